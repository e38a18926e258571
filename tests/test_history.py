from gardenctl.shared.history import HistoryItem, TargetHistory
from gardenctl.shared.target import TargetKind, TargetStack


def _stack(*pairs):
    stack = TargetStack()
    for kind, name in pairs:
        stack.push(TargetKind(kind), name)
    return stack


def test_item_from_stack():
    """A history item records the stack and the command to repeat it."""
    item = HistoryItem.from_stack(
        _stack(("garden", "prod"), ("project", "alpha"), ("shoot", "web"))
    )

    assert item.cmd == "gardenctl target --garden prod --project alpha --shoot web"
    assert item.to_dict() == {
        "cmd": "gardenctl target --garden prod --project alpha --shoot web",
        "garden": "prod",
        "project": "alpha",
        "shoot": "web",
    }
    assert item.to_stack().shoot == "web"


def test_append_and_recent(tmp_path):
    """Recent items come back newest first."""
    history = TargetHistory(tmp_path / "history")
    history.append(_stack(("garden", "prod")))
    history.append(_stack(("garden", "prod"), ("seed", "aws"), ("namespace", "ns")))
    history.append(TargetStack())

    recent = history.recent()

    assert [item.seed for item in recent] == ["aws", ""]
    assert recent[0].to_stack().namespace == "ns"
    assert len(history.recent(1)) == 1


def test_corrupt_lines_are_skipped(tmp_path, caplog):
    """Lines that do not parse are skipped with a warning."""
    path = tmp_path / "history"
    path.write_text('{"garden": "prod"}\nnot json\n\n{"garden": "dev"}\n')

    items = TargetHistory(path).load()

    assert [item.garden for item in items] == ["prod", "dev"]
    assert "corrupt history line 2" in caplog.text


def test_missing_history(tmp_path):
    """No history file means no items."""
    assert TargetHistory(tmp_path / "history").recent() == []
