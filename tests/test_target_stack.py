import itertools

import pytest

from gardenctl.shared.errors import (
    EmptyStackError,
    IllegalStackShapeError,
    InvalidTargetError,
)
from gardenctl.shared.target import TargetEntry, TargetKind, TargetShape, TargetStack


def _stack(*pairs):
    stack = TargetStack()
    for kind, name in pairs:
        stack.push(TargetKind(kind), name)
    return stack


def _assert_well_formed(stack):
    kinds = [entry.kind for entry in stack]
    assert len(kinds) <= 4
    if not kinds:
        return
    assert kinds[0] is TargetKind.GARDEN
    assert TargetKind.GARDEN not in kinds[1:]
    assert TargetKind.NAMESPACE not in kinds[:-1]
    if len(kinds) > 1:
        assert kinds[1] in (TargetKind.PROJECT, TargetKind.SEED, TargetKind.NAMESPACE)
    if len(kinds) > 2:
        assert kinds[1] in (TargetKind.PROJECT, TargetKind.SEED)
        assert kinds[2] in (TargetKind.SHOOT, TargetKind.NAMESPACE)
    if len(kinds) > 3:
        assert kinds[2] is TargetKind.SHOOT
        assert kinds[3] is TargetKind.NAMESPACE
    assert TargetShape.of(kinds) is stack.shape


OPERATIONS = [("push", kind) for kind in TargetKind] + [("pop", None), ("pop", TargetKind.PROJECT)]


def test_push_builds_project_shoot_namespace_stack():
    """Push garden, project, shoot and namespace in order."""
    stack = _stack(("garden", "prod"), ("project", "alpha"), ("shoot", "web"))
    stack.push(TargetKind.NAMESPACE, "kube-system")

    assert stack.shape is TargetShape.GARDEN_PROJECT_SHOOT_NAMESPACE
    assert [str(entry) for entry in stack] == [
        "garden prod",
        "project alpha",
        "shoot web",
        "namespace kube-system",
    ]
    assert stack.branch == TargetEntry(TargetKind.PROJECT, "alpha")
    assert stack.shape.base is TargetShape.GARDEN_PROJECT_SHOOT


def test_push_garden_starts_fresh_stack():
    """Targeting a garden discards everything else."""
    stack = _stack(("garden", "prod"), ("seed", "aws-eu1"), ("shoot", "web"))
    stack.push(TargetKind.GARDEN, "dev")

    assert stack.entries == (TargetEntry(TargetKind.GARDEN, "dev"),)


def test_push_seed_replaces_project_branch():
    """A seed replaces the project and the shoot below it."""
    stack = _stack(("garden", "prod"), ("project", "alpha"), ("shoot", "web"))
    stack.push(TargetKind.SEED, "aws-eu1")

    assert stack.shape is TargetShape.GARDEN_SEED
    assert stack.project is None
    assert stack.shoot is None


def test_push_shoot_replaces_shoot_and_namespace():
    """A new shoot replaces the old shoot and its namespace."""
    stack = _stack(
        ("garden", "prod"), ("project", "alpha"), ("shoot", "web"), ("namespace", "ns")
    )
    stack.push(TargetKind.SHOOT, "db")

    assert stack.shape is TargetShape.GARDEN_PROJECT_SHOOT
    assert stack.shoot == "db"


def test_namespace_replaces_trailing_namespace():
    """A second namespace replaces the first one."""
    stack = _stack(("garden", "prod"), ("namespace", "a"))
    stack.push(TargetKind.NAMESPACE, "b")

    assert len(stack) == 2
    assert stack.namespace == "b"
    assert stack.shape is TargetShape.GARDEN_NAMESPACE


@pytest.mark.parametrize("kind", ["project", "seed", "shoot", "namespace"])
def test_push_on_empty_stack_requires_garden(kind):
    """Only a garden can start an empty stack."""
    with pytest.raises(InvalidTargetError):
        TargetStack().push(TargetKind(kind), "x")


def test_push_shoot_without_branch_fails():
    """A shoot needs a project or seed and leaves the stack untouched otherwise."""
    stack = _stack(("garden", "prod"), ("namespace", "default"))
    with pytest.raises(InvalidTargetError):
        stack.push(TargetKind.SHOOT, "web")
    assert stack.shape is TargetShape.GARDEN_NAMESPACE


def test_push_requires_a_name():
    """Empty names are rejected."""
    with pytest.raises(InvalidTargetError):
        TargetStack().push(TargetKind.GARDEN, "")


def test_pop_without_kind_removes_top():
    """Drop without a kind removes the last entry."""
    stack = _stack(("garden", "prod"), ("seed", "aws-eu1"))

    assert stack.pop() == [TargetEntry(TargetKind.SEED, "aws-eu1")]
    assert stack.shape is TargetShape.GARDEN


def test_pop_kind_removes_everything_above_it():
    """Dropping a project also drops its shoot and namespace, top first."""
    stack = _stack(
        ("garden", "prod"), ("project", "alpha"), ("shoot", "web"), ("namespace", "ns")
    )

    dropped = stack.pop(TargetKind.PROJECT)

    assert [entry.kind for entry in dropped] == [
        TargetKind.NAMESPACE,
        TargetKind.SHOOT,
        TargetKind.PROJECT,
    ]
    assert stack.entries == (TargetEntry(TargetKind.GARDEN, "prod"),)


def test_pop_empty_stack_raises():
    """Dropping from an empty stack fails."""
    with pytest.raises(EmptyStackError, match="target stack is empty"):
        TargetStack().pop()


def test_pop_kind_not_targeted_raises():
    """Dropping a kind that is not targeted leaves the stack unchanged."""
    stack = _stack(("garden", "prod"), ("project", "alpha"))
    with pytest.raises(InvalidTargetError, match="no seed targeted"):
        stack.pop(TargetKind.SEED)
    assert len(stack) == 2


def test_push_pop_sequences_keep_stack_well_formed():
    """Any mix of pushes and pops keeps positions valid and depth at most four."""
    for operations in itertools.product(OPERATIONS, repeat=4):
        stack = _stack(("garden", "prod"))
        for step, (op, kind) in enumerate(operations):
            before = stack.copy()
            try:
                if op == "push":
                    stack.push(kind, f"{kind.value}-{step}")
                else:
                    stack.pop(kind)
            except (InvalidTargetError, EmptyStackError):
                assert stack == before, operations
            _assert_well_formed(stack)


def test_illegal_shapes_are_rejected():
    """Stacks built from raw entries are checked against the legal shapes."""
    with pytest.raises(IllegalStackShapeError, match="only a namespace"):
        TargetStack([TargetEntry(TargetKind.NAMESPACE, "default")])
    with pytest.raises(IllegalStackShapeError):
        TargetStack(
            [
                TargetEntry(TargetKind.GARDEN, "prod"),
                TargetEntry(TargetKind.PROJECT, "alpha"),
                TargetEntry(TargetKind.SEED, "aws-eu1"),
            ]
        )
    with pytest.raises(IllegalStackShapeError):
        TargetStack([TargetEntry(TargetKind.PROJECT, "alpha")])


def test_dict_round_trip_and_empty_document():
    """A stack serializes to a target list and the empty stack to nothing."""
    stack = _stack(("garden", "prod"), ("seed", "aws-eu1"))

    assert stack.to_dict() == {
        "target": [{"kind": "garden", "name": "prod"}, {"kind": "seed", "name": "aws-eu1"}]
    }
    assert TargetStack.from_dict(stack.to_dict()) == stack
    assert TargetStack().to_dict() == {}
    assert len(TargetStack.from_dict(None)) == 0


def test_from_dict_rejects_unknown_kind():
    """Unknown kinds in a stored document are an error."""
    with pytest.raises(InvalidTargetError, match="unknown target kind"):
        TargetStack.from_dict({"target": [{"kind": "cluster", "name": "x"}]})


def test_kind_from_string_ignores_case():
    """Kind names are case insensitive."""
    assert TargetKind.from_string("Shoot") is TargetKind.SHOOT


def test_copy_is_independent():
    """Changing a copy leaves the original alone."""
    stack = _stack(("garden", "prod"))
    clone = stack.copy()
    clone.push(TargetKind.PROJECT, "alpha")

    assert len(stack) == 1
    assert stack != clone


def test_switching_branch_truncates_before_append():
    """A project replaces a targeted seed."""
    stack = _stack(("garden", "g"), ("seed", "s"))
    stack.push(TargetKind.PROJECT, "p")

    assert [str(entry) for entry in stack] == ["garden g", "project p"]


def test_pop_shoot_from_seed_branch():
    """Dropping a seed's shoot leaves the seed targeted."""
    stack = _stack(("garden", "g"), ("seed", "s"), ("shoot", "t"))

    assert [str(entry) for entry in stack.pop()] == ["shoot t"]
    assert stack.shape is TargetShape.GARDEN_SEED
