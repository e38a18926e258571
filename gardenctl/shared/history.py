"""Targeting history stored as one JSON record per line."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from gardenctl.shared.target import TargetKind, TargetStack

logger = logging.getLogger("gardenctl.history")

MAX_ITEMS = 1000


@dataclass
class HistoryItem:
    """One recorded target, flattened by kind."""

    cmd: str = ""
    garden: str = ""
    project: str = ""
    seed: str = ""
    shoot: str = ""
    namespace: str = ""

    @staticmethod
    def from_stack(stack: TargetStack) -> "HistoryItem":
        item = HistoryItem()
        for entry in stack:
            setattr(item, entry.kind.value, entry.name)
        item.cmd = "gardenctl target " + " ".join(
            f"--{entry.kind.value} {entry.name}" for entry in stack
        )
        return item

    def to_stack(self) -> TargetStack:
        """Rebuild the stack in positional order."""

        stack = TargetStack()
        for kind in (
            TargetKind.GARDEN,
            TargetKind.PROJECT,
            TargetKind.SEED,
            TargetKind.SHOOT,
            TargetKind.NAMESPACE,
        ):
            name = getattr(self, kind.value)
            if name:
                stack.push(kind, name)
        return stack

    def to_dict(self) -> Dict[str, str]:
        return {key: value for key, value in asdict(self).items() if value}

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "HistoryItem":
        fields = ("cmd", "garden", "project", "seed", "shoot", "namespace")
        return HistoryItem(**{key: str(data.get(key) or "") for key in fields})


class TargetHistory:
    """Append-only log of targets."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> List[HistoryItem]:
        """Return recorded items, oldest first."""

        if not self.path.exists():
            return []
        items = []
        with open(self.path, "r") as f:
            for number, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    items.append(HistoryItem.from_dict(json.loads(line)))
                except (json.JSONDecodeError, AttributeError):
                    logger.warning("Skipping corrupt history line %d in %s", number, self.path)
        return items[-MAX_ITEMS:]

    def recent(self, limit: Optional[int] = None) -> List[HistoryItem]:
        """Return items newest first."""

        items = list(reversed(self.load()))
        return items[:limit] if limit else items

    def append(self, stack: TargetStack) -> Optional[HistoryItem]:
        if not len(stack):
            return None
        item = HistoryItem.from_stack(stack)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "a") as f:
            f.write(json.dumps(item.to_dict(), sort_keys=True) + "\n")
        return item
