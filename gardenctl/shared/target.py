"""Target stack model: garden -> project|seed -> shoot -> namespace.

The stack is a small cursor persisted between invocations. Every legal
arrangement of entries is enumerated by :class:`TargetShape`, so call sites
can branch on the shape instead of re-checking positions and lengths.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from gardenctl.shared.errors import (
    EmptyStackError,
    IllegalStackShapeError,
    InvalidTargetError,
)

MAX_DEPTH = 4


class TargetKind(str, Enum):
    """Kinds of entries that can be targeted."""

    GARDEN = "garden"
    PROJECT = "project"
    SEED = "seed"
    SHOOT = "shoot"
    NAMESPACE = "namespace"

    @classmethod
    def from_string(cls, value: str) -> "TargetKind":
        """Parse a kind name, ignoring case."""

        try:
            return cls(value.strip().lower())
        except (AttributeError, ValueError) as exc:
            choices = ", ".join(kind.value for kind in cls)
            raise InvalidTargetError(
                f"unknown target kind '{value}', expected one of: {choices}"
            ) from exc


# Index at which an entry of the kind lives; the stack is truncated there
# before the entry is appended.
_POSITIONS = {
    TargetKind.GARDEN: 0,
    TargetKind.PROJECT: 1,
    TargetKind.SEED: 1,
    TargetKind.SHOOT: 2,
}


@dataclass(frozen=True)
class TargetEntry:
    """A single (kind, name) pair of the target stack."""

    kind: TargetKind
    name: str

    def to_dict(self) -> Dict[str, str]:
        data: Dict[str, str] = {}
        if self.kind:
            data["kind"] = self.kind.value
        if self.name:
            data["name"] = self.name
        return data

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "TargetEntry":
        if not isinstance(data, dict):
            raise IllegalStackShapeError(f"target entry must be a mapping, got {data!r}")
        kind = data.get("kind")
        if not kind:
            raise IllegalStackShapeError(f"target entry without kind: {data!r}")
        return TargetEntry(
            kind=TargetKind.from_string(str(kind)), name=str(data.get("name") or "")
        )

    def __str__(self) -> str:
        return f"{self.kind.value} {self.name}"


class TargetShape(str, Enum):
    """Every legal arrangement of a target stack."""

    UNSET = "unset"
    GARDEN = "garden"
    GARDEN_PROJECT = "garden/project"
    GARDEN_PROJECT_SHOOT = "garden/project/shoot"
    GARDEN_SEED = "garden/seed"
    GARDEN_SEED_SHOOT = "garden/seed/shoot"
    GARDEN_NAMESPACE = "garden/namespace"
    GARDEN_PROJECT_NAMESPACE = "garden/project/namespace"
    GARDEN_PROJECT_SHOOT_NAMESPACE = "garden/project/shoot/namespace"
    GARDEN_SEED_NAMESPACE = "garden/seed/namespace"
    GARDEN_SEED_SHOOT_NAMESPACE = "garden/seed/shoot/namespace"

    @property
    def kinds(self) -> Tuple[TargetKind, ...]:
        if self is TargetShape.UNSET:
            return ()
        return tuple(TargetKind(part) for part in self.value.split("/"))

    @property
    def has_namespace(self) -> bool:
        return self.value.endswith("/namespace")

    @property
    def base(self) -> "TargetShape":
        """The shape with a trailing namespace removed."""
        if not self.has_namespace:
            return self
        return TargetShape(self.value[: -len("/namespace")])

    @property
    def branch(self) -> Optional[TargetKind]:
        """Kind at position 1 when it is project or seed."""
        kinds = self.kinds
        if len(kinds) > 1 and kinds[1] in (TargetKind.PROJECT, TargetKind.SEED):
            return kinds[1]
        return None

    @property
    def has_shoot(self) -> bool:
        return TargetKind.SHOOT in self.kinds

    @classmethod
    def of(cls, kinds: Sequence[TargetKind]) -> "TargetShape":
        """Return the shape for a sequence of kinds or raise if it is illegal."""

        shape = _SHAPES_BY_KINDS.get(tuple(kinds))
        if shape is None:
            rendered = " -> ".join(kind.value for kind in kinds)
            if kinds and kinds[0] is TargetKind.NAMESPACE:
                raise IllegalStackShapeError(
                    "the target has only a namespace, at least one garden needs to be "
                    "targeted before using a namespace"
                )
            raise IllegalStackShapeError(f"illegal target stack: {rendered}")
        return shape


_SHAPES_BY_KINDS = {shape.kinds: shape for shape in TargetShape}


class TargetStack:
    """Ordered, validated stack of target entries."""

    def __init__(self, entries: Iterable[TargetEntry] = ()):
        self._entries: List[TargetEntry] = list(entries)
        self._shape = TargetShape.of([entry.kind for entry in self._entries])

    # ------------------------------------------------------------------ #
    # Lookups
    # ------------------------------------------------------------------ #

    @property
    def entries(self) -> Tuple[TargetEntry, ...]:
        return tuple(self._entries)

    @property
    def shape(self) -> TargetShape:
        return self._shape

    def get(self, kind: TargetKind) -> Optional[TargetEntry]:
        """Return the entry of the given kind, if targeted."""
        for entry in self._entries:
            if entry.kind is kind:
                return entry
        return None

    def _name(self, kind: TargetKind) -> Optional[str]:
        entry = self.get(kind)
        return entry.name if entry else None

    @property
    def garden(self) -> Optional[str]:
        return self._name(TargetKind.GARDEN)

    @property
    def project(self) -> Optional[str]:
        return self._name(TargetKind.PROJECT)

    @property
    def seed(self) -> Optional[str]:
        return self._name(TargetKind.SEED)

    @property
    def shoot(self) -> Optional[str]:
        return self._name(TargetKind.SHOOT)

    @property
    def namespace(self) -> Optional[str]:
        return self._name(TargetKind.NAMESPACE)

    @property
    def branch(self) -> Optional[TargetEntry]:
        """The project or seed entry at position 1."""
        if self._shape.branch is None:
            return None
        return self._entries[1]

    @property
    def top(self) -> TargetEntry:
        if not self._entries:
            raise EmptyStackError()
        return self._entries[-1]

    def without_namespace(self) -> "TargetStack":
        """Copy of the stack with a trailing namespace entry stripped."""
        if self._shape.has_namespace:
            return TargetStack(self._entries[:-1])
        return self.copy()

    def copy(self) -> "TargetStack":
        return TargetStack(self._entries)

    # ------------------------------------------------------------------ #
    # Mutations
    # ------------------------------------------------------------------ #

    def push(self, kind: TargetKind, name: str) -> TargetEntry:
        """Target ``name`` of ``kind``, truncating the stack where needed."""

        kind = TargetKind(kind)
        if not name:
            raise InvalidTargetError(f"a {kind.value} name must be provided")

        if kind is TargetKind.NAMESPACE:
            if not self._entries:
                raise InvalidTargetError(
                    "no garden cluster targeted, a namespace needs a garden beneath it"
                )
            kept = list(self.without_namespace().entries)
        else:
            position = _POSITIONS[kind]
            if position > 0 and not self._entries:
                raise InvalidTargetError("no garden cluster targeted")
            if kind is TargetKind.SHOOT and self._shape.branch is None:
                raise InvalidTargetError(
                    "no project or seed targeted, a shoot needs one beneath it"
                )
            kept = self._entries[:position]

        entry = TargetEntry(kind=kind, name=name)
        candidate = kept + [entry]
        if len(candidate) > MAX_DEPTH:
            raise InvalidTargetError(
                f"target stack would exceed the maximum depth of {MAX_DEPTH}"
            )
        self._shape = TargetShape.of([item.kind for item in candidate])
        self._entries = candidate
        return entry

    def pop(self, kind: Optional[TargetKind] = None) -> List[TargetEntry]:
        """Drop the last entry, or every entry down to and including ``kind``.

        Returns the removed entries, most recently targeted first.
        """

        if not self._entries:
            raise EmptyStackError()

        if kind is None:
            dropped = [self._entries[-1]]
        else:
            kind = TargetKind(kind)
            entry = self.get(kind)
            if entry is None:
                raise InvalidTargetError(f"no {kind.value} targeted")
            index = self._entries.index(entry)
            dropped = list(reversed(self._entries[index:]))

        remaining = self._entries[: len(self._entries) - len(dropped)]
        self._shape = TargetShape.of([item.kind for item in remaining])
        self._entries = remaining
        return dropped

    # ------------------------------------------------------------------ #
    # Serialization
    # ------------------------------------------------------------------ #

    def to_dict(self) -> Dict[str, Any]:
        if not self._entries:
            return {}
        return {"target": [entry.to_dict() for entry in self._entries]}

    @staticmethod
    def from_dict(data: Optional[Dict[str, Any]]) -> "TargetStack":
        if not data:
            return TargetStack()
        if not isinstance(data, dict):
            raise IllegalStackShapeError(f"target document must be a mapping, got {data!r}")
        raw = data.get("target") or []
        if not isinstance(raw, list):
            raise IllegalStackShapeError("'target' must be a list of entries")
        return TargetStack(TargetEntry.from_dict(item) for item in raw)

    # ------------------------------------------------------------------ #
    # Dunder helpers
    # ------------------------------------------------------------------ #

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[TargetEntry]:
        return iter(list(self._entries))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TargetStack):
            return NotImplemented
        return self._entries == other._entries

    def __repr__(self) -> str:
        rendered = ", ".join(f"{e.kind.value}:{e.name}" for e in self._entries)
        return f"TargetStack([{rendered}])"
