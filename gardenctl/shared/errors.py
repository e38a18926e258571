"""Errors raised by the target stack and its collaborators."""

from typing import Any, List, Sequence


class GardenctlError(RuntimeError):
    """Base class for every recoverable gardenctl condition."""


class EmptyStackError(GardenctlError):
    """Raised when an operation needs an entry but the target stack is empty."""

    def __init__(self, message: str = "target stack is empty"):
        super().__init__(message)


class InvalidTargetError(GardenctlError):
    """Raised when a push would violate the positional invariants of the stack."""


class IllegalStackShapeError(GardenctlError):
    """Raised when a stack does not have one of the legal shapes."""


class NoMatchError(GardenctlError):
    """Raised when name resolution found no candidate."""

    def __init__(self, kind: str, pattern: str):
        self.kind = kind
        self.pattern = pattern
        super().__init__(f'no match for "{pattern}"')


class AmbiguousMatchError(GardenctlError):
    """Raised when name resolution found more than one candidate."""

    def __init__(self, kind: str, pattern: str, candidates: Sequence[Any]):
        self.kind = kind
        self.pattern = pattern
        self.candidates: List[Any] = list(candidates)
        super().__init__(
            f'{len(self.candidates)} {kind}s match "{pattern}", please be more specific'
        )


class ConfigError(GardenctlError):
    """Raised for unreadable garden configuration or unknown gardens."""


class KubeconfigError(GardenctlError):
    """Raised when a kubeconfig file is missing or has no usable context."""
