"""Wildcard name resolution for gardens, projects, seeds and shoots."""

from typing import Callable, Iterable, List, Optional, Sequence, TypeVar

from gardenctl.shared.config import GardenConfig
from gardenctl.shared.errors import AmbiguousMatchError, InvalidTargetError, NoMatchError
from gardenctl.shared.providers.base import GardenClient, ShootInfo
from gardenctl.shared.target import TargetKind, TargetStack

T = TypeVar("T")

WILDCARD = "*"


def name_matches(pattern: str, name: str) -> bool:
    """Return whether ``name`` satisfies ``pattern``.

    Rules are evaluated in order: exact match when the pattern has no
    wildcard, ``*x*`` substring, ``x*`` prefix, ``*x`` suffix. A wildcard
    anywhere else is treated literally.
    """

    if WILDCARD not in pattern:
        return name == pattern
    if len(pattern) > 1 and pattern.startswith(WILDCARD) and pattern.endswith(WILDCARD):
        return pattern[1:-1] in name
    if pattern.endswith(WILDCARD):
        return name.startswith(pattern[:-1])
    if pattern.startswith(WILDCARD):
        return name.endswith(pattern[1:])
    return name == pattern


def filter_matches(
    pattern: str, items: Iterable[T], key: Callable[[T], str]
) -> List[T]:
    """Keep the items whose name matches ``pattern``, preserving order."""
    return [item for item in items if name_matches(pattern, key(item))]


def match_names(pattern: str, names: Iterable[str]) -> List[str]:
    return filter_matches(pattern, names, key=lambda name: name)


def select_single(kind: str, pattern: str, matches: Sequence[T]) -> T:
    """Return the only match or raise NoMatchError / AmbiguousMatchError."""

    if not matches:
        raise NoMatchError(kind, pattern)
    if len(matches) > 1:
        raise AmbiguousMatchError(kind, pattern, matches)
    return matches[0]


def list_shoots_for_target(client: GardenClient, stack: TargetStack) -> List[ShootInfo]:
    """Shoots visible from the current target.

    Under a project only the project's shoots, under a seed only the shoots
    scheduled onto it, otherwise every shoot of the garden.
    """

    branch = stack.branch
    if branch is not None and branch.kind is TargetKind.PROJECT:
        project = client.get_project(branch.name)
        return client.list_shoots(namespace=project.namespace)
    shoots = client.list_shoots()
    if branch is not None and branch.kind is TargetKind.SEED:
        shoots = [shoot for shoot in shoots if shoot.seed_name == branch.name]
    return shoots


def resolve_shoots(client: GardenClient, stack: TargetStack, pattern: str) -> List[ShootInfo]:
    return filter_matches(pattern, list_shoots_for_target(client, stack), key=lambda s: s.name)


def resolve_name(
    client: Optional[GardenClient],
    stack: TargetStack,
    kind: TargetKind,
    pattern: str,
    garden_config: GardenConfig,
) -> List[str]:
    """Names of the objects of ``kind`` matching ``pattern``, in listing order."""

    kind = TargetKind(kind)
    if kind is TargetKind.GARDEN:
        return match_names(pattern, garden_config.names())
    if client is None:
        raise InvalidTargetError("no garden cluster targeted")
    if kind is TargetKind.SEED:
        return match_names(pattern, [seed.name for seed in client.list_seeds()])
    if kind is TargetKind.PROJECT:
        return match_names(pattern, [project.name for project in client.list_projects()])
    if kind is TargetKind.SHOOT:
        return [shoot.name for shoot in resolve_shoots(client, stack, pattern)]
    raise InvalidTargetError(f"{kind.value} names cannot be resolved")
