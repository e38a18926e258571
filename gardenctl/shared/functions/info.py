"""Read-only views of the current target and its kubeconfig."""

import logging
from dataclasses import asdict
from typing import Any, Dict, Optional

from gardenctl.session import Session
from gardenctl.shared.base_functions import BaseFunction
from gardenctl.shared.errors import EmptyStackError, InvalidTargetError, NoMatchError
from gardenctl.shared.kubeconfig import (
    cluster_kubeconfig_path,
    describe_kubeconfig,
    load_kubeconfig,
    parse_kubeconfig,
)
from gardenctl.shared.matching import list_shoots_for_target
from gardenctl.shared.providers import ShootInfo
from gardenctl.shared.target import TargetKind, TargetStack

logger = logging.getLogger("gardenctl.info")

CLUSTER_KINDS = [TargetKind.GARDEN.value, TargetKind.SEED.value, TargetKind.SHOOT.value]
GET_KINDS = [
    TargetKind.GARDEN.value,
    TargetKind.PROJECT.value,
    TargetKind.SEED.value,
    TargetKind.SHOOT.value,
]


class GetTargetFunction(BaseFunction):
    """Show the stored target stack."""

    def __init__(self) -> None:
        super().__init__(name="get_target", description="Show the current target stack.")

    def execute(self, session: Session, **_: Any) -> Dict[str, Any]:
        stack = session.stored_target()
        if not len(stack):
            raise EmptyStackError()
        return stack.to_dict()

    def get_schema(self) -> Dict[str, Any]:
        return {"type": "object", "properties": {}, "required": []}


class KubeconfigFunction(BaseFunction):
    """Locate and summarise the kubeconfig of the current target."""

    def __init__(self) -> None:
        super().__init__(
            name="kubeconfig",
            description="Show the kubeconfig of the current target, or of its garden, "
            "seed or shoot cluster.",
        )

    def execute(self, session: Session, kind: Optional[str] = None, **_: Any) -> Dict[str, Any]:
        stack = session.read_target()
        if kind is None:
            path = session.kubeconfig_path(stack)
        else:
            cluster = TargetKind.from_string(kind)
            path = cluster_kubeconfig_path(
                stack,
                cluster,
                session.paths.cache,
                session.garden_config,
                seed_name=_seed_of_shoot(session, stack)
                if cluster is TargetKind.SEED and stack.seed is None
                else None,
            )

        result: Dict[str, Any] = {"kubeconfig": str(path), "exists": path.exists()}
        if path.exists() and path.stat().st_size:
            result["details"] = describe_kubeconfig(path)
        return result

    def get_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "kind": {"type": "string", "enum": CLUSTER_KINDS, "nullable": True},
            },
            "required": [],
        }


class GetFunction(BaseFunction):
    """Show a garden, project, seed or shoot, defaulting to the targeted one."""

    def __init__(self) -> None:
        super().__init__(
            name="get",
            description="Show the kubeconfig of a garden or seed, or the project or "
            "shoot object. Without a name the targeted one is shown.",
        )

    def execute(
        self, session: Session, kind: str, name: Optional[str] = None, **_: Any
    ) -> Dict[str, Any]:
        get_kind = TargetKind.from_string(kind)
        stack = session.read_target()
        if get_kind is TargetKind.GARDEN:
            return self._get_garden(session, stack, name)
        if get_kind is TargetKind.PROJECT:
            return self._get_project(session, stack, name)
        if get_kind is TargetKind.SEED:
            return self._get_seed(session, stack, name)
        if get_kind is TargetKind.SHOOT:
            return self._get_shoot(session, stack, name)
        raise InvalidTargetError(f"cannot get {get_kind.value}")

    def _get_garden(
        self, session: Session, stack: TargetStack, name: Optional[str]
    ) -> Dict[str, Any]:
        name = name or stack.garden
        if not name:
            raise InvalidTargetError("no garden cluster targeted")
        return load_kubeconfig(session.garden_config.kubeconfig_for(name))

    def _get_project(
        self, session: Session, stack: TargetStack, name: Optional[str]
    ) -> Dict[str, Any]:
        if name is None:
            if stack.project is not None:
                name = stack.project
            elif stack.seed is not None:
                raise InvalidTargetError("seed targeted, project expected")
            else:
                raise InvalidTargetError("no project targeted")
        client = session.garden_client(stack.garden)
        return asdict(client.get_project(name))

    def _get_seed(
        self, session: Session, stack: TargetStack, name: Optional[str]
    ) -> Dict[str, Any]:
        if name is None:
            name = stack.seed or _seed_of_shoot(session, stack)
        if name is None:
            raise InvalidTargetError("no seed targeted or shoot targeted")
        client = session.garden_client(stack.garden)
        seeds = [seed for seed in client.list_seeds() if seed.name == name]
        if not seeds:
            raise NoMatchError(TargetKind.SEED.value, name)
        return parse_kubeconfig(client.fetch_seed_kubeconfig(seeds[0]), f"of seed {name}")

    def _get_shoot(
        self, session: Session, stack: TargetStack, name: Optional[str]
    ) -> Dict[str, Any]:
        name = name or stack.shoot
        if name is None:
            raise InvalidTargetError("no shoot targeted")
        if stack.branch is None:
            raise InvalidTargetError("no seed or project targeted")
        return asdict(_find_shoot(session, stack, name))

    def get_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "kind": {"type": "string", "enum": GET_KINDS},
                "name": {"type": "string", "nullable": True},
            },
            "required": ["kind"],
        }


def _find_shoot(session: Session, stack: TargetStack, name: str) -> ShootInfo:
    client = session.garden_client(stack.garden)
    for shoot in list_shoots_for_target(client, stack):
        if shoot.name == name:
            return shoot
    raise InvalidTargetError(f"shoot {name} not found")


def _seed_of_shoot(session: Session, stack: TargetStack) -> Optional[str]:
    """Seed the targeted shoot is scheduled onto, looked up in the garden."""

    if stack.shoot is None:
        return None
    shoot = _find_shoot(session, stack, stack.shoot)
    logger.debug("Shoot %s runs on seed %s", shoot.name, shoot.seed_name)
    return shoot.seed_name
