"""List gardens, projects, seeds and shoots."""

from typing import Any, Dict, List

from gardenctl.session import Session
from gardenctl.shared.base_functions import BaseFunction
from gardenctl.shared.errors import GardenctlError, InvalidTargetError
from gardenctl.shared.matching import list_shoots_for_target
from gardenctl.shared.providers import GardenClient, ShootInfo
from gardenctl.shared.target import TargetKind

RESOURCES = ("gardens", "projects", "seeds", "shoots")


class LsFunction(BaseFunction):
    """List the objects visible from the current target."""

    def __init__(self) -> None:
        super().__init__(
            name="ls",
            description="List gardens, projects, seeds or shoots of the current target.",
        )

    def execute(self, session: Session, resource: str = "", **_: Any) -> Dict[str, Any]:
        if resource == "gardens":
            return {
                "gardenClusters": [
                    {"name": name} for name in session.garden_config.names()
                ]
            }

        stack = session.read_target()
        if stack.garden is None:
            raise InvalidTargetError("no garden cluster targeted")
        client = session.garden_client(stack.garden)

        if resource == "projects":
            return {"projects": _projects_with_shoots(client, client.list_shoots())}
        if resource == "seeds":
            return {"seeds": [{"seed": seed.name} for seed in client.list_seeds()]}

        shoots = list_shoots_for_target(client, stack)
        branch = stack.branch
        if branch is None:
            return {"projects": _projects_with_shoots(client, shoots)}
        if branch.kind is TargetKind.SEED:
            projects = _projects_with_shoots(client, shoots, include_empty=False)
            if not projects:
                raise GardenctlError(f"No shoots for {branch.name}")
            return {"projects": projects}

        seeds = _seeds_with_shoots(shoots)
        if not seeds:
            raise GardenctlError(f"Project {branch.name} is empty")
        return {"seeds": seeds}

    def get_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "resource": {"type": "string", "enum": list(RESOURCES)},
            },
            "required": ["resource"],
        }


def _projects_with_shoots(
    client: GardenClient, shoots: List[ShootInfo], include_empty: bool = True
) -> List[Dict[str, Any]]:
    """Group shoots by project; projects without shoots are listed bare."""

    by_namespace: Dict[str, List[str]] = {}
    for shoot in shoots:
        by_namespace.setdefault(shoot.namespace, []).append(shoot.name)

    projects = []
    for project in client.list_projects():
        names = by_namespace.get(project.namespace or "", [])
        if not names and not include_empty:
            continue
        entry: Dict[str, Any] = {"project": project.name}
        if names:
            entry["shoots"] = names
        projects.append(entry)
    return projects


def _seeds_with_shoots(shoots: List[ShootInfo]) -> List[Dict[str, Any]]:
    by_seed: Dict[str, List[str]] = {}
    for shoot in shoots:
        by_seed.setdefault(shoot.seed_name or "", []).append(shoot.name)
    return [{"seed": seed, "shoots": names} for seed, names in by_seed.items()]
