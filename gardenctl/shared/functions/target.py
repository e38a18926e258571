"""Target function: push gardens, projects, seeds, shoots and namespaces."""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from gardenctl.session import Session
from gardenctl.shared.base_functions import BaseFunction
from gardenctl.shared.errors import (
    AmbiguousMatchError,
    ConfigError,
    GardenctlError,
    InvalidTargetError,
    NoMatchError,
)
from gardenctl.shared.kubeconfig import (
    seed_kubeconfig_path,
    set_context_namespace,
    write_kubeconfig,
)
from gardenctl.shared.matching import (
    filter_matches,
    resolve_name,
    resolve_shoots,
    select_single,
)
from gardenctl.shared.providers import GardenClient, SeedInfo, ShootInfo
from gardenctl.shared.restrictions import access_restriction_warnings
from gardenctl.shared.target import TargetKind, TargetStack

logger = logging.getLogger("gardenctl.target")

SHOOT_URL_PATTERN = re.compile(r"/namespace/[a-z0-9-]*/shoots/([a-z0-9-]*)")

EMPTY_KUBECONFIG_WARNING = (
    "Kubeconfig not available, using empty one. "
    "Be aware only a limited number of cmds are available!"
)

# Order in which target flags are applied.
FLAG_ORDER = ("garden", "project", "seed", "shoot", "namespace", "dashboard_url")


class TargetFunction(BaseFunction):
    """Set the scope for the next operations."""

    def __init__(self) -> None:
        super().__init__(
            name="target",
            description="Target a garden, project, seed, shoot or namespace. Names "
            "may use a leading and/or trailing '*' wildcard.",
        )

    def execute(
        self,
        session: Session,
        kind: Optional[str] = None,
        name: Optional[str] = None,
        **flags: Optional[str],
    ) -> Dict[str, Any]:
        """
        Execute the target function.

        Args:
            kind: garden, project, seed, shoot or namespace. Without a kind
                ``name`` is looked up as seed, then project, then shoot.
            name: Name or wildcard pattern to target.
            garden, project, seed, shoot, namespace, dashboard_url: Flag style
                targeting; every given flag is applied in that order.

        Returns:
            Dictionary with the targeted steps, warnings and resulting stack
        """

        steps: List[Dict[str, Any]] = []
        warnings: List[str] = []

        if any(flags.get(flag) for flag in FLAG_ORDER):
            for flag in FLAG_ORDER:
                value = flags.get(flag)
                if not value:
                    continue
                if flag == "dashboard_url":
                    self._target_dashboard_url(session, value, steps, warnings)
                else:
                    self._target_kind(session, TargetKind(flag), value, steps, warnings)
        elif kind:
            target_kind = TargetKind.from_string(kind)
            if target_kind is TargetKind.GARDEN and not name:
                return {
                    "status": "success",
                    "gardenClusters": [
                        {"name": garden} for garden in session.garden_config.names()
                    ],
                }
            if not name:
                raise InvalidTargetError(
                    f"command must be in the format: target {target_kind.value} NAME"
                )
            self._target_kind(session, target_kind, name, steps, warnings)
        elif name:
            self._target_any(session, name, steps, warnings)
        else:
            raise InvalidTargetError(
                "command must be in the format: "
                "target <project|garden|seed|shoot|namespace> NAME"
            )

        stack = session.read_target()
        session.history.append(stack)
        return {
            "status": "success",
            "targeted": steps,
            "warnings": warnings,
            "target": [entry.to_dict() for entry in stack],
        }

    # ------------------------------------------------------------------ #
    # Dispatch
    # ------------------------------------------------------------------ #

    def _target_kind(
        self,
        session: Session,
        kind: TargetKind,
        pattern: str,
        steps: List[Dict[str, Any]],
        warnings: List[str],
    ) -> None:
        if kind is TargetKind.GARDEN:
            steps.append(self._target_garden(session, pattern))
        elif kind is TargetKind.PROJECT:
            steps.append(self._target_project(session, pattern))
        elif kind is TargetKind.SEED:
            steps.append(self._target_seed(session, pattern))
        elif kind is TargetKind.SHOOT:
            steps.extend(self._target_shoot(session, pattern, warnings))
        else:
            steps.append(self._target_namespace(session, pattern, warnings))

    def _target_any(
        self,
        session: Session,
        name: str,
        steps: List[Dict[str, Any]],
        warnings: List[str],
    ) -> None:
        """Exact seed, then exact project, then shoot pattern."""

        stack, client = self._garden_client(session)
        seeds = [seed for seed in client.list_seeds() if seed.name == name]
        if seeds:
            steps.append(self._push_seed(session, stack, client, seeds[0]))
            return
        if name in [project.name for project in client.list_projects()]:
            stack.push(TargetKind.PROJECT, name)
            steps.append(self._write(session, stack, TargetKind.PROJECT, name))
            return
        steps.extend(self._target_shoot(session, name, warnings))

    # ------------------------------------------------------------------ #
    # Individual kinds
    # ------------------------------------------------------------------ #

    def _target_garden(self, session: Session, pattern: str) -> Dict[str, Any]:
        config = session.garden_config
        matches = resolve_name(None, TargetStack(), TargetKind.GARDEN, pattern, config)
        garden = select_single(TargetKind.GARDEN.value, pattern, matches)
        stack = TargetStack()
        stack.push(TargetKind.GARDEN, garden)
        return self._write(session, stack, TargetKind.GARDEN, garden)

    def _target_project(self, session: Session, pattern: str) -> Dict[str, Any]:
        stack, client = self._garden_client(session)
        matches = resolve_name(
            client, stack, TargetKind.PROJECT, pattern, session.garden_config
        )
        project = select_single(TargetKind.PROJECT.value, pattern, matches)
        stack.push(TargetKind.PROJECT, project)
        return self._write(session, stack, TargetKind.PROJECT, project)

    def _target_seed(self, session: Session, pattern: str) -> Dict[str, Any]:
        stack, client = self._garden_client(session)
        matches = filter_matches(pattern, client.list_seeds(), key=lambda seed: seed.name)
        if len(matches) > 1:
            raise AmbiguousMatchError(
                TargetKind.SEED.value, pattern, [seed.name for seed in matches]
            )
        seed = select_single(TargetKind.SEED.value, pattern, matches)
        return self._push_seed(session, stack, client, seed)

    def _push_seed(
        self, session: Session, stack: TargetStack, client: GardenClient, seed: SeedInfo
    ) -> Dict[str, Any]:
        stack.push(TargetKind.SEED, seed.name)
        write_kubeconfig(
            seed_kubeconfig_path(session.paths.cache, stack.garden or "", seed.name),
            client.fetch_seed_kubeconfig(seed),
        )
        return self._write(session, stack, TargetKind.SEED, seed.name)

    def _target_shoot(
        self, session: Session, pattern: str, warnings: List[str]
    ) -> List[Dict[str, Any]]:
        stack, client = self._garden_client(session)
        matches = resolve_shoots(client, stack, pattern)
        if not matches:
            raise NoMatchError(TargetKind.SHOOT.value, pattern)
        if len(matches) > 1:
            raise AmbiguousMatchError(
                TargetKind.SHOOT.value,
                pattern,
                [
                    {
                        "project": client.project_name_for_namespace(shoot.namespace),
                        "shoot": shoot.name,
                    }
                    for shoot in matches
                ],
            )
        shoot = matches[0]
        steps: List[Dict[str, Any]] = []

        branch = stack.branch
        if branch is not None and branch.kind is TargetKind.SEED:
            if not shoot.seed_name:
                raise InvalidTargetError(f"shoot {shoot.name} is not scheduled to a seed")
            stack.push(TargetKind.SEED, shoot.seed_name)
        else:
            project = client.project_name_for_namespace(shoot.namespace)
            stack.push(TargetKind.PROJECT, project)
        stack.push(TargetKind.SHOOT, shoot.name)

        if shoot.seed_name:
            self._cache_seed_of_shoot(session, stack, client, shoot, warnings)

        try:
            content = client.fetch_shoot_kubeconfig(shoot)
        except GardenctlError as exc:
            logger.debug("Shoot kubeconfig of %s unavailable: %s", shoot.name, exc)
            warnings.append(EMPTY_KUBECONFIG_WARNING)
            content = b""
        write_kubeconfig(session.kubeconfig_path(stack), content)

        steps.append(self._write(session, stack, TargetKind.SHOOT, shoot.name))
        garden = session.garden_config.get(stack.garden or "")
        if garden is not None:
            warnings.extend(
                access_restriction_warnings(shoot, garden.access_restrictions)
            )
        return steps

    def _cache_seed_of_shoot(
        self,
        session: Session,
        stack: TargetStack,
        client: GardenClient,
        shoot: ShootInfo,
        warnings: List[str],
    ) -> None:
        """Cache the seed kubeconfig; users without seed access only get a warning."""

        seeds = [seed for seed in client.list_seeds() if seed.name == shoot.seed_name]
        if not seeds:
            warnings.append(f"Seed {shoot.seed_name} of shoot {shoot.name} not found")
            return
        try:
            content = client.fetch_seed_kubeconfig(seeds[0])
        except GardenctlError as exc:
            warnings.append(f"Seed kubeconfig of {shoot.seed_name} not cached: {exc}")
            return
        write_kubeconfig(
            seed_kubeconfig_path(session.paths.cache, stack.garden or "", seeds[0].name),
            content,
        )

    def _target_namespace(
        self, session: Session, namespace: str, warnings: List[str]
    ) -> Dict[str, Any]:
        """Push the namespace; a kubeconfig that cannot be edited only warns."""

        stack = session.read_target()
        stack.push(TargetKind.NAMESPACE, namespace)
        step = self._write(session, stack, TargetKind.NAMESPACE, namespace)
        if step["kubeconfig"] is None:
            warnings.append(f"Namespace {namespace} not set: no kubeconfig for target")
            return step
        try:
            context = set_context_namespace(step["kubeconfig"], namespace)
        except GardenctlError as exc:
            logger.warning("Namespace %s not set in kubeconfig: %s", namespace, exc)
            warnings.append(f"Namespace {namespace} not set in kubeconfig: {exc}")
            return step
        step["message"] = f"Set namespace to {namespace} for current context {context}"
        return step

    def _target_dashboard_url(
        self,
        session: Session,
        url: str,
        steps: List[Dict[str, Any]],
        warnings: List[str],
    ) -> None:
        parsed = urlparse(url)
        if not parsed.scheme or not parsed.netloc:
            raise ConfigError(f"the URL entered is invalid: {url}")
        garden = session.garden_config.garden_for_dashboard(parsed.netloc)

        found = SHOOT_URL_PATTERN.search(parsed.path)
        if not found or not found.group(1):
            raise InvalidTargetError("could not get a valid shoot name from provided URL")

        steps.append(self._target_garden(session, garden))
        steps.extend(self._target_shoot(session, found.group(1), warnings))

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _garden_client(self, session: Session):
        stack = session.read_target()
        if stack.garden is None:
            raise InvalidTargetError("no garden cluster targeted")
        return stack, session.garden_client(stack.garden)

    def _write(
        self, session: Session, stack: TargetStack, kind: TargetKind, name: str
    ) -> Dict[str, Any]:
        session.write_target(stack)
        logger.info("Targeted %s %s", kind.value, name)
        return {
            "kind": kind.value,
            "name": name,
            "kubeconfig": str(session.kubeconfig) if session.kubeconfig else None,
        }

    def get_schema(self) -> Dict[str, Any]:
        """Return JSON schema for function parameters."""
        kinds = [kind.value for kind in TargetKind]
        return {
            "type": "object",
            "properties": {
                "kind": {"type": "string", "enum": kinds, "nullable": True},
                "name": {"type": "string", "nullable": True},
                "garden": {"type": "string", "nullable": True},
                "project": {"type": "string", "nullable": True},
                "seed": {"type": "string", "nullable": True},
                "shoot": {"type": "string", "nullable": True},
                "namespace": {"type": "string", "nullable": True},
                "dashboard_url": {"type": "string", "nullable": True},
            },
            "required": [],
        }
