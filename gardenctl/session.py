"""Per-invocation state shared by command handlers."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict, Mapping, Optional

from gardenctl.shared.config import GardenConfig, GardenctlPaths, load_garden_config
from gardenctl.shared.errors import ConfigError, InvalidTargetError
from gardenctl.shared.history import TargetHistory
from gardenctl.shared.kubeconfig import derive_kubeconfig_path
from gardenctl.shared.providers import GardenClient, KubectlGardenClient
from gardenctl.shared.store import ensure_target, read_target, write_target
from gardenctl.shared.target import TargetStack

logger = logging.getLogger("gardenctl.session")

ClientFactory = Callable[[Path], GardenClient]


def _kubectl_client(kubeconfig: Path) -> GardenClient:
    return KubectlGardenClient(str(kubeconfig))


class Session:
    """Paths, configuration, garden clients and the active kubeconfig.

    One session is created per CLI invocation and handed to every command,
    so several sessions can coexist in one process.
    """

    def __init__(
        self,
        paths: GardenctlPaths,
        *,
        client_factory: Optional[ClientFactory] = None,
        garden_config: Optional[GardenConfig] = None,
    ):
        self.paths = paths
        self._client_factory = client_factory or _kubectl_client
        self._garden_config = garden_config
        self._clients: Dict[str, GardenClient] = {}
        self.kubeconfig: Optional[Path] = None
        self.history = TargetHistory(paths.history)

    @classmethod
    def from_environment(
        cls, environ: Optional[Mapping[str, str]] = None, **kwargs
    ) -> "Session":
        return cls(GardenctlPaths.from_environment(environ), **kwargs)

    @property
    def garden_config(self) -> GardenConfig:
        if self._garden_config is None:
            self._garden_config = load_garden_config(self.paths.config)
        return self._garden_config

    def read_target(self) -> TargetStack:
        """Current stack, seeded with the default garden on first use."""
        return ensure_target(self.paths.target, self.garden_config)

    def write_target(self, stack: TargetStack) -> None:
        """Save the stack, then point ``kubeconfig`` at its cluster.

        A garden missing from the config leaves ``kubeconfig`` unset; the
        stack is saved regardless so stale targets can still be dropped.
        """

        write_target(self.paths.target, stack)
        self.kubeconfig = None
        if not len(stack):
            return
        try:
            self.kubeconfig = derive_kubeconfig_path(
                stack, self.paths.cache, self.garden_config
            )
        except ConfigError as exc:
            logger.debug("No kubeconfig for %s: %s", stack, exc)

    def stored_target(self) -> TargetStack:
        """Current stack without seeding a default garden."""
        return read_target(self.paths.target)

    def kubeconfig_path(self, stack: Optional[TargetStack] = None) -> Path:
        stack = self.read_target() if stack is None else stack
        return derive_kubeconfig_path(stack, self.paths.cache, self.garden_config)

    def garden_client(self, garden: Optional[str]) -> GardenClient:
        """Client for the garden cluster, created once per garden."""

        if not garden:
            raise InvalidTargetError("no garden cluster targeted")
        if garden not in self._clients:
            kubeconfig = self.garden_config.kubeconfig_for(garden)
            logger.debug("Creating garden client for %s using %s", garden, kubeconfig)
            self._clients[garden] = self._client_factory(kubeconfig)
        return self._clients[garden]
