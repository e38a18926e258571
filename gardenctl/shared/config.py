"""Garden configuration and on-disk locations used by gardenctl.

The garden configuration (``$GARDENCONFIG`` or ``<home>/config``) lists the
garden clusters the user can target::

    githubURL: https://github.com/...
    gardenClusters:
    - name: prod
      kubeConfig: ~/.kube/garden-prod.yaml
      dashboardUrl: https://dashboard.garden.prod.example.com
      accessRestrictions:
      - key: seed.gardener.cloud/eu-access
        notifyIf: true
        msg: warning for eu-access
        options:
        - key: support.gardener.cloud/eu-access-for-cluster-addons
          notifyIf: false
          msg: warning for addons
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from gardenctl.shared.errors import ConfigError
from gardenctl.shared.utils import home_dir, tidy_home

DEFAULT_SESSION_ID = "plantingSession"


@dataclass
class GardenctlPaths:
    """Filesystem locations for one gardenctl session."""

    home: Path
    config: Path
    session_dir: Path

    @property
    def target(self) -> Path:
        return self.session_dir / "target"

    @property
    def cache(self) -> Path:
        return self.home / "cache"

    @property
    def history(self) -> Path:
        return self.home / "history"

    @classmethod
    def from_environment(
        cls, environ: Optional[Mapping[str, str]] = None
    ) -> "GardenctlPaths":
        """Resolve paths from GARDENCTL_HOME, GARDENCONFIG and GARDEN_SESSION_ID."""

        env = os.environ if environ is None else environ
        home_value = env.get("GARDENCTL_HOME")
        home = tidy_home(home_value) if home_value else Path(home_dir()) / ".garden"

        config_value = env.get("GARDENCONFIG")
        config = tidy_home(config_value) if config_value else home / "config"

        session_id = env.get("GARDEN_SESSION_ID") or DEFAULT_SESSION_ID
        return cls(home=home, config=config, session_dir=home / "sessions" / session_id)


def _as_bool(value: Any) -> bool:
    """YAML booleans as-is; quoted strings are true only when they read 'true'."""
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


@dataclass
class RestrictionOption:
    key: str
    notify_if: bool = False
    msg: str = ""


@dataclass
class AccessRestriction:
    """Warning shown when a shoot's seed selector carries a given label."""

    key: str
    notify_if: bool = False
    msg: str = ""
    options: List[RestrictionOption] = field(default_factory=list)

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "AccessRestriction":
        return AccessRestriction(
            key=str(data.get("key", "")),
            notify_if=_as_bool(data.get("notifyIf", False)),
            msg=str(data.get("msg", "")),
            options=[
                RestrictionOption(
                    key=str(option.get("key", "")),
                    notify_if=_as_bool(option.get("notifyIf", False)),
                    msg=str(option.get("msg", "")),
                )
                for option in data.get("options") or []
            ],
        )


@dataclass
class GardenClusterMeta:
    """A configured garden cluster."""

    name: str
    kubeconfig: str = ""
    dashboard_url: str = ""
    access_restrictions: List[AccessRestriction] = field(default_factory=list)

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "GardenClusterMeta":
        if not data.get("name"):
            raise ConfigError(f"garden cluster entry without a name: {data!r}")
        return GardenClusterMeta(
            name=str(data["name"]),
            kubeconfig=str(data.get("kubeConfig") or ""),
            dashboard_url=str(data.get("dashboardUrl") or ""),
            access_restrictions=[
                AccessRestriction.from_dict(item)
                for item in data.get("accessRestrictions") or []
            ],
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name}
        if self.kubeconfig:
            data["kubeConfig"] = self.kubeconfig
        if self.dashboard_url:
            data["dashboardUrl"] = self.dashboard_url
        return data


@dataclass
class GardenConfig:
    """Static mapping of garden names to their kubeconfigs."""

    garden_clusters: List[GardenClusterMeta] = field(default_factory=list)
    github_url: str = ""

    def names(self) -> List[str]:
        return [garden.name for garden in self.garden_clusters]

    def get(self, name: str) -> Optional[GardenClusterMeta]:
        for garden in self.garden_clusters:
            if garden.name == name:
                return garden
        return None

    def kubeconfig_for(self, name: str) -> Path:
        """Path to the kubeconfig of a garden, with ``~`` expanded."""

        garden = self.get(name)
        if garden is None:
            raise ConfigError(f"garden '{name}' is not configured")
        if not garden.kubeconfig:
            raise ConfigError(f"garden '{name}' has no kubeConfig configured")
        return tidy_home(garden.kubeconfig)

    def garden_for_dashboard(self, host: str) -> str:
        """Name of the garden whose dashboard URL contains ``host``."""

        name = ""
        for garden in self.garden_clusters:
            if host and garden.dashboard_url and host in garden.dashboard_url:
                name = garden.name
        if not name:
            raise ConfigError(
                "a garden could not be matched for the provided dashboard url"
            )
        return name

    @staticmethod
    def from_dict(data: Optional[Dict[str, Any]]) -> "GardenConfig":
        if not data:
            return GardenConfig()
        if not isinstance(data, dict):
            raise ConfigError("garden configuration must be a mapping")
        return GardenConfig(
            garden_clusters=[
                GardenClusterMeta.from_dict(item)
                for item in data.get("gardenClusters") or []
            ],
            github_url=str(data.get("githubURL") or ""),
        )


def load_garden_config(path: Path) -> GardenConfig:
    """Read the garden configuration; a missing or empty file is an empty config."""

    if not path.exists():
        return GardenConfig()
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(f"failed to parse garden configuration {path}: {exc}") from exc
    return GardenConfig.from_dict(data)
