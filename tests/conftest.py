"""Shared fixtures: an in-memory garden and a session rooted in tmp_path."""

from pathlib import Path
from typing import Dict, List, Optional

import pytest
import yaml

from gardenctl.session import Session
from gardenctl.shared.base_functions import function_registry
from gardenctl.shared.config import GardenctlPaths
from gardenctl.shared.errors import GardenctlError
from gardenctl.shared.functions import initialize_functions
from gardenctl.shared.providers import KubectlError, ProjectInfo, SeedInfo, ShootInfo

EU_ACCESS = "seed.gardener.cloud/eu-access"
ADDONS_ACCESS = "support.gardener.cloud/eu-access-for-cluster-addons"


def make_kubeconfig(name: str, namespace: Optional[str] = None) -> bytes:
    context = {"cluster": name, "user": f"{name}-user"}
    if namespace:
        context["namespace"] = namespace
    data = {
        "apiVersion": "v1",
        "kind": "Config",
        "current-context": name,
        "clusters": [{"name": name, "cluster": {"server": f"https://api.{name}.example.com"}}],
        "contexts": [{"name": name, "context": context}],
        "users": [{"name": f"{name}-user", "user": {"token": "secret"}}],
    }
    return yaml.safe_dump(data).encode()


class FakeGardenClient:
    """In-memory GardenClient."""

    def __init__(self):
        self.projects: List[ProjectInfo] = [
            ProjectInfo("alpha", "garden-alpha"),
            ProjectInfo("beta", "garden-beta"),
            ProjectInfo("empty", "garden-empty"),
        ]
        self.seeds: List[SeedInfo] = [
            SeedInfo("aws-eu1", "seed-aws-eu1", "garden"),
            SeedInfo("gcp-us1", "seed-gcp-us1", "garden"),
        ]
        self.shoots: List[ShootInfo] = [
            ShootInfo("web", "garden-alpha", "aws-eu1"),
            ShootInfo("db", "garden-alpha", "gcp-us1"),
            ShootInfo(
                "web-eu",
                "garden-beta",
                "aws-eu1",
                seed_selector_labels={EU_ACCESS: "true"},
                annotations={ADDONS_ACCESS: "false"},
            ),
        ]
        self.unavailable_shoots = set()
        self.forbidden_seeds = set()

    def list_seeds(self) -> List[SeedInfo]:
        return list(self.seeds)

    def list_projects(self) -> List[ProjectInfo]:
        return list(self.projects)

    def list_shoots(self, namespace: Optional[str] = None) -> List[ShootInfo]:
        return [s for s in self.shoots if namespace is None or s.namespace == namespace]

    def get_project(self, name: str) -> ProjectInfo:
        for project in self.projects:
            if project.name == name:
                return project
        raise GardenctlError(f"project {name} not found")

    def project_name_for_namespace(self, namespace: str) -> str:
        for project in self.projects:
            if project.namespace == namespace:
                return project.name
        raise GardenctlError(f"namespace {namespace} has no project")

    def fetch_seed_kubeconfig(self, seed: SeedInfo) -> bytes:
        if seed.name in self.forbidden_seeds:
            raise KubectlError(["kubectl", "get", "secret"], 1, "forbidden")
        return make_kubeconfig(seed.name)

    def fetch_shoot_kubeconfig(self, shoot: ShootInfo) -> bytes:
        if shoot.name in self.unavailable_shoots:
            raise KubectlError(["kubectl", "get", "secret"], 1, "not found")
        return make_kubeconfig(shoot.name)


@pytest.fixture
def garden_client():
    return FakeGardenClient()


@pytest.fixture
def garden_config_path(tmp_path: Path) -> Path:
    """Config with two gardens whose kubeconfigs exist on disk."""

    kubeconfigs: Dict[str, Path] = {}
    for name in ("prod", "dev"):
        path = tmp_path / f"garden-{name}.yaml"
        path.write_bytes(make_kubeconfig(f"garden-{name}"))
        kubeconfigs[name] = path

    config = {
        "githubURL": "https://github.example.com",
        "gardenClusters": [
            {
                "name": "prod",
                "kubeConfig": str(kubeconfigs["prod"]),
                "dashboardUrl": "https://dashboard.garden.prod.example.com",
                "accessRestrictions": [
                    {
                        "key": EU_ACCESS,
                        "notifyIf": True,
                        "msg": "do not access EU shoots",
                        "options": [
                            {
                                "key": ADDONS_ACCESS,
                                "notifyIf": False,
                                "msg": "addons are not EU-restricted",
                            }
                        ],
                    }
                ],
            },
            {
                "name": "dev",
                "kubeConfig": str(kubeconfigs["dev"]),
                "dashboardUrl": "https://dashboard.garden.dev.example.com",
            },
        ],
    }
    path = tmp_path / "gardenconfig"
    path.write_text(yaml.safe_dump(config))
    return path


@pytest.fixture
def paths(tmp_path: Path, garden_config_path: Path) -> GardenctlPaths:
    return GardenctlPaths.from_environment(
        {
            "GARDENCTL_HOME": str(tmp_path / "home"),
            "GARDENCONFIG": str(garden_config_path),
        }
    )


@pytest.fixture
def session(paths, garden_client) -> Session:
    return Session(paths, client_factory=lambda kubeconfig: garden_client)


@pytest.fixture
def functions():
    function_registry.reset()
    initialize_functions()
    yield function_registry
    function_registry.reset()


@pytest.fixture
def kubeconfig_factory():
    return make_kubeconfig
