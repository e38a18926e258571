"""Garden client backed by ``kubectl``."""

from __future__ import annotations

import base64
import json
import logging
import subprocess
from typing import Any, Dict, List, Optional

from gardenctl.shared.errors import GardenctlError
from gardenctl.shared.providers.base import GardenClient, ProjectInfo, SeedInfo, ShootInfo
from gardenctl.shared.providers.errors import KubectlError
from gardenctl.shared.utils import run_command

logger = logging.getLogger("gardenctl.kubectl")

PROJECT_NAME_LABELS = ("project.gardener.cloud/name", "project.garden.sapcloud.io/name")

SEEDS = "seeds.core.gardener.cloud"
PROJECTS = "projects.core.gardener.cloud"
SHOOTS = "shoots.core.gardener.cloud"


class KubectlGardenClient(GardenClient):
    """Read garden objects through ``kubectl get -o json``."""

    def __init__(self, kubeconfig: str, timeout: Optional[float] = None):
        self.kubeconfig = str(kubeconfig)
        self.timeout = timeout

    def _get(self, *args: str) -> Dict[str, Any]:
        cmd = ["kubectl", "--kubeconfig", self.kubeconfig, "get", *args, "-o", "json"]
        try:
            result = run_command(cmd, timeout=self.timeout)
        except FileNotFoundError as exc:
            raise GardenctlError("kubectl is not installed or not on PATH") from exc
        except subprocess.TimeoutExpired as exc:
            raise GardenctlError(f"kubectl timed out after {exc.timeout}s") from exc
        if result["returncode"] != 0:
            raise KubectlError(cmd, result["returncode"], result["stderr"])
        try:
            return json.loads(result["stdout"] or "{}")
        except json.JSONDecodeError as exc:
            raise GardenctlError(f"kubectl returned invalid JSON: {exc}") from exc

    def _secret_kubeconfig(self, name: str, namespace: str) -> bytes:
        logger.debug("Fetching kubeconfig secret %s/%s", namespace, name)
        secret = self._get("secret", name, "--namespace", namespace)
        encoded = (secret.get("data") or {}).get("kubeconfig")
        if not encoded:
            raise GardenctlError(f"secret {namespace}/{name} has no kubeconfig")
        return base64.b64decode(encoded)

    def list_seeds(self) -> List[SeedInfo]:
        seeds = []
        for item in self._get(SEEDS).get("items", []):
            secret_ref = (item.get("spec") or {}).get("secretRef") or {}
            seeds.append(
                SeedInfo(
                    name=item["metadata"]["name"],
                    secret_name=secret_ref.get("name"),
                    secret_namespace=secret_ref.get("namespace"),
                )
            )
        return seeds

    def list_projects(self) -> List[ProjectInfo]:
        return [
            _project_from_item(item) for item in self._get(PROJECTS).get("items", [])
        ]

    def get_project(self, name: str) -> ProjectInfo:
        return _project_from_item(self._get(PROJECTS, name))

    def list_shoots(self, namespace: Optional[str] = None) -> List[ShootInfo]:
        scope = ["--namespace", namespace] if namespace else ["--all-namespaces"]
        shoots = []
        for item in self._get(SHOOTS, *scope).get("items", []):
            metadata = item.get("metadata") or {}
            spec = item.get("spec") or {}
            selector = spec.get("seedSelector") or {}
            shoots.append(
                ShootInfo(
                    name=metadata["name"],
                    namespace=metadata.get("namespace", ""),
                    seed_name=spec.get("seedName"),
                    seed_selector_labels=selector.get("matchLabels") or {},
                    annotations=metadata.get("annotations") or {},
                )
            )
        return shoots

    def project_name_for_namespace(self, namespace: str) -> str:
        labels = (self._get("namespace", namespace).get("metadata") or {}).get(
            "labels"
        ) or {}
        for label in PROJECT_NAME_LABELS:
            if label in labels:
                return labels[label]
        raise GardenctlError(
            f'label "{PROJECT_NAME_LABELS[0]}" on namespace "{namespace}" not found'
        )

    def fetch_seed_kubeconfig(self, seed: SeedInfo) -> bytes:
        if not seed.secret_name or not seed.secret_namespace:
            raise GardenctlError(f"seed {seed.name} has no secret reference")
        return self._secret_kubeconfig(seed.secret_name, seed.secret_namespace)

    def fetch_shoot_kubeconfig(self, shoot: ShootInfo) -> bytes:
        return self._secret_kubeconfig(f"{shoot.name}.kubeconfig", shoot.namespace)


def _project_from_item(item: Dict[str, Any]) -> ProjectInfo:
    return ProjectInfo(
        name=item["metadata"]["name"],
        namespace=(item.get("spec") or {}).get("namespace"),
    )
