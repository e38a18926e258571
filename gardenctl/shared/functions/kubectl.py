"""Kubectl function: run kubectl against the cluster of the current target."""

import logging
import subprocess
from typing import Any, Dict, List, Optional

from gardenctl.session import Session
from gardenctl.shared.base_functions import BaseFunction
from gardenctl.shared.errors import GardenctlError, KubeconfigError
from gardenctl.shared.utils import run_command

logger = logging.getLogger("gardenctl.kubectl")


class KubectlFunction(BaseFunction):
    """Run kubectl with the kubeconfig of the current target."""

    def __init__(self) -> None:
        super().__init__(
            name="kubectl",
            description="Run kubectl against the targeted cluster, optionally in one "
            "namespace or across all namespaces.",
        )

    def execute(
        self,
        session: Session,
        args: Optional[List[str]] = None,
        namespace: Optional[str] = None,
        all_namespaces: bool = False,
        timeout: Optional[float] = None,
        **_: Any,
    ) -> Dict[str, Any]:
        kubeconfig = session.kubeconfig_path()
        if not kubeconfig.exists():
            raise KubeconfigError(f"Kubeconfig file not found at: {kubeconfig}")

        cmd = ["kubectl", "--kubeconfig", str(kubeconfig), *(args or [])]
        if all_namespaces:
            cmd.append("--all-namespaces=true")
        if namespace:
            cmd.append(f"--namespace={namespace}")

        try:
            result = run_command(cmd, timeout=timeout)
        except FileNotFoundError as exc:
            raise GardenctlError("kubectl is not installed on your system") from exc
        except subprocess.TimeoutExpired as exc:
            raise GardenctlError(f"kubectl timed out after {exc.timeout}s") from exc

        if result["returncode"] != 0:
            logger.debug("kubectl exited with %s", result["returncode"])
        return {"cmd": cmd, "kubeconfig": str(kubeconfig), **result}

    def get_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "args": {"type": "array", "items": {"type": "string"}, "nullable": True},
                "namespace": {"type": "string", "nullable": True},
                "all_namespaces": {"type": "boolean"},
                "timeout": {"type": "number", "nullable": True},
            },
            "required": [],
        }
