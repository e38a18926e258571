"""Kubeconfig locations for a target stack and helpers to edit kubeconfigs."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from gardenctl.shared.config import GardenConfig
from gardenctl.shared.errors import (
    IllegalStackShapeError,
    InvalidTargetError,
    KubeconfigError,
)
from gardenctl.shared.target import TargetKind, TargetShape, TargetStack

logger = logging.getLogger("gardenctl.kubeconfig")

KUBECONFIG_FILENAME = "kubeconfig.yaml"
DEFAULT_NAMESPACE = "default"


# --------------------------------------------------------------------------- #
# Cache layout
# --------------------------------------------------------------------------- #


def seed_kubeconfig_path(cache_dir: Path, garden: str, seed: str) -> Path:
    return Path(cache_dir) / garden / "seeds" / seed / KUBECONFIG_FILENAME


def shoot_kubeconfig_path(
    cache_dir: Path, garden: str, branch: TargetKind, branch_name: str, shoot: str
) -> Path:
    folder = "seeds" if branch is TargetKind.SEED else "projects"
    return Path(cache_dir) / garden / folder / branch_name / shoot / KUBECONFIG_FILENAME


def derive_kubeconfig_path(
    stack: TargetStack, cache_dir: Path, garden_config: GardenConfig
) -> Path:
    """Return the kubeconfig to use for the current target.

    A trailing namespace does not change the kubeconfig, only the namespace
    of its active context, so it is stripped first.
    """

    shape = stack.shape.base
    if shape is TargetShape.UNSET:
        raise IllegalStackShapeError("no garden cluster targeted")

    garden = stack.garden or ""
    if shape in (TargetShape.GARDEN, TargetShape.GARDEN_PROJECT):
        return garden_config.kubeconfig_for(garden)
    if shape is TargetShape.GARDEN_SEED:
        return seed_kubeconfig_path(cache_dir, garden, stack.seed or "")
    if shape is TargetShape.GARDEN_SEED_SHOOT:
        return shoot_kubeconfig_path(
            cache_dir, garden, TargetKind.SEED, stack.seed or "", stack.shoot or ""
        )
    if shape is TargetShape.GARDEN_PROJECT_SHOOT:
        return shoot_kubeconfig_path(
            cache_dir, garden, TargetKind.PROJECT, stack.project or "", stack.shoot or ""
        )
    raise IllegalStackShapeError(f"no kubeconfig for target shape {shape.value}")


def cluster_kubeconfig_path(
    stack: TargetStack,
    kind: TargetKind,
    cache_dir: Path,
    garden_config: GardenConfig,
    seed_name: Optional[str] = None,
) -> Path:
    """Kubeconfig of the garden, seed or shoot cluster within the target.

    ``seed_name`` is needed for the seed of a shoot targeted via a project.
    """

    kind = TargetKind(kind)
    if stack.garden is None:
        raise IllegalStackShapeError("no garden cluster targeted")

    if kind is TargetKind.GARDEN:
        return garden_config.kubeconfig_for(stack.garden)
    if kind is TargetKind.SEED:
        seed = stack.seed or seed_name
        if not seed:
            raise InvalidTargetError("no seed targeted")
        return seed_kubeconfig_path(cache_dir, stack.garden, seed)
    if kind is TargetKind.SHOOT:
        if not stack.shape.has_shoot:
            raise InvalidTargetError("no shoot targeted")
        return derive_kubeconfig_path(stack, cache_dir, garden_config)
    raise InvalidTargetError(f"{kind.value} is not a cluster")


def write_kubeconfig(path: Path, content: bytes) -> Path:
    """Store a kubeconfig in the cache, creating parent directories."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    path.chmod(0o644)
    logger.debug("Cached kubeconfig at %s", path)
    return path


# --------------------------------------------------------------------------- #
# Kubeconfig contents
# --------------------------------------------------------------------------- #


def parse_kubeconfig(content: Union[bytes, str], source: str) -> Dict[str, Any]:
    """Parse kubeconfig text; ``source`` names it in error messages."""

    try:
        kubeconfig = yaml.safe_load(content) or {}
    except yaml.YAMLError as exc:
        raise KubeconfigError(f"Failed to parse kubeconfig {source}: {exc}") from exc
    if not isinstance(kubeconfig, dict):
        raise KubeconfigError(f"Kubeconfig {source} is not a mapping")
    return kubeconfig


def load_kubeconfig(path: Path) -> Dict[str, Any]:
    path = Path(path)
    if not path.exists():
        raise KubeconfigError(f"Kubeconfig file not found at: {path}")
    return parse_kubeconfig(path.read_bytes(), str(path))


def set_context_namespace(path: Path, namespace: str) -> str:
    """Set the namespace of the kubeconfig's current context.

    Returns the name of the modified context.
    """

    kubeconfig = load_kubeconfig(path)
    current = kubeconfig.get("current-context")
    if not current:
        raise KubeconfigError(f"Kubeconfig {path} has no current context")

    for ctx in kubeconfig.get("contexts") or []:
        if ctx.get("name") == current:
            if ctx.get("context") is None:
                ctx["context"] = {}
            ctx["context"]["namespace"] = namespace
            break
    else:
        raise KubeconfigError(f"Context '{current}' not found in {path}")

    with open(path, "w") as f:
        yaml.safe_dump(kubeconfig, f, default_flow_style=False, sort_keys=False)
    logger.info("Set namespace to %s for context %s", namespace, current)
    return current


def describe_kubeconfig(path: Path) -> Dict[str, Any]:
    """Summarise contexts, clusters and users of a kubeconfig."""

    kubeconfig = load_kubeconfig(path)
    contexts = kubeconfig.get("contexts") or []
    result: Dict[str, Any] = {
        "kubeconfig_path": str(path),
        "current_context": kubeconfig.get("current-context", "Not set"),
        "contexts": [_get_context_details(ctx) for ctx in contexts],
        "clusters": _get_clusters(kubeconfig),
        "users": _get_users(kubeconfig),
    }
    return result


def _get_context_details(context: Dict[str, Any]) -> Dict[str, Any]:
    context_info = context.get("context") or {}
    return {
        "name": context.get("name"),
        "cluster": context_info.get("cluster"),
        "user": context_info.get("user"),
        "namespace": context_info.get("namespace", DEFAULT_NAMESPACE),
    }


def _get_clusters(kubeconfig: Dict[str, Any]) -> List[Dict[str, Any]]:
    clusters = []
    for cluster in kubeconfig.get("clusters") or []:
        cluster_data = cluster.get("cluster") or {}
        clusters.append({"name": cluster.get("name"), "server": cluster_data.get("server")})
    return clusters


def _get_users(kubeconfig: Dict[str, Any]) -> List[Dict[str, Any]]:
    """User entries with their auth types only, never the credentials."""
    users = []
    for user in kubeconfig.get("users") or []:
        user_data = user.get("user") or {}
        auth_types = []
        if "client-certificate" in user_data or "client-certificate-data" in user_data:
            auth_types.append("certificate")
        if "token" in user_data:
            auth_types.append("token")
        if "exec" in user_data:
            auth_types.append("exec")
        if "auth-provider" in user_data:
            auth_types.append("auth-provider")
        users.append({"name": user.get("name"), "auth_type": auth_types})
    return users
