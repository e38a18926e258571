"""Garden cluster access for name resolution and kubeconfig caching."""

from .base import GardenClient, ProjectInfo, SeedInfo, ShootInfo
from .errors import KubectlError
from .kubectl import KubectlGardenClient

__all__ = [
    "GardenClient",
    "KubectlError",
    "KubectlGardenClient",
    "ProjectInfo",
    "SeedInfo",
    "ShootInfo",
]
