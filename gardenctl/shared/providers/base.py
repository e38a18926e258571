"""Collaborator interfaces for reading objects from a garden cluster."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol


@dataclass
class ProjectInfo:
    """A Gardener project and the namespace holding its shoots."""

    name: str
    namespace: Optional[str] = None


@dataclass
class SeedInfo:
    """A seed cluster and the secret holding its kubeconfig."""

    name: str
    secret_name: Optional[str] = None
    secret_namespace: Optional[str] = None


@dataclass
class ShootInfo:
    """A shoot cluster as listed from the garden."""

    name: str
    namespace: str
    seed_name: Optional[str] = None
    seed_selector_labels: Dict[str, str] = field(default_factory=dict)
    annotations: Dict[str, str] = field(default_factory=dict)


class GardenClient(Protocol):
    """Lists garden objects and fetches kubeconfig secrets."""

    def list_seeds(self) -> List[SeedInfo]:
        """Return all seeds registered in the garden."""

    def list_projects(self) -> List[ProjectInfo]:
        """Return all projects visible to the user."""

    def list_shoots(self, namespace: Optional[str] = None) -> List[ShootInfo]:
        """Return shoots, optionally limited to one project namespace."""

    def get_project(self, name: str) -> ProjectInfo:
        """Return a single project."""

    def project_name_for_namespace(self, namespace: str) -> str:
        """Return the project owning a namespace."""

    def fetch_seed_kubeconfig(self, seed: SeedInfo) -> bytes:
        """Return the raw kubeconfig of a seed."""

    def fetch_shoot_kubeconfig(self, shoot: ShootInfo) -> bytes:
        """Return the raw kubeconfig of a shoot."""
