"""gardenctl - navigate garden, project, seed and shoot clusters."""

__version__ = "0.1.0"
