"""Shared provider errors."""

from typing import List

from gardenctl.shared.errors import GardenctlError


class KubectlError(GardenctlError):
    """Raised when a kubectl invocation exits with a non-zero status."""

    def __init__(self, cmd: List[str], returncode: int, stderr: str = ""):
        self.cmd = list(cmd)
        self.returncode = returncode
        self.stderr = stderr.strip()
        detail = self.stderr or f"exit status {returncode}"
        super().__init__(f"'{' '.join(self.cmd)}' failed: {detail}")
