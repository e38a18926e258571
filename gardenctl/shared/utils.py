"""Utility functions for running external commands and handling paths."""

import os
import subprocess
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from gardenctl.shared import debug


def run_command(
    cmd: List[str],
    stdin_data: Optional[bytes] = None,
    timeout: Optional[float] = None,
) -> Dict[str, Any]:
    """
    Run a command to completion and capture its output.

    Args:
        cmd: Command to execute as a list of strings
        stdin_data: Optional data to send to stdin
        timeout: Optional number of seconds after which the command is killed

    Returns:
        Dictionary with returncode, stdout, and stderr

    Raises:
        FileNotFoundError: If the executable is not installed
        subprocess.TimeoutExpired: If the timeout elapsed
    """
    debug.log_command(cmd)
    process = subprocess.run(
        cmd,
        input=stdin_data,
        capture_output=True,
        check=False,
        timeout=timeout,
    )
    result = {
        "returncode": process.returncode,
        "stdout": process.stdout.decode() if process.stdout else "",
        "stderr": process.stderr.decode() if process.stderr else "",
    }
    debug.log_result(cmd, result)
    return result


def home_dir() -> str:
    return os.environ.get("HOME") or os.environ.get("USERPROFILE") or str(Path.home())


def tidy_home(path: Union[str, Path]) -> Path:
    """Replace a leading ``~`` with the user's home directory."""

    text = str(path)
    if text.startswith("~"):
        return Path(home_dir()) / text[1:].lstrip("/\\")
    return Path(text)
