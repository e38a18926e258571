"""Debug logging for gardenctl, toggled by ``--debug``."""

from __future__ import annotations

import logging
import shlex
import threading
from typing import Any, Dict, Sequence

_logger = logging.getLogger("gardenctl")
_state_lock = threading.Lock()
_enabled = False

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"

# Longest stderr excerpt written to the debug log.
MAX_STDERR = 500


def configure_root(level: int = logging.WARNING) -> None:
    """Install a stderr handler unless logging is configured already."""

    if not logging.getLogger().handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)


def is_enabled() -> bool:
    with _state_lock:
        return _enabled


def enable() -> None:
    """Log everything below the ``gardenctl`` logger at DEBUG."""

    global _enabled
    with _state_lock:
        _enabled = True
    _logger.setLevel(logging.DEBUG)
    for handler in logging.getLogger().handlers:
        handler.setLevel(logging.DEBUG)
    _logger.debug("Debug mode enabled")


def disable() -> None:
    global _enabled
    with _state_lock:
        _enabled = False
    _logger.setLevel(logging.WARNING)


def log_command(cmd: Sequence[str]) -> None:
    """Log an external command as it would be typed in a shell."""

    if not is_enabled():
        return
    logging.getLogger("gardenctl.command").debug("Running: %s", shlex.join(cmd))


def log_result(cmd: Sequence[str], result: Dict[str, Any]) -> None:
    """Log the exit status of an external command and the start of its stderr."""

    if not is_enabled():
        return
    stderr = (result.get("stderr") or "").strip()
    if len(stderr) > MAX_STDERR:
        stderr = stderr[:MAX_STDERR] + "..."
    logging.getLogger("gardenctl.command").debug(
        "%s exited with %s%s",
        cmd[0],
        result.get("returncode"),
        f": {stderr}" if stderr else "",
    )
