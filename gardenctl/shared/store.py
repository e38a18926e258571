"""Reading and writing the persisted target stack."""

import logging
import os
import tempfile
from pathlib import Path

import yaml

from gardenctl.shared.config import GardenConfig
from gardenctl.shared.errors import IllegalStackShapeError
from gardenctl.shared.target import TargetKind, TargetStack

logger = logging.getLogger("gardenctl.store")


def read_target(path: Path) -> TargetStack:
    """Load the target stack; a missing or empty file is an empty stack."""

    path = Path(path)
    if not path.exists():
        return TargetStack()
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise IllegalStackShapeError(f"failed to parse target file {path}: {exc}") from exc
    return TargetStack.from_dict(data)


def write_target(path: Path, stack: TargetStack) -> None:
    """Replace the target file with the YAML encoding of ``stack``."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    content = yaml.safe_dump(stack.to_dict(), default_flow_style=False, sort_keys=False)

    fd, tmp_name = tempfile.mkstemp(dir=str(path.parent), prefix=".target-")
    try:
        with os.fdopen(fd, "w") as f:
            f.write(content)
        os.chmod(tmp_name, 0o644)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
    logger.debug("Wrote target %r to %s", stack, path)


def ensure_target(path: Path, garden_config: GardenConfig) -> TargetStack:
    """Return the stored stack, seeding it with the first garden on first run."""

    path = Path(path)
    if path.exists() and path.stat().st_size > 0:
        return read_target(path)

    stack = TargetStack()
    names = garden_config.names()
    if names:
        stack.push(TargetKind.GARDEN, names[0])
        write_target(path, stack)
        logger.info("Targeted default garden %s", names[0])
    return stack
