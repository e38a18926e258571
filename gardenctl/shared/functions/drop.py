"""Drop function: remove the top of the target stack or a named level."""

import logging
from typing import Any, Dict, List, Optional

from gardenctl.session import Session
from gardenctl.shared.base_functions import BaseFunction
from gardenctl.shared.errors import GardenctlError
from gardenctl.shared.kubeconfig import DEFAULT_NAMESPACE, set_context_namespace
from gardenctl.shared.target import TargetKind, TargetStack

logger = logging.getLogger("gardenctl.drop")


class DropFunction(BaseFunction):
    """Drop the top of the target stack, or a kind and everything above it."""

    def __init__(self) -> None:
        super().__init__(
            name="drop",
            description="Drop the current target, or the given kind and everything "
            "targeted below it.",
        )

    def execute(self, session: Session, kind: Optional[str] = None, **_: Any) -> Dict[str, Any]:
        target_kind = TargetKind.from_string(kind) if kind else None

        stack = session.stored_target()
        before = stack.copy()
        dropped = stack.pop(target_kind)

        warnings: List[str] = []
        if any(entry.kind is TargetKind.NAMESPACE for entry in dropped):
            try:
                self._reset_namespace(session, before)
            except GardenctlError as exc:
                logger.warning("Namespace not reset: %s", exc)
                warnings.append(f"Namespace not reset to {DEFAULT_NAMESPACE}: {exc}")

        session.write_target(stack)
        for entry in dropped:
            logger.info("Dropped %s", entry)

        return {
            "status": "success",
            "dropped": [entry.to_dict() for entry in dropped],
            "warnings": warnings,
            "target": [entry.to_dict() for entry in stack],
            "kubeconfig": str(session.kubeconfig) if session.kubeconfig else None,
        }

    def _reset_namespace(self, session: Session, stack: TargetStack) -> None:
        kubeconfig = session.kubeconfig_path(stack)
        if not kubeconfig.exists():
            logger.debug("No kubeconfig at %s, namespace not reset", kubeconfig)
            return
        set_context_namespace(kubeconfig, DEFAULT_NAMESPACE)

    def get_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "kind": {
                    "type": "string",
                    "enum": [kind.value for kind in TargetKind],
                    "nullable": True,
                },
            },
            "required": [],
        }
