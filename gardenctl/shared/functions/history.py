"""Show the targeting history or re-apply one of its entries."""

from typing import Any, Dict, List, Optional

from gardenctl.session import Session
from gardenctl.shared.base_functions import BaseFunction
from gardenctl.shared.errors import InvalidTargetError
from gardenctl.shared.kubeconfig import cluster_kubeconfig_path, set_context_namespace
from gardenctl.shared.target import TargetKind, TargetStack

DEFAULT_LIMIT = 20


class HistoryFunction(BaseFunction):
    """List recent targets, newest first, or switch back to one of them."""

    def __init__(self) -> None:
        super().__init__(
            name="history",
            description="List recent targets or re-target the entry at the given index.",
        )

    def execute(
        self,
        session: Session,
        index: Optional[int] = None,
        limit: int = DEFAULT_LIMIT,
        **_: Any,
    ) -> Dict[str, Any]:
        if index is None:
            return {
                "history": [
                    dict(item.to_dict(), index=number)
                    for number, item in enumerate(session.history.recent(limit), start=1)
                ]
            }

        items = session.history.recent()
        if index < 1 or index > len(items):
            raise InvalidTargetError(f"no history entry {index}")

        stack = items[index - 1].to_stack()
        session.write_target(stack)
        if stack.namespace and session.kubeconfig is not None:
            set_context_namespace(session.kubeconfig, stack.namespace)
        session.history.append(stack)
        return {
            "status": "success",
            "target": [entry.to_dict() for entry in stack],
            "kubeconfigs": _cluster_kubeconfigs(session, stack),
        }

    def get_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "index": {"type": "integer", "nullable": True},
                "limit": {"type": "integer"},
            },
            "required": [],
        }


def _cluster_kubeconfigs(session: Session, stack: TargetStack) -> List[Dict[str, str]]:
    """Kubeconfig of every cluster in the stack."""

    result = []
    for entry in stack:
        if entry.kind in (TargetKind.PROJECT, TargetKind.NAMESPACE):
            continue
        path = cluster_kubeconfig_path(
            stack, entry.kind, session.paths.cache, session.garden_config
        )
        result.append({"kind": entry.kind.value, "kubeconfig": str(path)})
    return result
