"""Base classes for the operations behind gardenctl commands."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from gardenctl.session import Session


class BaseFunction(ABC):
    """Base class for all functions."""

    def __init__(self, name: str, description: str):
        self.name = name
        self.description = description

    @abstractmethod
    def execute(self, session: "Session", **kwargs: Any) -> Dict[str, Any]:
        """Execute the function against a session."""

    @abstractmethod
    def get_schema(self) -> Dict[str, Any]:
        """Return JSON schema for function parameters."""

    def validate_inputs(self, inputs: Dict[str, Any]) -> None:
        """Validate incoming inputs against the declared schema.

        Rejects missing required fields, explicit ``None`` values unless the
        property declares ``nullable: True``, and values outside an ``enum``.
        """

        schema = self.get_schema() or {}
        properties: Dict[str, Dict[str, Any]] = schema.get("properties", {}) or {}
        required_fields = set(schema.get("required", []))

        for field in required_fields:
            if field not in inputs or inputs[field] is None:
                raise ValueError(f"Parameter '{field}' is required and cannot be null")

        for field, value in inputs.items():
            property_schema = properties.get(field)
            if property_schema is None:
                continue
            if value is None:
                if property_schema.get("nullable") is True:
                    continue
                raise ValueError(f"Parameter '{field}' cannot be null")
            allowed = property_schema.get("enum")
            if allowed and value not in allowed:
                raise ValueError(
                    f"Parameter '{field}' must be one of: {', '.join(map(str, allowed))}"
                )

    def __call__(self, session: "Session", **kwargs: Any) -> Dict[str, Any]:
        self.validate_inputs(kwargs)
        return self.execute(session, **kwargs)


class FunctionRegistry:
    """Registry to manage all available functions."""

    def __init__(self):
        self._functions: Dict[str, BaseFunction] = {}

    def register(self, function: BaseFunction) -> None:
        """Register a new function."""
        self._functions[function.name] = function

    def get(self, name: str) -> Optional[BaseFunction]:
        """Get a function by name."""
        return self._functions.get(name)

    def reset(self) -> None:
        self._functions.clear()


# Global registry instance
function_registry = FunctionRegistry()
