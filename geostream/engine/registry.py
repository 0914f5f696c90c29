"""
Operator registry

Maps the "type" tag of a serialized operator to its class. Operators
register themselves with the ``register_operator`` decorator.
"""

import json
import logging
from typing import TYPE_CHECKING, Any

from geostream.core.exceptions import DeserializationError, UnknownOperatorError

if TYPE_CHECKING:
    from geostream.engine.operator import Operator

logger = logging.getLogger(__name__)

VECTOR = "vector"
RASTER = "raster"


class OperatorRegistry:
    """
    In-memory registry of operator classes by type tag.
    """

    def __init__(self):
        self._operators: dict[str, type["Operator"]] = {}

    def register(self, type_name: str, operator_cls: type["Operator"]) -> None:
        """Register an operator class under a type tag."""
        existing = self._operators.get(type_name)
        if existing is not None and existing is not operator_cls:
            raise ValueError(
                f"Operator type {type_name!r} already registered by {existing.__name__}"
            )
        self._operators[type_name] = operator_cls
        logger.debug("Registered operator: %s (%s)", type_name, operator_cls.family)

    def get(self, type_name: str) -> type["Operator"] | None:
        """Get an operator class by type tag."""
        return self._operators.get(type_name)

    def list_operators(self, family: str | None = None) -> list[str]:
        """List registered type tags, optionally of one family."""
        return sorted(
            name
            for name, operator_cls in self._operators.items()
            if family is None or operator_cls.family == family
        )


# Global registry instance
_global_registry = OperatorRegistry()


def get_registry() -> OperatorRegistry:
    """Get the global operator registry."""
    _load_builtin_operators()
    return _global_registry


def register_operator(type_name: str):
    """
    Class decorator registering an operator under a type tag

    Examples:
        >>> @register_operator("ColumnRangeFilter")
        ... class ColumnRangeFilter(VectorOperator):
        ...     ...
    """

    def decorator(operator_cls: type["Operator"]) -> type["Operator"]:
        operator_cls.type_name = type_name
        _global_registry.register(type_name, operator_cls)
        return operator_cls

    return decorator


def operator_from_dict(data: Any, family: str | None = None) -> "Operator":
    """
    Build an operator graph from its tagged representation

    Args:
        data: {"type": <name>, "params": {...}, "sources": {...}}
        family: Required operator family ("vector" or "raster"), if any

    Returns:
        Operator instance with deserialized sources

    Raises:
        UnknownOperatorError: If the type tag is not registered for the family
        DeserializationError: If the representation is malformed
    """
    if not isinstance(data, dict):
        raise DeserializationError(f"Operator must be an object, got {type(data).__name__}")
    type_name = data.get("type")
    if not isinstance(type_name, str):
        raise DeserializationError("Operator is missing its 'type' tag")

    operator_cls = get_registry().get(type_name)
    if operator_cls is None or (family is not None and operator_cls.family != family):
        raise UnknownOperatorError(type_name, family)

    unexpected = set(data) - {"type", "params", "sources"}
    if unexpected:
        raise DeserializationError(f"Unexpected operator fields: {sorted(unexpected)}")

    return operator_cls.from_dict(data)


def operator_from_json(text: str, family: str | None = None) -> "Operator":
    """Parse an operator graph from JSON text"""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise DeserializationError(f"Invalid JSON: {e}") from e
    return operator_from_dict(data, family)


def _load_builtin_operators() -> None:
    # Registration happens on import
    import geostream.mock  # noqa: F401
    import geostream.processing  # noqa: F401
