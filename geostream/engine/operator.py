"""
Operators

An operator is a declarative, serializable processing step: a parameter
object plus its source operators. Operators form trees built bottom-up,
so a graph can never contain cycles.

Lifecycle:
    Operator --initialize(execution_context)--> InitializedOperator
    InitializedOperator --query_processor()--> Typed*QueryProcessor
    QueryProcessor --query(rectangle, query_context)--> async chunk stream
"""

import dataclasses
import json
import logging
import re
from typing import Any, ClassVar

from geostream.core.exceptions import DeserializationError, ValidationError
from geostream.engine.context import ExecutionContext
from geostream.engine.initialized import (
    InitializedOperator,
    InitializedRasterOperator,
    InitializedVectorOperator,
)
from geostream.engine.registry import RASTER, VECTOR
from geostream.engine.sources import NoSources

logger = logging.getLogger(__name__)


def _camel_case(name: str) -> str:
    head, *tail = name.split("_")
    return head + "".join(part.title() for part in tail)


def _snake_case(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def _to_plain(value: Any) -> Any:
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if hasattr(value, "to_list"):
        return value.to_list()
    if isinstance(value, (list, tuple)):
        return [_to_plain(v) for v in value]
    if isinstance(value, dict):
        return {k: _to_plain(v) for k, v in value.items()}
    return value


@dataclasses.dataclass
class OperatorParams:
    """
    Base class for operator parameters

    Subclasses are dataclasses. Fields serialize with camelCase keys;
    conversion of nested values happens in ``__post_init__``.
    """

    def to_dict(self) -> dict[str, Any]:
        return {
            _camel_case(f.name): _to_plain(getattr(self, f.name))
            for f in dataclasses.fields(self)
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "OperatorParams":
        """
        Parse parameters from their camelCase representation

        Raises:
            DeserializationError: If fields are missing, unknown or malformed
        """
        data = data or {}
        if not isinstance(data, dict):
            raise DeserializationError(f"Params must be an object, got {type(data).__name__}")

        names = {f.name for f in dataclasses.fields(cls)}
        kwargs = {}
        for key, value in data.items():
            name = _snake_case(key)
            if name not in names:
                raise DeserializationError(f"Unknown parameter for {cls.__name__}: {key!r}")
            kwargs[name] = value

        try:
            return cls(**kwargs)
        except TypeError as e:
            raise DeserializationError(f"Invalid parameters for {cls.__name__}: {e}") from e
        except ValidationError as e:
            raise DeserializationError(str(e)) from e


@dataclasses.dataclass
class NoParams(OperatorParams):
    pass


class Operator:
    """
    Base class for all operators

    Subclasses set ``params_type`` and ``sources_type`` and implement
    ``_initialize``. The type tag is assigned by ``register_operator``.

    Attributes:
        params: Operator specific parameters
        sources: Source operator container
    """

    type_name: ClassVar[str]
    family: ClassVar[str]
    params_type: ClassVar[type[OperatorParams]] = NoParams
    sources_type: ClassVar[type] = NoSources

    def __init__(self, params: OperatorParams | None = None, sources: Any = None):
        self.params = params if params is not None else self.params_type()
        self.sources = sources if sources is not None else self.sources_type()

    def initialize(self, context: ExecutionContext) -> InitializedOperator:
        """
        Bind this operator and all of its sources

        Sources are initialized first (depth-first), then this operator's
        parameters are validated against the source result descriptors.

        Args:
            context: Execution context for dataset lookups

        Returns:
            Initialized operator

        Raises:
            BindingError: If any operator in the tree fails to bind
        """
        initialized_sources = self.sources.initialize(context)
        initialized = self._initialize(context, initialized_sources)
        logger.debug("Initialized %s -> %r", self.type_name, initialized.result_descriptor())
        return initialized

    def _initialize(self, context: ExecutionContext, sources: Any) -> InitializedOperator:
        raise NotImplementedError(f"{self.__class__.__name__} must implement _initialize()")

    def datasets(self) -> list[str]:
        """Dataset ids referenced anywhere in this operator tree"""
        return self.sources.datasets()

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"type": self.type_name, "params": self.params.to_dict()}
        sources = self.sources.to_dict()
        if sources:
            result["sources"] = sources
        return result

    def to_json(self, **kwargs: Any) -> str:
        return json.dumps(self.to_dict(), **kwargs)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Operator":
        params = cls.params_type.from_dict(data.get("params"))
        sources = cls.sources_type.from_dict(data.get("sources", {}))
        return cls(params=params, sources=sources)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Operator):
            return NotImplemented
        return type(self) is type(other) and self.to_dict() == other.to_dict()

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.params!r})"


class VectorOperator(Operator):
    """Operator producing feature collections"""

    family = VECTOR

    def initialize(self, context: ExecutionContext) -> InitializedVectorOperator:
        return super().initialize(context)


class RasterOperator(Operator):
    """Operator producing raster tiles"""

    family = RASTER

    def initialize(self, context: ExecutionContext) -> InitializedRasterOperator:
        return super().initialize(context)
