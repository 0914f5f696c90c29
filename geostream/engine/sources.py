"""
Operator sources

Containers for the child operators of an operator. Each container knows
its serialized shape, initializes its children depth-first and reports the
datasets they reference.

Serialized shapes:
    NoSources:                 (no "sources" key)
    SingleVectorSource:        {"vector": <operator>}
    SingleRasterSource:        {"raster": <operator>}
    MultipleRasterSources:     {"rasters": [<operator>, ...]}
    MultiRasterOrVectorSource: {"source": [<raster>, ...] | <vector>}
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from geostream.core.exceptions import DeserializationError
from geostream.engine.context import ExecutionContext
from geostream.engine.initialized import InitializedRasterOperator, InitializedVectorOperator
from geostream.engine.registry import RASTER, VECTOR, operator_from_dict

if TYPE_CHECKING:
    from geostream.engine.operator import RasterOperator, VectorOperator


def require_source(data: dict[str, Any], key: str) -> Any:
    if not isinstance(data, dict) or key not in data:
        raise DeserializationError(f"Sources are missing the {key!r} field")
    return data[key]


def check_source_keys(data: dict[str, Any], allowed: set[str]) -> None:
    if not isinstance(data, dict):
        raise DeserializationError(f"Sources must be an object, got {type(data).__name__}")
    unexpected = set(data) - allowed
    if unexpected:
        raise DeserializationError(f"Unexpected source fields: {sorted(unexpected)}")


class NoSources:
    """Sources of a leaf operator"""

    def to_dict(self) -> dict[str, Any]:
        return {}

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "NoSources":
        if data:
            raise DeserializationError("Source operators do not take sources")
        return cls()

    def initialize(self, context: ExecutionContext) -> None:
        return None

    def datasets(self) -> list[str]:
        return []

    def __eq__(self, other: object) -> bool:
        return isinstance(other, NoSources)


@dataclass(frozen=True)
class InitializedSingleVectorSource:
    vector: InitializedVectorOperator


@dataclass
class SingleVectorSource:
    """Exactly one vector operator"""

    vector: "VectorOperator"

    def to_dict(self) -> dict[str, Any]:
        return {"vector": self.vector.to_dict()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SingleVectorSource":
        check_source_keys(data, {"vector"})
        return cls(operator_from_dict(require_source(data, "vector"), VECTOR))

    def initialize(self, context: ExecutionContext) -> InitializedSingleVectorSource:
        return InitializedSingleVectorSource(self.vector.initialize(context))

    def datasets(self) -> list[str]:
        return self.vector.datasets()


@dataclass(frozen=True)
class InitializedSingleRasterSource:
    raster: InitializedRasterOperator


@dataclass
class SingleRasterSource:
    """Exactly one raster operator"""

    raster: "RasterOperator"

    def to_dict(self) -> dict[str, Any]:
        return {"raster": self.raster.to_dict()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SingleRasterSource":
        check_source_keys(data, {"raster"})
        return cls(operator_from_dict(require_source(data, "raster"), RASTER))

    def initialize(self, context: ExecutionContext) -> InitializedSingleRasterSource:
        return InitializedSingleRasterSource(self.raster.initialize(context))

    def datasets(self) -> list[str]:
        return self.raster.datasets()


@dataclass(frozen=True)
class InitializedMultipleRasterSources:
    rasters: list[InitializedRasterOperator]


@dataclass
class MultipleRasterSources:
    """Any number of raster operators, in declaration order"""

    rasters: list["RasterOperator"] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"rasters": [raster.to_dict() for raster in self.rasters]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MultipleRasterSources":
        check_source_keys(data, {"rasters"})
        rasters = require_source(data, "rasters")
        if not isinstance(rasters, list):
            raise DeserializationError("'rasters' must be a list of operators")
        return cls([operator_from_dict(raster, RASTER) for raster in rasters])

    def initialize(self, context: ExecutionContext) -> InitializedMultipleRasterSources:
        return InitializedMultipleRasterSources([r.initialize(context) for r in self.rasters])

    def datasets(self) -> list[str]:
        return [dataset for raster in self.rasters for dataset in raster.datasets()]


@dataclass(frozen=True)
class InitializedMultiRasterOrVectorSource:
    rasters: list[InitializedRasterOperator] | None = None
    vector: InitializedVectorOperator | None = None

    def is_raster(self) -> bool:
        return self.rasters is not None


class MultiRasterOrVectorSource:
    """
    Either a list of raster operators or a single vector operator

    A JSON list selects the raster form, a JSON object the vector form.
    """

    def __init__(
        self,
        rasters: list["RasterOperator"] | None = None,
        vector: "VectorOperator | None" = None,
    ):
        if (rasters is None) == (vector is None):
            raise DeserializationError("Exactly one of rasters or vector must be given")
        self.rasters = rasters
        self.vector = vector

    def is_raster(self) -> bool:
        return self.rasters is not None

    def is_vector(self) -> bool:
        return self.vector is not None

    def to_dict(self) -> dict[str, Any]:
        if self.is_raster():
            return {"source": [raster.to_dict() for raster in self.rasters]}
        return {"source": self.vector.to_dict()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MultiRasterOrVectorSource":
        check_source_keys(data, {"source"})
        source = require_source(data, "source")
        if isinstance(source, list):
            return cls(rasters=[operator_from_dict(raster, RASTER) for raster in source])
        return cls(vector=operator_from_dict(source, VECTOR))

    def initialize(self, context: ExecutionContext) -> InitializedMultiRasterOrVectorSource:
        if self.is_raster():
            return InitializedMultiRasterOrVectorSource(
                rasters=[raster.initialize(context) for raster in self.rasters]
            )
        return InitializedMultiRasterOrVectorSource(vector=self.vector.initialize(context))

    def datasets(self) -> list[str]:
        if self.is_raster():
            return [dataset for raster in self.rasters for dataset in raster.datasets()]
        return self.vector.datasets()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MultiRasterOrVectorSource):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        if self.is_raster():
            return f"MultiRasterOrVectorSource(rasters={self.rasters!r})"
        return f"MultiRasterOrVectorSource(vector={self.vector!r})"
