"""
GeoStream Engine Module

Operator lifecycle, typed query processors, contexts and serialization.
"""

from geostream.engine.context import (
    DatasetMetaData,
    ExecutionContext,
    InMemoryExecutionContext,
    QueryContext,
    StaticQueryContext,
)
from geostream.engine.initialized import (
    InitializedOperator,
    InitializedRasterOperator,
    InitializedVectorOperator,
)
from geostream.engine.operator import (
    NoParams,
    Operator,
    OperatorParams,
    RasterOperator,
    VectorOperator,
)
from geostream.engine.processor import (
    QueryProcessor,
    RasterQueryProcessor,
    TypedQueryProcessor,
    TypedRasterQueryProcessor,
    TypedVectorQueryProcessor,
    VectorQueryProcessor,
)
from geostream.engine.registry import (
    OperatorRegistry,
    get_registry,
    operator_from_dict,
    operator_from_json,
    register_operator,
)
from geostream.engine.sources import (
    MultipleRasterSources,
    MultiRasterOrVectorSource,
    NoSources,
    SingleRasterSource,
    SingleVectorSource,
)

__all__ = [
    # Contexts
    "DatasetMetaData",
    "ExecutionContext",
    "InMemoryExecutionContext",
    "QueryContext",
    "StaticQueryContext",
    # Operators
    "InitializedOperator",
    "InitializedRasterOperator",
    "InitializedVectorOperator",
    "NoParams",
    "Operator",
    "OperatorParams",
    "RasterOperator",
    "VectorOperator",
    # Processors
    "QueryProcessor",
    "RasterQueryProcessor",
    "TypedQueryProcessor",
    "TypedRasterQueryProcessor",
    "TypedVectorQueryProcessor",
    "VectorQueryProcessor",
    # Registry
    "OperatorRegistry",
    "get_registry",
    "operator_from_dict",
    "operator_from_json",
    "register_operator",
    # Sources
    "MultiRasterOrVectorSource",
    "MultipleRasterSources",
    "NoSources",
    "SingleRasterSource",
    "SingleVectorSource",
]
