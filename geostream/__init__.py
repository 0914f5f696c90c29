"""
GeoStream - Streaming geospatial operator graphs

Compose declarative operators over raster and vector data, bind them to a
catalog and stream the results chunk by chunk.

Quick Start:
    >>> import geostream as gs
    >>>
    >>> # Build a workflow from JSON
    >>> operator = gs.operator_from_json(open("workflow.json").read())
    >>>
    >>> # Bind it and build the typed processor
    >>> initialized = operator.initialize(gs.InMemoryExecutionContext())
    >>> typed = initialized.query_processor()
    >>>
    >>> # Stream the result chunks
    >>> rect = gs.QueryRectangle(bbox=(0.0, 0.0, 10.0, 10.0))
    >>> async for chunk in typed.processor.query(rect, gs.StaticQueryContext()):
    ...     print(len(chunk))
"""

from geostream.adapters import FeatureCollectionChunkMerger
from geostream.collections import (
    DataCollection,
    FeatureCollection,
    FeatureData,
    MultiLineStringCollection,
    MultiPointCollection,
    MultiPolygonCollection,
    StringOrNumberRange,
)
from geostream.core import (
    BindingError,
    BoundingBox2D,
    ColumnNotFoundError,
    ConfigurationError,
    Coordinate2D,
    DeserializationError,
    FeatureCollectionError,
    FeatureDataType,
    GeoStreamError,
    InvalidTypeError,
    QueryError,
    QueryRectangle,
    RasterDataType,
    RasterResultDescriptor,
    SpatialResolution,
    TimeInterval,
    UnknownDatasetError,
    UnknownOperatorError,
    UnsupportedVariantError,
    ValidationError,
    VectorDataType,
    VectorResultDescriptor,
)
from geostream.engine import (
    DatasetMetaData,
    InMemoryExecutionContext,
    Operator,
    StaticQueryContext,
    TypedRasterQueryProcessor,
    TypedVectorQueryProcessor,
    get_registry,
    operator_from_dict,
    operator_from_json,
)
from geostream.raster import GeoTransform, RasterTile2D

# Register built-in operators
import geostream.mock
import geostream.processing

__version__ = "0.1.0"

__all__ = [
    # Exceptions
    "BindingError",
    "ColumnNotFoundError",
    "ConfigurationError",
    "DeserializationError",
    "FeatureCollectionError",
    "GeoStreamError",
    "InvalidTypeError",
    "QueryError",
    "UnknownDatasetError",
    "UnknownOperatorError",
    "UnsupportedVariantError",
    "ValidationError",
    # Values
    "BoundingBox2D",
    "Coordinate2D",
    "FeatureDataType",
    "QueryRectangle",
    "RasterDataType",
    "RasterResultDescriptor",
    "SpatialResolution",
    "TimeInterval",
    "VectorDataType",
    "VectorResultDescriptor",
    # Data
    "DataCollection",
    "FeatureCollection",
    "FeatureData",
    "GeoTransform",
    "MultiLineStringCollection",
    "MultiPointCollection",
    "MultiPolygonCollection",
    "RasterTile2D",
    "StringOrNumberRange",
    # Engine
    "DatasetMetaData",
    "FeatureCollectionChunkMerger",
    "InMemoryExecutionContext",
    "Operator",
    "StaticQueryContext",
    "TypedRasterQueryProcessor",
    "TypedVectorQueryProcessor",
    "get_registry",
    "operator_from_dict",
    "operator_from_json",
    "__version__",
]
