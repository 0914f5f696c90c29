"""
GeoStream Core Module

Value types, result descriptors, exceptions and settings.
"""

from geostream.core.exceptions import (
    BindingError,
    ColumnNotFoundError,
    ConfigurationError,
    DeserializationError,
    FeatureCollectionError,
    GeoStreamError,
    InvalidTypeError,
    QueryError,
    UnknownDatasetError,
    UnknownOperatorError,
    UnsupportedVariantError,
    ValidationError,
)
from geostream.core.primitives import (
    TIME_INSTANCE_MAX,
    TIME_INSTANCE_MIN,
    BoundingBox2D,
    Coordinate2D,
    SpatialResolution,
    TimeInterval,
)
from geostream.core.query_rectangle import QueryRectangle
from geostream.core.result_descriptor import (
    FeatureDataType,
    Measurement,
    RasterDataType,
    RasterResultDescriptor,
    ResultDescriptor,
    VectorDataType,
    VectorResultDescriptor,
    result_descriptor_from_dict,
)

__all__ = [
    # Primitives
    "TIME_INSTANCE_MAX",
    "TIME_INSTANCE_MIN",
    "BoundingBox2D",
    "Coordinate2D",
    "QueryRectangle",
    "SpatialResolution",
    "TimeInterval",
    # Descriptors
    "FeatureDataType",
    "Measurement",
    "RasterDataType",
    "RasterResultDescriptor",
    "ResultDescriptor",
    "VectorDataType",
    "VectorResultDescriptor",
    "result_descriptor_from_dict",
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
]
