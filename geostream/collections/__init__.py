"""
GeoStream Collections Module

Arrow-backed feature collections and value ranges.
"""

from geostream.collections.feature_collection import (
    DataCollection,
    FeatureCollection,
    FeatureData,
    MultiLineStringCollection,
    MultiPointCollection,
    MultiPolygonCollection,
    collection_type_for,
)
from geostream.collections.ranges import StringOrNumberRange

__all__ = [
    "DataCollection",
    "FeatureCollection",
    "FeatureData",
    "MultiLineStringCollection",
    "MultiPointCollection",
    "MultiPolygonCollection",
    "StringOrNumberRange",
    "collection_type_for",
]
