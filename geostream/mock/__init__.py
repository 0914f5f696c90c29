"""
GeoStream Mock Module

In-memory source operators for tests, examples and the CLI.
"""

from geostream.mock.dataset_source import (
    MockDatasetDataSource,
    MockDatasetDataSourceLoadingInfo,
    MockDatasetDataSourceParams,
)
from geostream.mock.feature_collection_source import (
    MockFeatureCollectionSource,
    MockFeatureCollectionSourceData,
    MockFeatureCollectionSourceMultiLineString,
    MockFeatureCollectionSourceMultiPoint,
    MockFeatureCollectionSourceMultiPolygon,
    MockFeatureCollectionSourceParams,
)
from geostream.mock.raster_source import MockRasterSource, MockRasterSourceParams

__all__ = [
    "MockDatasetDataSource",
    "MockDatasetDataSourceLoadingInfo",
    "MockDatasetDataSourceParams",
    "MockFeatureCollectionSource",
    "MockFeatureCollectionSourceData",
    "MockFeatureCollectionSourceMultiLineString",
    "MockFeatureCollectionSourceMultiPoint",
    "MockFeatureCollectionSourceMultiPolygon",
    "MockFeatureCollectionSourceParams",
    "MockRasterSource",
    "MockRasterSourceParams",
]
