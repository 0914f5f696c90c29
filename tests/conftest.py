"""
GeoStream Test Configuration

Shared pytest fixtures for all tests.
"""

import pytest
from shapely.geometry import MultiPolygon, Polygon

from geostream.collections import (
    DataCollection,
    FeatureData,
    MultiPointCollection,
    MultiPolygonCollection,
)
from geostream.core import BoundingBox2D, QueryRectangle, SpatialResolution, TimeInterval
from geostream.core.settings import get_settings
from geostream.engine import InMemoryExecutionContext, StaticQueryContext


@pytest.fixture(scope="session")
def anyio_backend():
    """Configure anyio to only use asyncio backend."""
    return "asyncio"


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Settings are cached per process; tests may change the environment"""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def points():
    """Four points with an int and a float column"""
    return MultiPointCollection.from_data(
        geometries=[(0.0, 0.1), (1.0, 1.1), (2.0, 3.1), (3.0, 3.1)],
        time_intervals=[TimeInterval(0, 1)] * 4,
        data={
            "foo": FeatureData.float([0.0, 1.0, 2.0, 3.0]),
            "bar": FeatureData.int([0, 1, 2, 3]),
        },
    )


@pytest.fixture
def polygons():
    """One square from (0.5, 0.5) to (2.5, 3.5)"""
    square = Polygon([(0.5, 0.5), (2.5, 0.5), (2.5, 3.5), (0.5, 3.5)])
    return MultiPolygonCollection.from_data(
        geometries=[MultiPolygon([square])],
        data={"name": FeatureData.text(["square"])},
    )


@pytest.fixture
def data_rows():
    return DataCollection.from_data(
        data={
            "value": FeatureData.float([1.5, None, 3.5]),
            "label": FeatureData.text(["a", "b", None]),
        },
    )


@pytest.fixture
def query_rectangle():
    return QueryRectangle(
        bbox=BoundingBox2D((0.0, 0.0), (4.0, 4.0)),
        time_interval=TimeInterval.default(),
        spatial_resolution=SpatialResolution.zero_point_one(),
    )


@pytest.fixture
def execution_context():
    return InMemoryExecutionContext()


@pytest.fixture
def query_context():
    return StaticQueryContext(chunk_byte_size=1024 * 1024)
