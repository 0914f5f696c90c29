"""
Tests for the Statistics operator
"""

import numpy as np
import pytest

from geostream.collections import DataCollection, FeatureData
from geostream.core.exceptions import (
    ColumnNotFoundError,
    ConfigurationError,
    DeserializationError,
    InvalidTypeError,
)
from geostream.core.primitives import TimeInterval
from geostream.core.result_descriptor import (
    RasterDataType,
    RasterResultDescriptor,
    VectorDataType,
)
from geostream.engine import MultiRasterOrVectorSource, operator_from_dict
from geostream.mock import MockFeatureCollectionSource, MockRasterSource, MockRasterSourceParams
from geostream.processing import Statistics, StatisticsParams
from geostream.raster import GeoTransform, RasterTile2D


def raster(grids, data_type, no_data_value=None):
    tiles = [
        RasterTile2D(
            time=TimeInterval(0, 10),
            tile_position=(0, i),
            geo_transform=GeoTransform((0.0, 4.0), 1.0, -1.0),
            grid=grid,
        )
        for i, grid in enumerate(grids)
    ]
    descriptor = RasterResultDescriptor(data_type, no_data_value=no_data_value)
    return MockRasterSource(MockRasterSourceParams(result_descriptor=descriptor, tiles=tiles))


@pytest.fixture
def u8_raster():
    return raster(
        [
            np.array([[0, 1], [2, 0]], dtype=np.uint8),
            np.array([[3, 3], [3, 3]], dtype=np.uint8),
        ],
        RasterDataType.U8,
        no_data_value=0,
    )


@pytest.fixture
def f32_raster():
    return raster([np.array([[1.0, 3.0]], dtype=np.float32)], RasterDataType.F32)


async def run_statistics(operator, execution_context, query_rectangle, query_context):
    typed = operator.initialize(execution_context).query_processor()
    assert typed.data_type == VectorDataType.DATA
    chunks = [chunk async for chunk in typed.processor.vector_query(query_rectangle, query_context)]
    assert len(chunks) == 1
    return chunks[0]


def rows(collection):
    columns = ["name", "count", "min", "max", "mean"]
    return list(zip(*(collection.data(column) for column in columns)))


class TestRasterStatistics:
    """Test statistics over raster sources"""

    @pytest.mark.anyio
    async def test_excludes_no_data(
        self, u8_raster, f32_raster, execution_context, query_rectangle, query_context
    ):
        operator = Statistics(sources=MultiRasterOrVectorSource(rasters=[u8_raster, f32_raster]))
        result = await run_statistics(operator, execution_context, query_rectangle, query_context)

        assert rows(result) == [
            ("raster-1", 6, 1.0, 3.0, 2.5),
            ("raster-2", 2, 1.0, 3.0, 2.0),
        ]

    @pytest.mark.anyio
    async def test_custom_names(
        self, u8_raster, f32_raster, execution_context, query_rectangle, query_context
    ):
        operator = Statistics(
            StatisticsParams(column_names=["a", "b"]),
            MultiRasterOrVectorSource(rasters=[u8_raster, f32_raster]),
        )
        result = await run_statistics(operator, execution_context, query_rectangle, query_context)
        assert result.data("name") == ["a", "b"]

    @pytest.mark.anyio
    async def test_without_pixels(self, execution_context, query_rectangle, query_context):
        operator = Statistics(
            sources=MultiRasterOrVectorSource(rasters=[raster([], RasterDataType.I16)])
        )
        result = await run_statistics(operator, execution_context, query_rectangle, query_context)
        assert rows(result) == [("raster-1", 0, None, None, None)]

    def test_name_count_mismatch(self, u8_raster, execution_context):
        operator = Statistics(
            StatisticsParams(column_names=["a", "b"]),
            MultiRasterOrVectorSource(rasters=[u8_raster]),
        )
        with pytest.raises(ConfigurationError):
            operator.initialize(execution_context)

    def test_result_descriptor(self, u8_raster, execution_context):
        operator = Statistics(sources=MultiRasterOrVectorSource(rasters=[u8_raster]))
        descriptor = operator.initialize(execution_context).result_descriptor()
        assert descriptor.data_type == VectorDataType.DATA
        assert descriptor.spatial_reference is None
        assert list(descriptor.columns) == ["name", "count", "min", "max", "mean"]


class TestVectorStatistics:
    """Test statistics over vector columns"""

    @pytest.mark.anyio
    async def test_numeric_columns_by_default(
        self, points, execution_context, query_rectangle, query_context
    ):
        operator = Statistics(
            sources=MultiRasterOrVectorSource(
                vector=MockFeatureCollectionSource.multiple([points, points])
            )
        )
        result = await run_statistics(operator, execution_context, query_rectangle, query_context)
        assert rows(result) == [
            ("foo", 8, 0.0, 3.0, 1.5),
            ("bar", 8, 0.0, 3.0, 1.5),
        ]

    @pytest.mark.anyio
    async def test_skips_nulls(self, data_rows, execution_context, query_rectangle, query_context):
        operator = Statistics(
            sources=MultiRasterOrVectorSource(vector=MockFeatureCollectionSource.single(data_rows))
        )
        result = await run_statistics(operator, execution_context, query_rectangle, query_context)
        assert rows(result) == [("value", 2, 1.5, 3.5, 2.5)]

    @pytest.mark.anyio
    async def test_skips_nan(self, execution_context, query_rectangle, query_context):
        collection = DataCollection.from_data(
            data={"value": FeatureData.float([1.0, float("nan"), 3.0, None])}
        )
        operator = Statistics(
            sources=MultiRasterOrVectorSource(vector=MockFeatureCollectionSource.single(collection))
        )
        result = await run_statistics(operator, execution_context, query_rectangle, query_context)
        assert rows(result) == [("value", 2, 1.0, 3.0, 2.0)]

    def test_missing_column(self, points, execution_context):
        operator = Statistics(
            StatisticsParams(column_names=["baz"]),
            MultiRasterOrVectorSource(vector=MockFeatureCollectionSource.single(points)),
        )
        with pytest.raises(ColumnNotFoundError):
            operator.initialize(execution_context)

    def test_text_column(self, data_rows, execution_context):
        operator = Statistics(
            StatisticsParams(column_names=["label"]),
            MultiRasterOrVectorSource(vector=MockFeatureCollectionSource.single(data_rows)),
        )
        with pytest.raises(InvalidTypeError):
            operator.initialize(execution_context)


class TestStatisticsSerialization:
    """Test parameter parsing"""

    def test_round_trip(self, u8_raster):
        operator = Statistics(
            StatisticsParams(column_names=["elevation"]),
            MultiRasterOrVectorSource(rasters=[u8_raster]),
        )
        data = operator.to_dict()
        assert data["params"] == {"columnNames": ["elevation"]}
        assert operator_from_dict(data) == operator

    @pytest.mark.parametrize("names", ["elevation", ["a", "a"], [1]])
    def test_invalid_column_names(self, names):
        with pytest.raises(DeserializationError):
            StatisticsParams.from_dict({"columnNames": names})
