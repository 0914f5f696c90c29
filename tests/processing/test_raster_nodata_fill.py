"""
Tests for RasterNoDataFill
"""

import numpy as np
import pytest

from geostream.core.exceptions import ConfigurationError, DeserializationError, InvalidTypeError
from geostream.core.primitives import TimeInterval
from geostream.core.result_descriptor import RasterDataType, RasterResultDescriptor
from geostream.engine import SingleRasterSource, operator_from_dict
from geostream.mock import MockRasterSource, MockRasterSourceParams
from geostream.processing import RasterNoDataFill, RasterNoDataFillParams
from geostream.raster import GeoTransform, RasterTile2D


def make_tile(grid, position=(0, 0)):
    return RasterTile2D(
        time=TimeInterval(0, 10),
        tile_position=position,
        geo_transform=GeoTransform((0.0, 4.0), 1.0, -1.0),
        grid=grid,
    )


def build_fill(tiles, data_type, no_data_value, fill_value):
    source = MockRasterSource(
        MockRasterSourceParams(
            result_descriptor=RasterResultDescriptor(data_type, no_data_value=no_data_value),
            tiles=tiles,
        )
    )
    return RasterNoDataFill(RasterNoDataFillParams(fill_value), SingleRasterSource(source))


class TestRasterNoDataFill:
    """Test no-data filling"""

    @pytest.mark.anyio
    async def test_fills_no_data(self, execution_context, query_rectangle, query_context):
        tiles = [
            make_tile(np.array([[0, 1], [2, 0]], dtype=np.uint8)),
            make_tile(np.array([[3, 3], [3, 3]], dtype=np.uint8), position=(0, 1)),
        ]
        initialized = build_fill(tiles, RasterDataType.U8, 0, 9).initialize(execution_context)
        typed = initialized.query_processor()

        result = [t async for t in typed.processor.raster_query(query_rectangle, query_context)]

        assert typed.data_type == RasterDataType.U8
        assert result[0].grid.tolist() == [[9, 1], [2, 9]]
        assert result[0].grid.dtype == np.uint8
        assert result[1] is tiles[1]
        assert tiles[0].grid.tolist() == [[0, 1], [2, 0]]

    @pytest.mark.anyio
    async def test_fills_nan(self, execution_context, query_rectangle, query_context):
        tiles = [make_tile(np.array([[np.nan, 1.5]], dtype=np.float32))]
        typed = (
            build_fill(tiles, RasterDataType.F32, float("nan"), -1.0)
            .initialize(execution_context)
            .query_processor()
        )
        result = [t async for t in typed.processor.raster_query(query_rectangle, query_context)]
        assert result[0].grid.tolist() == [[-1.0, 1.5]]

    def test_result_descriptor_drops_no_data(self, execution_context):
        initialized = build_fill([], RasterDataType.I16, -1, 0).initialize(execution_context)
        descriptor = initialized.result_descriptor()
        assert descriptor.no_data_value is None
        assert descriptor.data_type == RasterDataType.I16

    def test_requires_no_data_value(self, execution_context):
        with pytest.raises(ConfigurationError):
            build_fill([], RasterDataType.U8, None, 0).initialize(execution_context)

    @pytest.mark.parametrize("fill_value", [256, -1, 0.5])
    def test_fill_value_must_fit_pixel_type(self, execution_context, fill_value):
        with pytest.raises(InvalidTypeError):
            build_fill([], RasterDataType.U8, 0, fill_value).initialize(execution_context)

    def test_round_trip(self):
        tiles = [make_tile(np.array([[0, 1]], dtype=np.uint8))]
        operator = build_fill(tiles, RasterDataType.U8, 0, 5)
        data = operator.to_dict()
        assert data["params"] == {"fillValue": 5}
        assert data["sources"]["raster"]["type"] == "MockRasterSource"
        assert operator_from_dict(data) == operator

    def test_fill_value_must_be_number(self):
        with pytest.raises(DeserializationError):
            RasterNoDataFill.from_dict({"params": {"fillValue": "zero"}, "sources": {}})
