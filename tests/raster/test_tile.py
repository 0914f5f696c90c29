"""
Tests for raster tiles
"""

import numpy as np
import pytest

from geostream.core.exceptions import ValidationError
from geostream.core.primitives import BoundingBox2D, Coordinate2D, TimeInterval
from geostream.core.result_descriptor import RasterDataType
from geostream.raster.tile import GeoTransform, RasterTile2D


@pytest.fixture
def tile():
    return RasterTile2D(
        time=TimeInterval(0, 5),
        tile_position=(0, 1),
        geo_transform=GeoTransform(Coordinate2D(2.0, 2.0), 1.0, -1.0),
        grid=np.array([[1, 2], [0, 4]], dtype=np.uint8),
    )


class TestGeoTransform:
    """Test GeoTransform"""

    def test_grid_bounds_north_up(self):
        transform = GeoTransform(Coordinate2D(0.0, 10.0), 0.5, -0.5)
        assert transform.grid_bounds((4, 2)) == BoundingBox2D((0.0, 8.0), (1.0, 10.0))

    def test_zero_pixel_size_rejected(self):
        with pytest.raises(ValidationError):
            GeoTransform(x_pixel_size=0.0)

    def test_dict_round_trip(self):
        transform = GeoTransform((1.0, 2.0), 0.25, -0.25)
        assert GeoTransform.from_dict(transform.to_dict()) == transform


class TestRasterTile2D:
    """Test RasterTile2D"""

    def test_properties(self, tile):
        assert tile.data_type == RasterDataType.U8
        assert tile.shape == (2, 2)
        assert tile.byte_size() == 4
        assert tile.bounds() == BoundingBox2D((2.0, 0.0), (4.0, 2.0))

    def test_grid_must_be_2d(self):
        with pytest.raises(ValidationError):
            RasterTile2D(TimeInterval(0, 1), (0, 0), GeoTransform(), np.zeros(4, dtype=np.uint8))

    def test_unsupported_dtype(self):
        with pytest.raises(ValidationError):
            RasterTile2D(TimeInterval(0, 1), (0, 0), GeoTransform(), np.zeros((2, 2), dtype=bool))

    def test_valid_mask(self, tile):
        assert tile.valid_mask(0).tolist() == [[True, True], [False, True]]
        assert tile.valid_mask(None).all()

    def test_valid_mask_nan(self):
        tile = RasterTile2D(
            TimeInterval(0, 1),
            (0, 0),
            GeoTransform(),
            np.array([[np.nan, 1.0]], dtype=np.float32),
        )
        assert tile.valid_mask(float("nan")).tolist() == [[False, True]]

    def test_with_grid_keeps_metadata(self, tile):
        filled = tile.with_grid(np.full((2, 2), 7, dtype=np.uint8))
        assert filled.time == tile.time
        assert filled.tile_position == tile.tile_position
        assert filled.grid.tolist() == [[7, 7], [7, 7]]
        assert tile.grid[1, 0] == 0

    def test_dict_round_trip(self, tile):
        data = tile.to_dict()
        assert data["dataType"] == "U8"
        assert data["tilePosition"] == [0, 1]
        assert RasterTile2D.from_dict(data) == tile
