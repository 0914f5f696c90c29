"""
Raster tiles

A tile is a 2D pixel grid at a tile position of a regular tiling, valid
for one time interval.
"""

from dataclasses import dataclass, field, replace
from typing import Any

import numpy as np
from numpy.typing import NDArray

from geostream.core.exceptions import ValidationError
from geostream.core.primitives import BoundingBox2D, Coordinate2D, TimeInterval
from geostream.core.result_descriptor import RasterDataType


@dataclass(frozen=True)
class GeoTransform:
    """
    Affine pixel-to-world mapping without rotation

    Attributes:
        origin: World coordinate of the upper left pixel corner
        x_pixel_size: Pixel width (positive)
        y_pixel_size: Pixel height (negative for north-up rasters)
    """

    origin: Coordinate2D = field(default_factory=lambda: Coordinate2D(0.0, 0.0))
    x_pixel_size: float = 1.0
    y_pixel_size: float = -1.0

    def __post_init__(self):
        object.__setattr__(self, "origin", Coordinate2D.from_value(self.origin))
        if self.x_pixel_size == 0 or self.y_pixel_size == 0:
            raise ValidationError("Pixel sizes must not be zero")

    def grid_bounds(self, shape: tuple[int, int]) -> BoundingBox2D:
        """World bounds of a grid with (rows, cols) shape starting at the origin"""
        rows, cols = shape
        xs = (self.origin.x, self.origin.x + cols * self.x_pixel_size)
        ys = (self.origin.y, self.origin.y + rows * self.y_pixel_size)
        return BoundingBox2D((min(xs), min(ys)), (max(xs), max(ys)))

    def to_dict(self) -> dict[str, Any]:
        return {
            "originCoordinate": self.origin.to_dict(),
            "xPixelSize": self.x_pixel_size,
            "yPixelSize": self.y_pixel_size,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GeoTransform":
        return cls(
            origin=Coordinate2D.from_value(data["originCoordinate"]),
            x_pixel_size=float(data["xPixelSize"]),
            y_pixel_size=float(data["yPixelSize"]),
        )


@dataclass(frozen=True, eq=False)
class RasterTile2D:
    """
    A single raster tile

    Attributes:
        time: Validity of the pixel values
        tile_position: (row, col) index of the tile in the tiling
        geo_transform: Pixel-to-world mapping of the tile's upper left corner
        grid: 2D pixel array

    Examples:
        >>> tile = RasterTile2D(
        ...     time=TimeInterval(0, 5),
        ...     tile_position=(0, 0),
        ...     geo_transform=GeoTransform(),
        ...     grid=np.array([[1, 2], [3, 4]], dtype=np.uint8),
        ... )
        >>> tile.data_type
        <RasterDataType.U8: 'U8'>
    """

    time: TimeInterval
    tile_position: tuple[int, int]
    geo_transform: GeoTransform
    grid: NDArray

    def __post_init__(self):
        grid = np.asarray(self.grid)
        if grid.ndim != 2:
            raise ValidationError(f"Raster grid must be 2D, got shape {grid.shape}")
        RasterDataType.from_numpy_dtype(grid.dtype)
        object.__setattr__(self, "grid", grid)
        object.__setattr__(self, "time", TimeInterval.from_value(self.time))
        object.__setattr__(self, "tile_position", tuple(int(i) for i in self.tile_position))

    @property
    def data_type(self) -> RasterDataType:
        return RasterDataType.from_numpy_dtype(self.grid.dtype)

    @property
    def shape(self) -> tuple[int, int]:
        return self.grid.shape

    def bounds(self) -> BoundingBox2D:
        return self.geo_transform.grid_bounds(self.shape)

    def byte_size(self) -> int:
        return int(self.grid.nbytes)

    def with_grid(self, grid: NDArray) -> "RasterTile2D":
        return replace(self, grid=grid)

    def valid_mask(self, no_data_value: float | None) -> NDArray:
        """Boolean mask of pixels that are not no-data"""
        if no_data_value is None:
            return np.ones(self.shape, dtype=bool)
        if np.isnan(no_data_value):
            return ~np.isnan(self.grid)
        return self.grid != no_data_value

    def to_dict(self) -> dict[str, Any]:
        return {
            "time": self.time.to_list(),
            "tilePosition": list(self.tile_position),
            "geoTransform": self.geo_transform.to_dict(),
            "dataType": self.data_type.value,
            "grid": self.grid.tolist(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RasterTile2D":
        data_type = RasterDataType(data["dataType"])
        return cls(
            time=TimeInterval.from_value(data["time"]),
            tile_position=tuple(data["tilePosition"]),
            geo_transform=GeoTransform.from_dict(data["geoTransform"]),
            grid=np.array(data["grid"], dtype=data_type.numpy_dtype),
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RasterTile2D):
            return NotImplemented
        return (
            self.time == other.time
            and self.tile_position == other.tile_position
            and self.geo_transform == other.geo_transform
            and self.grid.dtype == other.grid.dtype
            and np.array_equal(self.grid, other.grid, equal_nan=self.data_type.is_float())
        )

    __hash__ = None  # type: ignore[assignment]
