"""
GeoStream Raster Module
"""

from geostream.raster.tile import GeoTransform, RasterTile2D

__all__ = [
    "GeoTransform",
    "RasterTile2D",
]
