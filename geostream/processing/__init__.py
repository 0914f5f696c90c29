"""
GeoStream Processing Module

Built-in operators. Importing this module registers them.
"""

from geostream.processing.column_range_filter import (
    ColumnRangeFilter,
    ColumnRangeFilterParams,
    ColumnRangeFilterProcessor,
)
from geostream.processing.point_in_polygon import (
    PointInPolygonFilter,
    PointInPolygonFilterSource,
)
from geostream.processing.raster_nodata_fill import RasterNoDataFill, RasterNoDataFillParams
from geostream.processing.statistics import Statistics, StatisticsParams

__all__ = [
    "ColumnRangeFilter",
    "ColumnRangeFilterParams",
    "ColumnRangeFilterProcessor",
    "PointInPolygonFilter",
    "PointInPolygonFilterSource",
    "RasterNoDataFill",
    "RasterNoDataFillParams",
    "Statistics",
    "StatisticsParams",
]
