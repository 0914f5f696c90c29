"""
Raster no-data fill

Replaces the no-data pixels of a raster source with a fill value. The
pixel type is preserved; the output has no no-data value.
"""

import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass

import numpy as np

from geostream.core.exceptions import ConfigurationError, InvalidTypeError, ValidationError
from geostream.core.query_rectangle import QueryRectangle
from geostream.core.result_descriptor import RasterResultDescriptor
from geostream.engine.context import ExecutionContext, QueryContext
from geostream.engine.initialized import InitializedRasterOperator
from geostream.engine.operator import OperatorParams, RasterOperator
from geostream.engine.processor import (
    RasterQueryProcessor,
    TypedRasterQueryProcessor,
    stream_closing,
)
from geostream.engine.registry import register_operator
from geostream.engine.sources import InitializedSingleRasterSource, SingleRasterSource
from geostream.raster.tile import RasterTile2D

logger = logging.getLogger(__name__)


@dataclass
class RasterNoDataFillParams(OperatorParams):
    fill_value: float

    def __post_init__(self):
        if isinstance(self.fill_value, bool) or not isinstance(self.fill_value, (int, float)):
            raise ValidationError(f"fillValue must be a number, got {self.fill_value!r}")


@register_operator("RasterNoDataFill")
class RasterNoDataFill(RasterOperator):
    """
    Fill no-data pixels with a constant

    Examples:
        >>> operator = RasterNoDataFill(
        ...     RasterNoDataFillParams(fill_value=0),
        ...     SingleRasterSource(raster_source),
        ... )
    """

    params_type = RasterNoDataFillParams
    sources_type = SingleRasterSource

    def _initialize(
        self, context: ExecutionContext, sources: InitializedSingleRasterSource
    ) -> "InitializedRasterNoDataFill":
        source_descriptor = sources.raster.result_descriptor()
        if source_descriptor.no_data_value is None:
            raise ConfigurationError("RasterNoDataFill requires a source with a no-data value")

        fill_value = self.params.fill_value
        if not source_descriptor.data_type.is_valid(fill_value):
            raise InvalidTypeError(
                expected=source_descriptor.data_type.value, found=f"fill value {fill_value!r}"
            )

        return InitializedRasterNoDataFill(
            source_descriptor.with_no_data_value(None),
            sources.raster,
            source_descriptor.no_data_value,
            fill_value,
        )


class InitializedRasterNoDataFill(InitializedRasterOperator):
    def __init__(
        self,
        result_descriptor: RasterResultDescriptor,
        source: InitializedRasterOperator,
        no_data_value: float,
        fill_value: float,
    ):
        super().__init__(result_descriptor)
        self.source = source
        self.no_data_value = no_data_value
        self.fill_value = fill_value

    def query_processor(self) -> TypedRasterQueryProcessor:
        return self.source.query_processor().map(
            lambda processor: RasterNoDataFillProcessor(
                processor, self.no_data_value, self.fill_value
            ),
            operator=RasterNoDataFill.type_name,
        )


class RasterNoDataFillProcessor(RasterQueryProcessor):
    def __init__(self, source: RasterQueryProcessor, no_data_value: float, fill_value: float):
        super().__init__(source.data_type)
        self.source = source
        self.no_data_value = no_data_value
        self.fill_value = fill_value

    async def raster_query(
        self, query: QueryRectangle, ctx: QueryContext
    ) -> AsyncIterator[RasterTile2D]:
        async with stream_closing(self.source.raster_query(query, ctx)) as stream:
            async for tile in stream:
                yield self.fill_tile(tile)

    def fill_tile(self, tile: RasterTile2D) -> RasterTile2D:
        no_data = ~tile.valid_mask(self.no_data_value)
        if not no_data.any():
            return tile
        grid = np.where(no_data, np.asarray(self.fill_value, dtype=tile.grid.dtype), tile.grid)
        logger.debug("Filled %d no-data pixels of tile %s", int(no_data.sum()), tile.tile_position)
        return tile.with_grid(grid.astype(tile.grid.dtype, copy=False))
