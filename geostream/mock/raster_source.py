"""
Mock raster source

Replays a fixed list of raster tiles, restricted to those that intersect
the query rectangle in space and time.
"""

import asyncio
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from typing import Any

from geostream.core.exceptions import InvalidTypeError, ValidationError
from geostream.core.query_rectangle import QueryRectangle
from geostream.core.result_descriptor import RasterDataType, RasterResultDescriptor
from geostream.engine.context import ExecutionContext, QueryContext
from geostream.engine.initialized import InitializedRasterOperator
from geostream.engine.operator import OperatorParams, RasterOperator
from geostream.engine.processor import RasterQueryProcessor, TypedRasterQueryProcessor
from geostream.engine.registry import register_operator
from geostream.raster.tile import RasterTile2D


@dataclass
class MockRasterSourceParams(OperatorParams):
    result_descriptor: RasterResultDescriptor
    tiles: list[RasterTile2D] = field(default_factory=list)

    def __post_init__(self):
        if isinstance(self.result_descriptor, dict):
            self.result_descriptor = RasterResultDescriptor.from_dict(self.result_descriptor)
        if not isinstance(self.result_descriptor, RasterResultDescriptor):
            raise ValidationError("resultDescriptor must be a raster result descriptor")
        if not isinstance(self.tiles, list):
            raise ValidationError("tiles must be a list")
        try:
            self.tiles = [
                t if isinstance(t, RasterTile2D) else RasterTile2D.from_dict(t) for t in self.tiles
            ]
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Invalid raster tile: {e}") from e


@register_operator("MockRasterSource")
class MockRasterSource(RasterOperator):
    """
    Raster source over in-memory tiles

    Examples:
        >>> source = MockRasterSource(MockRasterSourceParams(
        ...     result_descriptor=RasterResultDescriptor(RasterDataType.U8),
        ...     tiles=[tile],
        ... ))
    """

    params_type = MockRasterSourceParams

    def _initialize(self, context: ExecutionContext, sources: Any) -> "InitializedMockRasterSource":
        result_descriptor = self.params.result_descriptor
        for tile in self.params.tiles:
            if tile.data_type != result_descriptor.data_type:
                raise InvalidTypeError(
                    expected=result_descriptor.data_type.value, found=tile.data_type.value
                )
        return InitializedMockRasterSource(result_descriptor, list(self.params.tiles))


class InitializedMockRasterSource(InitializedRasterOperator):
    def __init__(self, result_descriptor: RasterResultDescriptor, tiles: list[RasterTile2D]):
        super().__init__(result_descriptor)
        self.tiles = tiles

    def query_processor(self) -> TypedRasterQueryProcessor:
        return TypedRasterQueryProcessor.of(
            MockRasterSourceProcessor(self.result_descriptor().data_type, self.tiles)
        )


class MockRasterSourceProcessor(RasterQueryProcessor):
    def __init__(self, data_type: RasterDataType, tiles: list[RasterTile2D]):
        super().__init__(data_type)
        self.tiles = tiles

    async def raster_query(
        self, query: QueryRectangle, ctx: QueryContext
    ) -> AsyncIterator[RasterTile2D]:
        for tile in self.tiles:
            if not tile.time.intersects(query.time_interval):
                continue
            if not tile.bounds().intersects_bbox(query.bbox):
                continue
            await asyncio.sleep(0)
            yield tile
