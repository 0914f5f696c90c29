"""
Point in polygon filter

Keeps the point features that lie inside (or on the boundary of) any
polygon of a second source. The polygon source is read completely before
the first point chunk is requested; output order follows the point source.
"""

import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Any

import numpy as np
import shapely
from shapely.geometry.base import BaseGeometry

from geostream.adapters.chunk_merger import FeatureCollectionChunkMerger
from geostream.collections.feature_collection import MultiPointCollection
from geostream.core.query_rectangle import QueryRectangle
from geostream.core.result_descriptor import VectorDataType, VectorResultDescriptor
from geostream.engine.context import ExecutionContext, QueryContext
from geostream.engine.initialized import InitializedVectorOperator
from geostream.engine.operator import VectorOperator
from geostream.engine.processor import (
    TypedVectorQueryProcessor,
    VectorQueryProcessor,
    stream_closing,
)
from geostream.engine.registry import VECTOR, operator_from_dict, register_operator
from geostream.engine.sources import check_source_keys, require_source

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InitializedPointInPolygonFilterSource:
    points: InitializedVectorOperator
    polygons: InitializedVectorOperator


@dataclass
class PointInPolygonFilterSource:
    """A point operator and a polygon operator"""

    points: VectorOperator
    polygons: VectorOperator

    def to_dict(self) -> dict[str, Any]:
        return {"points": self.points.to_dict(), "polygons": self.polygons.to_dict()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PointInPolygonFilterSource":
        check_source_keys(data, {"points", "polygons"})
        return cls(
            points=operator_from_dict(require_source(data, "points"), VECTOR),
            polygons=operator_from_dict(require_source(data, "polygons"), VECTOR),
        )

    def initialize(self, context: ExecutionContext) -> InitializedPointInPolygonFilterSource:
        return InitializedPointInPolygonFilterSource(
            points=self.points.initialize(context),
            polygons=self.polygons.initialize(context),
        )

    def datasets(self) -> list[str]:
        return self.points.datasets() + self.polygons.datasets()


@register_operator("PointInPolygonFilter")
class PointInPolygonFilter(VectorOperator):
    """
    Filter points by polygons

    Examples:
        >>> operator = PointInPolygonFilter(
        ...     sources=PointInPolygonFilterSource(points=point_source, polygons=polygon_source)
        ... )
    """

    sources_type = PointInPolygonFilterSource

    def _initialize(
        self, context: ExecutionContext, sources: InitializedPointInPolygonFilterSource
    ) -> "InitializedPointInPolygonFilter":
        return InitializedPointInPolygonFilter(
            sources.points.result_descriptor(), sources.points, sources.polygons
        )


class InitializedPointInPolygonFilter(InitializedVectorOperator):
    def __init__(
        self,
        result_descriptor: VectorResultDescriptor,
        points: InitializedVectorOperator,
        polygons: InitializedVectorOperator,
    ):
        super().__init__(result_descriptor)
        self.points = points
        self.polygons = polygons

    def query_processor(self) -> TypedVectorQueryProcessor:
        """
        Raises:
            UnsupportedVariantError: If points are not MultiPoint or polygons
                are not MultiPolygon
        """
        operator = PointInPolygonFilter.type_name
        points = self.points.query_processor().expect(VectorDataType.MULTI_POINT, operator)
        polygons = self.polygons.query_processor().expect(VectorDataType.MULTI_POLYGON, operator)
        return TypedVectorQueryProcessor.of(PointInPolygonFilterProcessor(points, polygons))


class PointInPolygonFilterProcessor(VectorQueryProcessor):
    def __init__(self, points: VectorQueryProcessor, polygons: VectorQueryProcessor):
        super().__init__(MultiPointCollection)
        self.points = points
        self.polygons = polygons

    def vector_query(
        self, query: QueryRectangle, ctx: QueryContext
    ) -> AsyncIterator[MultiPointCollection]:
        return FeatureCollectionChunkMerger(
            self._filter_stream(query, ctx), ctx.chunk_byte_size()
        )

    async def _filter_stream(
        self, query: QueryRectangle, ctx: QueryContext
    ) -> AsyncIterator[MultiPointCollection]:
        polygons: list[BaseGeometry] = []
        async with stream_closing(self.polygons.vector_query(query, ctx)) as stream:
            async for collection in stream:
                polygons.extend(collection.geometries())

        area = shapely.union_all(polygons) if polygons else None
        if area is not None:
            shapely.prepare(area)
        logger.debug("Loaded %d polygons for point in polygon test", len(polygons))

        async with stream_closing(self.points.vector_query(query, ctx)) as stream:
            async for collection in stream:
                yield self._filter_collection(collection, area)

    @staticmethod
    def _filter_collection(
        collection: MultiPointCollection, area: BaseGeometry | None
    ) -> MultiPointCollection:
        if area is None or collection.is_empty():
            return collection.filter(np.zeros(len(collection), dtype=bool))
        geometries = np.array(collection.geometries(), dtype=object)
        # A MultiPoint intersects the area iff one of its points is inside or on the boundary
        return collection.filter(shapely.intersects(area, geometries))
