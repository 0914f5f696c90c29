"""
Mock dataset source

A leaf operator that loads points from a dataset registered in the
execution context. Shows how sources resolve dataset metadata while
the graph is initialized.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Any

from geostream.collections.feature_collection import FeatureData, MultiPointCollection
from geostream.core.exceptions import ConfigurationError, InvalidTypeError, ValidationError
from geostream.core.primitives import Coordinate2D, TimeInterval
from geostream.core.query_rectangle import QueryRectangle
from geostream.core.result_descriptor import (
    FeatureDataType,
    VectorDataType,
    VectorResultDescriptor,
)
from geostream.engine.context import ExecutionContext, QueryContext
from geostream.engine.initialized import InitializedVectorOperator
from geostream.engine.operator import OperatorParams, VectorOperator
from geostream.engine.processor import TypedVectorQueryProcessor, VectorQueryProcessor
from geostream.engine.registry import register_operator

logger = logging.getLogger(__name__)

# Two float64 coordinates
BYTES_PER_POINT = 16


@dataclass(frozen=True)
class MockDatasetDataSourceLoadingInfo:
    """
    Loading info of a mock dataset

    Attributes:
        points: Coordinates of the dataset's features
    """

    points: list[Coordinate2D]

    def __post_init__(self):
        object.__setattr__(self, "points", [Coordinate2D.from_value(p) for p in self.points])


@dataclass
class MockDatasetDataSourceParams(OperatorParams):
    dataset: str

    def __post_init__(self):
        if not isinstance(self.dataset, str) or not self.dataset:
            raise ValidationError("dataset must be a non-empty string")


@register_operator("MockDatasetDataSource")
class MockDatasetDataSource(VectorOperator):
    """
    Point source backed by a dataset of the execution context

    Examples:
        >>> ctx.add_meta_data("points", DatasetMetaData(
        ...     MockDatasetDataSourceLoadingInfo([(1.0, 2.0)]),
        ...     VectorResultDescriptor(VectorDataType.MULTI_POINT),
        ... ))
        >>> MockDatasetDataSource(MockDatasetDataSourceParams("points")).initialize(ctx)
    """

    params_type = MockDatasetDataSourceParams

    def datasets(self) -> list[str]:
        return [self.params.dataset]

    def _initialize(
        self, context: ExecutionContext, sources: Any
    ) -> "InitializedMockDatasetDataSource":
        meta_data = context.resolve(self.params.dataset)

        if not isinstance(meta_data.loading_info, MockDatasetDataSourceLoadingInfo):
            raise ConfigurationError(
                f"Dataset {self.params.dataset!r} is not a mock dataset "
                f"({type(meta_data.loading_info).__name__})"
            )
        result_descriptor = meta_data.result_descriptor
        if not isinstance(result_descriptor, VectorResultDescriptor):
            raise InvalidTypeError(expected="vector", found="raster")
        if result_descriptor.data_type != VectorDataType.MULTI_POINT:
            raise InvalidTypeError(
                expected=VectorDataType.MULTI_POINT.value, found=result_descriptor.data_type.value
            )

        return InitializedMockDatasetDataSource(result_descriptor, meta_data.loading_info)


class InitializedMockDatasetDataSource(InitializedVectorOperator):
    def __init__(
        self,
        result_descriptor: VectorResultDescriptor,
        loading_info: MockDatasetDataSourceLoadingInfo,
    ):
        super().__init__(result_descriptor)
        self.loading_info = loading_info

    def query_processor(self) -> TypedVectorQueryProcessor:
        return TypedVectorQueryProcessor.of(
            MockDatasetDataSourceProcessor(self.loading_info, self.result_descriptor().columns)
        )


class MockDatasetDataSourceProcessor(VectorQueryProcessor):
    """
    Streams the dataset's points inside the query box, sized by the chunk byte size

    The dataset carries no attribute values, so declared columns are all null.
    """

    def __init__(
        self,
        loading_info: MockDatasetDataSourceLoadingInfo,
        columns: dict[str, FeatureDataType] | None = None,
    ):
        super().__init__(MultiPointCollection)
        self.loading_info = loading_info
        self.columns = dict(columns or {})

    async def vector_query(
        self, query: QueryRectangle, ctx: QueryContext
    ) -> AsyncIterator[MultiPointCollection]:
        points = [p for p in self.loading_info.points if query.bbox.contains_coordinate(p)]
        points_per_chunk = max(1, ctx.chunk_byte_size() // BYTES_PER_POINT)
        logger.debug(
            "Loading %d of %d points in chunks of %d",
            len(points),
            len(self.loading_info.points),
            points_per_chunk,
        )

        for offset in range(0, len(points), points_per_chunk):
            batch = points[offset : offset + points_per_chunk]
            await asyncio.sleep(0)
            yield MultiPointCollection.from_data(
                geometries=[(p.x, p.y) for p in batch],
                time_intervals=[TimeInterval.default()] * len(batch),
                data={
                    name: FeatureData(data_type, [None] * len(batch))
                    for name, data_type in self.columns.items()
                },
            )
