"""
Column range filter

Keeps the features whose value in one data column lies inside any of a
list of inclusive ranges. Works on every geometry kind.

Serialized form:
    {
        "type": "ColumnRangeFilter",
        "params": {"column": "foo", "ranges": [[1, 2]], "keepNulls": false},
        "sources": {"vector": {...}}
    }
"""

import logging
from collections.abc import AsyncIterator, Sequence
from dataclasses import dataclass, field
from typing import Any

from geostream.adapters.chunk_merger import FeatureCollectionChunkMerger
from geostream.collections.feature_collection import FeatureCollection
from geostream.collections.ranges import StringOrNumberRange
from geostream.core.exceptions import ColumnNotFoundError, InvalidTypeError, ValidationError
from geostream.core.query_rectangle import QueryRectangle
from geostream.core.result_descriptor import FeatureDataType, VectorResultDescriptor
from geostream.engine.context import ExecutionContext, QueryContext
from geostream.engine.initialized import InitializedVectorOperator
from geostream.engine.operator import OperatorParams, VectorOperator
from geostream.engine.processor import (
    TypedVectorQueryProcessor,
    VectorQueryProcessor,
    stream_closing,
)
from geostream.engine.registry import register_operator
from geostream.engine.sources import InitializedSingleVectorSource, SingleVectorSource

logger = logging.getLogger(__name__)


@dataclass
class ColumnRangeFilterParams(OperatorParams):
    """
    Parameters of the column range filter

    Attributes:
        column: Data column to filter on
        ranges: Inclusive ranges; a feature is kept if its value lies in any
        keep_nulls: Also keep features whose value is null
    """

    column: str
    ranges: list[StringOrNumberRange] = field(default_factory=list)
    keep_nulls: bool = False

    def __post_init__(self):
        if not isinstance(self.column, str):
            raise ValidationError(f"column must be a string, got {self.column!r}")
        if not isinstance(self.ranges, (list, tuple)):
            raise ValidationError(f"ranges must be a list, got {self.ranges!r}")
        if not isinstance(self.keep_nulls, bool):
            raise ValidationError(f"keepNulls must be a boolean, got {self.keep_nulls!r}")
        self.ranges = [StringOrNumberRange.from_value(r) for r in self.ranges]


def resolve_ranges(
    ranges: Sequence[StringOrNumberRange], column_type: FeatureDataType
) -> list[tuple[Any, Any]]:
    """
    Convert ranges to the value type of a column

    Raises:
        InvalidTypeError: If the ranges do not fit the column type or the
            column is categorical
    """
    if column_type == FeatureDataType.FLOAT:
        return [r.into_float_range() for r in ranges]
    if column_type == FeatureDataType.INT:
        return [r.into_int_range() for r in ranges]
    if column_type == FeatureDataType.TEXT:
        return [r.into_string_range() for r in ranges]
    raise InvalidTypeError(expected="float, int or text column", found=column_type.value)


@register_operator("ColumnRangeFilter")
class ColumnRangeFilter(VectorOperator):
    """
    Filter features by value ranges of a column

    Examples:
        >>> operator = ColumnRangeFilter(
        ...     ColumnRangeFilterParams(column="foo", ranges=[[1, 2]]),
        ...     SingleVectorSource(MockFeatureCollectionSource.single(collection)),
        ... )
        >>> initialized = operator.initialize(InMemoryExecutionContext())
    """

    params_type = ColumnRangeFilterParams
    sources_type = SingleVectorSource

    def _initialize(
        self, context: ExecutionContext, sources: InitializedSingleVectorSource
    ) -> "InitializedColumnRangeFilter":
        result_descriptor = sources.vector.result_descriptor()

        column_type = result_descriptor.column_type(self.params.column)
        if column_type is None:
            raise ColumnNotFoundError(self.params.column)
        resolve_ranges(self.params.ranges, column_type)

        return InitializedColumnRangeFilter(result_descriptor, sources.vector, self.params)


class InitializedColumnRangeFilter(InitializedVectorOperator):
    def __init__(
        self,
        result_descriptor: VectorResultDescriptor,
        source: InitializedVectorOperator,
        params: ColumnRangeFilterParams,
    ):
        super().__init__(result_descriptor)
        self.source = source
        self.params = params

    def query_processor(self) -> TypedVectorQueryProcessor:
        return self.source.query_processor().map(
            lambda processor: ColumnRangeFilterProcessor(
                processor,
                self.params.column,
                self.params.ranges,
                self.params.keep_nulls,
            ),
            operator=ColumnRangeFilter.type_name,
        )


class ColumnRangeFilterProcessor(VectorQueryProcessor):
    """
    Filters each source chunk and merges the results

    Ranges are resolved against every chunk's own column type.
    """

    def __init__(
        self,
        source: VectorQueryProcessor,
        column: str,
        ranges: Sequence[StringOrNumberRange],
        keep_nulls: bool,
    ):
        super().__init__(source.collection_type)
        self.source = source
        self.column = column
        self.ranges = list(ranges)
        self.keep_nulls = keep_nulls

    def vector_query(
        self, query: QueryRectangle, ctx: QueryContext
    ) -> AsyncIterator[FeatureCollection]:
        filtered = self._filter_stream(self.source.vector_query(query, ctx))
        return FeatureCollectionChunkMerger(filtered, ctx.chunk_byte_size())

    async def _filter_stream(
        self, stream: AsyncIterator[FeatureCollection]
    ) -> AsyncIterator[FeatureCollection]:
        async with stream_closing(stream) as source:
            async for collection in source:
                yield self.filter_collection(collection)

    def filter_collection(self, collection: FeatureCollection) -> FeatureCollection:
        ranges = resolve_ranges(self.ranges, collection.column_type(self.column))
        filtered = collection.column_range_filter(self.column, ranges, self.keep_nulls)
        logger.debug(
            "Filtered %s on %r: %d of %d features kept",
            type(collection).__name__,
            self.column,
            len(filtered),
            len(collection),
        )
        return filtered
