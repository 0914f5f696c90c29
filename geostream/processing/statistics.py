"""
Statistics

Summarizes either a list of raster sources or the numeric columns of one
vector source into a single data collection with one row per raster or
column:

    name (text) | count (int) | min (float) | max (float) | mean (float)

Rasters exclude their no-data pixels. Sources are read one after another
in declaration order. min, max and mean are null when no value was seen.
"""

import logging
import math
from collections.abc import AsyncIterator
from dataclasses import dataclass

import numpy as np

from geostream.collections.feature_collection import DataCollection, FeatureData
from geostream.core.exceptions import (
    ColumnNotFoundError,
    ConfigurationError,
    InvalidTypeError,
    ValidationError,
)
from geostream.core.query_rectangle import QueryRectangle
from geostream.core.result_descriptor import (
    FeatureDataType,
    VectorDataType,
    VectorResultDescriptor,
)
from geostream.engine.context import ExecutionContext, QueryContext
from geostream.engine.initialized import InitializedRasterOperator, InitializedVectorOperator
from geostream.engine.operator import OperatorParams, VectorOperator
from geostream.engine.processor import (
    RasterQueryProcessor,
    TypedVectorQueryProcessor,
    VectorQueryProcessor,
    stream_closing,
)
from geostream.engine.registry import register_operator
from geostream.engine.sources import (
    InitializedMultiRasterOrVectorSource,
    MultiRasterOrVectorSource,
)

logger = logging.getLogger(__name__)

STATISTICS_COLUMNS = {
    "name": FeatureDataType.TEXT,
    "count": FeatureDataType.INT,
    "min": FeatureDataType.FLOAT,
    "max": FeatureDataType.FLOAT,
    "mean": FeatureDataType.FLOAT,
}


@dataclass
class StatisticsParams(OperatorParams):
    """
    Attributes:
        column_names: Row names for raster sources, or the numeric columns
            to summarize for a vector source (default: raster-<i> or all
            numeric columns)
    """

    column_names: list[str] | None = None

    def __post_init__(self):
        if self.column_names is not None:
            if not isinstance(self.column_names, list) or not all(
                isinstance(name, str) for name in self.column_names
            ):
                raise ValidationError("columnNames must be a list of strings")
            if len(set(self.column_names)) != len(self.column_names):
                raise ValidationError(f"columnNames must be unique: {self.column_names}")


class Summary:
    """Running count, min, max and sum of a stream of values"""

    def __init__(self, name: str):
        self.name = name
        self.count = 0
        self.min = math.inf
        self.max = -math.inf
        self.sum = 0.0

    def add(self, values: np.ndarray) -> None:
        if values.size == 0:
            return
        values = values.astype(np.float64, copy=False)
        self.count += int(values.size)
        self.min = min(self.min, float(values.min()))
        self.max = max(self.max, float(values.max()))
        self.sum += float(values.sum())

    def row(self) -> tuple:
        if self.count == 0:
            return (self.name, 0, None, None, None)
        return (self.name, self.count, self.min, self.max, self.sum / self.count)


def summaries_to_collection(summaries: list[Summary]) -> DataCollection:
    rows = [summary.row() for summary in summaries]
    columns = list(zip(*rows)) if rows else [[] for _ in STATISTICS_COLUMNS]
    return DataCollection.from_data(
        data={
            name: FeatureData(data_type, list(values))
            for (name, data_type), values in zip(STATISTICS_COLUMNS.items(), columns)
        }
    )


@register_operator("Statistics")
class Statistics(VectorOperator):
    """
    Summary statistics over rasters or vector columns

    Examples:
        >>> operator = Statistics(
        ...     StatisticsParams(column_names=["elevation"]),
        ...     MultiRasterOrVectorSource(rasters=[raster_source]),
        ... )
    """

    params_type = StatisticsParams
    sources_type = MultiRasterOrVectorSource

    def _initialize(
        self, context: ExecutionContext, sources: InitializedMultiRasterOrVectorSource
    ) -> "InitializedStatistics":
        result_descriptor = VectorResultDescriptor(
            data_type=VectorDataType.DATA, spatial_reference=None, columns=dict(STATISTICS_COLUMNS)
        )
        column_names = self.params.column_names

        if sources.is_raster():
            if column_names is None:
                column_names = [f"raster-{i + 1}" for i in range(len(sources.rasters))]
            elif len(column_names) != len(sources.rasters):
                raise ConfigurationError(
                    f"Statistics got {len(column_names)} column names "
                    f"for {len(sources.rasters)} rasters"
                )
            return InitializedStatistics(result_descriptor, column_names, rasters=sources.rasters)

        columns = sources.vector.result_descriptor().columns
        if column_names is None:
            column_names = [name for name, data_type in columns.items() if data_type.is_numeric()]
        for name in column_names:
            data_type = columns.get(name)
            if data_type is None:
                raise ColumnNotFoundError(name)
            if not data_type.is_numeric():
                raise InvalidTypeError(expected="numeric column", found=data_type.value)
        return InitializedStatistics(result_descriptor, column_names, vector=sources.vector)


class InitializedStatistics(InitializedVectorOperator):
    def __init__(
        self,
        result_descriptor: VectorResultDescriptor,
        column_names: list[str],
        rasters: list[InitializedRasterOperator] | None = None,
        vector: InitializedVectorOperator | None = None,
    ):
        super().__init__(result_descriptor)
        self.column_names = column_names
        self.rasters = rasters
        self.vector = vector

    def query_processor(self) -> TypedVectorQueryProcessor:
        if self.rasters is not None:
            processor = RasterStatisticsProcessor(
                [raster.query_processor().processor for raster in self.rasters],
                [raster.result_descriptor().no_data_value for raster in self.rasters],
                self.column_names,
            )
        else:
            processor = VectorStatisticsProcessor(
                self.vector.query_processor().processor, self.column_names
            )
        return TypedVectorQueryProcessor.of(processor)


class RasterStatisticsProcessor(VectorQueryProcessor):
    def __init__(
        self,
        rasters: list[RasterQueryProcessor],
        no_data_values: list[float | None],
        names: list[str],
    ):
        super().__init__(DataCollection)
        self.rasters = rasters
        self.no_data_values = no_data_values
        self.names = names

    async def vector_query(
        self, query: QueryRectangle, ctx: QueryContext
    ) -> AsyncIterator[DataCollection]:
        summaries = []
        for name, raster, no_data_value in zip(self.names, self.rasters, self.no_data_values):
            summary = Summary(name)
            async with stream_closing(raster.raster_query(query, ctx)) as stream:
                async for tile in stream:
                    summary.add(tile.grid[tile.valid_mask(no_data_value)])
            logger.debug("Summarized raster %s: %d pixels", name, summary.count)
            summaries.append(summary)
        yield summaries_to_collection(summaries)


class VectorStatisticsProcessor(VectorQueryProcessor):
    def __init__(self, source: VectorQueryProcessor, columns: list[str]):
        super().__init__(DataCollection)
        self.source = source
        self.columns = columns

    async def vector_query(
        self, query: QueryRectangle, ctx: QueryContext
    ) -> AsyncIterator[DataCollection]:
        summaries = [Summary(column) for column in self.columns]
        async with stream_closing(self.source.vector_query(query, ctx)) as stream:
            async for collection in stream:
                for summary in summaries:
                    values = [v for v in collection.data(summary.name) if v is not None]
                    values = np.asarray(values, dtype=np.float64)
                    summary.add(values[~np.isnan(values)])
        yield summaries_to_collection(summaries)
