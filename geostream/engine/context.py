"""
Execution and query contexts

The execution context resolves dataset metadata while an operator graph is
initialized. The query context hands operational limits to running query
processors. Both are shared read-only across one operator tree.
"""

import logging
from dataclasses import dataclass
from typing import Any, Protocol

from geostream.core.exceptions import UnknownDatasetError, ValidationError
from geostream.core.result_descriptor import ResultDescriptor
from geostream.core.settings import get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DatasetMetaData:
    """
    Metadata of a dataset as returned by a catalog

    Attributes:
        loading_info: Backend specific information a source needs to load data
        result_descriptor: Descriptor of the data the dataset produces
    """

    loading_info: Any
    result_descriptor: ResultDescriptor


class ExecutionContext(Protocol):
    """Catalog lookups during initialization"""

    def resolve(self, dataset_id: str) -> DatasetMetaData:
        """
        Resolve a dataset id to its metadata

        Raises:
            UnknownDatasetError: If the dataset does not exist
        """
        ...


class QueryContext(Protocol):
    """Operational limits of a running query"""

    def chunk_byte_size(self) -> int:
        """Target byte size of result chunks"""
        ...


class InMemoryExecutionContext:
    """
    Execution context backed by a dictionary

    Examples:
        >>> ctx = InMemoryExecutionContext()
        >>> ctx.add_meta_data("points", DatasetMetaData(loading_info, descriptor))
        >>> ctx.resolve("points").result_descriptor
    """

    def __init__(self, datasets: dict[str, DatasetMetaData] | None = None):
        self._datasets: dict[str, DatasetMetaData] = dict(datasets or {})

    def add_meta_data(self, dataset_id: str, meta_data: DatasetMetaData) -> None:
        self._datasets[dataset_id] = meta_data
        logger.debug("Registered dataset metadata: %s", dataset_id)

    def resolve(self, dataset_id: str) -> DatasetMetaData:
        try:
            return self._datasets[dataset_id]
        except KeyError:
            raise UnknownDatasetError(dataset_id) from None

    def list_datasets(self) -> list[str]:
        return sorted(self._datasets)


class StaticQueryContext:
    """
    Query context with a fixed chunk byte size

    Args:
        chunk_byte_size: Target chunk size in bytes (default: from settings)

    Raises:
        ValidationError: If the chunk size is not positive
    """

    def __init__(self, chunk_byte_size: int | None = None):
        if chunk_byte_size is None:
            chunk_byte_size = get_settings().query_context.chunk_byte_size
        if chunk_byte_size <= 0:
            raise ValidationError(f"Chunk byte size must be positive, got {chunk_byte_size}")
        self._chunk_byte_size = chunk_byte_size

    def chunk_byte_size(self) -> int:
        return self._chunk_byte_size

    def __repr__(self) -> str:
        return f"StaticQueryContext(chunk_byte_size={self._chunk_byte_size})"
