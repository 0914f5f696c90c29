"""
Query processors

A query processor is the executable form of an initialized operator. Given
a query rectangle and a query context it returns an async iterator of result
chunks. The call itself does no work; chunks are computed as they are pulled.

Typed wrappers tag a processor with the geometry kind (vector) or pixel type
(raster) it produces, so that callers can hold "a vector processor" without
knowing the concrete variant while operator implementations are written once
for all variants.
"""

from collections.abc import AsyncIterator, Callable, Collection
from contextlib import AbstractAsyncContextManager, aclosing, nullcontext
from dataclasses import dataclass
from typing import Any

from geostream.collections.feature_collection import FeatureCollection, collection_type_for
from geostream.core.exceptions import UnsupportedVariantError, ValidationError
from geostream.core.query_rectangle import QueryRectangle
from geostream.core.result_descriptor import RasterDataType, VectorDataType
from geostream.engine.context import QueryContext
from geostream.raster.tile import RasterTile2D


def stream_closing(stream: AsyncIterator[Any]) -> AbstractAsyncContextManager:
    """
    Context manager that closes a chunk stream on exit

    Used by composite processors so that abandoning the outermost stream
    stops every upstream producer.
    """
    if hasattr(stream, "aclose"):
        return aclosing(stream)
    return nullcontext(stream)


class QueryProcessor:
    """
    Base class for query processors

    Subclasses are stateless between chunks apart from the parameters they
    own, so one processor may serve several queries in turn.
    """

    def query(self, query: QueryRectangle, ctx: QueryContext) -> AsyncIterator[Any]:
        """
        Stream the result chunks for a query rectangle

        Returns:
            Async iterator of chunks; errors surface when the failing chunk
            is pulled and end the stream
        """
        raise NotImplementedError(f"{self.__class__.__name__} must implement query()")

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class VectorQueryProcessor(QueryProcessor):
    """
    Produces feature collections of one geometry kind

    Attributes:
        collection_type: FeatureCollection subclass of every produced chunk
    """

    collection_type: type[FeatureCollection]

    def __init__(self, collection_type: type[FeatureCollection]):
        self.collection_type = collection_type

    @property
    def vector_data_type(self) -> VectorDataType:
        return self.collection_type.vector_data_type

    def vector_query(
        self, query: QueryRectangle, ctx: QueryContext
    ) -> AsyncIterator[FeatureCollection]:
        raise NotImplementedError(f"{self.__class__.__name__} must implement vector_query()")

    def query(self, query: QueryRectangle, ctx: QueryContext) -> AsyncIterator[FeatureCollection]:
        return self.vector_query(query, ctx)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.vector_data_type.value})"


class RasterQueryProcessor(QueryProcessor):
    """
    Produces raster tiles of one pixel type

    Attributes:
        data_type: Pixel type of every produced tile
    """

    def __init__(self, data_type: RasterDataType):
        self.data_type = data_type

    def raster_query(self, query: QueryRectangle, ctx: QueryContext) -> AsyncIterator[RasterTile2D]:
        raise NotImplementedError(f"{self.__class__.__name__} must implement raster_query()")

    def query(self, query: QueryRectangle, ctx: QueryContext) -> AsyncIterator[RasterTile2D]:
        return self.raster_query(query, ctx)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.data_type.value})"


@dataclass(frozen=True)
class TypedVectorQueryProcessor:
    """
    Vector query processor tagged with its geometry kind

    One of Data, MultiPoint, MultiLineString or MultiPolygon.

    Examples:
        >>> typed = initialized.query_processor()
        >>> match typed:
        ...     case TypedVectorQueryProcessor(VectorDataType.MULTI_POINT, processor):
        ...         stream = processor.vector_query(rect, ctx)
    """

    data_type: VectorDataType
    processor: VectorQueryProcessor

    def __post_init__(self):
        object.__setattr__(self, "data_type", VectorDataType(self.data_type))
        if self.processor.vector_data_type != self.data_type:
            raise ValidationError(
                f"Processor produces {self.processor.vector_data_type.value}, "
                f"tagged as {self.data_type.value}"
            )

    @classmethod
    def of(cls, processor: VectorQueryProcessor) -> "TypedVectorQueryProcessor":
        """Tag a processor with the geometry kind it declares"""
        return cls(processor.vector_data_type, processor)

    @property
    def collection_type(self) -> type[FeatureCollection]:
        return collection_type_for(self.data_type)

    def map(
        self,
        factory: Callable[[VectorQueryProcessor], VectorQueryProcessor],
        operator: str = "Operator",
        supported: Collection[VectorDataType] | None = None,
    ) -> "TypedVectorQueryProcessor":
        """
        Wrap the inner processor and keep the variant tag

        Args:
            factory: Builds the operator's processor around the source processor
            operator: Operator name for error messages
            supported: Variants the operator accepts (default: all)

        Raises:
            UnsupportedVariantError: If the variant is not supported
        """
        self._check_supported(operator, supported)
        return TypedVectorQueryProcessor(self.data_type, factory(self.processor))

    def expect(self, data_type: VectorDataType, operator: str = "Operator") -> VectorQueryProcessor:
        """
        Unwrap the processor if it has the given variant

        Raises:
            UnsupportedVariantError: If the variant differs
        """
        self._check_supported(operator, [data_type])
        return self.processor

    def _check_supported(
        self, operator: str, supported: Collection[VectorDataType] | None
    ) -> None:
        if supported is not None and self.data_type not in supported:
            raise UnsupportedVariantError(
                operator, self.data_type.value, [v.value for v in supported]
            )


@dataclass(frozen=True)
class TypedRasterQueryProcessor:
    """Raster query processor tagged with its pixel type"""

    data_type: RasterDataType
    processor: RasterQueryProcessor

    def __post_init__(self):
        object.__setattr__(self, "data_type", RasterDataType(self.data_type))
        if self.processor.data_type != self.data_type:
            raise ValidationError(
                f"Processor produces {self.processor.data_type.value}, "
                f"tagged as {self.data_type.value}"
            )

    @classmethod
    def of(cls, processor: RasterQueryProcessor) -> "TypedRasterQueryProcessor":
        return cls(processor.data_type, processor)

    def map(
        self,
        factory: Callable[[RasterQueryProcessor], RasterQueryProcessor],
        operator: str = "Operator",
        supported: Collection[RasterDataType] | None = None,
    ) -> "TypedRasterQueryProcessor":
        """Wrap the inner processor and keep the pixel type tag"""
        self._check_supported(operator, supported)
        return TypedRasterQueryProcessor(self.data_type, factory(self.processor))

    def expect(self, data_type: RasterDataType, operator: str = "Operator") -> RasterQueryProcessor:
        self._check_supported(operator, [data_type])
        return self.processor

    def _check_supported(
        self, operator: str, supported: Collection[RasterDataType] | None
    ) -> None:
        if supported is not None and self.data_type not in supported:
            raise UnsupportedVariantError(
                operator, self.data_type.value, [v.value for v in supported]
            )


TypedQueryProcessor = TypedVectorQueryProcessor | TypedRasterQueryProcessor
