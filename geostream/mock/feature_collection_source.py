"""
Mock feature collection sources

Leaf operators that replay a fixed list of feature collections. There is
one operator per geometry kind, tagged e.g. "MockFeatureCollectionSourceMultiPoint".
"""

import asyncio
from collections.abc import AsyncIterator, Sequence
from dataclasses import dataclass, field
from typing import Any, ClassVar

from geostream.collections.feature_collection import (
    DataCollection,
    FeatureCollection,
    MultiLineStringCollection,
    MultiPointCollection,
    MultiPolygonCollection,
)
from geostream.core.exceptions import ConfigurationError, ValidationError
from geostream.core.query_rectangle import QueryRectangle
from geostream.core.result_descriptor import FeatureDataType, VectorResultDescriptor
from geostream.engine.context import ExecutionContext, QueryContext
from geostream.engine.initialized import InitializedVectorOperator
from geostream.engine.operator import OperatorParams, VectorOperator
from geostream.engine.processor import TypedVectorQueryProcessor, VectorQueryProcessor
from geostream.engine.registry import register_operator


@dataclass
class MockFeatureCollectionSourceParams(OperatorParams):
    """
    Attributes:
        collections: Collections replayed by every query
        columns: Declared data columns (default: those of the first collection)
    """

    collections: list[FeatureCollection] = field(default_factory=list)
    columns: dict[str, FeatureDataType] | None = None

    def __post_init__(self):
        if self.columns is not None:
            if not isinstance(self.columns, dict):
                raise ValidationError("columns must be an object of column types")
            try:
                self.columns = {name: FeatureDataType(t) for name, t in self.columns.items()}
            except ValueError as e:
                raise ValidationError(f"Invalid column type: {e}") from e
        if not isinstance(self.collections, list):
            raise ValidationError("collections must be a list")
        try:
            self.collections = [
                c if isinstance(c, FeatureCollection) else FeatureCollection.from_dict(c)
                for c in self.collections
            ]
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Invalid feature collection: {e}") from e


class MockFeatureCollectionSource(VectorOperator):
    """
    Replays feature collections in order

    Examples:
        >>> source = MockFeatureCollectionSource.single(points)
        >>> source.type_name
        'MockFeatureCollectionSourceMultiPoint'
    """

    collection_type: ClassVar[type[FeatureCollection]]
    params_type = MockFeatureCollectionSourceParams

    @classmethod
    def single(cls, collection: FeatureCollection) -> "MockFeatureCollectionSource":
        return cls.multiple([collection])

    @classmethod
    def multiple(
        cls,
        collections: Sequence[FeatureCollection],
        columns: dict[str, FeatureDataType] | None = None,
    ) -> "MockFeatureCollectionSource":
        """
        Build the source for a list of collections

        On the base class the geometry kind is taken from the first collection.
        Without collections, ``columns`` declares the schema of the source.
        """
        operator_cls = cls
        if cls is MockFeatureCollectionSource:
            if not collections:
                raise ValidationError("Cannot infer the geometry kind of an empty source")
            operator_cls = _SOURCE_TYPES[type(collections[0])]
        return operator_cls(MockFeatureCollectionSourceParams(list(collections), columns))

    def _initialize(
        self, context: ExecutionContext, sources: Any
    ) -> "InitializedMockFeatureCollectionSource":
        collections = self.params.collections
        for collection in collections:
            if type(collection) is not self.collection_type:
                raise ConfigurationError(
                    f"{self.type_name} expects {self.collection_type.__name__}, "
                    f"got {type(collection).__name__}"
                )

        columns = self.params.columns
        if columns is None:
            columns = collections[0].column_types() if collections else {}
        for collection in collections:
            if collection.column_types() != columns:
                raise ConfigurationError(
                    f"Collections of {self.type_name} have differing columns: "
                    f"{columns} vs {collection.column_types()}"
                )

        result_descriptor = VectorResultDescriptor(
            data_type=self.collection_type.vector_data_type, columns=columns
        )
        return InitializedMockFeatureCollectionSource(
            result_descriptor, list(collections), self.collection_type
        )


class InitializedMockFeatureCollectionSource(InitializedVectorOperator):
    def __init__(
        self,
        result_descriptor: VectorResultDescriptor,
        collections: list[FeatureCollection],
        collection_type: type[FeatureCollection],
    ):
        super().__init__(result_descriptor)
        self.collections = collections
        self.collection_type = collection_type

    def query_processor(self) -> TypedVectorQueryProcessor:
        return TypedVectorQueryProcessor.of(
            MockFeatureCollectionSourceProcessor(self.collections, self.collection_type)
        )


class MockFeatureCollectionSourceProcessor(VectorQueryProcessor):
    def __init__(
        self, collections: list[FeatureCollection], collection_type: type[FeatureCollection]
    ):
        super().__init__(collection_type)
        self.collections = collections

    async def vector_query(
        self, query: QueryRectangle, ctx: QueryContext
    ) -> AsyncIterator[FeatureCollection]:
        for collection in self.collections:
            await asyncio.sleep(0)
            yield collection


@register_operator("MockFeatureCollectionSourceData")
class MockFeatureCollectionSourceData(MockFeatureCollectionSource):
    collection_type = DataCollection


@register_operator("MockFeatureCollectionSourceMultiPoint")
class MockFeatureCollectionSourceMultiPoint(MockFeatureCollectionSource):
    collection_type = MultiPointCollection


@register_operator("MockFeatureCollectionSourceMultiLineString")
class MockFeatureCollectionSourceMultiLineString(MockFeatureCollectionSource):
    collection_type = MultiLineStringCollection


@register_operator("MockFeatureCollectionSourceMultiPolygon")
class MockFeatureCollectionSourceMultiPolygon(MockFeatureCollectionSource):
    collection_type = MultiPolygonCollection


_SOURCE_TYPES: dict[type[FeatureCollection], type[MockFeatureCollectionSource]] = {
    DataCollection: MockFeatureCollectionSourceData,
    MultiPointCollection: MockFeatureCollectionSourceMultiPoint,
    MultiLineStringCollection: MockFeatureCollectionSourceMultiLineString,
    MultiPolygonCollection: MockFeatureCollectionSourceMultiPolygon,
}
