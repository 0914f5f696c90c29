"""
Tests for typed query processors
"""

import numpy as np
import pytest

from geostream.collections import DataCollection, MultiPointCollection, MultiPolygonCollection
from geostream.core.exceptions import UnsupportedVariantError, ValidationError
from geostream.core.primitives import TimeInterval
from geostream.core.result_descriptor import RasterDataType, VectorDataType
from geostream.engine.processor import (
    RasterQueryProcessor,
    TypedRasterQueryProcessor,
    TypedVectorQueryProcessor,
    VectorQueryProcessor,
    stream_closing,
)
from geostream.raster import GeoTransform, RasterTile2D


class CountingProcessor(VectorQueryProcessor):
    """Yields the given collections and counts how many were produced"""

    def __init__(self, collections, collection_type=MultiPointCollection):
        super().__init__(collection_type)
        self.collections = collections
        self.produced = 0
        self.closed = False

    async def vector_query(self, query, ctx):
        try:
            for collection in self.collections:
                self.produced += 1
                yield collection
        finally:
            self.closed = True


class WrappingProcessor(VectorQueryProcessor):
    def __init__(self, source):
        super().__init__(source.collection_type)
        self.source = source

    async def vector_query(self, query, ctx):
        async with stream_closing(self.source.vector_query(query, ctx)) as stream:
            async for collection in stream:
                yield collection


class ConstantRasterProcessor(RasterQueryProcessor):
    async def raster_query(self, query, ctx):
        yield RasterTile2D(
            TimeInterval(0, 1),
            (0, 0),
            GeoTransform(),
            np.zeros((1, 1), dtype=self.data_type.numpy_dtype),
        )


class TestTypedVectorQueryProcessor:
    """Test variant tagging and dispatch"""

    def test_of_uses_declared_variant(self):
        typed = TypedVectorQueryProcessor.of(CountingProcessor([]))
        assert typed.data_type == VectorDataType.MULTI_POINT
        assert typed.collection_type is MultiPointCollection

    def test_tag_mismatch_rejected(self):
        with pytest.raises(ValidationError):
            TypedVectorQueryProcessor(VectorDataType.DATA, CountingProcessor([]))

    @pytest.mark.parametrize(
        "collection_type",
        [DataCollection, MultiPointCollection, MultiPolygonCollection],
    )
    def test_map_preserves_variant(self, collection_type):
        typed = TypedVectorQueryProcessor.of(CountingProcessor([], collection_type))
        mapped = typed.map(WrappingProcessor)
        assert mapped.data_type == typed.data_type
        assert isinstance(mapped.processor, WrappingProcessor)

    def test_map_unsupported_variant(self):
        typed = TypedVectorQueryProcessor.of(CountingProcessor([], DataCollection))
        with pytest.raises(UnsupportedVariantError) as exc_info:
            typed.map(
                WrappingProcessor,
                operator="PointsOnly",
                supported=[VectorDataType.MULTI_POINT],
            )
        assert exc_info.value.variant == "Data"

    def test_expect(self):
        processor = CountingProcessor([])
        typed = TypedVectorQueryProcessor.of(processor)
        assert typed.expect(VectorDataType.MULTI_POINT) is processor

        with pytest.raises(UnsupportedVariantError):
            typed.expect(VectorDataType.MULTI_POLYGON)

    def test_pattern_matching(self):
        typed = TypedVectorQueryProcessor.of(CountingProcessor([]))
        match typed:
            case TypedVectorQueryProcessor(VectorDataType.MULTI_POINT, processor):
                assert isinstance(processor, CountingProcessor)
            case _:
                pytest.fail("MultiPoint processor did not match")


class TestTypedRasterQueryProcessor:
    """Test raster pixel type tagging"""

    def test_map_preserves_pixel_type(self):
        typed = TypedRasterQueryProcessor.of(ConstantRasterProcessor(RasterDataType.I16))
        mapped = typed.map(lambda source: ConstantRasterProcessor(source.data_type))
        assert mapped.data_type == RasterDataType.I16

    def test_tag_mismatch_rejected(self):
        with pytest.raises(ValidationError):
            TypedRasterQueryProcessor(
                RasterDataType.U8, ConstantRasterProcessor(RasterDataType.F32)
            )

    def test_unsupported_pixel_type(self):
        typed = TypedRasterQueryProcessor.of(ConstantRasterProcessor(RasterDataType.F32))
        with pytest.raises(UnsupportedVariantError):
            typed.map(lambda p: p, supported=[RasterDataType.U8])


class TestStreaming:
    """Test lazy evaluation and cancellation"""

    @pytest.mark.anyio
    async def test_query_does_no_work_until_pulled(self, points, query_rectangle, query_context):
        processor = CountingProcessor([points, points])
        stream = processor.query(query_rectangle, query_context)
        assert processor.produced == 0

        first = await stream.__anext__()
        assert first is points
        assert processor.produced == 1
        await stream.aclose()

    @pytest.mark.anyio
    async def test_closing_consumer_closes_upstream(self, points, query_rectangle, query_context):
        source = CountingProcessor([points] * 10)
        stream = WrappingProcessor(source).query(query_rectangle, query_context)

        await stream.__anext__()
        await stream.aclose()

        assert source.closed
        assert source.produced == 1

    @pytest.mark.anyio
    async def test_raster_query(self, query_rectangle, query_context):
        processor = ConstantRasterProcessor(RasterDataType.U16)
        tiles = [tile async for tile in processor.query(query_rectangle, query_context)]
        assert [tile.data_type for tile in tiles] == [RasterDataType.U16]
