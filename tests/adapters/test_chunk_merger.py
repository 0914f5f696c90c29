"""
Tests for FeatureCollectionChunkMerger
"""

import pytest

from geostream.adapters.chunk_merger import FeatureCollectionChunkMerger
from geostream.collections import MultiPointCollection
from geostream.core.exceptions import QueryError, ValidationError


async def stream_of(collections, error=None, state=None):
    """Async source over collections, optionally failing at the end"""
    try:
        for collection in collections:
            if state is not None:
                state["produced"] += 1
            yield collection
        if error is not None:
            raise error
    finally:
        if state is not None:
            state["closed"] = True


@pytest.fixture
def singles(points):
    """The four rows of the points fixture as one-row collections"""
    return [points.filter([i == j for j in range(4)]) for i in range(4)]


class TestChunkMerger:
    """Test merging rules"""

    def test_invalid_chunk_size(self, points):
        with pytest.raises(ValidationError):
            FeatureCollectionChunkMerger(stream_of([points]), 0)

    @pytest.mark.anyio
    async def test_large_chunk_passes_through(self, points):
        merger = FeatureCollectionChunkMerger(stream_of([points]), points.byte_size())
        chunks = [chunk async for chunk in merger]
        assert len(chunks) == 1
        assert chunks[0] is points

    @pytest.mark.anyio
    async def test_small_chunks_are_merged(self, singles):
        size = singles[0].byte_size() + singles[1].byte_size()
        chunks = [chunk async for chunk in FeatureCollectionChunkMerger(stream_of(singles), size)]

        assert [len(chunk) for chunk in chunks] == [2, 2]
        assert chunks[0].data("bar") == [0, 1]
        assert chunks[1].data("bar") == [2, 3]

    @pytest.mark.anyio
    async def test_non_final_chunks_reach_target(self, singles):
        size = sum(single.byte_size() for single in singles[:3])
        chunks = [chunk async for chunk in FeatureCollectionChunkMerger(stream_of(singles), size)]

        assert [len(chunk) for chunk in chunks] == [3, 1]
        for chunk in chunks[:-1]:
            assert chunk.byte_size() >= size

    @pytest.mark.anyio
    async def test_rows_and_order_preserved(self, points, singles):
        inputs = singles + [points] + singles[::-1]
        size = 3 * singles[0].byte_size()
        chunks = [chunk async for chunk in FeatureCollectionChunkMerger(stream_of(inputs), size)]

        assert sum(len(chunk) for chunk in chunks) == sum(len(c) for c in inputs)
        assert MultiPointCollection.concat(chunks) == MultiPointCollection.concat(inputs)

    @pytest.mark.anyio
    async def test_large_chunk_joins_pending_buffer(self, points, singles):
        size = points.byte_size()
        merger = FeatureCollectionChunkMerger(stream_of([singles[0], points]), size)
        chunks = [chunk async for chunk in merger]

        assert len(chunks) == 1
        assert chunks[0].data("bar") == [0, 0, 1, 2, 3]

    @pytest.mark.anyio
    async def test_empty_source(self):
        merger = FeatureCollectionChunkMerger(stream_of([]), 1024)
        assert [chunk async for chunk in merger] == []

    @pytest.mark.anyio
    async def test_only_empty_chunks(self, points):
        empty = points.filter([False] * 4)
        merger = FeatureCollectionChunkMerger(stream_of([empty, empty]), 1024)
        chunks = [chunk async for chunk in merger]

        assert len(chunks) == 1
        assert chunks[0].is_empty()
        assert chunks[0].column_names == points.column_names

    @pytest.mark.anyio
    async def test_error_flushes_buffer_first(self, singles):
        source = stream_of(singles[:2], error=QueryError("source failed"))
        merger = FeatureCollectionChunkMerger(source, 1024 * 1024)

        flushed = await merger.__anext__()
        assert flushed.data("bar") == [0, 1]

        with pytest.raises(QueryError):
            await merger.__anext__()

    @pytest.mark.anyio
    async def test_error_without_buffer(self, points):
        source = stream_of([points], error=QueryError("source failed"))
        merger = FeatureCollectionChunkMerger(source, 1)

        assert await merger.__anext__() is points
        with pytest.raises(QueryError):
            await merger.__anext__()

    @pytest.mark.anyio
    async def test_close_stops_source(self, points):
        state = {"produced": 0, "closed": False}
        merger = FeatureCollectionChunkMerger(stream_of([points] * 10, state=state), 1)

        await merger.__anext__()
        await merger.aclose()

        assert state["closed"]
        assert state["produced"] == 1
