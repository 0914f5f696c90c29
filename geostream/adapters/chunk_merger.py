"""
Feature collection chunk merger

Coalesces a stream of small feature collections into chunks near a target
byte size. This is the only memory control of a vector query: it buffers
until the target is reached and so bounds the size of downstream chunks.

Guarantees:
    - Order is preserved; chunks are only concatenated, never reordered.
    - Every emitted chunk reaches the target size unless it is the last one,
      or a single source chunk already reaches it (passed through, never split).
    - No rows are dropped.
    - On a source error, buffered chunks are emitted before the error is raised.
"""

import logging
from collections.abc import AsyncIterator

from geostream.collections.feature_collection import FeatureCollection
from geostream.core.exceptions import ValidationError
from geostream.engine.processor import stream_closing

logger = logging.getLogger(__name__)


class FeatureCollectionChunkMerger:
    """
    Merge undersized feature collections up to a byte size target

    Attributes:
        source: Source stream of feature collections of one type
        chunk_byte_size: Target byte size of emitted chunks

    Examples:
        >>> merged = FeatureCollectionChunkMerger(stream, ctx.chunk_byte_size())
        >>> async for collection in merged:
        ...     print(len(collection), collection.byte_size())
    """

    def __init__(self, source: AsyncIterator[FeatureCollection], chunk_byte_size: int):
        if chunk_byte_size <= 0:
            raise ValidationError(f"Chunk byte size must be positive, got {chunk_byte_size}")
        self.source = source
        self.chunk_byte_size = chunk_byte_size
        self._stream: AsyncIterator[FeatureCollection] | None = None

    def __aiter__(self) -> AsyncIterator[FeatureCollection]:
        if self._stream is None:
            self._stream = self._merge()
        return self._stream

    async def __anext__(self) -> FeatureCollection:
        return await self.__aiter__().__anext__()

    async def aclose(self) -> None:
        """Stop merging and close the source stream"""
        if self._stream is None:
            self._stream = self._merge()
        await self._stream.aclose()

    async def _merge(self) -> AsyncIterator[FeatureCollection]:
        pending: list[FeatureCollection] = []
        pending_bytes = 0

        async with stream_closing(self.source) as source:
            try:
                async for collection in source:
                    collection_bytes = collection.byte_size()

                    if not pending and collection_bytes >= self.chunk_byte_size:
                        logger.debug("Passing through chunk of %d bytes", collection_bytes)
                        yield collection
                        continue

                    pending.append(collection)
                    pending_bytes += collection_bytes

                    if pending_bytes >= self.chunk_byte_size:
                        yield self._flush(pending, pending_bytes)
                        pending = []
                        pending_bytes = 0
            except Exception:
                if pending:
                    yield self._flush(pending, pending_bytes)
                raise

        if pending:
            yield self._flush(pending, pending_bytes)

    def _flush(self, pending: list[FeatureCollection], pending_bytes: int) -> FeatureCollection:
        merged = pending[0] if len(pending) == 1 else type(pending[0]).concat(pending)
        logger.debug(
            "Merged %d chunks into %d rows (%d bytes)", len(pending), len(merged), pending_bytes
        )
        return merged
