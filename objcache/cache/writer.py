"""
Write Sink Module

Two-phase write protocol for the object cache.

ObjectCache.create() hands out a WriteSink holding a private buffer taken
from the pool. Bytes are streamed into it without holding the cache lock;
finalize() then either commits the buffer as the entry for the key or
rejects it. Every path through finalize() that does not commit returns the
buffer to the pool.

Usage:
    with cache.create("key") as sink:
        sink.write(b"chunk 1")
        sink.write(b"chunk 2")
    # finalized on exit; CacheFullError if the payload is too large
"""

import logging
from typing import TYPE_CHECKING

from ..buffer.pool import BufferPool, ByteBuffer
from .errors import CacheFullError, ExcessDataError

if TYPE_CHECKING:
    from .store import ObjectCache

logger = logging.getLogger(__name__)


class WriteSink:
    """
    Writable handle for a pending cache entry.

    Attributes:
        key: The key the payload will be committed under
    """

    def __init__(self, cache: "ObjectCache", key: str, pool: BufferPool):
        self.key = key
        self._cache = cache
        self._pool = pool
        self._buf: ByteBuffer = pool.acquire()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        """Number of bytes written so far."""
        return 0 if self._closed else len(self._buf)

    def write(self, data) -> int:
        """
        Append bytes to the pending entry.

        Args:
            data: Any bytes-like object

        Returns:
            Number of bytes appended

        Raises:
            ExcessDataError: If the sink was already finalized
        """
        if self._closed:
            raise ExcessDataError(f"Attempted excess write on cache: {self.key!r} is already finalized")
        return self._buf.write(data)

    def finalize(self) -> None:
        """
        Commit or reject the pending entry.

        - Nothing written: the buffer is released and nothing is stored.
        - More than max_entry_size bytes: the buffer is released and
          CacheFullError is raised.
        - Otherwise the buffer becomes the entry for key.

        Calling finalize() again after the first call does nothing.

        Raises:
            CacheFullError: If the payload exceeds the per-entry cap
        """
        if self._closed:
            return
        self._closed = True

        buf = self._buf
        size = len(buf)

        if size == 0:
            self._pool.release(buf)
            logger.debug(f"Empty write for {self.key!r}, nothing stored")
            return

        limit = self._cache.max_entry_size
        if size > limit:
            self._pool.release(buf)
            logger.debug(f"Rejected {self.key!r}: {size} bytes exceeds entry limit {limit}")
            raise CacheFullError(self.key, size, limit)

        self._cache._commit(self.key, buf)

    close = finalize

    def discard(self) -> None:
        """Drop the pending entry without storing anything."""
        if self._closed:
            return
        self._closed = True
        self._pool.release(self._buf)

    def __enter__(self) -> "WriteSink":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_type is None:
            self.finalize()
        else:
            self.discard()

    def __repr__(self) -> str:
        state = "closed" if self._closed else f"{len(self._buf)} bytes"
        return f"WriteSink(key={self.key!r}, {state})"
