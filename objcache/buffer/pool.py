"""
Byte Buffer Pool Module

Reusable growable byte buffers for the object cache.

The cache only relies on the acquire/release/append/len/bytes/reset
operations below; how buffers are kept for reuse is internal to the pool.

Usage:
    buf = pool.acquire()
    buf.write(b"payload")
    ...
    pool.release(buf)  # buffer is reset and kept for the next acquire()
"""

import threading
from collections import deque
from typing import Deque, Optional

from ..config.settings import settings


class ByteBuffer:
    """
    A growable byte buffer backed by a bytearray.

    reset() swaps in a fresh bytearray rather than clearing the old one,
    so views handed out by bytes() keep their contents. A pooled buffer
    therefore reuses only this wrapper object, not its allocated storage.
    """

    __slots__ = ("_data",)

    def __init__(self):
        self._data = bytearray()

    def write(self, data) -> int:
        """Append bytes-like data and return the number of bytes appended."""
        n = memoryview(data).nbytes
        self._data += data
        return n

    append = write

    def bytes(self) -> memoryview:
        """Return a view over the accumulated bytes (no copy)."""
        return memoryview(self._data)

    def reset(self) -> None:
        """Drop the contents, keeping the buffer usable."""
        # clear() raises BufferError while a view is exported
        self._data = bytearray()

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"ByteBuffer(len={len(self._data)})"


class BufferPool:
    """
    Thread-safe pool of ByteBuffer instances.

    Released buffers are reset and kept on a bounded free list. Once the
    free list holds max_pooled buffers, further releases are dropped and
    left to the garbage collector.

    The pool guards its free list with its own lock, so acquire() and
    release() may be called while the caller holds another lock.

    Attributes:
        max_pooled: Maximum number of idle buffers kept for reuse
    """

    def __init__(self, max_pooled: Optional[int] = None):
        self.max_pooled = max_pooled if max_pooled is not None else settings.POOL_MAX_BUFFERS
        if self.max_pooled < 0:
            raise ValueError("max_pooled must not be negative")
        self._free: Deque[ByteBuffer] = deque()
        self._lock = threading.Lock()
        self.acquired = 0
        self.released = 0

    def acquire(self) -> ByteBuffer:
        """Get an empty buffer, reusing an idle one when available."""
        with self._lock:
            self.acquired += 1
            if self._free:
                return self._free.pop()
        return ByteBuffer()

    def release(self, buf: ByteBuffer) -> None:
        """Reset a buffer and return it to the pool."""
        buf.reset()
        with self._lock:
            self.released += 1
            if len(self._free) < self.max_pooled:
                self._free.append(buf)

    @property
    def outstanding(self) -> int:
        """Buffers handed out by acquire() and not yet released."""
        with self._lock:
            return self.acquired - self.released

    def idle(self) -> int:
        """Number of buffers waiting on the free list."""
        with self._lock:
            return len(self._free)


# Process-wide pool used when a cache is not given one
default_pool = BufferPool()


def acquire() -> ByteBuffer:
    """Acquire a buffer from the default pool."""
    return default_pool.acquire()


def release(buf: ByteBuffer) -> None:
    """Release a buffer to the default pool."""
    default_pool.release(buf)
