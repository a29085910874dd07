"""Buffer pool module for objcache."""

from .pool import BufferPool, ByteBuffer, default_pool

__all__ = ["BufferPool", "ByteBuffer", "default_pool"]
