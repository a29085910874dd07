"""Errors raised by the object cache."""


class ObjectCacheError(Exception):
    """Base class for all object cache errors."""


class KeyNotFoundError(ObjectCacheError, KeyError):
    """Key not found in cache, or the cached entry is older than the caller's reference time."""

    def __init__(self, key: str):
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"Key not found in cache: {self.key!r}"


class CacheFullError(ObjectCacheError):
    """Not enough space in cache for a single entry."""

    def __init__(self, key: str, size: int, limit: int):
        super().__init__(f"Not enough space in cache: {key!r} is {size} bytes, limit is {limit}")
        self.key = key
        self.size = size
        self.limit = limit


class InvalidConfigError(ObjectCacheError, ValueError):
    """Invalid cache configuration."""


class ExcessDataError(ObjectCacheError, ValueError):
    """Attempted write on a sink that has already been finalized."""
