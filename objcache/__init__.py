"""
objcache: In-Memory Object Cache

A size-bounded, in-process cache for transient object bytes with a
two-phase write protocol and optional idle expiry.
"""

from .cache import (
    CacheFullError,
    ExcessDataError,
    InvalidConfigError,
    KeyNotFoundError,
    ObjectCache,
    ObjectCacheError,
)
from .config.settings import DEFAULT_EXPIRY, NO_EXPIRY

__version__ = "1.0.0"

__all__ = [
    "CacheFullError",
    "DEFAULT_EXPIRY",
    "ExcessDataError",
    "InvalidConfigError",
    "KeyNotFoundError",
    "NO_EXPIRY",
    "ObjectCache",
    "ObjectCacheError",
]
