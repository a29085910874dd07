"""Cache module for objcache."""

from .errors import (
    CacheFullError,
    ExcessDataError,
    InvalidConfigError,
    KeyNotFoundError,
    ObjectCacheError,
)
from .janitor import Janitor
from .store import ObjectCache
from .writer import WriteSink

__all__ = [
    "CacheFullError",
    "ExcessDataError",
    "InvalidConfigError",
    "Janitor",
    "KeyNotFoundError",
    "ObjectCache",
    "ObjectCacheError",
    "WriteSink",
]
