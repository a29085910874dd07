"""
Pytest Configuration and Fixtures

This module provides shared fixtures and configuration for all tests.
"""

import threading
from typing import Iterator, List

import pytest

from objcache.buffer.pool import BufferPool
from objcache.cache.store import ObjectCache


def put(cache: ObjectCache, key: str, payload: bytes) -> None:
    """Store payload under key through the write protocol."""
    sink = cache.create(key)
    sink.write(payload)
    sink.finalize()


class EvictionRecorder:
    """Thread-safe eviction callback that records every key it receives."""

    def __init__(self):
        self.keys: List[str] = []
        self._lock = threading.Lock()
        self.called = threading.Event()

    def __call__(self, key: str) -> None:
        with self._lock:
            self.keys.append(key)
        self.called.set()

    def count(self, key: str) -> int:
        with self._lock:
            return self.keys.count(key)


# ============================================================================
# Buffer Pool Fixtures
# ============================================================================

@pytest.fixture
def pool() -> BufferPool:
    """Create a private buffer pool so buffer accounting is per test."""
    return BufferPool(max_pooled=8)


# ============================================================================
# Cache Fixtures
# ============================================================================

@pytest.fixture
def recorder() -> EvictionRecorder:
    """Create an eviction callback recorder."""
    return EvictionRecorder()


@pytest.fixture
def cache(pool: BufferPool, recorder: EvictionRecorder) -> Iterator[ObjectCache]:
    """Create a cache without expiry (1000 byte budget, 100 byte entry cap)."""
    c = ObjectCache(max_size=1000, expiry=0, pool=pool, on_eviction=recorder)
    yield c
    c.stop_janitor()


@pytest.fixture
def expiring_cache(pool: BufferPool, recorder: EvictionRecorder) -> Iterator[ObjectCache]:
    """Create a cache with a 0.2s expiry, so the janitor sweeps every 0.05s."""
    c = ObjectCache(max_size=1000, expiry=0.2, pool=pool, on_eviction=recorder)
    yield c
    c.stop_janitor()


@pytest.fixture
def large_cache(pool: BufferPool) -> Iterator[ObjectCache]:
    """Create a cache with a 10 MB budget for concurrency tests."""
    c = ObjectCache(max_size=10 * 1024 * 1024, expiry=0, pool=pool)
    yield c
    c.stop_janitor()


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
