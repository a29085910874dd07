"""
Object Cache Store Module

This module implements the in-memory object cache.

Callers write a byte payload under a string key with create()/finalize(),
read it back with open(), and remove it with delete(). When an expiry is
configured, a background janitor evicts entries that have not been
accessed within the expiry window.

One lock guards the entry mapping, current_size and total_evicted. The
eviction callback is always invoked after that lock has been released.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..buffer.pool import BufferPool, ByteBuffer, default_pool
from ..config.settings import settings
from .errors import InvalidConfigError, KeyNotFoundError
from .janitor import Janitor
from .writer import WriteSink

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    buffer: ByteBuffer
    last_accessed: float


class ObjectCache:
    """
    Size-bounded in-memory object cache with idle expiry.

    Features:
    - Two-phase writes: payloads are streamed into a private buffer and
      only become visible on finalize()
    - Per-entry cap: an entry may hold at most max_entry_size bytes
    - Freshness check: open() treats an entry as stale when it was last
      accessed before the caller's reference time
    - Idle expiry: with expiry > 0, entries untouched for longer than
      expiry seconds are evicted within about 1.25 * expiry
    - Eviction callback: on_eviction(key) is called after every explicit
      delete and every janitor eviction, outside the cache lock

    max_size is a nominal budget. It determines max_entry_size and is
    reported by stats(), but the cache keeps accepting entries that fit
    under the per-entry cap regardless of current_size.

    open() returns a copy of the stored bytes, so a returned payload stays
    valid after the entry is deleted, replaced or expired.

    Usage:
        cache = ObjectCache(max_size=1024 * 1024, expiry=60)
        with cache.create("key") as sink:
            sink.write(b"payload")
        data = cache.open("key")
        cache.delete("key")
        cache.stop_janitor()

    Attributes:
        max_size: Nominal total budget in bytes
        max_entry_size: Maximum size of a single entry in bytes
        expiry: Idle seconds before an entry is expired (0 = never)
        on_eviction: Optional callback receiving the evicted key
    """

    def __init__(
            self,
            max_size: int = None,
            expiry: float = None,
            pool: BufferPool = None,
            on_eviction: Optional[Callable[[str], None]] = None,
    ):
        """
        Initialize the cache and start the janitor if expiry > 0.

        Args:
            max_size: Nominal total budget in bytes (default from settings.MAX_SIZE)
            expiry: Idle expiry in seconds, 0 to disable (default from settings.EXPIRY)
            pool: Buffer pool for entry buffers (default process-wide pool)
            on_eviction: Callback invoked with the key of each deleted entry

        Raises:
            InvalidConfigError: If max_size is not positive or expiry is negative
        """
        max_size = max_size if max_size is not None else settings.MAX_SIZE
        expiry = expiry if expiry is not None else settings.EXPIRY

        if max_size <= 0:
            raise InvalidConfigError("invalid maximum cache size")
        if expiry < 0:
            raise InvalidConfigError("expiry must not be negative")

        self.max_size = max_size
        self.max_entry_size = max_size // settings.BUFFER_RATIO or max_size
        self.expiry = expiry
        self.on_eviction = on_eviction

        self._pool = pool if pool is not None else default_pool
        self._lock = threading.Lock()
        self._entries: Dict[str, _Entry] = {}
        self._current_size = 0
        self._total_evicted = 0
        self._janitor: Optional[Janitor] = None
        # Guards _janitor only; never held while sweeping or joining
        self._janitor_lock = threading.Lock()

        if self.expiry > 0:
            self.start_janitor()

    # ------------------------------------------------------------------
    # Write path
    # ------------------------------------------------------------------

    def create(self, key: str) -> WriteSink:
        """
        Start a write for key.

        The returned sink accumulates bytes in a private buffer; nothing is
        visible in the cache until its finalize() commits the payload.

        Args:
            key: The key to store the payload under

        Returns:
            A WriteSink; call finalize() exactly once, or use it as a
            context manager
        """
        return WriteSink(self, key, self._pool)

    def _commit(self, key: str, buf: ByteBuffer) -> None:
        """Install buf as the entry for key, releasing any entry it replaces."""
        size = len(buf)
        with self._lock:
            previous = self._entries.get(key)
            if previous is not None:
                self._current_size -= len(previous.buffer)
                self._pool.release(previous.buffer)
            self._entries[key] = _Entry(buffer=buf, last_accessed=time.time())
            self._current_size += size
        if previous is not None:
            logger.debug(f"Committed {key!r} ({size} bytes), replacing previous entry")
        else:
            logger.debug(f"Committed {key!r} ({size} bytes)")

    # ------------------------------------------------------------------
    # Read path
    # ------------------------------------------------------------------

    def open(self, key: str, reference_time: float = 0.0) -> bytes:
        """
        Read the payload stored under key.

        Args:
            key: The key to look up
            reference_time: Epoch seconds of the most recent write the
                caller knows of. An entry last accessed before this time
                is stale: it is deleted and treated as a miss.

        Returns:
            A copy of the stored bytes

        Raises:
            KeyNotFoundError: If the key is absent or the entry is stale
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                raise KeyNotFoundError(key)

            if entry.last_accessed < reference_time:
                self._remove(key)
                logger.debug(f"Invalidated stale entry {key!r}")
                raise KeyNotFoundError(key)

            entry.last_accessed = max(entry.last_accessed, time.time())
            return bytes(entry.buffer.bytes())

    def __contains__(self, key: str) -> bool:
        """Membership test; does not refresh last access time."""
        with self._lock:
            return key in self._entries

    # ------------------------------------------------------------------
    # Deletion
    # ------------------------------------------------------------------

    def delete(self, key: str) -> bool:
        """
        Delete the entry for key and notify on_eviction.

        The callback runs after the cache lock is released and is invoked
        even when key was not present. By the time it runs, another caller
        may already have stored a new entry under the same key.

        Args:
            key: The key to delete

        Returns:
            True if an entry was removed, False if key didn't exist
        """
        with self._lock:
            removed = self._remove(key)

        if self.on_eviction is not None:
            self.on_eviction(key)
        return removed

    def clear(self) -> int:
        """
        Delete every entry, then notify on_eviction for each one.

        Returns:
            Number of entries removed
        """
        with self._lock:
            keys = list(self._entries)
            for key in keys:
                self._remove(key)

        self._notify(keys)
        return len(keys)

    def sweep(self) -> List[str]:
        """
        Evict every entry idle for longer than expiry.

        Called periodically by the janitor. Callback failures are logged
        and do not stop delivery to the remaining keys.

        Returns:
            Evicted keys, in eviction order
        """
        if self.expiry <= 0:
            return []

        now = time.time()
        with self._lock:
            expired = [k for k, e in self._entries.items() if now - e.last_accessed > self.expiry]
            for key in expired:
                self._remove(key)

        if expired:
            logger.debug(f"Expired {len(expired)} entries")
        self._notify(expired)
        return expired

    def _remove(self, key: str) -> bool:
        """Remove key from the store. Caller must hold the lock."""
        entry = self._entries.pop(key, None)
        if entry is None:
            return False
        self._current_size -= len(entry.buffer)
        self._pool.release(entry.buffer)
        self._total_evicted += 1
        return True

    def _notify(self, keys: List[str]) -> None:
        callback = self.on_eviction
        if callback is None:
            return
        for key in keys:
            try:
                callback(key)
            except Exception:
                logger.exception(f"Eviction callback failed for {key!r}")

    # ------------------------------------------------------------------
    # Janitor
    # ------------------------------------------------------------------

    def start_janitor(self) -> None:
        """
        Start the background expiry sweep.

        Does nothing if the janitor is already running.

        Raises:
            InvalidConfigError: If the cache was created without expiry
        """
        if self.expiry <= 0:
            raise InvalidConfigError("janitor requires a positive expiry")
        with self._janitor_lock:
            if self._janitor is not None and self._janitor.running:
                return
            self._janitor = Janitor(self.sweep, self.expiry / settings.SWEEP_DIVISOR)
            self._janitor.start()

    def stop_janitor(self, timeout: Optional[float] = None) -> bool:
        """
        Stop the background expiry sweep.

        Once stopped, entries are no longer expired. Calling this when no
        janitor is running, or more than once, does nothing.

        Args:
            timeout: Maximum seconds to wait for the janitor thread to exit

        Returns:
            True if a running janitor was stopped
        """
        # Joined outside the control lock: a callback may call start_janitor()
        with self._janitor_lock:
            janitor = self._janitor
        if janitor is None:
            return False
        return janitor.stop(timeout)

    close = stop_janitor

    @property
    def janitor_running(self) -> bool:
        return self._janitor is not None and self._janitor.running

    def __enter__(self) -> "ObjectCache":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop_janitor()

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def current_size(self) -> int:
        with self._lock:
            return self._current_size

    @property
    def total_evicted(self) -> int:
        with self._lock:
            return self._total_evicted

    def size(self) -> int:
        """Get the current number of entries."""
        with self._lock:
            return len(self._entries)

    __len__ = size

    def _snapshot(self) -> Tuple[int, int, int]:
        with self._lock:
            return len(self._entries), self._current_size, self._total_evicted

    def stats(self) -> Dict[str, Any]:
        """
        Get statistics about the cache.

        Returns:
            Dictionary containing:
            - entries: Number of stored entries
            - current_size: Bytes held by stored entries
            - max_size: Nominal total budget
            - max_entry_size: Per-entry cap
            - utilization: current_size as a fraction of max_size
            - total_evicted: Entries deleted so far
            - expiry: Idle expiry in seconds
            - janitor_running: Whether the background sweep is active
        """
        entries, current_size, total_evicted = self._snapshot()
        return {
            "entries": entries,
            "current_size": current_size,
            "max_size": self.max_size,
            "max_entry_size": self.max_entry_size,
            "utilization": current_size / self.max_size,
            "total_evicted": total_evicted,
            "expiry": self.expiry,
            "janitor_running": self.janitor_running,
        }
