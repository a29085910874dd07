"""
Janitor Module

Background expiry sweep for the object cache.

The janitor runs on a daemon thread and wakes every interval seconds to
call the sweep function, which evicts idle entries and delivers their
eviction callbacks. A threading.Event is the stop signal: stop() sets it,
the wait wakes immediately, and the thread is joined.

States:
    running -> stopped (terminal; a Janitor instance is never restarted)
"""

import logging
import threading
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


class Janitor:
    """
    Periodic sweep task.

    Usage:
        janitor = Janitor(cache.sweep, interval=expiry / 4)
        janitor.start()
        ...
        janitor.stop()  # safe to call more than once

    Attributes:
        interval: Seconds between sweeps
    """

    def __init__(self, sweep: Callable[[], List[str]], interval: float, name: str = "objcache-janitor"):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.interval = interval
        self._sweep = sweep
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)
        self._started = False

    @property
    def running(self) -> bool:
        return self._thread.is_alive() and not self._stop.is_set()

    def start(self) -> None:
        """Start the sweep thread. Does nothing on a started janitor."""
        if self._started:
            return
        self._started = True
        self._thread.start()
        logger.info(f"Janitor started, sweeping every {self.interval:.3f}s")

    def stop(self, timeout: Optional[float] = None) -> bool:
        """
        Stop the sweep thread and wait for it to exit.

        Args:
            timeout: Maximum seconds to wait for the thread (None = wait
                     for the sweep in progress, if any, to finish)

        Returns:
            True if this call stopped a running janitor, False if it was
            never started or had already been stopped
        """
        if not self._started or self._stop.is_set():
            return False

        self._stop.set()
        if threading.current_thread() is not self._thread:
            self._thread.join(timeout)
        logger.info("Janitor stopped")
        return True

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            try:
                self._sweep()
            except Exception:
                logger.exception("Janitor sweep failed")
