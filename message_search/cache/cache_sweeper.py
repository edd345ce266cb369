"""
Background sweeper for the result cache.

Evicts expired search results on a fixed interval, independently of any
search call. Owned by the engine: started at construction, stopped at
teardown.
"""

import logging
import threading
from typing import Optional

from .result_cache import ResultCache

logger = logging.getLogger(__name__)

DEFAULT_SWEEP_INTERVAL_SECONDS = 60.0


class CacheSweeper:
    """Background worker that periodically calls ``ResultCache.cleanup``."""

    def __init__(self, cache: ResultCache, interval: float = DEFAULT_SWEEP_INTERVAL_SECONDS):
        """
        Initialize cache sweeper.

        Args:
            cache: Cache to sweep
            interval: Seconds between sweeps
        """
        self.cache = cache
        self.interval = interval
        self.sweeps = 0
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the sweeper thread."""
        if self.running:
            logger.warning("Cache sweeper already running")
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run, name="message-search-cache-sweeper", daemon=True
        )
        self._thread.start()
        logger.info(f"Cache sweeper started (interval={self.interval}s)")

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        """Stop the sweeper thread and wait for it to exit."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.info("Cache sweeper stopped")

    def _run(self) -> None:
        while not self._stop_event.wait(self.interval):
            try:
                self.cache.cleanup()
                self.sweeps += 1
            except Exception as e:
                logger.error(f"Error in cache sweeper: {e}")
