# reaper.py
# Background thread that periodically sweeps expired entries out of a code store

import threading
from typing import Optional

from loguru import logger

from .code_store import EphemeralCodeStore


class CodeStoreReaper:
    """Sweeps a store on a fixed interval from a daemon thread."""

    def __init__(self, store: EphemeralCodeStore, interval_seconds: Optional[float] = None):
        self.store = store
        self.interval_seconds = (
            interval_seconds if interval_seconds is not None
            else store.config.reaper_interval_seconds
        )
        self.sweeps = 0
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def enabled(self) -> bool:
        return self.interval_seconds > 0

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> bool:
        """Start the reaper thread. Returns False if disabled or already running."""
        if not self.enabled:
            logger.info("Code store reaper disabled (interval <= 0)")
            return False
        if self.running:
            return False

        # Each run gets its own event so a loop left over from a timed-out stop stays stopped
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._run,
            args=(self._stop_event,),
            name="code-store-reaper",
            daemon=True
        )
        self._thread.start()
        logger.info(f"Code store reaper started, interval {self.interval_seconds}s")
        return True

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        """Signal the thread to exit and wait for it."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                # Keep the handle so running stays true and start() cannot spawn a second loop
                logger.warning("Code store reaper did not stop within timeout")
                return
            logger.info(f"Code store reaper stopped after {self.sweeps} sweeps")
            self._thread = None

    def run_once(self) -> int:
        """Run a single sweep, returning the number of entries removed."""
        removed = self.store.sweep_expired()
        self.sweeps += 1
        if removed:
            logger.debug(f"Reaper removed {removed} expired entries")
        return removed

    def _run(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(self.interval_seconds):
            try:
                self.run_once()
            except Exception as e:
                logger.error(f"Error in code store reaper loop: {e}")
