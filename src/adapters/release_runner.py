"""
In-process release runner.

Runs the release sweep on a background thread at a fixed interval. Used by
the API when release.in_process_sweep is enabled and by the CLI's
`sweep --every N`. Deployments with an external scheduler call the sweep
directly (POST /api/premium/releases/process or `cli sweep`) instead.

Overlapping sweeps are harmless: every release is a conditional update, so
an item freed by one run is silently skipped by another.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from src.components.release import SweepOutput

logger = logging.getLogger(__name__)


class IntervalReleaseRunner:
    """Background thread that calls a sweep function every interval."""

    def __init__(
        self,
        sweep: Callable[[], SweepOutput],
        interval_seconds: float = 300.0,
    ) -> None:
        """
        Initialize runner.

        Args:
            sweep: Zero-argument callable running one release sweep
            interval_seconds: Seconds between sweeps
        """
        self._sweep = sweep
        self._interval = interval_seconds
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._running = False

    def start(self) -> None:
        """Start the background runner."""
        if self._running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._loop, name="release-runner", daemon=True)
        self._thread.start()
        self._running = True
        logger.info("Release runner started (interval: %.1fs)", self._interval)

    def stop(self) -> None:
        """Stop the runner and wait for the current sweep to finish."""
        if not self._running:
            return

        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=5.0)
        self._running = False
        logger.info("Release runner stopped")

    def trigger_now(self) -> SweepOutput:
        """Run one sweep on the caller's thread."""
        return self._sweep()

    def run_forever(self) -> None:
        """Sweep immediately, then every interval until stop() is called."""
        self._run_once()
        self._loop()

    @property
    def is_running(self) -> bool:
        return self._running

    def _run_once(self) -> None:
        try:
            result = self._sweep()
            if result.released_count or result.errors:
                logger.info(
                    "Release sweep: %d released, %d failed",
                    result.released_count,
                    len(result.errors),
                )
        except Exception:
            logger.exception("Error in release sweep")

    def _loop(self) -> None:
        while not self._stop_event.wait(timeout=self._interval):
            self._run_once()
