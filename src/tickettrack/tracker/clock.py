"""TickClock - Recurring background tick driving time accrual."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

logger = logging.getLogger(__name__)


class TickClock:
    """Calls ``callback`` every ``interval`` seconds on a daemon thread.

    ``stop()`` joins the thread, so once it returns no further tick runs.
    """

    def __init__(self, interval: float, callback: Callable[[], None]) -> None:
        self.interval = interval
        self.callback = callback
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start ticking. Starting a running clock is a no-op."""
        if self.is_running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="tickettrack-clock", daemon=True)
        self._thread.start()
        logger.debug("Tick clock started (interval=%ss)", self.interval)

    def stop(self, timeout: float | None = 5.0) -> None:
        """Stop ticking and wait for the thread to exit."""
        self._stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        self._thread = None
        logger.debug("Tick clock stopped")

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            try:
                self.callback()
            except Exception:
                logger.exception("Tick callback failed")
