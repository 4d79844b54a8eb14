"""Periodic polling of playback position."""

import logging
import threading
from typing import Callable, Optional

from quadplay.constants import POLL_INTERVAL

LOGGER = logging.getLogger(__name__)


class PositionPoller:
    """Calls `tick` every `interval` seconds on a background thread.

    The player does not push position updates, so elapsed time is read
    on this fixed cadence instead.
    """

    def __init__(self, tick: Callable[[], None], interval: float = POLL_INTERVAL):
        self.tick = tick
        self.interval = interval
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start polling, restarting if already running."""
        self.stop()
        self._stop = threading.Event()
        self._thread = threading.Thread(
            target=self._run, args=(self._stop,), name='position-poller', daemon=True
        )
        self._thread.start()

    def stop(self) -> None:
        # The thread exits on its next wakeup; no join, the tick may be
        # waiting on a lock the caller holds.
        self._stop.set()
        self._thread = None

    def _run(self, stop: threading.Event) -> None:
        while not stop.wait(self.interval):
            try:
                self.tick()
            except Exception as e:
                LOGGER.error("Position poll failed: %s", e)
