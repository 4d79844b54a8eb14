"""Observer registration for player state changes."""

import logging
import threading
from typing import Any, Callable, Dict, List

from quadplay.constants import Event

LOGGER = logging.getLogger(__name__)

Callback = Callable[[Any], None]


class EventBus:
    """Dispatches emitted events to subscribed callbacks.

    Callbacks run synchronously on the emitting thread, in subscription order.
    """

    def __init__(self):
        self._observers: Dict[Event, List[Callback]] = {}
        self._lock = threading.Lock()

    def subscribe(self, event: Event, callback: Callback) -> None:
        with self._lock:
            self._observers.setdefault(event, []).append(callback)

    def unsubscribe(self, event: Event, callback: Callback) -> None:
        with self._lock:
            callbacks = self._observers.get(event, [])
            if callback in callbacks:
                callbacks.remove(callback)

    def emit(self, event: Event, payload: Any = None) -> None:
        with self._lock:
            callbacks = list(self._observers.get(event, []))
        for cb in callbacks:
            try:
                cb(payload)
            except Exception:
                # A failing observer must not break the others
                LOGGER.exception("Observer for %s failed", event.value)
