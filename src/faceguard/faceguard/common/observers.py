from __future__ import annotations

import threading
from typing import Callable, Generic, List, TypeVar

from ..logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

Listener = Callable[[T], None]


class Subscribers(Generic[T]):
    """Listener list for store change notifications."""

    def __init__(self):
        self._listeners: List[Listener] = []
        self._lock = threading.Lock()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def notify(self, snapshot: T) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            # A broken reader must not undo a mutation that is already persisted.
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Store listener %r failed", listener)
