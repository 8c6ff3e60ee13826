"""Change notification shared by the stateful core components."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from jobfinder.log import log_exception
from jobfinder.logging_config import get_logger


__all__ = ["Listener", "Observable"]

logger = get_logger(__name__)

Listener = Callable[[Any], None]


class Observable:
    """Keeps a list of listeners and calls them with the owner after each visible change."""

    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; the returned callable unregisters it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self) -> None:
        # Snapshot: listeners may unsubscribe while being called.
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                log_exception(logger, "observer.listener.error", source=type(self).__name__)
