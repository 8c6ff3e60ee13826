"""Quiet-period debouncing on top of the running event loop."""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

from jobfinder.log import log_debug
from jobfinder.logging_config import get_logger


__all__ = ["Debouncer"]

logger = get_logger(__name__)

T = TypeVar("T")

_MISSING = object()


class Debouncer(Generic[T]):
    """Coalesce rapid input changes into a single emission after a quiet period.

    Every :meth:`push` restarts the timer, so only the last value of a burst
    reaches ``on_emit``. A non-positive delay makes :meth:`push` emit
    synchronously. After :meth:`dispose` nothing is ever emitted again.

    ``on_emit`` may be a coroutine function; its coroutine is scheduled as a task
    and can be awaited through :meth:`drain`.
    """

    def __init__(
        self,
        delay_s: float,
        on_emit: Callable[[T], Awaitable[None] | None],
        *,
        name: str = "debounce",
    ) -> None:
        self._delay_s = delay_s
        self._on_emit = on_emit
        self._name = name
        self._handle: asyncio.TimerHandle | None = None
        self._pending: object = _MISSING
        self._value: object = _MISSING
        self._tasks: set[asyncio.Task[None]] = set()
        self._disposed = False

    @property
    def delay_s(self) -> float:
        return self._delay_s

    @property
    def pending(self) -> bool:
        return self._pending is not _MISSING

    @property
    def value(self) -> T | None:
        """Last emitted value, or None before the first emission."""
        return None if self._value is _MISSING else self._value  # type: ignore[return-value]

    @property
    def disposed(self) -> bool:
        return self._disposed

    def push(self, value: T) -> None:
        if self._disposed:
            log_debug(logger, f"{self._name}.push.ignored", reason="disposed")
            return

        self._cancel_timer()
        self._pending = value
        if self._delay_s <= 0:
            self._fire()
            return

        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self._delay_s, self._fire)

    def flush(self) -> None:
        """Emit the pending value now instead of waiting for the quiet period."""
        if self._disposed or not self.pending:
            return
        self._cancel_timer()
        self._fire()

    def cancel(self) -> None:
        """Drop the pending value without emitting it."""
        self._cancel_timer()
        self._pending = _MISSING

    def dispose(self) -> None:
        self.cancel()
        self._disposed = True

    async def drain(self) -> None:
        """Wait for emitted coroutine callbacks that are still running."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _cancel_timer(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        if self._disposed or self._pending is _MISSING:
            return
        value = self._pending
        self._pending = _MISSING
        self._value = value
        log_debug(logger, f"{self._name}.emit", delay_s=self._delay_s)

        result = self._on_emit(value)  # type: ignore[arg-type]
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
