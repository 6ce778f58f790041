"""Deferred callbacks and debouncing for the navigator."""

from __future__ import annotations

import asyncio
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc


class Scheduler(typ.Protocol):
    """Schedule and cancel delayed callbacks."""

    def call_later(self, delay: float, callback: cabc.Callable[[], None]) -> object:
        """Run ``callback`` after ``delay`` seconds and return a handle."""
        ...

    def cancel(self, handle: object) -> None:
        """Cancel a handle returned by :meth:`call_later`."""
        ...


class AsyncioScheduler:
    """Scheduler backed by an asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(
        self, delay: float, callback: cabc.Callable[[], None]
    ) -> asyncio.TimerHandle:
        return self.loop.call_later(delay, callback)

    def cancel(self, handle: object) -> None:
        if isinstance(handle, asyncio.TimerHandle):
            handle.cancel()


class Debouncer:
    """Collapse bursts of triggers into one deferred callback.

    Each :meth:`trigger` cancels the pending call and schedules a new one, so
    the callback runs once, ``delay`` seconds after the last trigger.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        delay: float,
        callback: cabc.Callable[[], None],
    ) -> None:
        self._scheduler = scheduler
        self._delay = delay
        self._callback = callback
        self._handle: object | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self) -> None:
        self.cancel()
        self._handle = self._scheduler.call_later(self._delay, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._scheduler.cancel(self._handle)
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        self._callback()


__all__ = ["AsyncioScheduler", "Debouncer", "Scheduler"]
