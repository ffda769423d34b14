"""Debounced local autosave."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Protocol

_LOGGER = logging.getLogger(__name__)

IDLE = "idle"
PENDING = "pending"


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


CallLater = Callable[[float, Callable[[], None]], TimerHandle]


def _loop_call_later(delay: float, callback: Callable[[], None]) -> TimerHandle:
    return asyncio.get_running_loop().call_later(delay, callback)


class AutosaveScheduler:
    """Run ``save`` once after ``delay`` seconds without further mutations.

    The scheduler is either idle or has a save pending with a deadline.
    Every :meth:`touch` while enabled pushes the deadline back, so a burst of
    edits collapses into a single save. Timers come from ``call_later``,
    which defaults to the running asyncio loop; without one, touches are
    logged and the scheduler stays idle.
    """

    def __init__(
        self,
        save: Callable[[], object],
        delay: float = 1.0,
        *,
        enabled: bool = True,
        call_later: CallLater | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._save = save
        self.delay = delay
        self._enabled = enabled
        self._call_later = call_later or _loop_call_later
        self._clock = clock
        self._handle: TimerHandle | None = None
        self.deadline: float | None = None

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def state(self) -> str:
        return PENDING if self._handle is not None else IDLE

    def set_enabled(self, enabled: bool) -> None:
        """Toggle autosave; disabling drops a pending save without running it."""

        self._enabled = enabled
        if not enabled:
            self.cancel()

    def touch(self) -> None:
        """Record a mutation, arming or re-arming the timer."""

        if not self._enabled:
            return
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
        try:
            handle = self._call_later(self.delay, self._fire)
        except RuntimeError:
            # No running event loop to host the timer.
            _LOGGER.warning("Autosave not scheduled: no running event loop")
            self.deadline = None
            return
        self.deadline = self._clock() + self.delay
        self._handle = handle

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            _LOGGER.debug("Cancelled pending autosave")
        self._handle = None
        self.deadline = None

    def _fire(self) -> None:
        self._handle = None
        self.deadline = None
        if not self._enabled:
            return
        try:
            self._save()
        except Exception:
            _LOGGER.exception("Autosave failed")


__all__ = ["AutosaveScheduler", "IDLE", "PENDING"]
