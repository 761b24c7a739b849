"""Restartable scheduled callbacks on the running event loop."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

logger = logging.getLogger("parley.timers")


class ScheduledCallback:
    """One-shot timer that can be restarted or cancelled at any time.

    Every countdown in the engine (utterance closure silence, settle delay
    before analysis) goes through this class so there is a single place
    where pending handles live.  Restarting replaces the pending handle;
    the callback runs at most once per ``start()``.

    Must be started from code running on the event loop.
    """

    def __init__(
        self,
        callback: Callable[[], object],
        delay_ms: float,
        *,
        name: str = "",
    ) -> None:
        self._callback = callback
        self._delay_ms = delay_ms
        self._name = name or getattr(callback, "__name__", "callback")
        self._handle: asyncio.TimerHandle | None = None

    @property
    def name(self) -> str:
        return self._name

    @property
    def delay_ms(self) -> float:
        return self._delay_ms

    @property
    def pending(self) -> bool:
        """True while a countdown is armed and has not fired."""
        return self._handle is not None

    def start(self, delay_ms: float | None = None) -> None:
        """(Re)arm the countdown, replacing any pending one."""
        self.cancel()
        delay = self._delay_ms if delay_ms is None else delay_ms
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(max(delay, 0.0) / 1000.0, self._fire)

    def cancel(self) -> bool:
        """Cancel the pending countdown. Returns True if one was pending."""
        if self._handle is None:
            return False
        self._handle.cancel()
        self._handle = None
        return True

    def _fire(self) -> None:
        self._handle = None
        try:
            self._callback()
        except Exception:
            logger.exception("Error in scheduled callback %s", self._name)
