"""Passive status polling.

Runs the panel's ``poll_status`` on a fixed interval until stopped. Poll failures
are handled (and logged) by the panel itself, so the loop only has to keep time.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Any, Awaitable, Callable, Optional

LOGGER = logging.getLogger(__name__)


class RefreshPoller:
    """Calls ``refresh`` every ``interval_seconds`` on its own task."""

    def __init__(
        self,
        *,
        refresh: Callable[[], Awaitable[Any]],
        interval_seconds: float,
        stop_event: Optional[asyncio.Event] = None,
        initial_delay_seconds: Optional[float] = None,
    ) -> None:
        """Initialize the poller.

        Args:
            refresh: Async function performing one refresh
            interval_seconds: Seconds between refreshes (clamped to at least 0.1)
            stop_event: Event signaling shutdown; a private one is used when omitted
            initial_delay_seconds: Wait before the first poll (defaults to one interval,
                since startup already performs a refresh)
        """
        self._refresh = refresh
        self._interval = max(interval_seconds, 0.1)
        self._initial_delay = (
            self._interval if initial_delay_seconds is None else max(initial_delay_seconds, 0.0)
        )
        self._stop_event = stop_event or asyncio.Event()
        self._task: Optional[asyncio.Task[None]] = None
        self.polls = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self._task is not None:
            return
        LOGGER.debug("Status polling every %.1fs", self._interval)
        self._task = asyncio.create_task(self._poll_loop())

    async def stop(self) -> None:
        if self._task is None:
            return

        self._stop_event.set()
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None

    async def _wait(self, delay: float) -> bool:
        """Sleep for ``delay``; return True if the stop event fired instead."""
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=delay)
            return True
        except asyncio.TimeoutError:
            return False

    async def _poll_loop(self) -> None:
        if self._initial_delay and await self._wait(self._initial_delay):
            return

        while not self._stop_event.is_set():
            self.polls += 1
            try:
                await self._refresh()
            except asyncio.CancelledError:
                raise
            except Exception:
                LOGGER.exception("Status poll failed")

            if await self._wait(self._interval):
                break
