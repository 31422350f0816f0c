"""
Asyncio scheduler adapter.

Implements SchedulerPort on an asyncio event loop. Deferred actions run on
the loop thread, so tracking stays single-threaded and cooperative.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)


class AsyncioScheduler:
    """Schedules actions with loop.call_later."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        """
        Initialize scheduler.

        Args:
            loop: Event loop to schedule on. Defaults to the running loop,
                  looked up on each call.
        """
        self._loop = loop

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is not None:
            return self._loop
        return asyncio.get_running_loop()

    def call_later(self, delay_seconds: float, action: Callable[[], None]) -> asyncio.TimerHandle:
        """Run action after delay_seconds; the returned handle can cancel it."""
        return self._get_loop().call_later(delay_seconds, self._run, action)

    @staticmethod
    def _run(action: Callable[[], None]) -> None:
        try:
            action()
        except Exception:
            logger.exception("Scheduled tracking action failed")
