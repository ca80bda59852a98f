"""
Single-shot auto-logout countdown for customer sessions.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)


class TimerState(str, enum.Enum):
    IDLE = "idle"
    ARMED = "armed"


class AutoLogoutTimer:
    """Owns at most one pending ``asyncio.TimerHandle``.

    ``arm`` always cancels the previous handle first, so only the most
    recent arm can ever fire.
    """

    def __init__(self, timeout_seconds: float = 600.0):
        self.timeout_seconds = timeout_seconds
        self._handle: asyncio.TimerHandle | None = None

    @property
    def state(self) -> TimerState:
        return TimerState.ARMED if self._handle is not None else TimerState.IDLE

    def arm(self, callback: Callable[[], None]) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.timeout_seconds, self._fire, callback)
        logger.debug("Auto-logout armed for %.0fs", self.timeout_seconds)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, callback: Callable[[], None]) -> None:
        self._handle = None
        logger.info("Auto-logout timer expired")
        callback()
