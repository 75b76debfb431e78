"""Cancellable repeating timer on the asyncio loop (the setInterval analogue)."""

import asyncio
from typing import Callable, Optional

from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="dashboard/timers")


class RepeatingTimer:
    """
    Invoke `callback` every `interval` seconds until cancelled.

    Ticks are scheduled at a fixed rate with `loop.call_later`; the callback is
    synchronous and should hand long work off to a task. A cancelled timer
    cannot be restarted.
    """

    def __init__(self, interval: float, callback: Callable[[], None], *, name: str = "timer") -> None:
        if interval <= 0:
            raise ValueError("interval must be greater than zero")
        self.interval = interval
        self.callback = callback
        self.name = name
        self.ticks = 0
        self._handle: Optional[asyncio.TimerHandle] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._cancelled = False

    @property
    def active(self) -> bool:
        return self._handle is not None

    def start(self) -> "RepeatingTimer":
        """Schedule the first tick; must be called from inside a running loop."""
        if self._cancelled:
            raise RuntimeError(f"{self.name} was cancelled and cannot be restarted")
        if self._handle is not None:
            return self
        self._loop = asyncio.get_running_loop()
        self._schedule()
        logger.debug(f"{self.name} started, every {self.interval}s")
        return self

    def _schedule(self) -> None:
        self._handle = self._loop.call_later(self.interval, self._fire)

    def _fire(self) -> None:
        # reschedule first so a failing callback does not stop the timer
        self._schedule()
        self.ticks += 1
        try:
            self.callback()
        except Exception:
            logger.exception(f"{self.name} callback failed")

    def cancel(self) -> None:
        """Stop future ticks. Idempotent."""
        self._cancelled = True
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
            logger.debug(f"{self.name} cancelled after {self.ticks} tick(s)")
