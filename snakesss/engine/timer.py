"""The discussion countdown."""

import asyncio
import logging
from typing import Callable, Optional

from ..events import GameEvents

logger = logging.getLogger(__name__)


class DiscussionCountdown:
    """A cancellable once-per-second countdown.

    Time advances either through ``tick()`` (driver-owned clock) or through
    ``run()`` / ``start()`` on an asyncio loop. Once cancelled, the countdown
    never touches state or fires callbacks again.
    """

    WARNING_AT = 30
    FINAL_SECONDS = 10

    def __init__(
        self,
        duration: int,
        on_expire: Callable[[], None],
        events: Optional[GameEvents] = None,
        tick_seconds: float = 1.0,
    ):
        """Initialize the countdown.

        Args:
            duration: Starting number of seconds.
            on_expire: Called once when the countdown reaches zero.
            events: Receives warning/tick/finished notifications.
            tick_seconds: Wall-clock length of one countdown second in ``run()``.
        """
        self.duration = duration
        self.remaining = duration
        self.on_expire = on_expire
        self.events = events or GameEvents()
        self.tick_seconds = tick_seconds
        self.cancelled = False
        self.finished = False
        self._task: Optional[asyncio.Task] = None

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.finished)

    def tick(self) -> None:
        """Advance by one second, firing checkpoints and expiry."""
        if not self.active:
            return
        if self.remaining > 0:
            self.remaining -= 1
            if self.remaining == self.WARNING_AT:
                self.events.timer_warning(self.remaining)
            elif 0 < self.remaining <= self.FINAL_SECONDS:
                self.events.timer_tick(self.remaining)
        if self.remaining <= 0:
            self._finish()

    def _finish(self) -> None:
        self.finished = True
        logger.debug("Discussion countdown finished")
        self.events.timer_finished()
        self.on_expire()

    async def run(self) -> None:
        """Count down on the running event loop until zero or cancelled."""
        while self.active and self.remaining > 0:
            await asyncio.sleep(self.tick_seconds)
            if self.cancelled:
                return
            self.tick()
        if self.active:
            self._finish()

    def start(self) -> asyncio.Task:
        """Schedule ``run()`` on the running loop.

        Raises:
            RuntimeError: If no event loop is running.
        """
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self.run())
        self._task.add_done_callback(_log_task_error)
        return self._task

    def cancel(self) -> None:
        self.cancelled = True
        if self._task is not None and not self._task.done():
            if self._task is not _current_task():
                self._task.cancel()
        self._task = None


def _log_task_error(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Discussion countdown failed", exc_info=exc)


def _current_task() -> Optional[asyncio.Task]:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None
