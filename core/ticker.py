"""Recurring tick source for the focus timer.

Runs as a single asyncio task on the caller's event loop, so every tick is
applied on the same thread as every other timer call. The task ends on its
own as soon as the timer stops, and stop() cancels it explicitly.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from core.timer import FocusTimer

logger = logging.getLogger(__name__)


class TimerDriver:
    def __init__(
        self,
        timer: FocusTimer,
        interval: float = 1.0,
        on_tick: Callable[[FocusTimer], None] | None = None,
    ) -> None:
        self.timer = timer
        self.interval = interval
        self.on_tick = on_tick
        self._task: asyncio.Task | None = None

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> bool:
        """Start the timer and its tick loop. Must be called from a running loop.

        Returns False if the timer could not start (nothing left to count).
        """
        if not self.timer.start():
            return False
        if not self.active:
            self._task = asyncio.get_running_loop().create_task(self._run())
        return True

    def pause(self) -> None:
        self.timer.pause()
        self.stop()

    def stop(self) -> None:
        """Tear down the tick loop without touching timer state."""
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _run(self) -> None:
        try:
            while self.timer.is_running:
                await asyncio.sleep(self.interval)
                if not self.timer.is_running:
                    break
                self.timer.tick()
                if self.on_tick is not None:
                    self.on_tick(self.timer)
        except asyncio.CancelledError:
            logger.debug("Timer tick loop cancelled")
            raise
        finally:
            if self._task is asyncio.current_task():
                self._task = None
