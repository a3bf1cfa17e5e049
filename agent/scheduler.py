"""Resumable, cancelable refresh loop driving fetch-and-process cycles."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Set

LOGGER = logging.getLogger(__name__)

Cycle = Callable[[], Awaitable[None]]
Sleeper = Callable[[float], Awaitable[None]]


class PollScheduler:
    """Periodic timer that spawns one cycle task per tick.

    The timer is an asyncio task sleeping for ``interval`` between ticks. Each
    tick spawns the cycle as its own task, so cancelling the timer (pause,
    reset) never cancels a fetch that is already in flight, and overlapping
    cycles may complete in any order.
    """

    def __init__(
        self,
        cycle: Cycle,
        interval: float = 5.0,
        enabled: bool = True,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._cycle = cycle
        self._interval = interval
        self._enabled = enabled
        self._sleep = sleep
        self._timer: Optional[asyncio.Task] = None
        self._inflight: Set[asyncio.Task] = set()

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def armed(self) -> bool:
        return self._timer is not None

    @property
    def interval(self) -> float:
        return self._interval

    def start(self, immediate: bool = True) -> None:
        """Process start: one immediate cycle, then the periodic timer."""

        if immediate:
            self.manual_trigger()
        self.reset()

    def toggle(self) -> bool:
        """Flip auto-refresh and return the new enabled state."""

        self._enabled = not self._enabled
        if self._enabled:
            self.reset()
        else:
            self._cancel_timer()
        LOGGER.info("Auto-refresh %s", "enabled" if self._enabled else "paused")
        return self._enabled

    def reset(self) -> None:
        """Cancel any armed timer and, when enabled, arm a fresh one."""

        self._cancel_timer()
        if self._enabled:
            self._timer = asyncio.get_running_loop().create_task(self._run_timer(), name="poll_timer")

    def manual_trigger(self) -> asyncio.Task:
        """Run one cycle now without touching the timer."""

        return self._spawn_cycle()

    def stop(self) -> None:
        self._cancel_timer()

    async def wait_idle(self) -> None:
        """Wait until every spawned cycle has finished."""

        while self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def _run_timer(self) -> None:
        while True:
            await self._sleep(self._interval)
            self._spawn_cycle()

    def _spawn_cycle(self) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(self._guarded_cycle(), name="poll_cycle")
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        return task

    async def _guarded_cycle(self) -> None:
        try:
            await self._cycle()
        except asyncio.CancelledError:  # pragma: no cover - runtime cancellation
            raise
        except Exception as exc:
            LOGGER.exception("Refresh cycle failed: %s", exc)


__all__ = ["PollScheduler"]
