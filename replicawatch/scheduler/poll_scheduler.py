"""Fixed-interval poll scheduler.

Runs one collection cycle at a time, hands each sweep result to a reporter,
then waits the configured interval. The wait is interruptible through
``stop()``; a fatal error halts the scheduler and is re-raised.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import signal
import time
from collections.abc import Callable
from contextlib import suppress
from typing import Any

from replicawatch.constants.enums import SchedulerState
from replicawatch.constants.timeouts import POLL_INTERVAL_SECONDS
from replicawatch.controllers.base import BaseController
from replicawatch.errors import FatalError
from replicawatch.models.core.snapshot_info import SweepResult
from replicawatch.models.state.app_settings import WatchSettings

logger = logging.getLogger(__name__)

Reporter = Callable[[SweepResult], Any]


class PollScheduler:
    """Drives collection cycles on a fixed interval.

    State transitions:
    - IDLE -> RUNNING once the controller connection check passes
    - RUNNING -> HALTED on any FatalError (connection or namespace listing)
    - RUNNING -> STOPPED when ``stop()`` is called or ``max_cycles`` is reached
    """

    def __init__(
        self,
        controller: BaseController,
        reporter: Reporter,
        interval_seconds: float = POLL_INTERVAL_SECONDS,
        max_cycles: int | None = None,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        if max_cycles is not None and max_cycles < 1:
            raise ValueError("max_cycles must be at least 1")

        self._controller = controller
        self._reporter = reporter
        self._interval = interval_seconds
        self._max_cycles = max_cycles
        self._stop_event = asyncio.Event()

        self.state = SchedulerState.IDLE
        self.cycles_completed = 0
        self.last_error: FatalError | None = None
        self.last_cycle_started_at: float | None = None

    @classmethod
    def from_settings(
        cls,
        settings: WatchSettings,
        controller: BaseController,
        reporter: Reporter,
    ) -> PollScheduler:
        return cls(
            controller,
            reporter,
            interval_seconds=settings.poll_interval_seconds,
            max_cycles=settings.max_cycles,
        )

    @property
    def interval_seconds(self) -> float:
        return self._interval

    @property
    def stop_requested(self) -> bool:
        return self._stop_event.is_set()

    def stop(self) -> None:
        """Request a graceful stop; interrupts the inter-cycle wait."""
        if not self._stop_event.is_set():
            logger.info("Stop requested")
        self._stop_event.set()

    def install_signal_handlers(
        self,
        loop: asyncio.AbstractEventLoop | None = None,
        signals: tuple[signal.Signals, ...] = (signal.SIGINT, signal.SIGTERM),
    ) -> None:
        """Route termination signals to ``stop()`` where the loop supports it."""
        loop = loop or asyncio.get_running_loop()
        for sig in signals:
            with suppress(NotImplementedError, RuntimeError, ValueError):
                loop.add_signal_handler(sig, self.stop)

    async def _report(self, result: SweepResult) -> None:
        report_result = self._reporter(result)
        if inspect.isawaitable(report_result):
            await report_result

    async def _wait_interval(self) -> bool:
        """Wait one interval. Returns True if a stop was requested meanwhile."""
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=self._interval)
        except asyncio.TimeoutError:
            return False
        return True

    async def run(self) -> SchedulerState:
        """Run cycles until stopped, the cycle bound is reached, or a fatal error.

        Returns:
            The terminal state (STOPPED).

        Raises:
            FatalError: After moving to HALTED.
        """
        try:
            await self._controller.check_connection()
            self.state = SchedulerState.RUNNING
            logger.debug("Scheduler running, interval %.1fs", self._interval)

            cycle = 0
            while not self._stop_event.is_set():
                cycle += 1
                self.last_cycle_started_at = time.monotonic()
                result = await self._controller.collect(cycle=cycle)
                await self._report(result)
                self.cycles_completed = cycle

                if self._max_cycles is not None and cycle >= self._max_cycles:
                    logger.debug("Reached %d cycles", self._max_cycles)
                    break
                if await self._wait_interval():
                    break
        except FatalError as exc:
            self.state = SchedulerState.HALTED
            self.last_error = exc
            logger.error("Scheduler halted: %s", exc)
            raise
        except asyncio.CancelledError:
            self.state = SchedulerState.STOPPED
            raise

        self.state = SchedulerState.STOPPED
        return self.state
