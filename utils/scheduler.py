"""
Periodic scheduler driving one bot processor.

A scheduler owns a chain of one-shot timers: every tick schedules the next
tick before running its pass, so a slow or failing pass never breaks the
chain. ``stop()`` cancels the pending timer; a pass already running is
allowed to finish.
"""

import logging
import threading
from functools import partial
from typing import Callable, Optional

from utils.pass_result import PassResult
from utils.timers import TimerFactory, TimerHandle

logger = logging.getLogger(__name__)


class PeriodicScheduler:
    """
    Fire ``run_pass`` every ``interval_seconds`` until stopped.

    Usage:
        scheduler = PeriodicScheduler(
            "automation", processor.run_pass, 120, ThreadingTimerFactory()
        )
        scheduler.start()
        ...
        scheduler.stop()
    """

    def __init__(
        self,
        name: str,
        run_pass: Callable[[], PassResult],
        interval_seconds: float,
        timer_factory: TimerFactory,
        initial_delay_seconds: Optional[float] = None,
    ):
        """
        Initialize a stopped scheduler.

        Args:
            name: Scheduler name used in logs
            run_pass: Callable running one processing pass
            interval_seconds: Delay between ticks
            timer_factory: Builds the one-shot timers
            initial_delay_seconds: Delay before the first tick
                (defaults to interval_seconds)
        """
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be positive, got {interval_seconds}")

        self.name = name
        self.run_pass = run_pass
        self.interval_seconds = interval_seconds
        self.initial_delay_seconds = initial_delay_seconds
        self._timer_factory = timer_factory

        self._lock = threading.Lock()
        self._running = False
        # Bumped on every start and stop; ticks from an older chain are ignored
        self._generation = 0
        self._timer: Optional[TimerHandle] = None
        self.last_result: Optional[PassResult] = None

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self) -> bool:
        """
        Start ticking. Does nothing if already running.

        Returns:
            True if this call started the scheduler, False if it was running
        """
        with self._lock:
            if self._running:
                return False
            self._running = True
            self._generation += 1
            delay = (
                self.initial_delay_seconds
                if self.initial_delay_seconds is not None
                else self.interval_seconds
            )
            self._schedule(delay)

        logger.info(
            f"{self.name} scheduler started - processing every {self.interval_seconds}s"
        )
        return True

    def stop(self) -> bool:
        """
        Cancel the pending tick. Does nothing if already stopped.

        Returns:
            True if this call stopped the scheduler, False if it was stopped
        """
        with self._lock:
            if not self._running:
                return False
            self._running = False
            self._generation += 1
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

        logger.info(f"{self.name} scheduler stopped")
        return True

    def trigger(self) -> PassResult:
        """
        Run one pass synchronously, independent of the timer.

        Raises:
            ToolError: If the pass fails as a whole (e.g. the store is unavailable)
        """
        logger.info(f"{self.name}: manual workflow trigger initiated")
        result = self.run_pass()
        self.last_result = result
        return result

    def _schedule(self, delay: float) -> None:
        # Caller holds self._lock
        timer = self._timer_factory(delay, partial(self._tick, self._generation))
        self._timer = timer
        timer.start()

    def _tick(self, generation: int) -> None:
        with self._lock:
            if not self._running or generation != self._generation:
                return
            self._schedule(self.interval_seconds)

        try:
            self.last_result = self.run_pass()
        except Exception:
            # A failed pass waits for the next tick; the chain stays alive
            logger.exception(f"{self.name} pass failed")
