"""
Timer abstraction used by the periodic schedulers.

A ``TimerFactory`` turns ``(delay_seconds, callback)`` into a one-shot
``TimerHandle``. Production code uses daemon ``threading.Timer`` objects;
tests substitute a manually advanced fake.
"""

import threading
from typing import Callable, Protocol


class TimerHandle(Protocol):
    """One-shot timer that can be started and cancelled."""

    def start(self) -> None:
        ...

    def cancel(self) -> None:
        ...


class TimerFactory(Protocol):
    """Creates one-shot timers."""

    def __call__(self, delay_seconds: float, callback: Callable[[], None]) -> TimerHandle:
        ...


class ThreadingTimerFactory:
    """TimerFactory producing daemon ``threading.Timer`` instances."""

    def __call__(self, delay_seconds: float, callback: Callable[[], None]) -> TimerHandle:
        timer = threading.Timer(delay_seconds, callback)
        # Daemon so a pending tick never keeps the process alive on shutdown
        timer.daemon = True
        return timer
