"""Delayed callbacks with explicit cancellation."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Protocol

logger = logging.getLogger(__name__)


class ScheduledCall(Protocol):
    def cancel(self) -> None:
        raise NotImplementedError


class Scheduler(Protocol):
    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> ScheduledCall:
        raise NotImplementedError


class _TimerCall:
    def __init__(self, timer: threading.Timer):
        self._timer = timer

    def cancel(self) -> None:
        self._timer.cancel()


class ThreadingScheduler:
    """Runs each callback on a daemon ``threading.Timer``."""

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> ScheduledCall:
        def run() -> None:
            try:
                callback()
            except Exception:
                logger.exception("Scheduled callback failed")

        timer = threading.Timer(max(float(delay_seconds), 0.0), run)
        timer.daemon = True
        timer.start()
        return _TimerCall(timer)
