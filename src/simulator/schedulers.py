"""
Schedulers drive the simulator's tick continuations.

    ImmediateScheduler  — synchronous replay, no waiting (tests, batch use)
    ThreadingScheduler  — real delays on threading.Timer (CLI)

The Qt front end provides its own QTimer-based scheduler (src.gui.main_window).
"""

import logging
import threading
from collections import deque
from typing import Callable, Protocol

__all__ = ["Scheduler", "ImmediateScheduler", "ThreadingScheduler"]

logger = logging.getLogger(__name__)


class Scheduler(Protocol):
    def schedule(self, delay: float, callback: Callable[[], None]) -> None: ...


class ImmediateScheduler:
    """
    Runs callbacks right away, in order, ignoring delays.

    Callbacks scheduled from inside a running callback are queued and drained
    by the outermost call, so replaying a long plan never recurses.
    ``elapsed`` accumulates the delays that would have been waited.
    """

    def __init__(self) -> None:
        self._queue: deque[Callable[[], None]] = deque()
        self._draining = False
        self.elapsed = 0.0

    def schedule(self, delay: float, callback: Callable[[], None]) -> None:
        self.elapsed += delay
        self._queue.append(callback)
        if self._draining:
            return
        self._draining = True
        try:
            while self._queue:
                self._queue.popleft()()
        finally:
            self._draining = False


class ThreadingScheduler:
    """Fires each callback on a daemon threading.Timer after *delay* seconds."""

    def schedule(self, delay: float, callback: Callable[[], None]) -> None:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        logger.debug("Scheduled tick in %.3f s", delay)
