"""
ExecutionSimulator — fake "python3 <script>" runs for the terminal pane.

A run is a finite plan of ticks:

    tick 0  (immediate)    > python3 main.py
    tick 1..n  (+delay)    one bootstrap narration line each
    tick n+1   (+delay)    script output, then mock-error tracebacks

The plan is consumed by a single-flight step function through an injected
Scheduler.  Events go straight to the caller's sink; the simulator keeps
no console buffer of its own.

Usage::

    log = ConsoleLog()
    sim = ExecutionSimulator(ThreadingScheduler())
    sim.run(script, log.append, on_finished=done.set)
"""

import logging
import threading
from typing import Callable, Optional

from .extractor import EMPTY_SCRIPT, EXIT_OK, detect_mock_errors, extract_output_lines
from .models import ConsoleEvent, RunState, SimulatorConfig, Tick
from .schedulers import ImmediateScheduler, Scheduler

__all__ = ["ExecutionSimulator", "simulate_output"]

logger = logging.getLogger(__name__)

EventSink = Callable[[ConsoleEvent], None]


def simulate_output(source: str, script_name: str) -> list[ConsoleEvent]:
    """Events for the output phase: printed lines (or a placeholder), then errors."""
    events = [ConsoleEvent.info(line) for line in extract_output_lines(source)]
    if not events:
        events.append(ConsoleEvent.info(EMPTY_SCRIPT if not source.strip() else EXIT_OK))
    events.extend(ConsoleEvent.error(tb) for tb in detect_mock_errors(source, script_name))
    return events


class ExecutionSimulator:
    """
    Turns a script snapshot into a staged console event stream.

    Parameters
    ----------
    scheduler : Scheduler (or None → ImmediateScheduler)
    config    : SimulatorConfig (or None → defaults)
    """

    def __init__(
        self,
        scheduler: Optional[Scheduler] = None,
        config: Optional[SimulatorConfig] = None,
    ) -> None:
        self._scheduler = scheduler or ImmediateScheduler()
        self._config = config or SimulatorConfig()
        self._state = RunState.IDLE
        self._lock = threading.Lock()

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is not RunState.IDLE

    def plan(self, script) -> list[Tick]:
        """Build the full tick plan for *script* (anything with .name and .content)."""
        delay = self._config.tick_delay
        ticks = [Tick(0.0, (ConsoleEvent.info(f"> {self._config.interpreter} {script.name}"),))]
        ticks.extend(
            Tick(delay, (ConsoleEvent.info(msg),)) for msg in self._config.bootstrap_messages
        )
        ticks.append(Tick(delay, tuple(simulate_output(script.content, script.name))))
        return ticks

    def replay(self, script) -> list[ConsoleEvent]:
        """Every event a run of *script* would emit, without waiting or state changes."""
        return [event for tick in self.plan(script) for event in tick.events]

    def run(
        self,
        script,
        sink: EventSink,
        on_finished: Optional[Callable[[], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
    ) -> bool:
        """
        Start a simulated run of *script*, delivering events to *sink*.

        If *sink* raises, the run is abandoned and *on_finished* still fires.
        The exception goes to *on_error* when given, otherwise it propagates
        from whichever call delivered the tick.

        Returns:
            True if the run started, False if another run is still in progress.
        """
        with self._lock:
            if self._state is not RunState.IDLE:
                logger.warning("Run of %s ignored: simulator is %s", script.name, self._state.value)
                return False
            self._state = RunState.BOOTSTRAP

        ticks = self.plan(script)
        logger.info("Simulating %s (%d ticks)", script.name, len(ticks))
        self._step(ticks, 0, sink, on_finished, on_error)
        return True

    # ── Internal helpers ──────────────────────────────────────────────────

    def _step(
        self,
        ticks: list[Tick],
        index: int,
        sink: EventSink,
        on_finished: Optional[Callable[[], None]],
        on_error: Optional[Callable[[Exception], None]],
    ) -> None:
        last = index == len(ticks) - 1
        try:
            if last:
                self._state = RunState.OUTPUT
            for event in ticks[index].events:
                sink(event)
        except Exception as exc:
            self._finish()
            logger.warning("Simulation aborted at tick %d: %r", index, exc)
            if on_error is not None:
                on_error(exc)
            if on_finished is not None:
                on_finished()
            if on_error is None:
                raise
            return

        if not last:
            nxt = index + 1
            self._scheduler.schedule(
                ticks[nxt].delay,
                lambda: self._step(ticks, nxt, sink, on_finished, on_error),
            )
            return

        self._finish()
        logger.info("Simulation finished")
        if on_finished is not None:
            on_finished()

    def _finish(self) -> None:
        with self._lock:
            self._state = RunState.IDLE
