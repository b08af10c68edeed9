"""Execution simulator — staged fake console output for scripts, no interpreter."""

from .engine import ExecutionSimulator, simulate_output
from .models import ConsoleEvent, ConsoleLog, EventKind, RunState, SimulatorConfig, Tick
from .schedulers import ImmediateScheduler, ThreadingScheduler

__all__ = [
    "ExecutionSimulator",
    "simulate_output",
    "ConsoleEvent",
    "ConsoleLog",
    "EventKind",
    "RunState",
    "SimulatorConfig",
    "Tick",
    "ImmediateScheduler",
    "ThreadingScheduler",
]
