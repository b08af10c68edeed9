"""Data models for the simulator module."""

from dataclasses import dataclass, field
from enum import Enum

__all__ = [
    "EventKind",
    "ConsoleEvent",
    "RunState",
    "Tick",
    "SimulatorConfig",
    "ConsoleLog",
]


class EventKind(str, Enum):
    INFO  = "info"
    ERROR = "error"


@dataclass(frozen=True)
class ConsoleEvent:
    """One terminal line (may span several physical lines, e.g. a traceback)."""
    kind: EventKind
    text: str

    @classmethod
    def info(cls, text: str) -> "ConsoleEvent":
        return cls(EventKind.INFO, text)

    @classmethod
    def error(cls, text: str) -> "ConsoleEvent":
        return cls(EventKind.ERROR, text)

    def __str__(self) -> str:
        return self.text


class RunState(str, Enum):
    """Simulator lifecycle: IDLE → BOOTSTRAP → OUTPUT → IDLE."""
    IDLE      = "idle"
    BOOTSTRAP = "bootstrap"
    OUTPUT    = "output"


@dataclass(frozen=True)
class Tick:
    """A batch of events emitted *delay* seconds after the previous tick."""
    delay:  float
    events: tuple[ConsoleEvent, ...]


_BOOTSTRAP_MESSAGES = (
    "🔍 Scanning for virtual environment...",
    "✅ Found .venv (Python 3.11.5)",
    "🚀 Initializing Python Hub Engine...",
)


@dataclass
class SimulatorConfig:
    """Runtime configuration for ExecutionSimulator."""
    tick_delay:         float           = 0.2     # seconds between ticks
    interpreter:        str             = "python3"
    bootstrap_messages: tuple[str, ...] = field(default=_BOOTSTRAP_MESSAGES)


class ConsoleLog:
    """
    Caller-held terminal buffer.

    Append-only while a run is in progress; emptied only by clear().
    """

    def __init__(self) -> None:
        self._events: list[ConsoleEvent] = []

    def append(self, event: ConsoleEvent) -> None:
        self._events.append(event)

    def extend(self, events) -> None:
        self._events.extend(events)

    def clear(self) -> None:
        self._events.clear()

    @property
    def events(self) -> list[ConsoleEvent]:
        """Snapshot of the events collected so far."""
        return list(self._events)

    def as_text(self) -> str:
        """All event texts joined by newlines (the "copy console" payload)."""
        return "\n".join(e.text for e in self._events)

    def __len__(self) -> int:
        return len(self._events)
