"""
GUI ViewModels — pure-Python observable state containers.

No Qt imports here; every class is testable without a display.
Qt widgets observe these objects and update themselves in response to state
changes.  (Signal emission is handled by the Qt layer, not here.)

Public API
──────────
ScriptListViewModel   — script list + active script, backed by ScriptStore
ConsoleViewModel      — terminal log + running flag
AssistantState        — enum for AI request lifecycle
AssistantViewModel    — manages one in-flight AI request + its result
"""

import logging
from enum import Enum
from typing import Optional

from src.simulator.models import ConsoleEvent, ConsoleLog
from src.store.db import ScriptStore
from src.store.models import Script

__all__ = [
    "ScriptListViewModel",
    "ConsoleViewModel",
    "AssistantState",
    "AssistantViewModel",
]

logger = logging.getLogger(__name__)


# ── ScriptListViewModel ────────────────────────────────────────────────────────

class ScriptListViewModel:
    """
    Sidebar / tab state.

    Attributes
    ──────────
    scripts       — latest snapshot from the store
    active_id     — id of the script shown in the editor, or None
    active_script — derived: the Script whose id is active_id
    """

    def __init__(self, store: ScriptStore) -> None:
        self._store = store
        self.scripts:   list[Script]   = []
        self.active_id: Optional[str]  = None
        self.refresh()

    def refresh(self) -> None:
        """Reload from the store; activate the first script if none is active."""
        self.scripts = self._store.list_scripts()
        if self.active_id not in {s.id for s in self.scripts}:
            self.active_id = self.scripts[0].id if self.scripts else None

    @property
    def active_script(self) -> Optional[Script]:
        return next((s for s in self.scripts if s.id == self.active_id), None)

    def select(self, script_id: str) -> None:
        self.active_id = script_id

    def create(self, name: str, content: str = "") -> Script:
        """Add a script (optionally with AI-generated *content*) and activate it."""
        script = self._store.add(name, content)
        self.active_id = script.id
        self.refresh()
        return script

    def update_active(self, content: str) -> None:
        """Persist editor *content* into the active script."""
        if self.active_id is None:
            return
        self._store.update_content(self.active_id, content)
        self.refresh()

    def delete(self, script_id: str) -> None:
        """Delete *script_id*; if it was active, fall back to the first script."""
        self._store.delete(script_id)
        if self.active_id == script_id:
            self.active_id = None
        self.refresh()


# ── ConsoleViewModel ───────────────────────────────────────────────────────────

class ConsoleViewModel:
    """
    Terminal pane state.

    Attributes
    ──────────
    log        — ConsoleLog collecting events across runs
    is_running — True between begin_run() and finish_run()
    """

    def __init__(self) -> None:
        self.log = ConsoleLog()
        self.is_running = False

    def begin_run(self) -> None:
        self.is_running = True

    def append(self, event: ConsoleEvent) -> None:
        self.log.append(event)

    def finish_run(self) -> None:
        self.is_running = False

    def clear(self) -> bool:
        """Empty the log. Refused (returns False) while a run is in progress."""
        if self.is_running:
            return False
        self.log.clear()
        return True

    def copy_text(self) -> str:
        return self.log.as_text()


# ── AssistantViewModel ─────────────────────────────────────────────────────────

class AssistantState(str, Enum):
    IDLE    = "idle"
    RUNNING = "running"
    DONE    = "done"
    ERROR   = "error"


class AssistantViewModel:
    """
    Tracks a single generate / explain request.

    Attributes
    ──────────
    state   — AssistantState
    result  — last successful result (GeneratedScript or Explanation)
    message — last error message, empty if none
    busy    — derived: True while a request is in flight
    """

    def __init__(self) -> None:
        self.state:   AssistantState = AssistantState.IDLE
        self.result                  = None
        self.message: str            = ""

    @property
    def busy(self) -> bool:
        return self.state is AssistantState.RUNNING

    def start(self) -> bool:
        """Transition to RUNNING. Returns False if a request is already running."""
        if self.busy:
            return False
        self.state = AssistantState.RUNNING
        self.result = None
        self.message = ""
        return True

    def finish(self, result) -> None:
        """Transition to DONE with *result*."""
        self.state = AssistantState.DONE
        self.result = result

    def error(self, message: str) -> None:
        """Transition to ERROR; controls are re-armed since busy is False again."""
        self.state = AssistantState.ERROR
        self.message = message
        logger.warning("Assistant request failed: %s", message)
