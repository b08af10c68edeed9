"""
Project-wide custom exception hierarchy.
All modules raise subclasses of CodeFlowBaseError — never bare Exception.
"""

__all__ = [
    "CodeFlowBaseError",
    "StoreError",
    "CorruptStoreError",
    "SimulationError",
    "AssistantError",
    "AssistantAPIError",
    "ScriptGenerationError",
    "ExplanationError",
]


class CodeFlowBaseError(Exception):
    """Root exception for all codeflow errors."""


# ── Store ─────────────────────────────────────────────────────────────────────

class StoreError(CodeFlowBaseError):
    """Raised on SQLite / store I/O errors."""


class CorruptStoreError(StoreError):
    """Raised when the persisted script collection cannot be deserialized."""


# ── Simulator ─────────────────────────────────────────────────────────────────

class SimulationError(CodeFlowBaseError):
    """Raised when a simulated run does not complete in time."""


# ── Assistant ─────────────────────────────────────────────────────────────────

class AssistantError(CodeFlowBaseError):
    """Base class for LLM-related errors."""


class AssistantAPIError(AssistantError):
    """Raised when the upstream LLM API call fails (network, auth, rate-limit)."""


class ScriptGenerationError(AssistantError):
    """Raised when the LLM response does not contain a usable script."""


class ExplanationError(AssistantError):
    """Raised when the LLM returns an empty explanation."""
