"""Data models for the store module."""

import time
from dataclasses import dataclass

__all__ = ["Script", "normalize_name", "now_ms"]

_SUFFIX = ".py"


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def normalize_name(name: str) -> str:
    """Append the ``.py`` suffix to *name* unless it already ends with it."""
    return name if name.endswith(_SUFFIX) else f"{name}{_SUFFIX}"


@dataclass
class Script:
    """
    One editable Python script.

    Fields
    ──────
    id          — opaque unique identifier, never changes after creation
    name        — display name, always ends in ".py"
    content     — raw source text
    updated_at  — epoch milliseconds of the last content change
    """
    id:         str
    name:       str
    content:    str
    updated_at: int

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "content": self.content,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Script":
        """Build a Script from its serialized form; raises KeyError/TypeError on bad input."""
        fields = {key: data[key] for key in ("id", "name", "content")}
        for key, value in fields.items():
            if not isinstance(value, str):
                raise TypeError(f"{key!r} must be a string, got {type(value).__name__}")
        updated_at = data["updatedAt"]
        # bool is an int subclass
        if isinstance(updated_at, bool) or not isinstance(updated_at, (int, float)):
            raise TypeError(f"'updatedAt' must be a number, got {type(updated_at).__name__}")
        if isinstance(updated_at, float) and not updated_at.is_integer():
            raise TypeError(f"'updatedAt' must be whole milliseconds, got {updated_at!r}")
        return cls(updated_at=int(updated_at), **fields)

    def __str__(self) -> str:
        return f"Script(id={self.id!r}, name={self.name!r}, lines={self.content.count(chr(10)) + 1})"
