"""Data models for the assistant module."""

from dataclasses import dataclass

__all__ = ["GeneratedScript", "Explanation"]


@dataclass
class GeneratedScript:
    """
    Result of a natural-language → script request.

    script_text   — the Python source, delimiters and fences removed
    prompt        — the user's description it was generated from
    model_id      — model that produced it
    prompt_tokens / output_tokens — usage reported by the backend
    raw_response  — unparsed LLM text, kept for debugging
    """
    script_text:   str
    prompt:        str
    model_id:      str = ""
    prompt_tokens: int = 0
    output_tokens: int = 0
    raw_response:  str = ""

    @property
    def line_count(self) -> int:
        return self.script_text.count("\n") + 1


@dataclass
class Explanation:
    """Result of an explain request (4-step debugging write-up)."""
    explanation_text: str
    model_id:         str = ""
    prompt_tokens:    int = 0
    output_tokens:    int = 0
