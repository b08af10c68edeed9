"""LLM-powered assistant — script generation and code/error explanation."""

from .llm_assistant import CodeAssistant, LLMConfig
from .models import Explanation, GeneratedScript

__all__ = [
    "CodeAssistant",
    "LLMConfig",
    "Explanation",
    "GeneratedScript",
]
