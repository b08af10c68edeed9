"""
CodeAssistant — LLM-backed script generation and code/error explanation.

Supported backends (selected via LLMConfig.backend):
  • "anthropic"  — Claude models via anthropic SDK
  • "openai"     — GPT models via openai SDK
  • "stub"       — deterministic no-network stub for unit testing

Each call is single-request / single-response.  By default there is one
attempt; raise LLMConfig.max_attempts to retry with exponential back-off.
Response parsing: extracts the [SCRIPT_BEGIN]...[SCRIPT_END] block (or a
fenced ```python block as a fallback) from generation responses.
"""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass
from typing import Optional

from src.exceptions import AssistantAPIError, ExplanationError, ScriptGenerationError

from .models import Explanation, GeneratedScript
from .prompts.builder import PromptBuilder

__all__ = ["CodeAssistant", "LLMConfig"]

logger = logging.getLogger(__name__)


# ── Configuration ─────────────────────────────────────────────────────────────

@dataclass
class LLMConfig:
    """Runtime configuration for CodeAssistant."""
    backend:      str   = "anthropic"      # "anthropic" | "openai" | "stub"
    model:        str   = ""               # empty = use backend default
    api_key:      str   = ""               # empty = read from env
    max_tokens:   int   = 4096
    temperature:  float = 0.2
    max_attempts: int   = 1
    retry_delay:  float = 2.0              # seconds (doubled each attempt)
    timeout:      float = 60.0             # per-request timeout in seconds


_DEFAULT_MODELS = {
    "anthropic": "claude-3-5-sonnet-20241022",
    "openai":    "gpt-4o",
    "stub":      "stub-v1",
}


# ── Response parser ───────────────────────────────────────────────────────────

_SCRIPT_RE = re.compile(r"\[SCRIPT_BEGIN\](.*?)\[SCRIPT_END\]", re.DOTALL)
_FENCE_RE  = re.compile(r"```(?:python|py)?[ \t]*\n(.*?)```", re.DOTALL)


def _parse_script(raw: str) -> str:
    """
    Pull the script body out of an LLM response.

    Raises ScriptGenerationError if neither a delimited nor a fenced block is found.
    """
    m = _SCRIPT_RE.search(raw) or _FENCE_RE.search(raw)
    if not m or not m.group(1).strip():
        raise ScriptGenerationError(
            "LLM response did not contain a [SCRIPT_BEGIN]...[SCRIPT_END] block. "
            f"Raw response (first 200 chars): {raw[:200]!r}"
        )
    return m.group(1).strip("\n") + "\n"


# ── Backend adapters ──────────────────────────────────────────────────────────

class _AnthropicBackend:
    def __init__(self, config: LLMConfig) -> None:
        try:
            import anthropic  # type: ignore
        except ImportError as exc:
            raise ImportError(
                "anthropic package not installed. Run: pip install anthropic"
            ) from exc
        kwargs: dict = {"max_retries": 0, "timeout": config.timeout}
        if config.api_key:
            kwargs["api_key"] = config.api_key
        self._client = anthropic.Anthropic(**kwargs)
        self._config = config

    def call(self, system: str, user: str, model: str) -> tuple[str, int, int]:
        """Returns (response_text, prompt_tokens, output_tokens)."""
        resp = self._client.messages.create(
            model=model,
            max_tokens=self._config.max_tokens,
            temperature=self._config.temperature,
            system=system,
            messages=[{"role": "user", "content": user}],
        )
        text = resp.content[0].text
        return text, resp.usage.input_tokens, resp.usage.output_tokens


class _OpenAIBackend:
    def __init__(self, config: LLMConfig) -> None:
        try:
            import openai  # type: ignore
        except ImportError as exc:
            raise ImportError(
                "openai package not installed. Run: pip install openai"
            ) from exc
        kwargs: dict = {"max_retries": 0, "timeout": config.timeout}
        if config.api_key:
            kwargs["api_key"] = config.api_key
        self._client = openai.OpenAI(**kwargs)
        self._config = config

    def call(self, system: str, user: str, model: str) -> tuple[str, int, int]:
        resp = self._client.chat.completions.create(
            model=model,
            max_tokens=self._config.max_tokens,
            temperature=self._config.temperature,
            messages=[
                {"role": "system", "content": system},
                {"role": "user",   "content": user},
            ],
        )
        text = resp.choices[0].message.content or ""
        usage = resp.usage
        prompt_t = usage.prompt_tokens     if usage else 0
        output_t = usage.completion_tokens if usage else 0
        return text, prompt_t, output_t


class _StubBackend:
    """Deterministic stub — no network, for unit tests."""

    def __init__(self, config: "LLMConfig") -> None:
        pass  # config not used

    _SCRIPT_TEMPLATE = """\
[SCRIPT_BEGIN]
import asyncio

# {description}
async def main():
    print("Running: {description}")
    await asyncio.sleep(0)
    print("Done.")

if __name__ == "__main__":
    asyncio.run(main())
[SCRIPT_END]
"""

    _EXPLAIN_TEMPLATE = """\
Step 1: Root Cause. {focus}
Step 2: Studio Context. Python logic only; no Nix or SDK configuration involved.
Step 3: The Fix. Correct the statement above and re-run the script.
Step 4: Prevention. Run a linter before executing scripts.
"""

    def call(self, system: str, user: str, model: str) -> tuple[str, int, int]:
        if "[SCRIPT_BEGIN]" in system:
            description = "Unknown"
            for line in user.splitlines():
                if line.startswith("Python Script Description:"):
                    description = line.split(":", 1)[1].strip().replace('"', "'")
            text = self._SCRIPT_TEMPLATE.format(description=description)
        else:
            body = [ln.strip() for ln in user.splitlines()[2:] if ln.strip() and ln.strip() != "```"]
            focus = body[-1] if body else "Nothing to analyze."
            text = self._EXPLAIN_TEMPLATE.format(focus=focus)
        return text, len(user) // 4, len(text) // 4


_BACKEND_MAP = {
    "anthropic": _AnthropicBackend,
    "openai":    _OpenAIBackend,
    "stub":      _StubBackend,
}


# ── CodeAssistant ─────────────────────────────────────────────────────────────

class CodeAssistant:
    """
    The two AI collaborators of the editor.

    Parameters
    ----------
    config : LLMConfig (or None → defaults)

    Usage::
        assistant = CodeAssistant(LLMConfig(backend="anthropic"))
        script = assistant.generate_script("list all Firestore collections")
        note = assistant.explain_snippet(traceback_text)
    """

    def __init__(self, config: Optional[LLMConfig] = None) -> None:
        self._config = config or LLMConfig()
        backend_cls = _BACKEND_MAP.get(self._config.backend)
        if backend_cls is None:
            raise ValueError(
                f"Unknown LLM backend: {self._config.backend!r}. "
                f"Choose from: {list(_BACKEND_MAP)}"
            )
        self._backend = backend_cls(self._config)
        self._builder = PromptBuilder()
        self._model = self._config.model or _DEFAULT_MODELS[self._config.backend]

    @property
    def model(self) -> str:
        return self._model

    def _call(self, system: str, user: str, label: str) -> tuple[str, int, int]:
        """Send one prompt, wrapping SDK failures in AssistantAPIError."""
        attempts = max(1, self._config.max_attempts)
        delay = self._config.retry_delay
        last_exc: Optional[Exception] = None

        for attempt in range(1, attempts + 1):
            try:
                logger.info(
                    "LLM call attempt %d/%d  model=%s  flow=%s",
                    attempt, attempts, self._model, label,
                )
                return self._backend.call(system, user, self._model)
            except Exception as exc:
                logger.warning("Attempt %d: API error: %s", attempt, exc)
                last_exc = exc

            if attempt < attempts:
                logger.debug("Retrying in %.1f s …", delay)
                time.sleep(delay)
                delay *= 2  # exponential back-off

        raise AssistantAPIError(f"{label} request failed: {last_exc}") from last_exc

    def generate_script(self, prompt_text: str) -> GeneratedScript:
        """
        Generate a Python script from a natural-language description.

        Raises
        ------
        ValueError            — blank description
        AssistantAPIError     — network / authentication failure
        ScriptGenerationError — response held no script block
        """
        if not prompt_text.strip():
            raise ValueError("Script description must not be empty")

        system, user = self._builder.build_generate(prompt_text)
        raw, prompt_t, output_t = self._call(system, user, "generate")
        script = GeneratedScript(
            script_text=_parse_script(raw),
            prompt=prompt_text,
            model_id=self._model,
            prompt_tokens=prompt_t,
            output_tokens=output_t,
            raw_response=raw,
        )
        logger.info(
            "Script generated: %d lines  (tokens: in=%d out=%d)",
            script.line_count, prompt_t, output_t,
        )
        return script

    def explain_snippet(self, source_text: str) -> Explanation:
        """
        Explain a code snippet or terminal error.

        Raises
        ------
        ValueError         — blank snippet
        AssistantAPIError  — network / authentication failure
        ExplanationError   — model returned an empty answer
        """
        if not source_text.strip():
            raise ValueError("Nothing to explain: snippet is empty")

        system, user = self._builder.build_explain(source_text)
        raw, prompt_t, output_t = self._call(system, user, "explain")
        if not raw.strip():
            raise ExplanationError("LLM returned an empty explanation")
        return Explanation(
            explanation_text=raw.strip(),
            model_id=self._model,
            prompt_tokens=prompt_t,
            output_tokens=output_t,
        )
