"""
Naive literal-print extractor and mock-error detector.

Nothing here parses Python.  Output lines come from a single regex pass
over the raw text:

  print("literal") / print('literal')  → the literal, trimmed
  print(anything-up-to-next-paren)     → the argument text, trimmed
  COMMAND: some shell command          → "SHELL: some shell command"

Matches are returned in left-to-right source order.  Nested parentheses
and escaped quotes are not handled.

Mock errors are plain substring checks that append a traceback-shaped
message naming the script; they run in the fixed order of _MOCK_ERRORS.
"""

import re
from dataclasses import dataclass

__all__ = ["extract_output_lines", "detect_mock_errors", "EMPTY_SCRIPT", "EXIT_OK"]

EMPTY_SCRIPT = "(script is empty)"
EXIT_OK      = "Process finished with exit code 0."

_OUTPUT_RE = re.compile(
    r"\bprint\s*\(\s*(?P<quote>['\"])(?P<literal>.*?)(?P=quote)\s*\)"   # quoted literal
    r"|\bprint\s*\((?P<loose>[^)\n]*)\)"                                 # unquoted fallback
    r"|COMMAND:[ \t]*(?P<command>[^\n]*)"                                # shell marker
)


@dataclass(frozen=True)
class _MockError:
    trigger: str
    message: str


_MOCK_ERRORS = (
    _MockError("pirnt", "NameError: name 'pirnt' is not defined"),
    _MockError(
        "import nonexistent_module",
        "ModuleNotFoundError: No module named 'nonexistent_module'",
    ),
)


def extract_output_lines(source: str) -> list[str]:
    """Return the simulated stdout lines of *source*, in source order."""
    lines: list[str] = []
    for m in _OUTPUT_RE.finditer(source):
        if m.group("command") is not None:
            lines.append(f"SHELL: {m.group('command').strip()}")
        elif m.group("quote") is not None:
            lines.append(m.group("literal").strip())
        else:
            lines.append(m.group("loose").strip())
    return lines


def _traceback(script_name: str, source: str, err: _MockError) -> str:
    offset = source.index(err.trigger)
    line_no = source.count("\n", 0, offset) + 1
    offending = source.split("\n")[line_no - 1].strip()
    return (
        "Traceback (most recent call last):\n"
        f'  File "{script_name}", line {line_no}, in <module>\n'
        f"    {offending}\n"
        f"{err.message}"
    )


def detect_mock_errors(source: str, script_name: str) -> list[str]:
    """Return one traceback text per mock-error trigger found in *source*."""
    return [
        _traceback(script_name, source, err)
        for err in _MOCK_ERRORS
        if err.trigger in source
    ]
