"""
cli — command-line interface for codeflow.

Entry points
────────────
  python -m src.cli.main
  codeflow               (via pyproject.toml [project.scripts])

Subcommands: list | show | new | edit | delete | run | export | generate | explain | gui
"""

from src.cli.main import build_parser, cmd_list, cmd_run, main

__all__ = ["build_parser", "cmd_list", "cmd_run", "main"]
