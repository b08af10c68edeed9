"""
CLI entry point for codeflow.

Usage
─────
  # List stored scripts (seeds the defaults on first use)
  codeflow list

  # Create, edit, inspect, delete
  codeflow new scratch                       # stored as scratch.py
  codeflow edit scratch.py --file ./local.py
  codeflow show main.py
  codeflow delete scratch.py

  # Simulated run in the terminal (no interpreter involved)
  codeflow run main.py
  codeflow run main.py --instant

  # AI helpers
  codeflow generate "fetch all users from Firestore" --name users --backend anthropic
  codeflow explain main.py --backend openai

  # Export / desktop window
  codeflow export main.py --output ./out/
  codeflow gui

Scripts are addressed by id or by name; when several scripts share a name
the first one in list order wins.

Subcommands are implemented as standalone functions (cmd_list, cmd_run, …)
so they can be unit-tested without invoking argparse.
"""

import argparse
import logging
import os
import sys
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from src.exceptions import CodeFlowBaseError, SimulationError
from src.simulator import (
    ConsoleEvent,
    ConsoleLog,
    EventKind,
    ExecutionSimulator,
    ImmediateScheduler,
    SimulatorConfig,
    ThreadingScheduler,
)
from src.store.backends import DEFAULT_DB_PATH, SqliteStorage
from src.store.db import ScriptStore
from src.store.export import export_script
from src.store.models import Script

__all__ = [
    "build_parser",
    "resolve_script",
    "cmd_list",
    "cmd_show",
    "cmd_new",
    "cmd_edit",
    "cmd_delete",
    "cmd_run",
    "cmd_export",
    "cmd_generate",
    "cmd_explain",
    "main",
]

logger = logging.getLogger(__name__)

# Added on top of the plan's own tick time before a run counts as stuck.
_RUN_TIMEOUT_SLACK = 5.0


# ── Argument parser ────────────────────────────────────────────────────────────


def _add_llm_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--backend",
        choices=["stub", "anthropic", "openai"],
        default="stub",
        help="LLM backend to use (default: stub; use anthropic or openai for real answers)",
    )
    p.add_argument(
        "--model",
        default="",
        metavar="MODEL",
        help="LLM model override (default: backend-specific default)",
    )
    p.add_argument(
        "--api-key",
        default="",
        dest="api_key",
        metavar="KEY",
        help="API key (or use ANTHROPIC_API_KEY / OPENAI_API_KEY env var)",
    )


def build_parser() -> argparse.ArgumentParser:
    """
    Build and return the top-level argument parser.

    Subcommands: list | show | new | edit | delete | run | export | generate | explain | gui
    """
    parser = argparse.ArgumentParser(
        prog="codeflow",
        description="Python script workspace with a simulated terminal and AI helpers",
    )
    parser.add_argument(
        "--db",
        default=DEFAULT_DB_PATH,
        metavar="PATH",
        help=f"SQLite database path (default: {DEFAULT_DB_PATH})",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Enable verbose debug logging",
    )

    sub = parser.add_subparsers(dest="subcommand")

    # ── list / show ───────────────────────────────────────────────────────
    sub.add_parser("list", help="List stored scripts")

    show = sub.add_parser("show", help="Print a script's content")
    show.add_argument("script", metavar="SCRIPT", help="Script id or name")

    # ── new / edit / delete ───────────────────────────────────────────────
    new = sub.add_parser("new", help="Create a script")
    new.add_argument("name", metavar="NAME", help="File name (.py is appended if missing)")
    new.add_argument(
        "--file",
        default=None,
        metavar="PATH",
        help="Initial content from a local file (default: built-in template)",
    )

    edit = sub.add_parser("edit", help="Replace a script's content")
    edit.add_argument("script", metavar="SCRIPT", help="Script id or name")
    edit.add_argument("--file", required=True, metavar="PATH", help="New content from a local file")

    delete = sub.add_parser("delete", help="Delete a script")
    delete.add_argument("script", metavar="SCRIPT", help="Script id or name")

    # ── run ───────────────────────────────────────────────────────────────
    run = sub.add_parser("run", help="Simulate running a script")
    run.add_argument("script", metavar="SCRIPT", help="Script id or name")
    run.add_argument(
        "--instant",
        action="store_true",
        default=False,
        help="Replay all ticks immediately instead of waiting between them",
    )
    run.add_argument(
        "--tick",
        type=float,
        default=SimulatorConfig.tick_delay,
        metavar="SECONDS",
        help=f"Delay between ticks (default: {SimulatorConfig.tick_delay})",
    )

    # ── export ────────────────────────────────────────────────────────────
    exp = sub.add_parser("export", help="Write a script to a .py file")
    exp.add_argument("script", metavar="SCRIPT", help="Script id or name")
    exp.add_argument(
        "--output",
        default=None,
        metavar="DIR",
        help="Output directory (default: current directory)",
    )

    # ── generate / explain ────────────────────────────────────────────────
    gen = sub.add_parser("generate", help="Generate a new script from a description")
    gen.add_argument("prompt", metavar="DESCRIPTION", help="What the script should do")
    gen.add_argument(
        "--name",
        default="generated",
        metavar="NAME",
        help="File name for the new script (default: generated.py)",
    )
    _add_llm_args(gen)

    expl = sub.add_parser("explain", help="Explain a script or an error text")
    src_group = expl.add_mutually_exclusive_group(required=True)
    src_group.add_argument("script", nargs="?", metavar="SCRIPT", help="Script id or name")
    src_group.add_argument("--file", default=None, metavar="PATH", help="Explain a local file instead")
    _add_llm_args(expl)

    # ── gui ───────────────────────────────────────────────────────────────
    gui = sub.add_parser("gui", help="Open the desktop editor window")
    _add_llm_args(gui)

    return parser


# ── Helpers ───────────────────────────────────────────────────────────────────


def resolve_script(store: ScriptStore, ref: str) -> Script:
    """Find a script by id, then by name. Raises ValueError if neither matches."""
    scripts = store.list_scripts()
    for script in scripts:
        if script.id == ref:
            return script
    for script in scripts:
        if script.name == ref:
            return script
    raise ValueError(f"No script with id or name {ref!r}")


def _read_file(path: str) -> str:
    try:
        return Path(path).expanduser().read_text(encoding="utf-8")
    except OSError as exc:
        raise ValueError(f"Cannot read {path}: {exc}") from exc


def _make_assistant(backend: str, model: str, api_key: str):
    from src.assistant import CodeAssistant, LLMConfig
    return CodeAssistant(LLMConfig(backend=backend, model=model, api_key=api_key))


def _print_event(event: ConsoleEvent) -> None:
    stream = sys.stderr if event.kind is EventKind.ERROR else sys.stdout
    print(event.text, file=stream, flush=True)


# ── Command implementations ───────────────────────────────────────────────────


def cmd_list(store: ScriptStore) -> None:
    """Print stored scripts to stdout."""
    scripts = store.list_scripts()
    if not scripts:
        print("0 scripts found.")
        return
    for s in scripts:
        stamp = datetime.fromtimestamp(s.updated_at / 1000, tz=timezone.utc)
        lines = s.content.count("\n") + 1
        print(f"[{s.id:>9}]  {s.name:<30} {lines:>4} lines  {stamp:%Y-%m-%d %H:%M}")


def cmd_show(store: ScriptStore, ref: str) -> None:
    print(resolve_script(store, ref).content, end="")


def cmd_new(store: ScriptStore, name: str, file: Optional[str] = None) -> Script:
    content = _read_file(file) if file else ""
    script = store.add(name, content)
    print(f"Created {script.name} (id={script.id})")
    return script


def cmd_edit(store: ScriptStore, ref: str, file: str) -> Script:
    script = resolve_script(store, ref)
    store.update_content(script.id, _read_file(file))
    print(f"Updated {script.name}")
    return script


def cmd_delete(store: ScriptStore, ref: str) -> None:
    script = resolve_script(store, ref)
    store.delete(script.id)
    print(f"Deleted {script.name}")


def cmd_run(
    store: ScriptStore,
    ref: str,
    instant: bool = False,
    tick_delay: float = SimulatorConfig.tick_delay,
) -> list[ConsoleEvent]:
    """
    Simulate a run of *ref*, echoing events as they arrive.

    Returns:
        The full list of emitted ConsoleEvents.
    """
    script = resolve_script(store, ref)
    log = ConsoleLog()
    done = threading.Event()

    def sink(event: ConsoleEvent) -> None:
        log.append(event)
        _print_event(event)

    errors: list[Exception] = []
    scheduler = ImmediateScheduler() if instant else ThreadingScheduler()
    simulator = ExecutionSimulator(scheduler, SimulatorConfig(tick_delay=tick_delay))
    simulator.run(script, sink, on_finished=done.set, on_error=errors.append)

    timeout = tick_delay * (len(simulator.plan(script)) + 1) + _RUN_TIMEOUT_SLACK
    if not done.wait(timeout):
        raise SimulationError(f"Run of {script.name} did not finish within {timeout:.1f}s")
    if errors:
        raise errors[0]
    return log.events


def cmd_export(store: ScriptStore, ref: str, output_dir: Optional[str]) -> Path:
    """Export a stored script to a file."""
    out_path = export_script(resolve_script(store, ref), output_dir)
    print(f"Exported → {out_path}")
    return out_path


def cmd_generate(
    store: ScriptStore,
    prompt: str,
    name: str = "generated",
    backend: str = "stub",
    model: str = "",
    api_key: str = "",
) -> Script:
    """
    Generate a script from *prompt* and store it as a new script.

    Raises:
        Any AssistantError / ValueError from the assistant propagates to the caller.
    """
    assistant = _make_assistant(backend, model, api_key)
    result = assistant.generate_script(prompt)
    script = store.add(name, result.script_text)
    logger.info("Generated %s with %s", script.name, result.model_id)
    print(f"Created {script.name} using AI (id={script.id})")
    return script


def cmd_explain(
    store: ScriptStore,
    ref: Optional[str] = None,
    file: Optional[str] = None,
    backend: str = "stub",
    model: str = "",
    api_key: str = "",
) -> str:
    """Print an explanation of a stored script or a local file."""
    source = _read_file(file) if file else resolve_script(store, ref).content
    assistant = _make_assistant(backend, model, api_key)
    text = assistant.explain_snippet(source).explanation_text
    print(text)
    return text


def _launch_gui(store: ScriptStore, backend: str, model: str, api_key: str) -> int:
    from PyQt6.QtWidgets import QApplication
    from src.gui.main_window import MainWindow

    app = QApplication.instance() or QApplication(sys.argv)
    win = MainWindow(store=store, assistant=_make_assistant(backend, model, api_key))
    win.show()
    return app.exec()


# ── Entry point ───────────────────────────────────────────────────────────────


def main(argv: Optional[list[str]] = None) -> int:
    """Main CLI entry point. Returns exit code."""
    parser = build_parser()
    ns = parser.parse_args(argv)

    level = logging.DEBUG if ns.debug else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")

    if ns.subcommand is None:
        parser.print_help()
        return 0

    try:
        store = ScriptStore(SqliteStorage(ns.db))

        if ns.subcommand == "list":
            cmd_list(store)
        elif ns.subcommand == "show":
            cmd_show(store, ns.script)
        elif ns.subcommand == "new":
            cmd_new(store, ns.name, ns.file)
        elif ns.subcommand == "edit":
            cmd_edit(store, ns.script, ns.file)
        elif ns.subcommand == "delete":
            cmd_delete(store, ns.script)
        elif ns.subcommand == "run":
            cmd_run(store, ns.script, instant=ns.instant, tick_delay=ns.tick)
        elif ns.subcommand == "export":
            cmd_export(store, ns.script, ns.output)
        elif ns.subcommand == "generate":
            cmd_generate(store, ns.prompt, ns.name, ns.backend, ns.model, ns.api_key)
        elif ns.subcommand == "explain":
            cmd_explain(store, ns.script, ns.file, ns.backend, ns.model, ns.api_key)
        elif ns.subcommand == "gui":
            return _launch_gui(store, ns.backend, ns.model, ns.api_key)
    except (CodeFlowBaseError, ValueError) as exc:
        logger.debug("%s failed", ns.subcommand, exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except BrokenPipeError:
        # Reader went away (e.g. piped into head); silence the exit-time flush.
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
