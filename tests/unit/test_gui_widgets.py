"""
Unit tests for src/gui/ Qt widgets — requires PyQt6 + offscreen display.

Run with: QT_QPA_PLATFORM=offscreen pytest tests/unit/test_gui_widgets.py

Coverage plan
─────────────
MainWindow       → construction, sidebar, run, clear, create / delete
QtScheduler      → callbacks fire on the event loop
AssistantWorker  → finished / failed signals
MainWindow       → previous worker thread stopped before a new request
"""

import os
import sys

import pytest

# Ensure offscreen rendering when no display is available
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

PyQt6 = pytest.importorskip("PyQt6", reason="PyQt6 not installed")


# ─────────────────────────────────────────────────────────────────────────────
# Fixtures
# ─────────────────────────────────────────────────────────────────────────────

@pytest.fixture(scope="module")
def app():
    """Single QApplication for the entire module (can only have one per process)."""
    from PyQt6.QtWidgets import QApplication
    _app = QApplication.instance() or QApplication(sys.argv)
    yield _app
    # Don't call app.quit() — other tests in the session may still need it.


@pytest.fixture
def window(app):
    """MainWindow on an in-memory store with synchronous simulation."""
    from src.gui.main_window import MainWindow
    from src.simulator import ExecutionSimulator, ImmediateScheduler
    from src.store.backends import MemoryStorage
    from src.store.db import ScriptStore

    win = MainWindow(store=ScriptStore(MemoryStorage()))
    win._simulator = ExecutionSimulator(ImmediateScheduler())
    return win


# ─────────────────────────────────────────────────────────────────────────────
# 1. MainWindow
# ─────────────────────────────────────────────────────────────────────────────

class TestMainWindow:

    def test_sidebar_lists_default_scripts(self, window):
        from PyQt6.QtWidgets import QListWidget
        lists = window.findChildren(QListWidget)
        assert len(lists) == 1
        names = [lists[0].item(i).text() for i in range(lists[0].count())]
        assert "main.py" in names

    def test_editor_shows_active_script(self, window):
        assert window._editor.toPlainText() == window._scripts_vm.active_script.content

    def test_has_run_button(self, window):
        from PyQt6.QtWidgets import QPushButton
        labels = [b.text().lower() for b in window.findChildren(QPushButton)]
        assert any("run" in lbl for lbl in labels)

    def test_run_fills_console(self, window):
        assert window.run_active() is True
        text = window._console.toPlainText()
        assert "> python3 main.py" in text
        assert "✅ System Ready." in text
        assert window._console_vm.is_running is False
        assert window._run_btn.isEnabled()

    def test_clear_empties_console(self, window):
        window.run_active()
        window._on_clear_clicked()
        assert window._console.toPlainText() == ""
        assert len(window._console_vm.log) == 0

    def test_create_script_selects_it(self, window):
        script = window.create_script("fresh", "print('new')")
        assert window._scripts_vm.active_id == script.id
        assert window._editor.toPlainText() == "print('new')"
        assert window._script_list.currentItem().text() == "fresh.py"

    def test_editing_persists_to_store(self, window):
        window._editor.setPlainText("print('typed')")
        active = window._scripts_vm.active_id
        assert window._store.get(active).content == "print('typed')"

    def test_delete_active_moves_selection(self, window):
        script = window.create_script("temp")
        window._on_delete_clicked()
        assert window._scripts_vm.active_id != script.id
        assert window._store.get(script.id) is None


# ─────────────────────────────────────────────────────────────────────────────
# 2. QtScheduler
# ─────────────────────────────────────────────────────────────────────────────

class TestQtScheduler:

    def test_callback_runs_on_event_loop(self, app):
        from PyQt6.QtCore import QEventLoop, QTimer
        from src.gui.main_window import QtScheduler

        fired = []
        loop = QEventLoop()
        QtScheduler().schedule(0.01, lambda: (fired.append(True), loop.quit()))
        QTimer.singleShot(2000, loop.quit)
        loop.exec()
        assert fired == [True]


# ─────────────────────────────────────────────────────────────────────────────
# 3. AssistantWorker
# ─────────────────────────────────────────────────────────────────────────────

class TestAssistantWorker:
    """AssistantWorker — runs one CodeAssistant call, emits signals."""

    def _make_worker(self, task, text):
        from src.assistant import CodeAssistant, LLMConfig
        from src.gui.worker import AssistantWorker
        return AssistantWorker(CodeAssistant(LLMConfig(backend="stub")), task, text)

    def test_generate_emits_finished(self, app):
        worker = self._make_worker("generate", "say hello")
        results, errors = [], []
        worker.finished.connect(results.append)
        worker.failed.connect(errors.append)
        worker.run()
        assert errors == []
        assert "say hello" in results[0].script_text

    def test_explain_emits_finished(self, app):
        worker = self._make_worker("explain", "pirnt('x')")
        results = []
        worker.finished.connect(results.append)
        worker.run()
        assert results[0].explanation_text.startswith("Step 1")

    def test_blank_input_emits_failed(self, app):
        worker = self._make_worker("generate", "   ")
        errors = []
        worker.failed.connect(errors.append)
        worker.run()
        assert len(errors) == 1

    def test_unknown_task_rejected(self, app):
        with pytest.raises(ValueError):
            self._make_worker("compile", "x")


# ─────────────────────────────────────────────────────────────────────────────
# 4. Worker thread lifecycle
# ─────────────────────────────────────────────────────────────────────────────

class _SilentBox:
    """Stands in for QMessageBox so results don't open modal dialogs."""

    shown: list = []

    @staticmethod
    def information(parent, title, text):
        _SilentBox.shown.append(text)

    @staticmethod
    def warning(parent, title, text):
        _SilentBox.shown.append(text)


class TestWorkerThreadLifecycle:

    def test_new_request_stops_previous_thread(self, window, app, monkeypatch):
        import time
        from PyQt6.QtCore import QThread

        _SilentBox.shown = []
        monkeypatch.setattr("src.gui.main_window.QMessageBox", _SilentBox)

        previous = QThread()
        previous.start()
        window._thread = previous

        window._start_worker("explain", "pirnt('x')")
        assert previous.isFinished()
        assert window._thread is not previous

        deadline = time.monotonic() + 5
        while window._assistant_vm.busy and time.monotonic() < deadline:
            app.processEvents()
        assert not window._assistant_vm.busy
        assert window._thread.wait(3000)
        assert _SilentBox.shown[0].startswith("Step 1")
