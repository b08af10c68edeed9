"""
MainWindow — top-level application window for the CodeFlow editor.

Layout
──────
  ┌────────────┬──────────────────────────────────────────┐
  │ main.py    │ [Run] [Export] [Generate…] [Explain]     │
  │ setup_env… │ ┌──────────────────────────────────────┐ │
  │            │ │ editor                               │ │
  │            │ └──────────────────────────────────────┘ │
  │            │ Terminal Simulator        [Copy] [Clear] │
  │ [New][Del] │ ┌──────────────────────────────────────┐ │
  │            │ │ > python3 main.py                    │ │
  └────────────┴──────────────────────────────────────────┘

Script runs are simulated on the GUI thread through QtScheduler (QTimer);
AI requests run on a QThread via AssistantWorker.
"""

import logging
from typing import Callable, Optional

from PyQt6.QtCore import Qt, QThread, QTimer
from PyQt6.QtWidgets import (
    QApplication,
    QFileDialog,
    QHBoxLayout,
    QInputDialog,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QMessageBox,
    QPlainTextEdit,
    QPushButton,
    QSplitter,
    QVBoxLayout,
    QWidget,
)

from src.assistant import CodeAssistant, LLMConfig
from src.gui.viewmodels import AssistantViewModel, ConsoleViewModel, ScriptListViewModel
from src.gui.worker import TASK_EXPLAIN, TASK_GENERATE, AssistantWorker
from src.simulator import ConsoleEvent, EventKind, ExecutionSimulator
from src.store.backends import DEFAULT_DB_PATH, SqliteStorage
from src.store.db import ScriptStore
from src.store.export import export_script

__all__ = ["MainWindow", "QtScheduler"]

logger = logging.getLogger(__name__)

_ID_ROLE = Qt.ItemDataRole.UserRole


class QtScheduler:
    """Real-timer scheduler on the Qt event loop."""

    def schedule(self, delay: float, callback: Callable[[], None]) -> None:
        QTimer.singleShot(int(delay * 1000), callback)


class MainWindow(QMainWindow):
    """Root window: sidebar, editor and terminal wired to the view-models."""

    def __init__(
        self,
        store: Optional[ScriptStore] = None,
        assistant: Optional[CodeAssistant] = None,
        parent: QWidget = None,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("CodeFlow — Python Hub")
        self.resize(960, 640)

        self._store = store or ScriptStore(SqliteStorage(DEFAULT_DB_PATH))
        self._assistant = assistant or CodeAssistant(LLMConfig(backend="stub"))
        self._simulator = ExecutionSimulator(QtScheduler())

        self._scripts_vm   = ScriptListViewModel(self._store)
        self._console_vm   = ConsoleViewModel()
        self._assistant_vm = AssistantViewModel()

        # Active assistant request
        self._thread: QThread | None = None
        self._worker: AssistantWorker | None = None
        self._pending_name = ""
        self._loading = False

        self._build_ui()
        self._reload_sidebar()
        self._load_editor()

    # ── UI construction ────────────────────────────────────────────────────

    def _build_ui(self) -> None:
        # Sidebar
        self._script_list = QListWidget()
        self._script_list.currentItemChanged.connect(self._on_script_selected)
        self._new_btn = QPushButton("New")
        self._delete_btn = QPushButton("Delete")
        self._new_btn.clicked.connect(self._on_new_clicked)
        self._delete_btn.clicked.connect(self._on_delete_clicked)

        side_btns = QHBoxLayout()
        side_btns.addWidget(self._new_btn)
        side_btns.addWidget(self._delete_btn)
        sidebar = QWidget()
        side_layout = QVBoxLayout(sidebar)
        side_layout.addWidget(QLabel("<b>Python Hub</b>"))
        side_layout.addWidget(self._script_list)
        side_layout.addLayout(side_btns)

        # Editor
        self._run_btn      = QPushButton("Run Script")
        self._export_btn   = QPushButton("Export")
        self._generate_btn = QPushButton("Generate…")
        self._explain_btn  = QPushButton("Explain")
        self._run_btn.clicked.connect(self._on_run_clicked)
        self._export_btn.clicked.connect(self._on_export_clicked)
        self._generate_btn.clicked.connect(self._on_generate_clicked)
        self._explain_btn.clicked.connect(self._on_explain_clicked)

        tool_row = QHBoxLayout()
        for btn in (self._run_btn, self._export_btn, self._generate_btn, self._explain_btn):
            tool_row.addWidget(btn)
        tool_row.addStretch()

        self._editor = QPlainTextEdit()
        self._editor.textChanged.connect(self._on_text_changed)

        # Terminal
        self._console = QPlainTextEdit()
        self._console.setReadOnly(True)
        self._copy_btn  = QPushButton("Copy Commands")
        self._clear_btn = QPushButton("Clear")
        self._copy_btn.clicked.connect(self._on_copy_clicked)
        self._clear_btn.clicked.connect(self._on_clear_clicked)

        console_head = QHBoxLayout()
        console_head.addWidget(QLabel("Terminal Simulator"))
        console_head.addStretch()
        console_head.addWidget(self._copy_btn)
        console_head.addWidget(self._clear_btn)

        editor_pane = QWidget()
        editor_layout = QVBoxLayout(editor_pane)
        editor_layout.addLayout(tool_row)
        editor_layout.addWidget(self._editor)

        console_pane = QWidget()
        console_layout = QVBoxLayout(console_pane)
        console_layout.addLayout(console_head)
        console_layout.addWidget(self._console)

        right = QSplitter(Qt.Orientation.Vertical)
        right.addWidget(editor_pane)
        right.addWidget(console_pane)

        root = QSplitter(Qt.Orientation.Horizontal)
        root.addWidget(sidebar)
        root.addWidget(right)
        root.setStretchFactor(1, 3)
        self.setCentralWidget(root)

    # ── View refresh ───────────────────────────────────────────────────────

    def _reload_sidebar(self) -> None:
        self._loading = True
        self._script_list.clear()
        for script in self._scripts_vm.scripts:
            item = QListWidgetItem(script.name)
            item.setData(_ID_ROLE, script.id)
            self._script_list.addItem(item)
            if script.id == self._scripts_vm.active_id:
                self._script_list.setCurrentItem(item)
        self._loading = False

    def _load_editor(self) -> None:
        script = self._scripts_vm.active_script
        self._loading = True
        self._editor.setPlainText(script.content if script else "")
        self._editor.setEnabled(script is not None)
        self._loading = False
        self._sync_buttons()

    def _sync_buttons(self) -> None:
        has_script = self._scripts_vm.active_script is not None
        running = self._console_vm.is_running
        busy = self._assistant_vm.busy
        self._run_btn.setEnabled(has_script and not running)
        self._run_btn.setText("Running..." if running else "Run Script")
        self._export_btn.setEnabled(has_script)
        self._delete_btn.setEnabled(has_script)
        self._explain_btn.setEnabled(has_script and not busy)
        self._generate_btn.setEnabled(not busy)
        self._clear_btn.setEnabled(not running and len(self._console_vm.log) > 0)
        self._copy_btn.setEnabled(len(self._console_vm.log) > 0)

    # ── Slots: scripts ─────────────────────────────────────────────────────

    def _on_script_selected(self, current: QListWidgetItem, _previous) -> None:
        if self._loading or current is None:
            return
        self._scripts_vm.select(current.data(_ID_ROLE))
        self._load_editor()

    def _on_text_changed(self) -> None:
        if self._loading:
            return
        self._scripts_vm.update_active(self._editor.toPlainText())

    def _on_new_clicked(self) -> None:
        name, ok = QInputDialog.getText(self, "New Script", "File name:")
        if ok and name.strip():
            self.create_script(name.strip())

    def _on_delete_clicked(self) -> None:
        script = self._scripts_vm.active_script
        if script is not None:
            self._scripts_vm.delete(script.id)
            self._reload_sidebar()
            self._load_editor()

    def _on_export_clicked(self) -> None:
        script = self._scripts_vm.active_script
        if script is None:
            return
        directory = QFileDialog.getExistingDirectory(self, "Export to folder")
        if directory:
            path = export_script(script, directory)
            self.statusBar().showMessage(f"Exported {path}", 5000)

    # ── Slots: terminal ────────────────────────────────────────────────────

    def _on_run_clicked(self) -> None:
        self.run_active()

    def _on_console_event(self, event: ConsoleEvent) -> None:
        self._console_vm.append(event)
        prefix = "!! " if event.kind is EventKind.ERROR else ""
        self._console.appendPlainText(f"[{len(self._console_vm.log)}] {prefix}{event.text}")

    def _on_run_finished(self) -> None:
        self._console_vm.finish_run()
        self._sync_buttons()
        self.statusBar().showMessage("Execution simulation finished", 5000)

    def _on_copy_clicked(self) -> None:
        QApplication.clipboard().setText(self._console_vm.copy_text())
        self.statusBar().showMessage("Console copied", 3000)

    def _on_clear_clicked(self) -> None:
        if self._console_vm.clear():
            self._console.clear()
            self._sync_buttons()

    # ── Slots: assistant ───────────────────────────────────────────────────

    def _on_generate_clicked(self) -> None:
        name, ok = QInputDialog.getText(self, "Generate Script", "File name:")
        if not ok or not name.strip():
            return
        prompt, ok = QInputDialog.getMultiLineText(
            self, "Generate Script", "Describe the script to generate:"
        )
        if ok and prompt.strip():
            self._pending_name = name.strip()
            self._start_worker(TASK_GENERATE, prompt)

    def _on_explain_clicked(self) -> None:
        script = self._scripts_vm.active_script
        if script is not None and script.content.strip():
            self._start_worker(TASK_EXPLAIN, script.content)

    def _start_worker(self, task: str, text: str) -> None:
        if not self._assistant_vm.start():
            return
        self._sync_buttons()

        # Clean up any previous request
        if self._thread is not None and self._thread.isRunning():
            self._thread.quit()
            self._thread.wait(3000)  # wait up to 3s

        self._worker = AssistantWorker(self._assistant, task, text)
        self._thread = QThread()
        self._worker.moveToThread(self._thread)

        self._thread.started.connect(self._worker.run)
        self._worker.finished.connect(self._on_assistant_finished)
        self._worker.failed.connect(self._on_assistant_failed)
        self._worker.finished.connect(self._thread.quit)
        self._worker.failed.connect(self._thread.quit)

        self._thread.start()

    def _on_assistant_finished(self, result) -> None:
        self._assistant_vm.finish(result)
        if hasattr(result, "script_text"):
            script = self.create_script(self._pending_name, result.script_text)
            self.statusBar().showMessage(f"Created {script.name} using AI", 5000)
        else:
            QMessageBox.information(self, "Explanation", result.explanation_text)
        self._sync_buttons()

    def _on_assistant_failed(self, error: str) -> None:
        self._assistant_vm.error(error)
        self._sync_buttons()
        QMessageBox.warning(self, "Assistant", f"Request failed: {error}")

    # ── Public API ─────────────────────────────────────────────────────────

    def create_script(self, name: str, content: str = ""):
        """Add a script through the view-model and show it."""
        script = self._scripts_vm.create(name, content)
        self._reload_sidebar()
        self._load_editor()
        return script

    def run_active(self) -> bool:
        """Start a simulated run of the active script; False if not started."""
        script = self._scripts_vm.active_script
        if script is None or self._console_vm.is_running:
            return False
        self._console_vm.begin_run()
        self._sync_buttons()
        started = self._simulator.run(script, self._on_console_event, self._on_run_finished)
        if not started:
            self._console_vm.finish_run()
            self._sync_buttons()
        return started
