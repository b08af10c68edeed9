"""
AssistantWorker — runs one CodeAssistant request in a background thread.

Usage (MainWindow)::

    self._thread = QThread()
    self._worker = AssistantWorker(assistant, "explain", source_text)
    self._worker.moveToThread(self._thread)
    self._thread.started.connect(self._worker.run)
    self._worker.finished.connect(self._thread.quit)
    self._worker.failed.connect(self._thread.quit)
    self._thread.start()

Signals
───────
finished(object) — GeneratedScript or Explanation
failed(str)      — human-readable error message
"""

import logging

from PyQt6.QtCore import QObject, pyqtSignal

from src.assistant import CodeAssistant

__all__ = ["AssistantWorker"]

logger = logging.getLogger(__name__)

TASK_GENERATE = "generate"
TASK_EXPLAIN  = "explain"


class AssistantWorker(QObject):
    """
    Wraps CodeAssistant.generate_script / explain_snippet for a QThread.

    All interaction with the GUI must go through signals — never touch
    Qt widgets from inside run().
    """

    finished = pyqtSignal(object)  # GeneratedScript | Explanation
    failed   = pyqtSignal(str)     # error message

    def __init__(self, assistant: CodeAssistant, task: str, text: str) -> None:
        super().__init__()
        if task not in (TASK_GENERATE, TASK_EXPLAIN):
            raise ValueError(f"Unknown assistant task: {task!r}")
        self._assistant = assistant
        self._task = task
        self._text = text

    def run(self) -> None:
        """Entry point — connect QThread.started to this slot."""
        try:
            if self._task == TASK_GENERATE:
                result = self._assistant.generate_script(self._text)
            else:
                result = self._assistant.explain_snippet(self._text)
            self.finished.emit(result)
        except Exception as exc:  # noqa: BLE001
            logger.exception("AssistantWorker.run() failed")
            self.failed.emit(str(exc))
