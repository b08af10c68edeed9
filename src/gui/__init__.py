"""
gui — PyQt6 front-end for the CodeFlow editor.

Public API
──────────
main_window.MainWindow  — top-level application window (imports PyQt6)
viewmodels              — pure-Python observable state containers (no Qt)
"""

from src.gui import viewmodels

__all__ = ["viewmodels"]
