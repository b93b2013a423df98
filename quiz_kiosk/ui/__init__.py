"""Qt UI components for the kiosk application."""

from .dialog_helpers import (
    confirm_abandon_attempt,
    show_info,
    show_warning,
)
from .kiosk_main_window import KioskMainWindow
from .qt_scheduler import QtScheduler
from .question_renderer import option_label, render_question

__all__ = [
    "KioskMainWindow",
    "QtScheduler",
    "confirm_abandon_attempt",
    "option_label",
    "render_question",
    "show_info",
    "show_warning",
]
