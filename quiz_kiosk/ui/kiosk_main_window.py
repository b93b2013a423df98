"""Qt main window stacking the registration, attempt, and results screens."""

from __future__ import annotations

from enum import Enum, auto
import logging

from PySide6.QtCore import QObject, Signal
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import (
    QHBoxLayout,
    QMainWindow,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from quiz_kiosk.constants.about import APP_ABOUT_TEXT, APP_LICENSE, APP_NAME, APP_VERSION, HELP_TEXT
from quiz_kiosk.constants.ui_constants import (
    QUIZ_NOT_STARTED_MESSAGE,
    QUIZ_UNAVAILABLE_TITLE,
    WINDOW_TITLE,
)
from quiz_kiosk.core.identity import RegistrationError, RegistrationForm
from quiz_kiosk.core.kiosk_manager import KioskManager
from quiz_kiosk.core.services.attempt_session import AttemptPhase, AttemptSession
from quiz_kiosk.core.services.state_store import StoreEvent
from quiz_kiosk.styling.styles import Styles
from quiz_kiosk.ui.components.attempt_panel import AttemptPanel
from quiz_kiosk.ui.components.registration_panel import RegistrationPanel
from quiz_kiosk.ui.components.results_panel import ResultsPanel
from quiz_kiosk.ui.dialog_helpers import confirm_abandon_attempt, show_info, show_warning
from quiz_kiosk.ui.qt_scheduler import QtScheduler

logger = logging.getLogger(__name__)


class KioskMode(Enum):
    REGISTRATION = auto()
    ATTEMPT = auto()
    RESULTS = auto()


class _StoreBridge(QObject):
    """Re-emits store notifications as a Qt signal.

    The admin API mutates the store from its server thread; connecting to the
    signal queues the refresh onto the GUI thread.
    """

    changed = Signal(int)

    def handle_event(self, event: StoreEvent) -> None:
        self.changed.emit(event.revision)


class KioskMainWindow(QMainWindow):
    """Main Qt window driving one participant at a time through the quiz."""

    def __init__(self, kiosk_manager: KioskManager) -> None:
        super().__init__()
        self.setWindowTitle(WINDOW_TITLE)

        self.kiosk_manager = kiosk_manager
        self._scheduler = QtScheduler(self)
        self._session: AttemptSession | None = None
        self._last_form: RegistrationForm | None = None
        self._mode = KioskMode.REGISTRATION

        self._build_ui()
        self._connect_store()
        self.setStyleSheet(Styles.get_main_window_style())
        self._refresh_summary()

    def _build_ui(self) -> None:
        central_widget = QWidget(self)
        self.setCentralWidget(central_widget)

        root_layout = QVBoxLayout()
        central_widget.setLayout(root_layout)

        button_row = QHBoxLayout()
        button_row.addStretch()
        self.help_button = QPushButton("Help", self)
        self.help_button.clicked.connect(self._handle_help)
        button_row.addWidget(self.help_button)
        self.about_button = QPushButton(f"About {APP_NAME}", self)
        self.about_button.clicked.connect(self._handle_about)
        button_row.addWidget(self.about_button)
        root_layout.addLayout(button_row)

        self.mode_stack = QStackedWidget(self)
        self.registration_panel = RegistrationPanel(on_begin=self._handle_begin, parent=self)
        self.attempt_panel = AttemptPanel(on_done=self._handle_attempt_done, parent=self)
        self.results_panel = ResultsPanel(
            on_retake=self._handle_retake,
            on_finish=self._handle_finish,
            parent=self,
        )
        self.mode_stack.addWidget(self.registration_panel)
        self.mode_stack.addWidget(self.attempt_panel)
        self.mode_stack.addWidget(self.results_panel)
        root_layout.addWidget(self.mode_stack)

        self._set_mode(KioskMode.REGISTRATION)

    def _connect_store(self) -> None:
        self._store_bridge = _StoreBridge(self)
        self._store_bridge.changed.connect(self._handle_store_changed)
        self._unsubscribe_store = self.kiosk_manager.store.subscribe(self._store_bridge.handle_event)

    def _set_mode(self, mode: KioskMode) -> None:
        self._mode = mode
        index_map = {
            KioskMode.REGISTRATION: 0,
            KioskMode.ATTEMPT: 1,
            KioskMode.RESULTS: 2,
        }
        self.mode_stack.setCurrentIndex(index_map[mode])
        self.help_button.setEnabled(mode is not KioskMode.ATTEMPT)
        self.about_button.setEnabled(mode is not KioskMode.ATTEMPT)

    def _handle_store_changed(self, revision: int) -> None:
        logger.debug("Store revision %d", revision)
        if self._mode is KioskMode.REGISTRATION:
            self._refresh_summary()

    def _refresh_summary(self) -> None:
        self.registration_panel.update_summary(self.kiosk_manager.quiz_summary())

    def _handle_begin(self, form: RegistrationForm) -> None:
        if self.kiosk_manager.active_quiz() is None:
            show_warning(self, QUIZ_UNAVAILABLE_TITLE, QUIZ_NOT_STARTED_MESSAGE)
            return
        try:
            session = self.kiosk_manager.start_attempt(form, self._scheduler)
        except RegistrationError as exc:
            show_warning(self, "Check your details", str(exc))
            return
        if session is None:
            show_warning(self, QUIZ_UNAVAILABLE_TITLE, QUIZ_NOT_STARTED_MESSAGE)
            return
        self._last_form = form
        self._run_session(session)

    def _run_session(self, session: AttemptSession) -> None:
        self._session = session
        self.attempt_panel.bind_session(session)
        self._set_mode(KioskMode.ATTEMPT)
        session.start()

    def _handle_attempt_done(self, session: AttemptSession) -> None:
        self.results_panel.show_results(session)
        self._set_mode(KioskMode.RESULTS)

    def _handle_retake(self) -> None:
        session = self._session
        if session is None or self._last_form is None or not session.quiz.allow_retake:
            return
        self._handle_begin(self._last_form)

    def _handle_finish(self) -> None:
        self._session = None
        self._last_form = None
        self.registration_panel.reset_state()
        self._refresh_summary()
        self._set_mode(KioskMode.REGISTRATION)

    def _handle_about(self) -> None:
        details = (
            f"{APP_NAME} v{APP_VERSION}\n"
            f"License: {APP_LICENSE}\n\n"
            f"{APP_ABOUT_TEXT}"
        )
        show_info(self, f"About {APP_NAME}", details)

    def _handle_help(self) -> None:
        show_info(self, f"{APP_NAME} Help", HELP_TEXT)

    def closeEvent(self, event: QCloseEvent) -> None:
        session = self._session
        if session is not None and session.phase is AttemptPhase.RUNNING:
            if not confirm_abandon_attempt(self):
                event.ignore()
                return
        if session is not None:
            session.cancel()
        self.attempt_panel.release_session()
        self._unsubscribe_store()
        super().closeEvent(event)
