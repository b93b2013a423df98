"""Component that presents a running attempt."""

from __future__ import annotations

from collections.abc import Callable

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QProgressBar,
    QPushButton,
    QTextBrowser,
    QVBoxLayout,
    QWidget,
)

from quiz_kiosk.constants.kiosk_constants import TIMER_WARNING_THRESHOLD_SECONDS
from quiz_kiosk.constants.ui_constants import ATTEMPT_FOCUS_NOTICE, ATTEMPT_PROGRESS_TEMPLATE
from quiz_kiosk.core.services.attempt_session import (
    AttemptEvent,
    AttemptEventKind,
    AttemptSession,
)
from quiz_kiosk.styling.color_palette import ColorPalette, Theme
from quiz_kiosk.styling.styles import Styles
from quiz_kiosk.ui.question_renderer import option_label, render_question


class AttemptPanel(QWidget):
    """Shows the timer, the current question, and one button per option."""

    def __init__(
        self,
        on_done: Callable[[AttemptSession], None],
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.on_done = on_done
        self._theme = Theme.DARK
        self._session: AttemptSession | None = None
        self._unsubscribe: Callable[[], None] | None = None
        self._option_buttons: list[QPushButton] = []

        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        header_row = QHBoxLayout()
        self.progress_label = QLabel("", self)
        header_row.addWidget(self.progress_label)
        header_row.addStretch()
        self.timer_label = QLabel("", self)
        self.timer_label.setStyleSheet(Styles.get_timer_style(self._theme))
        header_row.addWidget(self.timer_label)
        layout.addLayout(header_row)

        self.progress_bar = QProgressBar(self)
        self.progress_bar.setTextVisible(False)
        layout.addWidget(self.progress_bar)

        self.question_view = QTextBrowser(self)
        self.question_view.setOpenExternalLinks(False)
        layout.addWidget(self.question_view, stretch=1)

        self.options_layout = QVBoxLayout()
        layout.addLayout(self.options_layout)

        self.feedback_label = QLabel("", self)
        self.feedback_label.setAlignment(Qt.AlignCenter)
        layout.addWidget(self.feedback_label)

        self.notice_label = QLabel(ATTEMPT_FOCUS_NOTICE, self)
        self.notice_label.setAlignment(Qt.AlignCenter)
        layout.addWidget(self.notice_label)

    def bind_session(self, session: AttemptSession) -> None:
        self.release_session()
        self._session = session
        self._unsubscribe = session.subscribe(self._handle_event)
        self.progress_bar.setRange(0, len(session.questions))
        self._display_current_question()
        self._update_timer()

    def release_session(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
        self._unsubscribe = None
        self._session = None

    def _handle_event(self, event: AttemptEvent) -> None:
        if event.kind is AttemptEventKind.TICK:
            self._update_timer()
        elif event.kind is AttemptEventKind.ANSWER_RECORDED:
            self._show_feedback(bool(event.is_correct))
        elif event.kind is AttemptEventKind.ADVANCED:
            self._display_current_question()
        elif event.kind is AttemptEventKind.FINALIZED:
            self._set_options_enabled(False)
            self._update_timer()
        elif event.kind is AttemptEventKind.DONE:
            session = self._session
            self.release_session()
            if session is not None:
                self.on_done(session)

    def _display_current_question(self) -> None:
        session = self._session
        if session is None:
            return
        question = session.current_question
        self.progress_label.setText(
            ATTEMPT_PROGRESS_TEMPLATE.format(
                current=session.question_index + 1,
                total=len(session.questions),
            )
        )
        self.progress_bar.setValue(session.question_index)
        self.question_view.setHtml(
            render_question(question, ColorPalette.TEXT_PRIMARY.get(self._theme))
        )
        self.feedback_label.setText("")
        self._rebuild_option_buttons(question.options)

    def _rebuild_option_buttons(self, options: tuple[str, ...]) -> None:
        for button in self._option_buttons:
            self.options_layout.removeWidget(button)
            button.deleteLater()
        self._option_buttons = []
        for index, option in enumerate(options):
            button = QPushButton(option_label(index, option), self)
            button.setStyleSheet(Styles.get_option_button_style(self._theme))
            button.clicked.connect(lambda _checked=False, i=index: self._handle_option_click(i))
            self.options_layout.addWidget(button)
            self._option_buttons.append(button)

    def _handle_option_click(self, option_index: int) -> None:
        if self._session is None:
            return
        if self._session.select_answer(option_index):
            self._option_buttons[option_index].setStyleSheet(
                Styles.get_option_button_style(
                    self._theme,
                    feedback=self._session.current_question.correct_option_index == option_index,
                )
            )

    def _show_feedback(self, is_correct: bool) -> None:
        self._set_options_enabled(False)
        if is_correct:
            self.feedback_label.setText("Correct!")
            self.feedback_label.setStyleSheet(f"color: {ColorPalette.CORRECT.get(self._theme)};")
        else:
            self.feedback_label.setText("Not quite.")
            self.feedback_label.setStyleSheet(f"color: {ColorPalette.INCORRECT.get(self._theme)};")

    def _set_options_enabled(self, enabled: bool) -> None:
        for button in self._option_buttons:
            button.setEnabled(enabled)

    def _update_timer(self) -> None:
        if self._session is None:
            return
        self.timer_label.setText(self._session.timer_label)
        self.timer_label.setStyleSheet(
            Styles.get_timer_style(
                self._theme,
                warning=self._session.remaining_seconds <= TIMER_WARNING_THRESHOLD_SECONDS,
            )
        )
