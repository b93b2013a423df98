"""Component for the post-attempt results and review screen."""

from __future__ import annotations

from collections.abc import Callable

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from quiz_kiosk.constants.ui_constants import (
    RESULTS_FINISH_BUTTON,
    RESULTS_RETAKE_BUTTON,
    RESULTS_STATUS_LABELS,
)
from quiz_kiosk.core.services.attempt_session import AttemptSession
from quiz_kiosk.styling.styles import Styles
from quiz_kiosk.ui.question_renderer import option_label


class ResultsPanel(QWidget):
    """Shows the score, how the attempt ended, and a per-question review."""

    def __init__(
        self,
        on_retake: Callable[[], None],
        on_finish: Callable[[], None],
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.on_retake = on_retake
        self.on_finish = on_finish
        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        self.score_label = QLabel("", self)
        self.score_label.setAlignment(Qt.AlignCenter)
        self.score_label.setStyleSheet(Styles.get_large_label_style())
        layout.addWidget(self.score_label)

        self.status_label = QLabel("", self)
        self.status_label.setAlignment(Qt.AlignCenter)
        layout.addWidget(self.status_label)

        self.review_list = QListWidget(self)
        self.review_list.setWordWrap(True)
        layout.addWidget(self.review_list, stretch=1)

        button_row = QHBoxLayout()
        self.retake_button = QPushButton(RESULTS_RETAKE_BUTTON, self)
        self.retake_button.clicked.connect(self.on_retake)
        button_row.addWidget(self.retake_button)

        self.finish_button = QPushButton(RESULTS_FINISH_BUTTON, self)
        self.finish_button.clicked.connect(self.on_finish)
        button_row.addWidget(self.finish_button)
        layout.addLayout(button_row)

    def show_results(self, session: AttemptSession) -> None:
        result = session.result
        if result is None:
            return
        self.score_label.setText(f"{session.participant.name}: {result.score} / {result.total_questions}")
        status_text = RESULTS_STATUS_LABELS.get(result.status.value, result.status.value)
        self.status_label.setText(f"{status_text} · {result.time_taken_seconds}s")

        self.review_list.clear()
        for number, (question, answer) in enumerate(zip(session.questions, result.answers), start=1):
            correct = option_label(question.correct_option_index, question.options[question.correct_option_index])
            selected_index = answer.selected_option_index
            if selected_index is None:
                chosen = "No answer"
            else:
                chosen = option_label(selected_index, question.options[selected_index])
            mark = "✓" if answer.is_correct else "✗"
            QListWidgetItem(
                f"{mark} {number}. {question.text}\n    Your answer: {chosen}\n    Correct answer: {correct}",
                self.review_list,
            )

        self.retake_button.setVisible(session.quiz.allow_retake)
