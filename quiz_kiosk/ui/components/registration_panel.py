"""Component for the participant registration screen."""

from __future__ import annotations

from collections.abc import Callable

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QFormLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from quiz_kiosk.constants.kiosk_constants import PHONE_DIGIT_COUNT
from quiz_kiosk.constants.ui_constants import (
    QUIZ_UNAVAILABLE_MESSAGE,
    REGISTRATION_BEGIN_BUTTON,
    REGISTRATION_CLASS_PLACEHOLDER,
    REGISTRATION_HEADLINE,
    REGISTRATION_NAME_PLACEHOLDER,
    REGISTRATION_PHONE_PLACEHOLDER,
    REGISTRATION_SUBTITLE,
    REGISTRATION_SUMMARY_TEMPLATE,
    REGISTRATION_TIMER_NOTICE,
)
from quiz_kiosk.core.identity import RegistrationForm
from quiz_kiosk.core.kiosk_manager import QuizSummary
from quiz_kiosk.styling.styles import Styles


class RegistrationPanel(QWidget):
    """Collects name, phone, and class before an attempt starts."""

    def __init__(
        self,
        on_begin: Callable[[RegistrationForm], None],
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.on_begin = on_begin
        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)
        layout.addStretch()

        self.headline_label = QLabel(REGISTRATION_HEADLINE, self)
        self.headline_label.setAlignment(Qt.AlignCenter)
        self.headline_label.setStyleSheet(Styles.get_large_label_style())
        layout.addWidget(self.headline_label)

        self.subtitle_label = QLabel(REGISTRATION_SUBTITLE, self)
        self.subtitle_label.setAlignment(Qt.AlignCenter)
        layout.addWidget(self.subtitle_label)

        self.summary_label = QLabel("", self)
        self.summary_label.setAlignment(Qt.AlignCenter)
        self.summary_label.setWordWrap(True)
        layout.addWidget(self.summary_label)

        form_layout = QFormLayout()
        self.name_input = QLineEdit(self)
        self.name_input.setPlaceholderText(REGISTRATION_NAME_PLACEHOLDER)
        form_layout.addRow("Name", self.name_input)

        self.phone_input = QLineEdit(self)
        self.phone_input.setPlaceholderText(REGISTRATION_PHONE_PLACEHOLDER)
        self.phone_input.setMaxLength(PHONE_DIGIT_COUNT)
        self.phone_input.setInputMask("9" * PHONE_DIGIT_COUNT + ";_")
        form_layout.addRow("Phone", self.phone_input)

        self.class_input = QLineEdit(self)
        self.class_input.setPlaceholderText(REGISTRATION_CLASS_PLACEHOLDER)
        self.class_input.returnPressed.connect(self._handle_begin_click)
        form_layout.addRow("Class", self.class_input)
        layout.addLayout(form_layout)

        self.notice_label = QLabel(REGISTRATION_TIMER_NOTICE, self)
        self.notice_label.setWordWrap(True)
        self.notice_label.setAlignment(Qt.AlignCenter)
        layout.addWidget(self.notice_label)

        self.begin_button = QPushButton(REGISTRATION_BEGIN_BUTTON, self)
        self.begin_button.clicked.connect(self._handle_begin_click)
        layout.addWidget(self.begin_button)
        layout.addStretch()

    def _handle_begin_click(self) -> None:
        self.on_begin(
            RegistrationForm(
                name=self.name_input.text(),
                phone=self.phone_input.text().replace("_", ""),
                class_name=self.class_input.text(),
            )
        )

    def update_summary(self, summary: QuizSummary | None) -> None:
        if summary is None:
            self.summary_label.setText(QUIZ_UNAVAILABLE_MESSAGE)
            self.begin_button.setEnabled(False)
            return
        self.summary_label.setText(
            REGISTRATION_SUMMARY_TEMPLATE.format(
                title=summary.title,
                question_count=summary.question_count,
                minutes=summary.time_limit_minutes,
            )
        )
        self.begin_button.setEnabled(True)

    def reset_state(self) -> None:
        self.name_input.clear()
        self.phone_input.clear()
        self.class_input.clear()
        self.name_input.setFocus()
