"""Question rendering utilities for the attempt panel."""

from __future__ import annotations

from quiz_kiosk.core.markdown_renderer import renderer
from quiz_kiosk.core.models import Question


def render_question(question: Question, text_color: str) -> str:
    """Render the question stem as an HTML document for ``QTextBrowser``.

    Options are shown as buttons, so only the stem and its category go
    through markdown.
    """
    markdown = f"*{question.category}*\n\n{question.text.strip() or '(No question text)'}"
    return renderer.render_document(markdown, text_color=text_color)


def option_label(index: int, option: str) -> str:
    return f"{chr(ord('A') + index)}. {option}"
