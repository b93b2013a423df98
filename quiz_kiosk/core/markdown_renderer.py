"""Markdown rendering shared by the kiosk window and the admin API.

Question text in the catalog is markdown. Both the Qt text browser and the
admin review endpoint consume the same HTML fragment, so the renderer lives in
core rather than in the UI package.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import html

from markdown_it import MarkdownIt


@dataclass(slots=True)
class MarkdownRenderer:
    """Converts markdown into HTML fragments or small standalone documents."""

    enable_html: bool = False
    _markdown: MarkdownIt = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._markdown = (
            MarkdownIt("commonmark", {"html": self.enable_html})
            .enable("table")
            .enable("strikethrough")
        )

    def render_fragment(self, markdown_text: str) -> str:
        sanitized = markdown_text.strip()
        if not sanitized:
            return "<p><em>No content provided.</em></p>"
        return self._markdown.render(sanitized)

    def render_document(self, markdown_text: str, title: str = "QuizKiosk", text_color: str = "#f5f7ff") -> str:
        """Wrap a rendered fragment in a minimal HTML page for ``QTextBrowser``."""

        fragment = self.render_fragment(markdown_text)
        return f"""<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <title>{html.escape(title)}</title>
    <style>
      body {{ font-family: 'Segoe UI', system-ui, sans-serif; color: {text_color}; }}
      .question-html {{ font-size: 1.3rem; line-height: 1.5; }}
    </style>
  </head>
  <body>
    <div class="question-html">{fragment}</div>
  </body>
</html>"""


renderer = MarkdownRenderer()
# MarkdownIt renders are read-only, so the Qt thread and the admin API thread
# share this instance.
