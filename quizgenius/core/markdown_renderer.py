"""Markdown rendering helpers for question text and code snippets.

Question text is markdown. Code snippets are kept verbatim in a fenced block so
markdown-it escapes them; the fence grows past the longest backtick run inside
the snippet.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import html
import re

from markdown_it import MarkdownIt

_BACKTICK_RUN = re.compile(r"`+")


def fence_code(code: str, language: str = "") -> str:
    """Wrap code in a markdown fence that cannot be closed by the code itself."""
    longest = max((len(run) for run in _BACKTICK_RUN.findall(code)), default=0)
    fence = "`" * max(3, longest + 1)
    return f"{fence}{language}\n{code.rstrip()}\n{fence}"


@dataclass(slots=True)
class MarkdownRenderer:
    """Converts question markdown into HTML fragments or full documents."""

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

    def render_question(self, text: str, code_snippet: str | None = None) -> str:
        """Render question text followed by its code snippet, if any."""
        parts = [text.strip() or "(No question text)"]
        if code_snippet and code_snippet.strip():
            parts.append(fence_code(code_snippet))
        return self._markdown.render("\n\n".join(parts))

    def wrap_document(
        self,
        body_html: str,
        title: str = "QuizGenius",
        *,
        text_color: str = "#000000",
        background: str = "transparent",
        code_background: str = "#F5F5F5",
        font_size: int = 14,
    ) -> str:
        """Wrap a fragment inside a minimal HTML document for QWebEngineView."""

        return f"""<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <title>{html.escape(title)}</title>
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <style>
      body {{ font-family: 'Segoe UI', system-ui, sans-serif; margin: 0; padding: 1rem; background: {background}; color: {text_color}; }}
      .question-html {{ font-size: {font_size}pt; line-height: 1.5; }}
      pre {{ background: {code_background}; padding: 0.75rem; border-radius: 6px; overflow-x: auto; }}
      code {{ font-family: 'Cascadia Code', 'Consolas', monospace; font-size: 0.95em; }}
    </style>
  </head>
  <body>
    <div class="question-html">{body_html}</div>
  </body>
</html>"""


renderer = MarkdownRenderer()
