"""Question and result rendering utilities for QWebEngineView."""

from __future__ import annotations

from quizgenius.core.markdown_renderer import fence_code, renderer
from quizgenius.core.models import Question, ResultReport
from quizgenius.styling.color_palette import ColorPalette, Theme


def _wrap(body_html: str, title: str, theme: Theme, font_size: int) -> str:
    return renderer.wrap_document(
        body_html,
        title=title,
        text_color=ColorPalette.TEXT_PRIMARY.get(theme),
        background=ColorPalette.BACKGROUND_PRIMARY.get(theme),
        code_background=ColorPalette.CODE_BG.get(theme),
        font_size=font_size,
    )


def render_question_document(question: Question, theme: Theme = Theme.LIGHT, font_size: int = 14) -> str:
    """Render a quiz question (text plus optional code snippet) as a full HTML page.

    Options are shown as Qt radio buttons next to the view, not in the page.
    """
    body = renderer.render_question(question.text, question.code_snippet)
    return _wrap(body, "Question", theme, font_size)


def render_result_review(report: ResultReport, theme: Theme = Theme.LIGHT, font_size: int = 12) -> str:
    """Render the per-question review shown on the results page."""
    sections: list[str] = []
    for number, row in enumerate(report.questions, start=1):
        mark = "Correct" if row.is_correct else "Incorrect"
        lines = [f"**{number}.** {row.text}"]
        if row.code_snippet:
            lines.append(fence_code(row.code_snippet))
        lines.append(f"**Your answer:** {row.user_answer} ({mark})")
        if not row.is_correct:
            lines.append(f"**Correct answer:** {row.correct_answer}")
        sections.append("\n\n".join(lines))
    markdown = "\n\n---\n\n".join(sections) or "_No questions to review._"
    return _wrap(renderer.render_fragment(markdown), report.quiz_title or "Results", theme, font_size)


def render_question_preview(
    text: str,
    code_snippet: str | None,
    options: list[tuple[str, bool]],
    theme: Theme = Theme.LIGHT,
    font_size: int = 12,
) -> str:
    """Render an authored question with its lettered options, marking the correct ones."""
    filled = [(option_text.strip(), is_correct) for option_text, is_correct in options if option_text.strip()]
    lines = []
    for index, (option_text, is_correct) in enumerate(filled):
        letter = chr(ord("A") + index)
        mark = " **(correct)**" if is_correct else ""
        lines.append(f"- **{letter}.** {option_text}{mark}")
    body = renderer.render_question(text, code_snippet)
    if lines:
        body += renderer.render_fragment("\n".join(lines))
    return _wrap(body, "Preview", theme, font_size)
