"""Qt UI components for the QuizGenius desktop client."""

from .dialog_helpers import (
    check_unsaved_changes,
    confirm_delete_question,
    confirm_delete_quiz,
    confirm_exit_quiz,
    confirm_submit_unanswered,
    show_error,
    show_info,
    show_warning,
)
from .qt_scheduler import make_qt_scheduler
from .question_renderer import render_question_document, render_question_preview, render_result_review
from .quiz_window import QuizMainWindow

__all__ = [
    "QuizMainWindow",
    "check_unsaved_changes",
    "confirm_delete_question",
    "confirm_delete_quiz",
    "confirm_exit_quiz",
    "confirm_submit_unanswered",
    "make_qt_scheduler",
    "show_error",
    "show_info",
    "show_warning",
    "render_question_document",
    "render_question_preview",
    "render_result_review",
]
