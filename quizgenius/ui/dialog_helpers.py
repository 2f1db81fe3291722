"""Helper functions for common dialog patterns in the quiz UI."""

from __future__ import annotations

from PySide6.QtGui import QFont
from PySide6.QtWidgets import QMessageBox, QWidget


def _apply_optional_font(widget: QWidget, font_point_size: int | None) -> None:
    """Apply font size to a widget when requested."""
    if font_point_size is None or font_point_size <= 0:
        return

    font: QFont = widget.font()
    font.setPointSize(font_point_size)
    widget.setFont(font)


def confirm_submit_unanswered(parent: QWidget, unanswered_count: int) -> bool:
    """Ask whether to submit although some questions have no answer.

    Args:
        parent: Parent widget for the dialog
        unanswered_count: Number of questions without a selected option

    Returns:
        True if user confirmed, False otherwise
    """
    plural = "s" if unanswered_count != 1 else ""
    reply = QMessageBox.question(
        parent,
        f"{unanswered_count} question{plural} unanswered",
        "Are you sure you want to submit? You can go back and review your answers.",
        QMessageBox.Yes | QMessageBox.No,
        QMessageBox.No
    )
    return reply == QMessageBox.Yes


def confirm_exit_quiz(parent: QWidget) -> bool:
    """Ask before abandoning a quiz that is in progress."""
    reply = QMessageBox.question(
        parent,
        "Exit Quiz",
        "Your answers will be lost. Exit the quiz anyway?",
        QMessageBox.Yes | QMessageBox.No,
        QMessageBox.No
    )
    return reply == QMessageBox.Yes


def confirm_delete_quiz(parent: QWidget, quiz_title: str) -> bool:
    """Show confirmation dialog for deleting a quiz with its questions and results."""
    reply = QMessageBox.question(
        parent,
        "Confirm Delete",
        f"Delete '{quiz_title}' together with its questions and results?",
        QMessageBox.Yes | QMessageBox.No,
        QMessageBox.No
    )
    return reply == QMessageBox.Yes


def show_error(parent: QWidget, title: str, message: str) -> None:
    """Show error dialog.

    Args:
        parent: Parent widget for the dialog
        title: Dialog title
        message: Error message
    """
    QMessageBox.critical(parent, title, message)


def show_info(
    parent: QWidget,
    title: str,
    message: str,
    *,
    font_point_size: int | None = None,
) -> None:
    """Show information dialog.

    Args:
        parent: Parent widget for the dialog
        title: Dialog title
        message: Information message
    """
    msg_box = QMessageBox(parent)
    msg_box.setIcon(QMessageBox.Information)
    msg_box.setWindowTitle(title)
    msg_box.setText(message)
    msg_box.setStandardButtons(QMessageBox.Ok)
    _apply_optional_font(msg_box, font_point_size)
    msg_box.exec()


def show_warning(parent: QWidget, title: str, message: str) -> None:
    QMessageBox.warning(parent, title, message)


def confirm_delete_question(parent: QWidget, question_number: int) -> bool:
    """Ask before removing a saved question from the quiz being edited."""
    reply = QMessageBox.question(
        parent,
        "Confirm Delete",
        f"Delete question {question_number} from this quiz?",
        QMessageBox.Yes | QMessageBox.No,
        QMessageBox.No
    )
    return reply == QMessageBox.Yes


def check_unsaved_changes(parent: QWidget) -> bool | None:
    """Ask what to do with an edited but unsaved question.

    Returns:
        True to save, False to discard, None to stay on the question
    """
    reply = QMessageBox.question(
        parent,
        "Unsaved Changes",
        "This question has unsaved changes. Save them before moving on?",
        QMessageBox.Yes | QMessageBox.No | QMessageBox.Cancel,
        QMessageBox.Yes
    )
    if reply == QMessageBox.Yes:
        return True
    if reply == QMessageBox.No:
        return False
    return None
