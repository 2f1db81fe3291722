"""Component for writing a quiz by hand: details form plus a question editor."""

from __future__ import annotations

from collections.abc import Callable
import logging

from PySide6.QtWebEngineWidgets import QWebEngineView
from PySide6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPlainTextEdit,
    QPushButton,
    QSpinBox,
    QVBoxLayout,
    QWidget,
)

from quizgenius.constants.quiz_constants import DEFAULT_TIME_LIMIT_MINUTES, DIFFICULTY_LEVELS
from quizgenius.constants.ui_constants import (
    CREATE_DELETE_BUTTON,
    CREATE_INSERT_BUTTON,
    CREATE_NEW_QUIZ_BUTTON,
    CREATE_NEXT_BUTTON,
    CREATE_PREV_BUTTON,
    CREATE_SAVE_BUTTON,
    CREATE_SAVE_DETAILS_BUTTON,
    PLACEHOLDER_CODE,
    PLACEHOLDER_QUESTION,
)
from quizgenius.core.models import Question, QuestionDraft, Quiz, QuizDraft
from quizgenius.core.services.api_client import ApiError, QuizApiClient
from quizgenius.styling.color_palette import Theme
from quizgenius.ui.dialog_helpers import (
    check_unsaved_changes,
    confirm_delete_question,
    show_error,
    show_info,
    show_warning,
)
from quizgenius.ui.question_renderer import render_question_preview

logger = logging.getLogger(__name__)

_OPTION_LABELS = ("A", "B", "C", "D")


class CreationPanel(QWidget):
    """UI component for creating a quiz and adding, editing and deleting its questions.

    Every save goes straight to the API; ``_current_index`` equal to the
    question count means a new, not yet stored question is being written.
    """

    def __init__(
        self,
        api_client: QuizApiClient,
        user_id: str,
        on_saved: Callable[[], None] | None = None,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.api_client = api_client
        self.user_id = user_id
        self.on_saved = on_saved

        self._theme = Theme.LIGHT
        self._quiz: Quiz | None = None
        self._questions: list[Question] = []
        self._current_index: int = 0
        self._has_unsaved_changes: bool = False
        self._loading: bool = False

        self._build_ui()
        self.start_new_quiz()

    def _build_ui(self) -> None:
        layout = QHBoxLayout()
        self.setLayout(layout)
        layout.addWidget(self._build_details_group(), stretch=2)

        editor_column = QVBoxLayout()

        action_row = QHBoxLayout()
        self.insert_button = QPushButton(CREATE_INSERT_BUTTON, self)
        self.insert_button.clicked.connect(self._handle_insert_question)
        action_row.addWidget(self.insert_button)

        self.save_button = QPushButton(CREATE_SAVE_BUTTON, self)
        self.save_button.clicked.connect(self._handle_save_question)
        action_row.addWidget(self.save_button)

        self.delete_button = QPushButton(CREATE_DELETE_BUTTON, self)
        self.delete_button.clicked.connect(self._handle_delete_question)
        action_row.addWidget(self.delete_button)

        self.prev_button = QPushButton(CREATE_PREV_BUTTON, self)
        self.prev_button.clicked.connect(lambda: self._navigate_questions(-1))
        action_row.addWidget(self.prev_button)

        self.next_button = QPushButton(CREATE_NEXT_BUTTON, self)
        self.next_button.clicked.connect(lambda: self._navigate_questions(1))
        action_row.addWidget(self.next_button)
        editor_column.addLayout(action_row)

        self.question_input = QPlainTextEdit(self)
        self.question_input.setPlaceholderText(PLACEHOLDER_QUESTION)
        self.question_input.textChanged.connect(self._on_input_changed)
        editor_column.addWidget(self.question_input, stretch=2)

        self.code_input = QPlainTextEdit(self)
        self.code_input.setPlaceholderText(PLACEHOLDER_CODE)
        self.code_input.textChanged.connect(self._on_input_changed)
        editor_column.addWidget(self.code_input, stretch=1)

        self.option_inputs: list[QLineEdit] = []
        self.correct_checks: list[QCheckBox] = []
        for label in _OPTION_LABELS:
            row = QHBoxLayout()
            option_input = QLineEdit(self)
            option_input.setPlaceholderText(f"Option {label}")
            option_input.textChanged.connect(self._on_input_changed)
            row.addWidget(option_input, stretch=1)
            correct_check = QCheckBox("Correct", self)
            correct_check.toggled.connect(lambda _checked: self._on_input_changed())
            row.addWidget(correct_check)
            editor_column.addLayout(row)
            self.option_inputs.append(option_input)
            self.correct_checks.append(correct_check)

        self.preview_view = QWebEngineView(self)
        editor_column.addWidget(self.preview_view, stretch=3)

        self.status_label = QLabel("", self)
        self.status_label.setWordWrap(True)
        editor_column.addWidget(self.status_label)

        layout.addLayout(editor_column, stretch=3)

    def _build_details_group(self) -> QGroupBox:
        group = QGroupBox("Quiz details", self)
        form = QFormLayout()
        group.setLayout(form)

        self.title_edit = QLineEdit(group)
        form.addRow("Title", self.title_edit)

        self.description_edit = QPlainTextEdit(group)
        self.description_edit.setMaximumHeight(90)
        form.addRow("Description", self.description_edit)

        self.category_edit = QLineEdit(group)
        self.category_edit.setPlaceholderText("e.g. Programming")
        form.addRow("Category", self.category_edit)

        self.difficulty_combo = QComboBox(group)
        self.difficulty_combo.addItems([d.capitalize() for d in DIFFICULTY_LEVELS])
        form.addRow("Difficulty", self.difficulty_combo)

        self.time_limit_spin = QSpinBox(group)
        self.time_limit_spin.setRange(1, 180)
        self.time_limit_spin.setSuffix(" min")
        form.addRow("Time limit", self.time_limit_spin)

        button_row = QHBoxLayout()
        self.new_quiz_button = QPushButton(CREATE_NEW_QUIZ_BUTTON, group)
        self.new_quiz_button.clicked.connect(self._handle_new_quiz)
        button_row.addWidget(self.new_quiz_button)

        self.save_details_button = QPushButton(CREATE_SAVE_DETAILS_BUTTON, group)
        self.save_details_button.clicked.connect(self._handle_save_details)
        button_row.addWidget(self.save_details_button)
        form.addRow(button_row)
        return group

    # --- Public API used by the main window ---

    def start_new_quiz(self) -> None:
        """Clear the panel for a quiz that does not exist yet."""
        self._quiz = None
        self._questions = []
        self._current_index = 0
        self.title_edit.clear()
        self.description_edit.clear()
        self.category_edit.clear()
        self.difficulty_combo.setCurrentIndex(0)
        self.time_limit_spin.setValue(DEFAULT_TIME_LIMIT_MINUTES)
        self.clear_fields()
        self._update_controls()
        self.status_label.setText("Fill in the quiz details and save them to start adding questions.")

    def edit_quiz(self, quiz: Quiz) -> bool:
        """Load an existing quiz and its questions. Returns False when the quiz is gone."""
        try:
            quiz = self.api_client.fetch_quiz(quiz.id)
            questions = self.api_client.fetch_questions(quiz.id) if quiz.question_count else []
        except ApiError as exc:
            logger.warning("Could not load quiz %s for editing: %s", quiz.id, exc.message)
            show_error(self, "Quiz unavailable", exc.message)
            return False

        self._quiz = quiz
        self._questions = questions
        self.title_edit.setText(quiz.title)
        self.description_edit.setPlainText(quiz.description)
        self.category_edit.setText(quiz.category)
        if quiz.difficulty in DIFFICULTY_LEVELS:
            self.difficulty_combo.setCurrentIndex(DIFFICULTY_LEVELS.index(quiz.difficulty))
        self.time_limit_spin.setValue(quiz.time_limit_minutes)
        self._show_question(0)
        return True

    def has_unsaved_changes(self) -> bool:
        return self._has_unsaved_changes

    def check_unsaved_changes(self) -> bool:
        """Prompt about an unsaved question. Returns True if it is ok to move on."""
        if not self._has_unsaved_changes:
            return True
        result = check_unsaved_changes(self)
        if result is True:
            self._handle_save_question()
            return not self._has_unsaved_changes
        if result is False:
            self._has_unsaved_changes = False
            return True
        return False

    def set_theme(self, theme: Theme) -> None:
        self._theme = theme
        self._refresh_preview()

    # --- Quiz details ---

    def _details_draft(self) -> QuizDraft:
        return QuizDraft(
            title=self.title_edit.text(),
            description=self.description_edit.toPlainText(),
            category=self.category_edit.text(),
            difficulty=DIFFICULTY_LEVELS[self.difficulty_combo.currentIndex()],
            time_limit_minutes=self.time_limit_spin.value(),
        )

    def _handle_new_quiz(self) -> None:
        if not self.check_unsaved_changes():
            return
        self.start_new_quiz()

    def _handle_save_details(self) -> None:
        draft = self._details_draft()
        if not draft.title.strip():
            show_warning(self, "Missing title", "Give the quiz a title before saving.")
            return
        try:
            if self._quiz is None:
                quiz_id = self.api_client.create_quiz(draft, self.user_id)
                self._quiz = self.api_client.fetch_quiz(quiz_id)
                message = "Quiz created. Now add its questions."
            else:
                self._quiz = self.api_client.update_quiz(self._quiz.id, draft)
                message = "Quiz details saved."
        except ApiError as exc:
            show_error(self, "Save failed", exc.message)
            return
        self._update_controls()
        self.status_label.setText(message)
        self._notify_saved()

    # --- Questions ---

    def _handle_insert_question(self) -> None:
        if not self.check_unsaved_changes():
            return
        self._show_question(len(self._questions))
        self.status_label.setText("Ready to write a new question.")

    def _handle_save_question(self) -> None:
        if self._quiz is None:
            show_info(self, "Save the quiz first", "Save the quiz details before adding questions.")
            return
        try:
            draft = QuestionDraft.from_form(
                self.question_input.toPlainText(),
                self.code_input.toPlainText(),
                self._option_rows(),
            )
        except ValueError as exc:
            show_warning(self, "Invalid question", str(exc))
            return

        try:
            if self._current_index >= len(self._questions):
                question = self.api_client.add_question(self._quiz.id, draft)
                self._questions.append(question)
                self._current_index = len(self._questions) - 1
            else:
                question = self.api_client.update_question(self._questions[self._current_index].id, draft)
                self._questions[self._current_index] = question
        except ApiError as exc:
            show_error(self, "Save failed", f"Could not save question: {exc.message}")
            return

        self._has_unsaved_changes = False
        self._update_controls()
        self.status_label.setText(f"Saved question {self._current_index + 1} of {len(self._questions)}.")
        self._notify_saved()

    def _handle_delete_question(self) -> None:
        if self._current_index >= len(self._questions):
            self.clear_fields()
            self.status_label.setText("Discarded unsaved question.")
            return
        if not confirm_delete_question(self, self._current_index + 1):
            return
        try:
            self.api_client.delete_question(self._questions[self._current_index].id)
        except ApiError as exc:
            show_error(self, "Delete failed", f"Could not delete question: {exc.message}")
            return

        del self._questions[self._current_index]
        self._show_question(min(self._current_index, max(0, len(self._questions) - 1)))
        if self._questions:
            self.status_label.setText(
                f"Deleted question. Now viewing {self._current_index + 1} of {len(self._questions)}."
            )
        else:
            self.status_label.setText("All questions removed.")
        self._notify_saved()

    def _navigate_questions(self, step: int) -> None:
        if not self._questions or not self.check_unsaved_changes():
            return
        target = max(0, min(len(self._questions) - 1, self._current_index + step))
        self._show_question(target)

    def _show_question(self, index: int) -> None:
        self._current_index = index
        if index < len(self._questions):
            self.populate_fields(self._questions[index])
            self.status_label.setText(f"Viewing question {index + 1} of {len(self._questions)}.")
        else:
            self.clear_fields()
        self._update_controls()

    # --- Fields ---

    def clear_fields(self) -> None:
        self._loading = True
        self.question_input.clear()
        self.code_input.clear()
        for option_input, correct_check in zip(self.option_inputs, self.correct_checks):
            option_input.clear()
            correct_check.setChecked(False)
        self._loading = False
        self._has_unsaved_changes = False
        self._refresh_preview()

    def populate_fields(self, question: Question) -> None:
        self._loading = True
        self.question_input.setPlainText(question.text)
        self.code_input.setPlainText(question.code_snippet or "")
        for row, (option_input, correct_check) in enumerate(zip(self.option_inputs, self.correct_checks)):
            option = question.options[row] if row < len(question.options) else None
            option_input.setText(option.text if option else "")
            correct_check.setChecked(bool(option and option.is_correct))
        self._loading = False
        self._has_unsaved_changes = False
        self._refresh_preview()

    def _option_rows(self) -> list[tuple[str, bool]]:
        return [
            (option_input.text(), correct_check.isChecked())
            for option_input, correct_check in zip(self.option_inputs, self.correct_checks)
        ]

    def _on_input_changed(self) -> None:
        if self._loading:
            return
        self._has_unsaved_changes = True
        self._refresh_preview()

    def _refresh_preview(self) -> None:
        self.preview_view.setHtml(
            render_question_preview(
                self.question_input.toPlainText(),
                self.code_input.toPlainText(),
                self._option_rows(),
                self._theme,
            )
        )

    def _update_controls(self) -> None:
        has_quiz = self._quiz is not None
        for widget in (self.insert_button, self.save_button, self.delete_button):
            widget.setEnabled(has_quiz)
        self.prev_button.setEnabled(has_quiz and self._current_index > 0)
        self.next_button.setEnabled(has_quiz and self._current_index < len(self._questions) - 1)
        self.save_details_button.setText(CREATE_SAVE_DETAILS_BUTTON if has_quiz else "Create Quiz")

    def _notify_saved(self) -> None:
        if self.on_saved is not None:
            self.on_saved()
