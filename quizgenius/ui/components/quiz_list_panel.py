"""Component for browsing, editing, deleting and generating quizzes."""

from __future__ import annotations

from collections.abc import Callable
import logging

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QPushButton,
    QSpinBox,
    QVBoxLayout,
    QWidget,
)

from quizgenius.constants.quiz_constants import (
    DEFAULT_TIME_LIMIT_MINUTES,
    DIFFICULTY_LEVELS,
    MAX_GENERATED_QUESTIONS,
)
from quizgenius.constants.ui_constants import (
    BROWSE_DELETE_BUTTON,
    BROWSE_EDIT_BUTTON,
    BROWSE_EMPTY_STATE,
    BROWSE_GENERATE_BUTTON,
    BROWSE_OPEN_BUTTON,
    NO_QUIZ_SELECTED_MESSAGE,
)
from quizgenius.core.models import Quiz
from quizgenius.core.services.api_client import ApiError, QuizApiClient
from quizgenius.ui.dialog_helpers import confirm_delete_quiz, show_error, show_info, show_warning

logger = logging.getLogger(__name__)


def describe_quiz(quiz: Quiz) -> str:
    return (
        f"{quiz.title}  |  {quiz.category}  |  {quiz.difficulty.capitalize()}  |  "
        f"{quiz.question_count} questions  |  {quiz.time_limit_minutes} min"
    )


class QuizListPanel(QWidget):
    """UI component listing available quizzes and offering the generator form."""

    def __init__(
        self,
        api_client: QuizApiClient,
        user_id: str,
        on_open_quiz: Callable[[int], None],
        on_edit_quiz: Callable[[Quiz], None] | None = None,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.api_client = api_client
        self.user_id = user_id
        self.on_open_quiz = on_open_quiz
        self.on_edit_quiz = on_edit_quiz
        self._quizzes: list[Quiz] = []

        self._build_ui()

    def _build_ui(self) -> None:
        layout = QHBoxLayout()
        self.setLayout(layout)

        list_column = QVBoxLayout()
        self.quiz_list = QListWidget(self)
        self.quiz_list.itemDoubleClicked.connect(lambda _item: self._handle_open())
        list_column.addWidget(self.quiz_list, stretch=1)

        self.empty_label = QLabel(BROWSE_EMPTY_STATE, self)
        self.empty_label.setAlignment(Qt.AlignCenter)
        self.empty_label.setVisible(False)
        list_column.addWidget(self.empty_label)

        button_row = QHBoxLayout()
        self.open_button = QPushButton(BROWSE_OPEN_BUTTON, self)
        self.open_button.setDefault(True)
        self.open_button.clicked.connect(self._handle_open)
        button_row.addWidget(self.open_button)

        self.edit_button = QPushButton(BROWSE_EDIT_BUTTON, self)
        self.edit_button.clicked.connect(self._handle_edit)
        button_row.addWidget(self.edit_button)

        self.delete_button = QPushButton(BROWSE_DELETE_BUTTON, self)
        self.delete_button.clicked.connect(self._handle_delete)
        button_row.addWidget(self.delete_button)
        button_row.addStretch()
        list_column.addLayout(button_row)

        layout.addLayout(list_column, stretch=3)
        layout.addWidget(self._build_generator_group(), stretch=2)

    def _build_generator_group(self) -> QGroupBox:
        group = QGroupBox("Generate a quiz", self)
        form = QFormLayout()
        group.setLayout(form)

        self.topic_edit = QLineEdit(group)
        self.topic_edit.setPlaceholderText("e.g. Python, World History")
        form.addRow("Topic", self.topic_edit)

        self.difficulty_combo = QComboBox(group)
        self.difficulty_combo.addItems([d.capitalize() for d in DIFFICULTY_LEVELS])
        self.difficulty_combo.setCurrentIndex(1)
        form.addRow("Difficulty", self.difficulty_combo)

        self.count_spin = QSpinBox(group)
        self.count_spin.setRange(1, MAX_GENERATED_QUESTIONS)
        self.count_spin.setValue(5)
        form.addRow("Questions", self.count_spin)

        self.time_limit_spin = QSpinBox(group)
        self.time_limit_spin.setRange(1, 180)
        self.time_limit_spin.setValue(DEFAULT_TIME_LIMIT_MINUTES)
        self.time_limit_spin.setSuffix(" min")
        form.addRow("Time limit", self.time_limit_spin)

        self.include_code_check = QCheckBox("Prefer questions with code", group)
        form.addRow(self.include_code_check)

        self.generate_button = QPushButton(BROWSE_GENERATE_BUTTON, group)
        self.generate_button.clicked.connect(self._handle_generate)
        form.addRow(self.generate_button)
        return group

    def refresh(self) -> None:
        """Reload the quiz list from the API."""
        try:
            self._quizzes = self.api_client.fetch_quizzes()
        except ApiError as exc:
            logger.warning("Could not load quizzes: %s", exc.message)
            show_error(self, "Quizzes unavailable", exc.message)
            return

        self.quiz_list.clear()
        for quiz in self._quizzes:
            item = QListWidgetItem(describe_quiz(quiz))
            item.setData(Qt.UserRole, quiz.id)
            item.setToolTip(quiz.description)
            self.quiz_list.addItem(item)
        has_quizzes = bool(self._quizzes)
        self.empty_label.setVisible(not has_quizzes)
        self.open_button.setEnabled(has_quizzes)
        self.edit_button.setEnabled(has_quizzes and self.on_edit_quiz is not None)
        self.delete_button.setEnabled(has_quizzes)
        if has_quizzes:
            self.quiz_list.setCurrentRow(0)

    def _selected_quiz(self) -> Quiz | None:
        item = self.quiz_list.currentItem()
        if item is None:
            return None
        quiz_id = item.data(Qt.UserRole)
        return next((quiz for quiz in self._quizzes if quiz.id == quiz_id), None)

    def _handle_open(self) -> None:
        quiz = self._selected_quiz()
        if quiz is None:
            show_warning(self, "No quiz", NO_QUIZ_SELECTED_MESSAGE)
            return
        self.on_open_quiz(quiz.id)

    def _handle_edit(self) -> None:
        quiz = self._selected_quiz()
        if quiz is None:
            show_warning(self, "No quiz", NO_QUIZ_SELECTED_MESSAGE)
            return
        if self.on_edit_quiz is not None:
            self.on_edit_quiz(quiz)

    def _handle_delete(self) -> None:
        quiz = self._selected_quiz()
        if quiz is None:
            show_warning(self, "No quiz", NO_QUIZ_SELECTED_MESSAGE)
            return
        if not confirm_delete_quiz(self, quiz.title):
            return
        try:
            self.api_client.delete_quiz(quiz.id)
        except ApiError as exc:
            show_error(self, "Delete failed", exc.message)
            return
        self.refresh()

    def _handle_generate(self) -> None:
        topic = self.topic_edit.text().strip()
        if not topic:
            show_warning(self, "Missing topic", "Enter a topic to generate a quiz about.")
            return
        try:
            quiz_id = self.api_client.generate_quiz(
                topic=topic,
                difficulty=DIFFICULTY_LEVELS[self.difficulty_combo.currentIndex()],
                question_count=self.count_spin.value(),
                time_limit_minutes=self.time_limit_spin.value(),
                user_id=self.user_id,
                include_code=self.include_code_check.isChecked(),
            )
        except ApiError as exc:
            show_error(self, "Generation failed", exc.message)
            return

        self.topic_edit.clear()
        self.refresh()
        for row in range(self.quiz_list.count()):
            if self.quiz_list.item(row).data(Qt.UserRole) == quiz_id:
                self.quiz_list.setCurrentRow(row)
                break
        show_info(self, "Quiz generated", "Your quiz is ready. Open it to get started.")
