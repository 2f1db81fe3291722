"""Component for taking a quiz: timer, question view, options and navigation."""

from __future__ import annotations

from collections.abc import Callable
import logging

from PySide6.QtCore import Qt
from PySide6.QtGui import QKeySequence, QShortcut
from PySide6.QtWebEngineWidgets import QWebEngineView
from PySide6.QtWidgets import (
    QButtonGroup,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QProgressBar,
    QPushButton,
    QRadioButton,
    QVBoxLayout,
    QWidget,
)

from quizgenius.constants.quiz_constants import TIME_LIMIT_WARNING_WINDOW_SECONDS
from quizgenius.constants.ui_constants import (
    QUIZ_EXIT_BUTTON,
    QUIZ_NEXT_BUTTON,
    QUIZ_NOT_FOUND_MESSAGE,
    QUIZ_PREV_BUTTON,
    QUIZ_START_BUTTON,
    QUIZ_SUBMIT_BUTTON,
)
from quizgenius.core.models import Question
from quizgenius.core.quiz_session import SessionController, SessionState, SubmissionOutcome, SubmitStatus
from quizgenius.core.services.api_client import ApiError
from quizgenius.core.services.submission_gateway import SessionPreconditionError
from quizgenius.styling.color_palette import Theme
from quizgenius.styling.styles import Styles
from quizgenius.ui.dialog_helpers import (
    confirm_exit_quiz,
    confirm_submit_unanswered,
    show_error,
    show_warning,
)
from quizgenius.ui.question_renderer import render_question_document

logger = logging.getLogger(__name__)

_ANSWER_SHORTCUT_KEYS = ("1", "2", "3", "4")


class QuizPanel(QWidget):
    """UI component driving one quiz session."""

    def __init__(
        self,
        session: SessionController,
        on_finished: Callable[[int], None],
        on_exit: Callable[[], None],
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.session = session
        self.on_finished = on_finished
        self.on_exit = on_exit

        self._theme = Theme.LIGHT
        self._game_font_size: int = 14
        self._option_buttons: list[QRadioButton] = []
        self._rendered_question_id: int | None = None

        self.session.set_on_update(self._handle_timer_update)
        self.session.set_on_notice(self._show_notice)

        self._build_ui()
        self._build_shortcuts()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        header_row = QHBoxLayout()
        self.title_label = QLabel("", self)
        self.title_label.setStyleSheet(Styles.get_large_label_style())
        self.title_label.setWordWrap(True)
        header_row.addWidget(self.title_label, stretch=1)

        self.timer_label = QLabel("", self)
        self.timer_label.setAlignment(Qt.AlignRight | Qt.AlignVCenter)
        header_row.addWidget(self.timer_label)
        layout.addLayout(header_row)

        progress_row = QHBoxLayout()
        self.progress_label = QLabel("", self)
        progress_row.addWidget(self.progress_label)
        self.answered_progress = QProgressBar(self)
        self.answered_progress.setTextVisible(False)
        progress_row.addWidget(self.answered_progress, stretch=1)
        self.answered_label = QLabel("", self)
        progress_row.addWidget(self.answered_label)
        layout.addLayout(progress_row)

        self.question_view = QWebEngineView(self)
        layout.addWidget(self.question_view, stretch=3)

        self.options_group = QGroupBox("Answers", self)
        self.options_layout = QVBoxLayout()
        self.options_group.setLayout(self.options_layout)
        self.option_button_group = QButtonGroup(self)
        self.option_button_group.setExclusive(True)
        layout.addWidget(self.options_group, stretch=1)

        self.status_label = QLabel("", self)
        self.status_label.setWordWrap(True)
        layout.addWidget(self.status_label)

        nav_row = QHBoxLayout()
        self.exit_button = QPushButton(QUIZ_EXIT_BUTTON, self)
        self.exit_button.clicked.connect(self._handle_exit)
        nav_row.addWidget(self.exit_button)
        nav_row.addStretch()

        self.start_button = QPushButton(QUIZ_START_BUTTON, self)
        self.start_button.setDefault(True)
        self.start_button.clicked.connect(self._handle_start)
        nav_row.addWidget(self.start_button)

        self.prev_button = QPushButton(QUIZ_PREV_BUTTON, self)
        self.prev_button.clicked.connect(self._handle_previous)
        nav_row.addWidget(self.prev_button)

        self.next_button = QPushButton(QUIZ_NEXT_BUTTON, self)
        self.next_button.clicked.connect(self._handle_next)
        nav_row.addWidget(self.next_button)
        layout.addLayout(nav_row)

    def _build_shortcuts(self) -> None:
        for key in ("Right", "N"):
            self._add_shortcut(key, self._handle_next)
        for key in ("Left", "P"):
            self._add_shortcut(key, self._handle_previous)
        for index, key in enumerate(_ANSWER_SHORTCUT_KEYS):
            self._add_shortcut(key, lambda index=index: self._select_option_at(index))
        self._add_shortcut("S", self._handle_submit_shortcut)
        self._add_shortcut("Home", lambda: self._handle_jump(0))
        self._add_shortcut("End", lambda: self._handle_jump(self.session.question_count - 1))

    def _add_shortcut(self, key: str, handler: Callable[[], None]) -> None:
        shortcut = QShortcut(QKeySequence(key), self)
        shortcut.setContext(Qt.WidgetWithChildrenShortcut)
        shortcut.activated.connect(handler)

    # --- Public API used by the main window ---

    def load_quiz(self, quiz_id: int) -> bool:
        """Fetch a quiz and its questions into the session. Returns False on failure."""
        try:
            quiz = self.session.open_quiz(quiz_id)
        except ApiError as exc:
            logger.warning("Could not open quiz %s: %s", quiz_id, exc.message)
            message = QUIZ_NOT_FOUND_MESSAGE if exc.status_code == 404 else exc.message
            show_error(self, "Quiz unavailable", message)
            return False
        self.title_label.setText(quiz.title)
        self.status_label.setText(quiz.description)
        self._rendered_question_id = None
        self.render()
        return True

    def set_theme(self, theme: Theme) -> None:
        self._theme = theme
        self._rendered_question_id = None
        self.render()

    def render(self) -> None:
        """Sync every widget with the session state."""
        in_progress = self.session.state is SessionState.IN_PROGRESS
        total = self.session.question_count
        question = self.session.current_question

        self.start_button.setVisible(not self.session.is_started)
        self.start_button.setEnabled(total > 0)
        self.prev_button.setEnabled(in_progress and self.session.current_index > 0)
        self.next_button.setEnabled(in_progress and not self.session.is_submitting)
        self.next_button.setText(QUIZ_SUBMIT_BUTTON if self.session.is_last_question() else QUIZ_NEXT_BUTTON)
        self.options_group.setEnabled(in_progress)

        if total:
            self.progress_label.setText(f"Question {self.session.current_index + 1} of {total}")
        else:
            self.progress_label.setText("")
        self.answered_progress.setRange(0, max(1, total))
        self.answered_progress.setValue(self.session.answered_count)
        self.answered_label.setText(f"{self.session.answered_count}/{total} answered")
        self._update_timer_label()

        if not in_progress or question is None:
            self._clear_options()
            self._rendered_question_id = None
            self.question_view.setHtml("")
            return
        if question.id != self._rendered_question_id:
            self.question_view.setHtml(
                render_question_document(question, self._theme, font_size=self._game_font_size)
            )
            self._rebuild_options(question)
            self._rendered_question_id = question.id

    # --- Options ---

    def _clear_options(self) -> None:
        for button in self._option_buttons:
            self.option_button_group.removeButton(button)
            self.options_layout.removeWidget(button)
            button.deleteLater()
        self._option_buttons = []

    def _rebuild_options(self, question: Question) -> None:
        self._clear_options()
        selected = self.session.answer_for(question.id)
        for index, option in enumerate(question.options):
            letter = chr(ord("A") + index)
            button = QRadioButton(f"{letter}. {option.text}", self.options_group)
            button.setChecked(option.id == selected)
            button.toggled.connect(
                lambda checked, qid=question.id, oid=option.id: self._handle_option_toggled(qid, oid, checked)
            )
            self.option_button_group.addButton(button, index)
            self.options_layout.addWidget(button)
            self._option_buttons.append(button)

    def _handle_option_toggled(self, question_id: int, option_id: int, checked: bool) -> None:
        if not checked:
            return
        self.session.record_answer(question_id, option_id)
        total = self.session.question_count
        self.answered_progress.setValue(self.session.answered_count)
        self.answered_label.setText(f"{self.session.answered_count}/{total} answered")

    def _select_option_at(self, index: int) -> None:
        if self.session.state is not SessionState.IN_PROGRESS:
            return
        if 0 <= index < len(self._option_buttons):
            self._option_buttons[index].setChecked(True)

    # --- Navigation & submission ---

    def _handle_start(self) -> None:
        if self.session.start():
            self.status_label.setText("")
        self.render()

    def _handle_previous(self) -> None:
        self.session.previous()
        self.render()

    def _handle_jump(self, index: int) -> None:
        if self.session.state is not SessionState.IN_PROGRESS or index < 0:
            return
        self.session.go_to(index)
        self.render()

    def _handle_next(self) -> None:
        if self.session.state is not SessionState.IN_PROGRESS:
            return
        if self.session.is_last_question():
            self._handle_submit()
            return
        self.session.next()
        self.render()

    def _handle_submit_shortcut(self) -> None:
        if self.session.state is SessionState.IN_PROGRESS and self.session.is_last_question():
            self._handle_submit()

    def _handle_submit(self, confirmed: bool = False) -> None:
        if self.session.state is not SessionState.IN_PROGRESS:
            return
        try:
            outcome = self.session.submit(confirmed=confirmed)
        except SessionPreconditionError as exc:
            show_warning(self, "Quiz not started", str(exc))
            return
        self._handle_outcome(outcome)

    def _handle_outcome(self, outcome: SubmissionOutcome) -> None:
        if outcome.status is SubmitStatus.NEEDS_CONFIRMATION:
            # The dialog runs its own event loop, so the timer may have submitted the quiz meanwhile.
            if confirm_submit_unanswered(self, outcome.unanswered_count):
                self._handle_submit(confirmed=True)
            return
        if outcome.status is SubmitStatus.SUBMITTED and outcome.result_id is not None:
            self.on_finished(outcome.result_id)
            return
        if outcome.status is SubmitStatus.FAILED:
            title = "Time is up" if outcome.forced else "Error submitting quiz"
            show_error(self, title, outcome.error or "Could not submit your answers.")
        self.render()

    def _handle_exit(self) -> None:
        if self.session.state is SessionState.IN_PROGRESS and not confirm_exit_quiz(self):
            return
        self.session.reset()
        self.title_label.setText("")
        self.status_label.setText("")
        self.render()
        self.on_exit()

    # --- Timer ---

    def _handle_timer_update(self, outcome: SubmissionOutcome | None) -> None:
        self._update_timer_label()
        if outcome is not None:
            self._handle_outcome(outcome)

    def _update_timer_label(self) -> None:
        if not self.session.is_started:
            self.timer_label.setText("")
            return
        remaining = self.session.seconds_remaining
        self.timer_label.setText(self.session.time_remaining_text)
        self.timer_label.setStyleSheet(
            Styles.get_timer_label_style(self._theme, warning=remaining <= TIME_LIMIT_WARNING_WINDOW_SECONDS)
        )

    def _show_notice(self, title: str, message: str) -> None:
        self.status_label.setText(f"{title}: {message}")
