"""Qt main window switching between the quiz browser, the quiz editor, a running quiz and its results."""

from __future__ import annotations

from enum import Enum, auto

from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from quizgenius.constants.about import (
    APP_ABOUT_TEXT,
    APP_LICENSE,
    APP_NAME,
    APP_VERSION,
    HELP_TEXT,
)
from quizgenius.constants.ui_constants import (
    MODE_BUTTON_BROWSE,
    MODE_BUTTON_CREATE,
    MODE_BUTTON_REFRESH,
    MODE_BUTTON_THEME,
    WINDOW_TITLE,
)
from quizgenius.core.models import Quiz
from quizgenius.core.quiz_session import SessionController, SessionState
from quizgenius.core.services.api_client import QuizApiClient
from quizgenius.styling.color_palette import Theme
from quizgenius.styling.styles import Styles
from quizgenius.ui.components.creation_panel import CreationPanel
from quizgenius.ui.components.quiz_list_panel import QuizListPanel
from quizgenius.ui.components.quiz_panel import QuizPanel
from quizgenius.ui.components.results_panel import ResultsPanel
from quizgenius.ui.dialog_helpers import confirm_exit_quiz, show_info


class WindowMode(Enum):
    """High-level UI mode of the main window."""

    BROWSE = auto()
    CREATE = auto()
    QUIZ = auto()
    RESULTS = auto()


class QuizMainWindow(QMainWindow):
    """Main Qt window orchestrating the application modes."""

    def __init__(self, api_client: QuizApiClient, session: SessionController) -> None:
        super().__init__()
        self.setWindowTitle(WINDOW_TITLE)
        self.resize(1100, 760)

        self.api_client = api_client
        self.session = session
        self._mode = WindowMode.BROWSE
        self._theme = Theme.LIGHT

        self._build_ui()
        self._apply_styles()
        self.list_panel.refresh()

    def _build_ui(self) -> None:
        central_widget = QWidget(self)
        self.setCentralWidget(central_widget)

        root_layout = QVBoxLayout()
        central_widget.setLayout(root_layout)

        self._build_mode_buttons(root_layout)

        self.mode_stack = QStackedWidget(self)
        self.list_panel = QuizListPanel(
            self.api_client,
            self.session.user_id,
            on_open_quiz=self._handle_open_quiz,
            on_edit_quiz=self._handle_edit_quiz,
            parent=self,
        )
        self.creation_panel = CreationPanel(
            self.api_client,
            self.session.user_id,
            parent=self,
        )
        self.quiz_panel = QuizPanel(
            self.session,
            on_finished=self._handle_quiz_finished,
            on_exit=self._show_browser,
            parent=self,
        )
        self.results_panel = ResultsPanel(
            self.api_client,
            self.session.user_id,
            on_back=self._handle_back_from_results,
            parent=self,
        )
        self.mode_stack.addWidget(self.list_panel)
        self.mode_stack.addWidget(self.creation_panel)
        self.mode_stack.addWidget(self.quiz_panel)
        self.mode_stack.addWidget(self.results_panel)
        root_layout.addWidget(self.mode_stack)

        self._set_mode(WindowMode.BROWSE)

    def _build_mode_buttons(self, layout: QVBoxLayout) -> None:
        button_row = QHBoxLayout()

        self.browse_button = QPushButton(MODE_BUTTON_BROWSE, self)
        self.browse_button.setCheckable(True)
        self.browse_button.clicked.connect(self._handle_browse_button)
        button_row.addWidget(self.browse_button)

        self.create_button = QPushButton(MODE_BUTTON_CREATE, self)
        self.create_button.setCheckable(True)
        self.create_button.clicked.connect(self._handle_create_button)
        button_row.addWidget(self.create_button)

        self.refresh_button = QPushButton(MODE_BUTTON_REFRESH, self)
        self.refresh_button.clicked.connect(lambda: self.list_panel.refresh())
        button_row.addWidget(self.refresh_button)

        button_row.addStretch()
        self.user_label = QLabel(f"Signed in as {self.session.user_id}", self)
        button_row.addWidget(self.user_label)

        self.theme_button = QPushButton(MODE_BUTTON_THEME, self)
        self.theme_button.clicked.connect(self._handle_toggle_theme)
        button_row.addWidget(self.theme_button)

        self.about_button = QPushButton(f"About {APP_NAME}", self)
        self.about_button.clicked.connect(self._handle_about)
        button_row.addWidget(self.about_button)

        self.help_button = QPushButton("Help", self)
        self.help_button.clicked.connect(self._handle_help)
        button_row.addWidget(self.help_button)

        layout.addLayout(button_row)

    def _set_mode(self, mode: WindowMode) -> None:
        self._mode = mode
        self.browse_button.setChecked(mode == WindowMode.BROWSE)
        self.create_button.setChecked(mode == WindowMode.CREATE)
        self.refresh_button.setEnabled(mode == WindowMode.BROWSE)

        index_map = {
            WindowMode.BROWSE: 0,
            WindowMode.CREATE: 1,
            WindowMode.QUIZ: 2,
            WindowMode.RESULTS: 3,
        }
        self.mode_stack.setCurrentIndex(index_map[mode])

    def _handle_browse_button(self) -> None:
        if self._mode == WindowMode.CREATE and not self.creation_panel.check_unsaved_changes():
            self.browse_button.setChecked(False)
            return
        if self._mode == WindowMode.QUIZ and self.session.state is SessionState.IN_PROGRESS:
            if not confirm_exit_quiz(self):
                self.browse_button.setChecked(False)
                return
        self.session.reset()
        self._show_browser()

    def _handle_create_button(self) -> None:
        if self._mode == WindowMode.CREATE:
            self.create_button.setChecked(True)
            return
        if self._mode == WindowMode.QUIZ and self.session.state is SessionState.IN_PROGRESS:
            if not confirm_exit_quiz(self):
                self.create_button.setChecked(False)
                return
        self.session.reset()
        self.quiz_panel.render()
        self.creation_panel.start_new_quiz()
        self._set_mode(WindowMode.CREATE)

    def _handle_edit_quiz(self, quiz: Quiz) -> None:
        if self.creation_panel.edit_quiz(quiz):
            self._set_mode(WindowMode.CREATE)
        else:
            self.list_panel.refresh()

    def _handle_open_quiz(self, quiz_id: int) -> None:
        if self.quiz_panel.load_quiz(quiz_id):
            self._set_mode(WindowMode.QUIZ)
        else:
            self.list_panel.refresh()

    def _handle_quiz_finished(self, result_id: int) -> None:
        if self.results_panel.show_result(result_id):
            self._set_mode(WindowMode.RESULTS)
        else:
            self._handle_back_from_results()

    def _handle_back_from_results(self) -> None:
        self.session.reset()
        self.quiz_panel.render()
        self._show_browser()

    def _show_browser(self) -> None:
        self.list_panel.refresh()
        self._set_mode(WindowMode.BROWSE)

    def _handle_toggle_theme(self) -> None:
        self._theme = self._theme.toggled()
        self._apply_styles()

    def _handle_about(self) -> None:
        details = (
            f"{APP_NAME} v{APP_VERSION}\n"
            f"License: {APP_LICENSE}\n\n"
            f"{APP_ABOUT_TEXT}"
        )
        show_info(self, f"About {APP_NAME}", details)

    def _handle_help(self) -> None:
        show_info(self, f"{APP_NAME} Help", HELP_TEXT)

    def _apply_styles(self) -> None:
        self.setStyleSheet(Styles.get_main_window_style(self._theme))
        self.user_label.setStyleSheet(Styles.get_secondary_label_style(self._theme))
        self.creation_panel.set_theme(self._theme)
        self.quiz_panel.set_theme(self._theme)
        self.results_panel.set_theme(self._theme)

    def closeEvent(self, event: QCloseEvent) -> None:
        self.session.close()
        super().closeEvent(event)
