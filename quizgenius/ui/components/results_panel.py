"""Component showing a submitted quiz: score, review, leaderboard and achievements."""

from __future__ import annotations

from collections.abc import Callable
import logging

from PySide6.QtCore import Qt
from PySide6.QtWebEngineWidgets import QWebEngineView
from PySide6.QtWidgets import (
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from quizgenius.constants.quiz_constants import STREAK_THRESHOLD_PERCENT
from quizgenius.constants.ui_constants import LEADERBOARD_SIZE, RESULTS_BACK_BUTTON
from quizgenius.core.models import ResultReport
from quizgenius.core.services.api_client import ApiError, QuizApiClient
from quizgenius.styling.color_palette import Theme
from quizgenius.styling.styles import Styles
from quizgenius.ui.dialog_helpers import show_error, show_info
from quizgenius.ui.question_renderer import render_result_review

logger = logging.getLogger(__name__)


def score_message(percentage: int) -> str:
    if percentage >= 90:
        return "Excellent work!"
    if percentage >= 70:
        return "Great job!"
    if percentage >= 50:
        return "Good effort."
    return "Keep practising."


class ResultsPanel(QWidget):
    """UI component for the results view."""

    def __init__(
        self,
        api_client: QuizApiClient,
        user_id: str,
        on_back: Callable[[], None],
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.api_client = api_client
        self.user_id = user_id
        self.on_back = on_back

        self._theme = Theme.LIGHT
        self._report: ResultReport | None = None

        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        self.title_label = QLabel("", self)
        self.title_label.setStyleSheet(Styles.get_large_label_style())
        layout.addWidget(self.title_label)

        self.summary_label = QLabel("", self)
        self.summary_label.setWordWrap(True)
        layout.addWidget(self.summary_label)

        body_row = QHBoxLayout()
        self.review_view = QWebEngineView(self)
        body_row.addWidget(self.review_view, stretch=3)

        side_column = QVBoxLayout()
        self.leaderboard_group = QGroupBox("Leaderboard", self)
        self.leaderboard_layout = QVBoxLayout()
        self.leaderboard_group.setLayout(self.leaderboard_layout)
        side_column.addWidget(self.leaderboard_group)

        self.achievements_group = QGroupBox("Achievements", self)
        self.achievements_layout = QVBoxLayout()
        self.achievements_group.setLayout(self.achievements_layout)
        side_column.addWidget(self.achievements_group)
        side_column.addStretch()
        body_row.addLayout(side_column, stretch=1)
        layout.addLayout(body_row, stretch=1)

        button_row = QHBoxLayout()
        button_row.addStretch()
        self.back_button = QPushButton(RESULTS_BACK_BUTTON, self)
        self.back_button.clicked.connect(self.on_back)
        button_row.addWidget(self.back_button)
        layout.addLayout(button_row)

    def show_result(self, result_id: int) -> bool:
        """Load and display a result. Returns False if the report could not be fetched."""
        try:
            report = self.api_client.fetch_result(result_id)
        except ApiError as exc:
            show_error(self, "Results unavailable", exc.message)
            return False
        self._report = report
        self._render_report()

        new_achievements = self._update_leaderboard(result_id)
        self._refresh_leaderboard()
        self._refresh_achievements()
        if new_achievements:
            show_info(self, "Achievement unlocked", "\n".join(new_achievements))
        return True

    def set_theme(self, theme: Theme) -> None:
        self._theme = theme
        if self._report is not None:
            self._render_report()

    def _render_report(self) -> None:
        report = self._report
        if report is None:
            return
        percentage = report.percentage
        self.title_label.setText(f"{report.quiz_title}: {percentage}%")
        self.title_label.setStyleSheet(
            Styles.get_score_label_style(self._theme, passed=percentage >= STREAK_THRESHOLD_PERCENT)
        )
        self.summary_label.setText(
            f"{score_message(percentage)} You answered {report.correct_answers} of "
            f"{report.total_questions} questions correctly in {report.time_taken}."
        )
        self.review_view.setHtml(render_result_review(report, self._theme))

    def _update_leaderboard(self, result_id: int) -> list[str]:
        try:
            payload = self.api_client.update_leaderboard(self.user_id, result_id)
        except ApiError as exc:
            logger.warning("Leaderboard update failed: %s", exc.message)
            return []
        return list(payload.get("newAchievements") or [])

    def _refresh_leaderboard(self) -> None:
        _clear_layout(self.leaderboard_layout)
        try:
            rows = self.api_client.fetch_leaderboard(LEADERBOARD_SIZE)
        except ApiError as exc:
            logger.warning("Leaderboard unavailable: %s", exc.message)
            self.leaderboard_layout.addWidget(QLabel("Leaderboard unavailable", self.leaderboard_group))
            return
        if not rows:
            self.leaderboard_layout.addWidget(QLabel("No entries yet", self.leaderboard_group))
        for row in rows:
            marker = " (you)" if row.get("userId") == self.user_id else ""
            label = QLabel(
                f"#{row.get('ranking', 0)} {row.get('userId', '')}{marker}: {row.get('totalScore', 0)} pts",
                self.leaderboard_group,
            )
            self.leaderboard_layout.addWidget(label)

    def _refresh_achievements(self) -> None:
        _clear_layout(self.achievements_layout)
        try:
            awards = self.api_client.fetch_user_achievements(self.user_id)
        except ApiError as exc:
            logger.warning("Achievements unavailable: %s", exc.message)
            awards = []
        if not awards:
            self.achievements_layout.addWidget(QLabel("None yet", self.achievements_group))
        for award in awards:
            achievement = award.get("achievement") or {}
            label = QLabel(f"{achievement.get('name', '')}: {achievement.get('description', '')}", self)
            label.setWordWrap(True)
            label.setAlignment(Qt.AlignLeft)
            self.achievements_layout.addWidget(label)


def _clear_layout(layout: QVBoxLayout) -> None:
    while layout.count():
        item = layout.takeAt(0)
        widget = item.widget()
        if widget is not None:
            widget.deleteLater()
