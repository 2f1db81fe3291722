"""Achievement catalogue and award rules."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
import logging

from quizgenius.constants.quiz_constants import EXPLORER_CATEGORY_COUNT, PERFECT_STREAK_LENGTH
from quizgenius.core.models import Quiz, QuizResult, utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Achievement:
    id: int
    name: str
    description: str
    criteria: str
    icon: str


@dataclass(frozen=True, slots=True)
class UserAchievement:
    id: int
    user_id: str
    achievement_id: int
    earned_at: datetime


@dataclass(frozen=True, slots=True)
class UserHistory:
    """Facts about one user that the award rules inspect."""

    results: Sequence[QuizResult]
    quizzes: Mapping[int, Quiz]
    best_streak: int


def _first_quiz(history: UserHistory) -> bool:
    return len(history.results) >= 1


def _quiz_master(history: UserHistory) -> bool:
    for result in history.results:
        quiz = history.quizzes.get(result.quiz_id)
        if quiz is not None and quiz.question_count > 0 and result.score >= quiz.question_count:
            return True
    return False


def _speed_demon(history: UserHistory) -> bool:
    for result in history.results:
        quiz = history.quizzes.get(result.quiz_id)
        if quiz is not None and result.time_taken_seconds < quiz.time_limit_seconds / 2:
            return True
    return False


def _perfect_streak(history: UserHistory) -> bool:
    return history.best_streak >= PERFECT_STREAK_LENGTH


def _knowledge_explorer(history: UserHistory) -> bool:
    categories = {
        history.quizzes[result.quiz_id].category
        for result in history.results
        if result.quiz_id in history.quizzes
    }
    return len(categories) >= EXPLORER_CATEGORY_COUNT


_RULES: dict[str, Callable[[UserHistory], bool]] = {
    "First Quiz": _first_quiz,
    "Quiz Master": _quiz_master,
    "Speed Demon": _speed_demon,
    "Perfect Streak": _perfect_streak,
    "Knowledge Explorer": _knowledge_explorer,
}

DEFAULT_ACHIEVEMENTS: tuple[tuple[str, str, str, str], ...] = (
    ("First Quiz", "Completed your first quiz", "Complete 1 quiz", "award"),
    ("Quiz Master", "Score 100% on a quiz", "Score 100% on any quiz", "trophy"),
    (
        "Speed Demon",
        "Complete a quiz in less than half the allotted time",
        "Complete quiz in < 50% of time limit",
        "zap",
    ),
    (
        "Perfect Streak",
        f"Score at least 70% on {PERFECT_STREAK_LENGTH} quizzes in a row",
        f"{PERFECT_STREAK_LENGTH} consecutive quizzes with scores >= 70%",
        "star",
    ),
    (
        "Knowledge Explorer",
        f"Take quizzes in {EXPLORER_CATEGORY_COUNT} different categories",
        f"Quizzes in {EXPLORER_CATEGORY_COUNT}+ categories",
        "compass",
    ),
)


class AchievementTracker:
    """Holds the achievement catalogue and which users earned what."""

    def __init__(self, definitions: Sequence[tuple[str, str, str, str]] = DEFAULT_ACHIEVEMENTS) -> None:
        self._achievements: dict[int, Achievement] = {}
        self._awards: dict[int, UserAchievement] = {}
        self._award_counter: int = 0
        for index, (name, description, criteria, icon) in enumerate(definitions, start=1):
            self._achievements[index] = Achievement(index, name, description, criteria, icon)

    def list_achievements(self) -> list[Achievement]:
        return list(self._achievements.values())

    def get_achievement(self, achievement_id: int) -> Achievement | None:
        return self._achievements.get(achievement_id)

    def user_achievements(self, user_id: str) -> list[tuple[UserAchievement, Achievement]]:
        return [
            (award, self._achievements[award.achievement_id])
            for award in self._awards.values()
            if award.user_id == user_id
        ]

    def award(self, user_id: str, achievement_id: int) -> tuple[UserAchievement, bool]:
        """Award an achievement once. Returns the award and whether it was newly created."""
        if achievement_id not in self._achievements:
            raise LookupError(f"Achievement with id {achievement_id} not found")
        for award in self._awards.values():
            if award.user_id == user_id and award.achievement_id == achievement_id:
                return award, False
        self._award_counter += 1
        award = UserAchievement(
            id=self._award_counter,
            user_id=user_id,
            achievement_id=achievement_id,
            earned_at=utcnow(),
        )
        self._awards[award.id] = award
        logger.info("User %s earned '%s'", user_id, self._achievements[achievement_id].name)
        return award, True

    def evaluate(self, user_id: str, history: UserHistory) -> list[str]:
        """Award every achievement whose rule holds; return the names earned just now."""
        if not history.results:
            return []
        earned: list[str] = []
        for achievement in self._achievements.values():
            rule = _RULES.get(achievement.name)
            if rule is None or not rule(history):
                continue
            _, created = self.award(user_id, achievement.id)
            if created:
                earned.append(achievement.name)
        return earned
