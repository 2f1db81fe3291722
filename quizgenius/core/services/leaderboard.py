"""Service for tracking per-user totals, streaks and rankings."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime

from quizgenius.constants.quiz_constants import LEADERBOARD_DEFAULT_LIMIT, STREAK_THRESHOLD_PERCENT
from quizgenius.core.models import utcnow


@dataclass(slots=True)
class LeaderboardEntry:
    """Aggregated standing of one user."""

    user_id: str
    total_score: int = 0
    quizzes_completed: int = 0
    average_score: int = 0
    best_streak: int = 0
    current_streak: int = 0
    ranking: int = 0
    last_active: datetime = field(default_factory=utcnow)


class Leaderboard:
    """Tracks and ranks users by total score."""

    def __init__(self, streak_threshold_percent: int = STREAK_THRESHOLD_PERCENT) -> None:
        self._entries: dict[str, LeaderboardEntry] = {}
        self._streak_threshold = streak_threshold_percent

    def record_result(self, user_id: str, score: int, max_score: int) -> LeaderboardEntry:
        """Fold one quiz result into the user's standing and re-rank everyone."""
        entry = self._entries.get(user_id)
        if entry is None:
            entry = LeaderboardEntry(user_id=user_id)
            self._entries[user_id] = entry

        entry.total_score += score
        entry.quizzes_completed += 1
        entry.average_score = round(entry.total_score / entry.quizzes_completed)
        entry.last_active = utcnow()

        percentage = score / max_score * 100 if max_score > 0 else 0
        if percentage >= self._streak_threshold:
            entry.current_streak += 1
            entry.best_streak = max(entry.best_streak, entry.current_streak)
        else:
            entry.current_streak = 0

        self._update_rankings()
        return replace(entry)

    def get_entry(self, user_id: str) -> LeaderboardEntry | None:
        entry = self._entries.get(user_id)
        return replace(entry) if entry is not None else None

    def get_top(self, limit: int = LEADERBOARD_DEFAULT_LIMIT) -> list[LeaderboardEntry]:
        """Return the top N users sorted by total score."""
        return [replace(entry) for entry in self._sorted_entries()[: max(0, limit)]]

    def percentile(self, user_id: str) -> int:
        """Share of users with a strictly lower total score, in percent."""
        entry = self._entries.get(user_id)
        if entry is None or not self._entries:
            return 0
        below = sum(1 for other in self._entries.values() if other.total_score < entry.total_score)
        return round(below / len(self._entries) * 100)

    def _sorted_entries(self) -> list[LeaderboardEntry]:
        return sorted(self._entries.values(), key=lambda e: -e.total_score)

    def _update_rankings(self) -> None:
        for position, entry in enumerate(self._sorted_entries(), start=1):
            entry.ranking = position
