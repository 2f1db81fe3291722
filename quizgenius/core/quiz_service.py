"""Business logic for quiz content, scoring, leaderboards and achievements shared with the API."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
import logging
import random
from threading import Lock

from quizgenius.constants.quiz_constants import (
    LEADERBOARD_DEFAULT_LIMIT,
    SAMPLE_QUIZ_FILENAME,
    SAMPLE_QUIZ_OWNER,
)
from quizgenius.core.models import (
    Question,
    QuestionDraft,
    Quiz,
    QuizDraft,
    QuizResult,
    ResultReport,
    UserAnswer,
    format_duration,
)
from quizgenius.core.quiz_importer import load_question_bank
from quizgenius.core.services.achievements import (
    Achievement,
    AchievementTracker,
    UserAchievement,
    UserHistory,
)
from quizgenius.core.services.leaderboard import Leaderboard, LeaderboardEntry
from quizgenius.core.services.quiz_generator import GenerationRequest, QuizGenerator
from quizgenius.core.services.quiz_repository import QuizRepository
from quizgenius.core.services.scoring import build_result_report, score_answers

logger = logging.getLogger(__name__)

SAMPLE_QUIZ_PATH = Path(__file__).resolve().parent.parent / "data" / SAMPLE_QUIZ_FILENAME


class QuizNotFoundError(LookupError):
    """Raised when a quiz, its questions or a result does not exist."""


@dataclass(frozen=True, slots=True)
class QuizStatistics:
    participant_count: int
    average_score: int
    completion_rate: int
    average_time_taken: str


@dataclass(frozen=True, slots=True)
class UserStatistics:
    quizzes_taken: int
    average_score: int
    best_score: int
    total_time_taken: str
    rank: int
    percentile: int


class QuizService:
    """Facade for quiz services: Repository, Scoring, Leaderboard, Achievements and Generator."""

    def __init__(
        self,
        repository: QuizRepository | None = None,
        generator: QuizGenerator | None = None,
        leaderboard: Leaderboard | None = None,
        achievements: AchievementTracker | None = None,
    ) -> None:
        self._lock = Lock()

        # Services
        self._repository = repository or QuizRepository()
        self._generator = generator or QuizGenerator([])
        self._leaderboard = leaderboard or Leaderboard()
        self._achievements = achievements or AchievementTracker()

        self._ranked_results: set[int] = set()

    @classmethod
    def with_sample_data(cls, bank_path: Path = SAMPLE_QUIZ_PATH, rng: random.Random | None = None) -> QuizService:
        """Create a service seeded from a question bank file, which also feeds the generator."""
        bank = load_question_bank(bank_path)
        repository = QuizRepository()
        for draft in bank.quizzes:
            repository.add_quiz(draft, SAMPLE_QUIZ_OWNER)
        for question in bank.standalone_questions:
            repository.add_bank_question(question)
        logger.info(
            "Loaded %d quiz(zes) and %d bank question(s) from %s",
            len(bank.quizzes),
            len(bank.standalone_questions),
            bank_path.name,
        )
        return cls(repository=repository, generator=QuizGenerator(bank.quizzes, rng=rng))

    # --- Quizzes ---

    def list_quizzes(self, user_id: str | None = None) -> list[Quiz]:
        with self._lock:
            return self._repository.list_quizzes(user_id)

    def get_quiz(self, quiz_id: int) -> Quiz:
        with self._lock:
            return self._require_quiz(quiz_id)

    def get_questions(self, quiz_id: int) -> list[Question]:
        with self._lock:
            questions = self._repository.get_questions(quiz_id)
            if not questions:
                raise QuizNotFoundError("No questions found for this quiz")
            return questions

    def get_bank_questions(self, category: str | None = None) -> list[Question]:
        with self._lock:
            return self._repository.get_bank_questions(category)

    def generate_quiz(self, request: GenerationRequest, user_id: str) -> Quiz:
        user_id = user_id.strip()
        if not user_id:
            raise ValueError("User ID is required")
        with self._lock:
            draft = self._generator.generate(request)
            quiz = self._repository.add_quiz(draft, user_id)
        logger.info("Generated quiz %s '%s' for user %s", quiz.id, quiz.title, user_id)
        return quiz

    def create_quiz(self, draft: QuizDraft, user_id: str) -> Quiz:
        """Store a hand-written quiz. Questions may be added now or later."""
        user_id = user_id.strip()
        if not user_id:
            raise ValueError("User ID is required")
        with self._lock:
            quiz = self._repository.add_quiz(draft, user_id, require_correct=True)
        logger.info("Created quiz %s '%s' with %d question(s)", quiz.id, quiz.title, quiz.question_count)
        return quiz

    def update_quiz(self, quiz_id: int, draft: QuizDraft) -> Quiz:
        with self._lock:
            self._require_quiz(quiz_id)
            quiz = self._repository.update_quiz(quiz_id, draft)
        logger.info("Updated details of quiz %s", quiz_id)
        return quiz

    def delete_quiz(self, quiz_id: int) -> None:
        with self._lock:
            if not self._repository.delete_quiz(quiz_id):
                raise QuizNotFoundError("Quiz not found")
        logger.info("Deleted quiz %s with its questions and results", quiz_id)

    # --- Questions ---

    def add_question(self, quiz_id: int, draft: QuestionDraft) -> Question:
        with self._lock:
            self._require_quiz(quiz_id)
            question = self._repository.add_question(quiz_id, draft)
        logger.info("Added question %s to quiz %s", question.id, quiz_id)
        return question

    def update_question(self, question_id: int, draft: QuestionDraft) -> Question:
        with self._lock:
            if self._repository.get_question(question_id) is None:
                raise QuizNotFoundError("Question not found")
            return self._repository.update_question(question_id, draft)

    def delete_question(self, question_id: int) -> None:
        with self._lock:
            if not self._repository.delete_question(question_id):
                raise QuizNotFoundError("Question not found")
        logger.info("Deleted question %s", question_id)

    # --- Submission & results ---

    def submit_quiz(
        self,
        quiz_id: int,
        user_id: str,
        answers: Iterable[UserAnswer],
        time_taken_seconds: int | None = None,
    ) -> QuizResult:
        """Score a submission, store the result and update the quiz's participation figures."""
        user_id = user_id.strip()
        if not user_id:
            raise ValueError("Invalid request data")
        if time_taken_seconds is not None and time_taken_seconds < 0:
            raise ValueError("Time taken cannot be negative")
        answers = list(answers)
        with self._lock:
            self._require_quiz(quiz_id)
            questions = self._repository.get_questions(quiz_id)
            score = score_answers(questions, answers)
            result = self._repository.add_result(quiz_id, user_id, score, time_taken_seconds or 0, answers)
            self._repository.record_participation(quiz_id)
        logger.info("User %s scored %d/%d on quiz %s", user_id, score, len(questions), quiz_id)
        return result

    def get_result_report(self, result_id: int) -> ResultReport:
        with self._lock:
            result = self._repository.get_result(result_id)
            if result is None:
                raise QuizNotFoundError("Quiz result not found")
            quiz = self._repository.get_quiz(result.quiz_id)
            questions = self._repository.get_questions(result.quiz_id)
            return build_result_report(result, quiz, questions)

    # --- Statistics ---

    def get_quiz_statistics(self, quiz_id: int) -> QuizStatistics:
        with self._lock:
            quiz = self._require_quiz(quiz_id)
            results = self._repository.results_for_quiz(quiz_id)
        total_score = sum(result.score for result in results)
        total_possible = len(results) * quiz.question_count
        average_seconds = sum(r.time_taken_seconds for r in results) / len(results) if results else 0
        return QuizStatistics(
            participant_count=quiz.participant_count,
            average_score=round(total_score / len(results)) if results else 0,
            completion_rate=round(total_score / total_possible * 100) if total_possible else 0,
            average_time_taken=format_duration(round(average_seconds)),
        )

    def get_user_statistics(self, user_id: str) -> UserStatistics:
        with self._lock:
            results = self._repository.results_for_user(user_id)
            entry = self._leaderboard.get_entry(user_id)
            percentile = self._leaderboard.percentile(user_id)
        if entry is None:
            return UserStatistics(0, 0, 0, format_duration(0), 0, 0)
        scores = [result.score for result in results]
        return UserStatistics(
            quizzes_taken=len(results),
            average_score=round(sum(scores) / len(scores)) if scores else 0,
            best_score=max(scores, default=0),
            total_time_taken=format_duration(sum(r.time_taken_seconds for r in results)),
            rank=entry.ranking,
            percentile=percentile,
        )

    # --- Leaderboard ---

    def get_leaderboard(self, limit: int = LEADERBOARD_DEFAULT_LIMIT) -> list[LeaderboardEntry]:
        with self._lock:
            return self._leaderboard.get_top(limit)

    def get_user_leaderboard(self, user_id: str) -> LeaderboardEntry:
        with self._lock:
            entry = self._leaderboard.get_entry(user_id)
        if entry is None:
            raise LookupError("Leaderboard entry not found")
        return entry

    def update_leaderboard(self, user_id: str, result_id: int) -> tuple[LeaderboardEntry, list[str]]:
        """Fold a result into the leaderboard once, then award any newly earned achievements."""
        if not user_id or not result_id:
            raise ValueError("User ID and quiz result ID are required")
        with self._lock:
            result = self._repository.get_result(result_id)
            if result is None:
                raise QuizNotFoundError("Quiz result not found")
            if result_id in self._ranked_results:
                entry = self._leaderboard.get_entry(user_id)
                logger.info("Result %s already counted on the leaderboard", result_id)
            else:
                quiz = self._require_quiz(result.quiz_id)
                entry = self._leaderboard.record_result(user_id, result.score, quiz.question_count)
                self._ranked_results.add(result_id)
            new_achievements = self._check_achievements(user_id)
        if entry is None:
            raise LookupError("Leaderboard entry not found")
        return entry, new_achievements

    # --- Achievements ---

    def list_achievements(self) -> list[Achievement]:
        with self._lock:
            return self._achievements.list_achievements()

    def get_user_achievements(self, user_id: str) -> list[tuple[UserAchievement, Achievement]]:
        with self._lock:
            return self._achievements.user_achievements(user_id)

    def award_achievement(self, user_id: str, achievement_id: int) -> UserAchievement:
        if not user_id or not achievement_id:
            raise ValueError("User ID and achievement ID are required")
        with self._lock:
            award, _ = self._achievements.award(user_id, achievement_id)
            return award

    def check_achievements(self, user_id: str) -> list[str]:
        if not user_id:
            raise ValueError("User ID is required")
        with self._lock:
            return self._check_achievements(user_id)

    # --- Internals (caller holds the lock) ---

    def _require_quiz(self, quiz_id: int) -> Quiz:
        quiz = self._repository.get_quiz(quiz_id)
        if quiz is None:
            raise QuizNotFoundError("Quiz not found")
        return quiz

    def _check_achievements(self, user_id: str) -> list[str]:
        entry = self._leaderboard.get_entry(user_id)
        if entry is None:
            return []
        results = self._repository.results_for_user(user_id)
        quizzes = {quiz.id: quiz for quiz in self._repository.list_quizzes()}
        history = UserHistory(results=results, quizzes=quizzes, best_streak=entry.best_streak)
        return self._achievements.evaluate(user_id, history)
