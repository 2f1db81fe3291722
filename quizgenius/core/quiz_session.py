"""Client-side quiz-taking session: questions, answers, timer and submission."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum, auto
import logging
import time

from quizgenius.constants.ui_constants import NO_QUESTIONS_MESSAGE, NO_QUESTIONS_TITLE
from quizgenius.core.models import Question, Quiz
from quizgenius.core.services.answer_ledger import AnswerLedger
from quizgenius.core.services.api_client import QuizApiClient
from quizgenius.core.services.question_loader import load_questions
from quizgenius.core.services.session_timer import Scheduler, SessionTimer, format_time_remaining
from quizgenius.core.services.submission_gateway import (
    SessionPreconditionError,
    SubmissionError,
    SubmissionGateway,
)

logger = logging.getLogger(__name__)

NoticeCallback = Callable[[str, str], None]


class SessionState(Enum):
    """Lifecycle of one quiz attempt."""

    NOT_STARTED = auto()
    IN_PROGRESS = auto()
    COMPLETED = auto()


class SubmitStatus(Enum):
    SUBMITTED = auto()
    NEEDS_CONFIRMATION = auto()
    FAILED = auto()
    IGNORED = auto()


@dataclass(frozen=True, slots=True)
class SubmissionOutcome:
    """What happened when the session tried to submit."""

    status: SubmitStatus
    result_id: int | None = None
    score: int | None = None
    unanswered_count: int = 0
    error: str | None = None
    forced: bool = False


class SessionController:
    """Owns one quiz attempt from opening the quiz to completion or reset.

    A single instance is created by the application and injected into the UI;
    all state changes go through the methods below.
    """

    def __init__(
        self,
        api_client: QuizApiClient,
        user_id: str,
        *,
        scheduler: Scheduler | None = None,
        gateway: SubmissionGateway | None = None,
        on_notice: NoticeCallback | None = None,
        on_update: Callable[[SubmissionOutcome | None], None] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._api_client = api_client
        self._user_id = user_id
        self._gateway = gateway or SubmissionGateway(api_client)
        self._timer = SessionTimer(scheduler)
        self._on_notice = on_notice
        self._on_update = on_update
        self._clock = clock

        self._generation: int = 0
        self._active_quiz: Quiz | None = None
        self._questions: list[Question] = []
        self._ledger = AnswerLedger()
        self._current_index: int = 0
        self._state = SessionState.NOT_STARTED
        self._started_at: float | None = None
        self._submitting: bool = False
        self._forced_submission_fired: bool = False
        self._result_id: int | None = None
        self._score: int | None = None

    # --- Setup ---

    def open_quiz(self, quiz_id: int) -> Quiz:
        """Reset, then fetch a quiz and its questions and prepare a new attempt."""
        self.reset()
        quiz = self._api_client.fetch_quiz(quiz_id)
        questions = self._api_client.fetch_questions(quiz_id)
        self.set_active_quiz(quiz)
        self.set_questions(questions)
        logger.info("Opened quiz %s with %d question(s)", quiz_id, len(self._questions))
        return quiz

    def set_active_quiz(self, quiz: Quiz) -> None:
        self._active_quiz = quiz
        self._timer.seed(quiz.time_limit_minutes)

    def set_questions(self, questions: Iterable[Question]) -> None:
        loaded = load_questions(questions)
        self._questions = loaded.questions
        self._ledger = loaded.ledger
        self._current_index = 0

    def set_on_update(self, callback: Callable[[SubmissionOutcome | None], None] | None) -> None:
        self._on_update = callback

    def set_on_notice(self, callback: NoticeCallback | None) -> None:
        self._on_notice = callback

    # --- State ---

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_started(self) -> bool:
        return self._state is not SessionState.NOT_STARTED

    @property
    def is_completed(self) -> bool:
        return self._state is SessionState.COMPLETED

    @property
    def is_submitting(self) -> bool:
        return self._submitting

    @property
    def active_quiz(self) -> Quiz | None:
        return self._active_quiz

    @property
    def questions(self) -> list[Question]:
        return list(self._questions)

    @property
    def question_count(self) -> int:
        return len(self._questions)

    @property
    def answered_count(self) -> int:
        return self._ledger.answered_count()

    @property
    def seconds_remaining(self) -> int:
        return self._timer.seconds_remaining

    @property
    def time_remaining_text(self) -> str:
        return format_time_remaining(self._timer.seconds_remaining)

    @property
    def result_id(self) -> int | None:
        return self._result_id

    @property
    def score(self) -> int | None:
        return self._score

    @property
    def user_id(self) -> str:
        return self._user_id

    @property
    def current_index(self) -> int:
        self._repair_pointer()
        return self._current_index

    @property
    def current_question(self) -> Question | None:
        self._repair_pointer()
        if not self._questions:
            return None
        return self._questions[self._current_index]

    def is_last_question(self) -> bool:
        return bool(self._questions) and self.current_index == len(self._questions) - 1

    # --- Transitions ---

    def start(self) -> bool:
        """Move from NotStarted to InProgress. Requires at least one loaded question."""
        if self._state is SessionState.IN_PROGRESS:
            return True
        if self._state is SessionState.COMPLETED:
            logger.info("Ignoring start on a completed session; reset it first")
            return False
        if not self._questions:
            self._notify(NO_QUESTIONS_TITLE, NO_QUESTIONS_MESSAGE)
            return False

        self._state = SessionState.IN_PROGRESS
        self._started_at = self._clock()
        self._forced_submission_fired = False
        self._timer.start(self._handle_timer_tick)
        logger.info("Quiz started with %d question(s)", len(self._questions))
        return True

    def reset(self) -> None:
        """Cancel the timer and return every field to its initial value.

        Bumping the generation makes any in-flight submission response a no-op.
        """
        self._timer.reset()
        self._generation += 1
        self._active_quiz = None
        self._questions = []
        self._ledger = AnswerLedger()
        self._current_index = 0
        self._state = SessionState.NOT_STARTED
        self._started_at = None
        self._submitting = False
        self._forced_submission_fired = False
        self._result_id = None
        self._score = None

    def close(self) -> None:
        """Teardown hook for the owning view."""
        self.reset()

    # --- Navigation ---

    def next(self) -> SubmissionOutcome | None:
        """Advance one question, or submit when already on the last one."""
        if self._state is not SessionState.IN_PROGRESS:
            return None
        if self.current_index < len(self._questions) - 1:
            self._current_index += 1
            return None
        return self.submit()

    def previous(self) -> None:
        if self.current_index > 0:
            self._current_index -= 1

    def go_to(self, index: int) -> None:
        if not 0 <= index < len(self._questions):
            raise IndexError(f"Question index {index} out of range")
        self._current_index = index

    # --- Answers ---

    def record_answer(self, question_id: int, answer_id: int | None) -> bool:
        if self._state is SessionState.COMPLETED:
            logger.info("Ignoring answer for question %s on a completed session", question_id)
            return False
        return self._ledger.record_answer(question_id, answer_id)

    def answer_for(self, question_id: int) -> int | None:
        return self._ledger.answer_for(question_id)

    # --- Timer ---

    def tick(self) -> SubmissionOutcome | None:
        """Advance the countdown by one second; expiry forces a single submission."""
        if self._state is not SessionState.IN_PROGRESS:
            return None
        reached_zero = self._timer.tick()
        if not reached_zero or self._forced_submission_fired:
            return None
        self._forced_submission_fired = True
        logger.info("Time limit reached, submitting quiz automatically")
        return self.submit(confirmed=True, forced=True)

    def _handle_timer_tick(self) -> None:
        outcome = self.tick()
        if self._on_update is not None:
            self._on_update(outcome)

    # --- Submission ---

    def submit(self, confirmed: bool = False, *, forced: bool = False) -> SubmissionOutcome:
        """Submit the ledger.

        Unanswered questions require a second, confirmed call. Raises
        SessionPreconditionError without touching the network when the session
        is not in progress.
        """
        if self._state is not SessionState.IN_PROGRESS or self._active_quiz is None or not self._questions:
            raise SessionPreconditionError("Quiz not properly started")
        if self._submitting:
            logger.info("Submission already in progress; ignoring duplicate request")
            return SubmissionOutcome(status=SubmitStatus.IGNORED, forced=forced)

        unanswered = self._ledger.unanswered_count()
        if unanswered and not confirmed:
            plural = "s" if unanswered > 1 else ""
            self._notify(
                f"{unanswered} question{plural} unanswered",
                "Are you sure you want to submit? You can go back and review your answers.",
            )
            return SubmissionOutcome(status=SubmitStatus.NEEDS_CONFIRMATION, unanswered_count=unanswered)

        generation = self._generation
        self._submitting = True
        try:
            receipt = self._gateway.submit(
                self._active_quiz.id,
                self._user_id,
                self._ledger,
                self._elapsed_seconds(),
            )
        except SubmissionError as exc:
            if generation != self._generation:
                logger.info("Discarding submission failure for a session that was reset")
                return SubmissionOutcome(status=SubmitStatus.IGNORED, forced=forced)
            self._submitting = False
            self._notify("Error submitting quiz", str(exc) or "Could not submit your answers")
            return SubmissionOutcome(
                status=SubmitStatus.FAILED,
                unanswered_count=unanswered,
                error=str(exc),
                forced=forced,
            )
        finally:
            # A reset during the request already cleared the flag for the new attempt.
            if generation == self._generation:
                self._submitting = False

        if generation != self._generation:
            logger.info("Discarding submission response for a session that was reset")
            return SubmissionOutcome(status=SubmitStatus.IGNORED, forced=forced)

        self._timer.cancel()
        self._state = SessionState.COMPLETED
        self._result_id = receipt.result_id
        self._score = receipt.score
        return SubmissionOutcome(
            status=SubmitStatus.SUBMITTED,
            result_id=receipt.result_id,
            score=receipt.score,
            unanswered_count=unanswered,
            forced=forced,
        )

    # --- Helpers ---

    def _elapsed_seconds(self) -> int | None:
        if self._started_at is None:
            return None
        return max(0, round(self._clock() - self._started_at))

    def _repair_pointer(self) -> None:
        if not self._questions:
            self._current_index = 0
            return
        if not 0 <= self._current_index < len(self._questions):
            logger.warning(
                "Question pointer %d is outside 0..%d; resetting to the first question",
                self._current_index,
                len(self._questions) - 1,
            )
            self._current_index = 0

    def _notify(self, title: str, message: str) -> None:
        logger.info("%s: %s", title, message)
        if self._on_notice is not None:
            self._on_notice(title, message)
