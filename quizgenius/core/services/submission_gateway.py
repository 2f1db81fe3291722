"""Sends a finished answer ledger to the scoring endpoint."""

from __future__ import annotations

import logging

from quizgenius.core.models import SubmissionReceipt
from quizgenius.core.services.answer_ledger import AnswerLedger
from quizgenius.core.services.api_client import ApiError, QuizApiClient

logger = logging.getLogger(__name__)


class SessionPreconditionError(RuntimeError):
    """Raised when an action is invoked on a session that is not in the required state."""


class SubmissionError(Exception):
    """Raised when the scoring endpoint rejects or fails to receive a submission."""


class SubmissionGateway:
    """Packages a ledger and posts it to ``/api/quizzes/{id}/submit``."""

    def __init__(self, api_client: QuizApiClient) -> None:
        self._api_client = api_client
        self._attempts: int = 0

    @property
    def attempts(self) -> int:
        """Number of network submissions attempted through this gateway."""
        return self._attempts

    def submit(
        self,
        quiz_id: int,
        user_id: str,
        ledger: AnswerLedger,
        time_taken_seconds: int | None = None,
    ) -> SubmissionReceipt:
        if len(ledger) == 0:
            raise SessionPreconditionError("Cannot submit a quiz without questions.")

        answers = ledger.entries()
        self._attempts += 1
        logger.info(
            "Submitting quiz %s for user %s (%d answered, %d unanswered)",
            quiz_id,
            user_id,
            ledger.answered_count(),
            ledger.unanswered_count(),
        )
        try:
            receipt = self._api_client.submit_quiz(quiz_id, user_id, answers, time_taken_seconds)
        except ApiError as exc:
            logger.warning("Submission of quiz %s failed: %s", quiz_id, exc.message)
            raise SubmissionError(exc.message) from exc
        logger.info("Quiz %s submitted, result %s", quiz_id, receipt.result_id)
        return receipt
