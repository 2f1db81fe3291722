"""Per-session mapping from question id to the selected option id."""

from __future__ import annotations

from collections.abc import Iterable
import logging

from quizgenius.core.models import UserAnswer

logger = logging.getLogger(__name__)


class AnswerLedger:
    """Ordered answer sheet with one entry per loaded question.

    Entries are created blank (``None``) and only ever replaced, so the key set
    always equals the set of questions the ledger was built from.
    """

    def __init__(self, question_ids: Iterable[int] = ()) -> None:
        self._answers: dict[int, int | None] = {}
        for question_id in question_ids:
            self._answers.setdefault(question_id, None)

    def record_answer(self, question_id: int, answer_id: int | None) -> bool:
        """Replace the answer for a known question. Returns False for unknown ids."""
        if question_id not in self._answers:
            logger.warning("Ignoring answer for question %s which is not in the ledger", question_id)
            return False
        self._answers[question_id] = answer_id
        return True

    def answer_for(self, question_id: int) -> int | None:
        return self._answers.get(question_id)

    def question_ids(self) -> list[int]:
        return list(self._answers)

    def entries(self) -> list[UserAnswer]:
        return [
            UserAnswer(question_id=question_id, answer_id=answer_id)
            for question_id, answer_id in self._answers.items()
        ]

    def answered_count(self) -> int:
        return sum(1 for answer_id in self._answers.values() if answer_id is not None)

    def unanswered_count(self) -> int:
        return len(self._answers) - self.answered_count()

    def clear(self) -> None:
        self._answers.clear()

    def __contains__(self, question_id: object) -> bool:
        return question_id in self._answers

    def __len__(self) -> int:
        return len(self._answers)
