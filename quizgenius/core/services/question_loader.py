"""Prepares fetched questions for a quiz session."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
import logging

from quizgenius.core.models import Question
from quizgenius.core.services.answer_ledger import AnswerLedger

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class LoadedQuestions:
    """Deduplicated questions together with their blank answer ledger."""

    questions: list[Question]
    ledger: AnswerLedger
    duplicates_removed: int = 0


def deduplicate_questions(questions: Iterable[Question]) -> tuple[list[Question], int]:
    """Drop repeated question ids, keeping the first occurrence and the original order."""
    seen: set[int] = set()
    unique: list[Question] = []
    duplicates = 0
    for question in questions:
        if question.id in seen:
            duplicates += 1
            continue
        seen.add(question.id)
        unique.append(question)
    return unique, duplicates


def load_questions(questions: Iterable[Question]) -> LoadedQuestions:
    unique, duplicates = deduplicate_questions(questions)
    if duplicates:
        logger.info("Removed %d duplicate question(s) while loading %d question(s)", duplicates, len(unique))
    ledger = AnswerLedger(question.id for question in unique)
    return LoadedQuestions(questions=unique, ledger=ledger, duplicates_removed=duplicates)
