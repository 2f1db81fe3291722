"""Offline quiz generator backed by the question bank.

Requests are matched against the topic keywords of the bank quizzes. When
nothing matches, a random bank quiz is retitled after the requested topic.
The question list is then padded by repeating questions or trimmed to the
requested count.
"""

from __future__ import annotations

from collections.abc import Sequence
import copy
from dataclasses import dataclass
import logging
import random
import re

from quizgenius.constants.quiz_constants import MAX_GENERATED_QUESTIONS
from quizgenius.core.models import QuestionDraft, QuizDraft

logger = logging.getLogger(__name__)


class GenerationError(ValueError):
    """Raised when a generation request is invalid or cannot be served."""


def _parse_positive_int(value: object, field_name: str) -> int:
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError) as exc:
        raise GenerationError(f"{field_name} must be a whole number.") from exc
    if parsed <= 0:
        raise GenerationError(f"{field_name} must be a positive number.")
    return parsed


@dataclass(frozen=True, slots=True)
class GenerationRequest:
    topic: str
    difficulty: str
    question_count: int
    time_limit_minutes: int
    include_code: bool = False

    @classmethod
    def parse(
        cls,
        topic: str,
        difficulty: str,
        question_count: object,
        time_limit: object,
        include_code: bool = False,
    ) -> GenerationRequest:
        """Validate raw request values; counts may arrive as numeric strings."""
        topic = topic.strip()
        difficulty = difficulty.strip().lower()
        if not topic:
            raise GenerationError("Topic is required")
        if not difficulty:
            raise GenerationError("Difficulty is required")
        count = _parse_positive_int(question_count, "Question count")
        if count > MAX_GENERATED_QUESTIONS:
            raise GenerationError(f"Question count cannot exceed {MAX_GENERATED_QUESTIONS}.")
        return cls(
            topic=topic,
            difficulty=difficulty,
            question_count=count,
            time_limit_minutes=_parse_positive_int(time_limit, "Time limit"),
            include_code=include_code,
        )


class QuizGenerator:
    """Builds quiz drafts from a fixed set of template quizzes."""

    def __init__(self, templates: Sequence[QuizDraft], rng: random.Random | None = None) -> None:
        self._templates = list(templates)
        self._rng = rng or random.Random()

    def generate(self, request: GenerationRequest) -> QuizDraft:
        if not self._templates:
            raise GenerationError("No question bank is available to generate quizzes from.")

        template = self._match(request.topic, request.difficulty)
        if template is not None:
            title, description = template.title, template.description
            logger.info("Generating '%s' from matching bank quiz '%s'", request.topic, template.title)
        else:
            template = self._rng.choice(self._templates)
            title = f"{request.topic} {request.difficulty.capitalize()} Quiz"
            description = f"Test your {request.difficulty} knowledge about {request.topic}."
            logger.info("No bank quiz matches '%s'; reusing '%s'", request.topic, template.title)

        questions = self._select_questions(template.questions, request)
        return QuizDraft(
            title=title,
            description=description,
            category=template.category,
            difficulty=request.difficulty,
            time_limit_minutes=request.time_limit_minutes,
            topics=list(template.topics),
            questions=questions,
        )

    def _match(self, topic: str, difficulty: str) -> QuizDraft | None:
        normalized = topic.lower()
        candidates = [
            template
            for template in self._templates
            if any(re.search(rf"\b{re.escape(keyword)}\b", normalized) for keyword in template.topics)
        ]
        if not candidates:
            return None
        preferred = [template for template in candidates if template.difficulty == difficulty]
        return (preferred or candidates)[0]

    @staticmethod
    def _select_questions(source: list[QuestionDraft], request: GenerationRequest) -> list[QuestionDraft]:
        ordered = list(source)
        if request.include_code:
            ordered.sort(key=lambda question: question.code_snippet is None)
        if not ordered:
            raise GenerationError("Selected bank quiz has no questions.")

        questions: list[QuestionDraft] = []
        while len(questions) < request.question_count:
            questions.append(copy.deepcopy(ordered[len(questions) % len(ordered)]))
        return questions
