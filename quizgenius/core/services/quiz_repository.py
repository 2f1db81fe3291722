"""In-memory storage for quizzes, questions, options and results."""

from __future__ import annotations

from collections.abc import Iterable
import copy
import dataclasses

from quizgenius.constants.quiz_constants import MAX_OPTIONS_PER_QUESTION, MIN_OPTIONS_PER_QUESTION
from quizgenius.core.models import (
    Option,
    Question,
    QuestionDraft,
    Quiz,
    QuizDraft,
    QuizResult,
    UserAnswer,
    parse_time_limit_minutes,
    utcnow,
)


class QuizRepository:
    """Stores quiz content and results with monotonically increasing ids.

    Getters hand out copies so callers can serialise them outside any lock.
    """

    def __init__(self) -> None:
        self._quizzes: dict[int, Quiz] = {}
        self._questions: dict[int, Question] = {}
        self._results: dict[int, QuizResult] = {}
        self._quiz_counter: int = 0
        self._question_counter: int = 0
        self._option_counter: int = 0
        self._result_counter: int = 0

    # --- Quizzes ---

    def add_quiz(self, draft: QuizDraft, user_id: str, *, require_correct: bool = False) -> Quiz:
        """Store a quiz and its questions in one step.

        Bank quizzes may carry questions without a marked answer; authored
        quizzes pass ``require_correct`` so every question needs one.
        """
        details = self._validate_details(draft)
        prepared_questions = [
            self._validate_question(question, require_correct=require_correct) for question in draft.questions
        ]

        self._quiz_counter += 1
        quiz = Quiz(id=self._quiz_counter, user_id=user_id, **details)
        self._quizzes[quiz.id] = quiz
        for question in prepared_questions:
            self._store_question(question, quiz_id=quiz.id, category=quiz.category, difficulty=quiz.difficulty)
        quiz.question_count = len(prepared_questions)
        return dataclasses.replace(quiz)

    def get_quiz(self, quiz_id: int) -> Quiz | None:
        quiz = self._quizzes.get(quiz_id)
        return dataclasses.replace(quiz) if quiz is not None else None

    def list_quizzes(self, user_id: str | None = None) -> list[Quiz]:
        return [
            dataclasses.replace(quiz)
            for quiz in self._quizzes.values()
            if user_id is None or quiz.user_id == user_id
        ]

    def update_quiz(self, quiz_id: int, draft: QuizDraft) -> Quiz:
        """Replace title, description, category, difficulty and time limit. Questions are untouched."""
        quiz = self._require_quiz(quiz_id)
        for name, value in self._validate_details(draft).items():
            setattr(quiz, name, value)
        for question in self._questions.values():
            if question.quiz_id == quiz_id:
                question.category = quiz.category
                question.difficulty = quiz.difficulty
        return dataclasses.replace(quiz)

    def record_participation(self, quiz_id: int) -> Quiz:
        """Count one more participant and recompute the completion rate from stored results."""
        quiz = self._require_quiz(quiz_id)
        quiz.participant_count += 1
        results = self.results_for_quiz(quiz_id)
        total_possible = len(results) * quiz.question_count
        total_score = sum(result.score for result in results)
        quiz.completion_rate = round(total_score / total_possible * 100) if total_possible else 0
        return dataclasses.replace(quiz)

    def delete_quiz(self, quiz_id: int) -> bool:
        """Remove a quiz with its questions, their options and its results."""
        if self._quizzes.pop(quiz_id, None) is None:
            return False
        for question_id in [qid for qid, q in self._questions.items() if q.quiz_id == quiz_id]:
            del self._questions[question_id]
        for result_id in [rid for rid, r in self._results.items() if r.quiz_id == quiz_id]:
            del self._results[result_id]
        return True

    # --- Questions ---

    def add_bank_question(self, draft: QuestionDraft) -> Question:
        """Store a standalone question that belongs to no quiz."""
        prepared = self._validate_question(draft)
        return copy.deepcopy(
            self._store_question(prepared, quiz_id=None, category=draft.category, difficulty=draft.difficulty)
        )

    def add_question(self, quiz_id: int, draft: QuestionDraft) -> Question:
        """Append an authored question to a quiz; it must mark at least one correct option."""
        quiz = self._require_quiz(quiz_id)
        prepared = self._validate_question(draft, require_correct=True)
        question = self._store_question(prepared, quiz_id=quiz_id, category=quiz.category, difficulty=quiz.difficulty)
        self._sync_question_count(quiz)
        return copy.deepcopy(question)

    def update_question(self, question_id: int, draft: QuestionDraft) -> Question:
        """Rewrite a question in place.

        Options keep their ids by position so stored results still resolve;
        options beyond the old count get fresh ids.
        """
        question = self._questions.get(question_id)
        if question is None:
            raise LookupError(f"Question with id {question_id} not found")
        prepared = self._validate_question(draft, require_correct=True)
        old_ids = [option.id for option in question.options]
        question.text = prepared.text
        question.code_snippet = prepared.code_snippet
        question.options = self._build_options(question_id, prepared, reuse_ids=old_ids)
        return copy.deepcopy(question)

    def delete_question(self, question_id: int) -> bool:
        question = self._questions.pop(question_id, None)
        if question is None:
            return False
        if question.quiz_id is not None and question.quiz_id in self._quizzes:
            self._sync_question_count(self._quizzes[question.quiz_id])
        return True

    def get_question(self, question_id: int) -> Question | None:
        question = self._questions.get(question_id)
        return copy.deepcopy(question) if question is not None else None

    def get_questions(self, quiz_id: int) -> list[Question]:
        return [copy.deepcopy(q) for q in self._questions.values() if q.quiz_id == quiz_id]

    def get_bank_questions(self, category: str | None = None) -> list[Question]:
        wanted = category.strip().lower() if category else None
        return [
            copy.deepcopy(question)
            for question in self._questions.values()
            if question.quiz_id is None
            and (wanted is None or (question.category or "").lower() == wanted)
        ]

    # --- Results ---

    def add_result(
        self,
        quiz_id: int,
        user_id: str,
        score: int,
        time_taken_seconds: int,
        answers: Iterable[UserAnswer],
    ) -> QuizResult:
        self._require_quiz(quiz_id)
        self._result_counter += 1
        result = QuizResult(
            id=self._result_counter,
            quiz_id=quiz_id,
            user_id=user_id,
            score=score,
            time_taken_seconds=max(0, int(time_taken_seconds)),
            completed_at=utcnow(),
            answers=tuple(UserAnswer(a.question_id, a.answer_id) for a in answers),
        )
        self._results[result.id] = result
        return result

    def get_result(self, result_id: int) -> QuizResult | None:
        return self._results.get(result_id)

    def results_for_quiz(self, quiz_id: int) -> list[QuizResult]:
        return [result for result in self._results.values() if result.quiz_id == quiz_id]

    def results_for_user(self, user_id: str) -> list[QuizResult]:
        return [result for result in self._results.values() if result.user_id == user_id]

    # --- Internals ---

    def _require_quiz(self, quiz_id: int) -> Quiz:
        quiz = self._quizzes.get(quiz_id)
        if quiz is None:
            raise LookupError(f"Quiz with id {quiz_id} not found")
        return quiz

    def _store_question(
        self,
        draft: QuestionDraft,
        *,
        quiz_id: int | None,
        category: str | None,
        difficulty: str | None,
    ) -> Question:
        question_id = self._next_question_id()
        question = Question(
            id=question_id,
            text=draft.text,
            options=self._build_options(question_id, draft),
            quiz_id=quiz_id,
            code_snippet=draft.code_snippet,
            category=category,
            difficulty=difficulty,
        )
        self._questions[question_id] = question
        return question

    def _build_options(
        self,
        question_id: int,
        draft: QuestionDraft,
        reuse_ids: list[int] | None = None,
    ) -> list[Option]:
        reuse_ids = reuse_ids or []
        return [
            Option(
                id=reuse_ids[index] if index < len(reuse_ids) else self._next_option_id(),
                question_id=question_id,
                text=text,
                is_correct=index in draft.correct_indices,
            )
            for index, text in enumerate(draft.options)
        ]

    def _sync_question_count(self, quiz: Quiz) -> None:
        quiz.question_count = sum(1 for q in self._questions.values() if q.quiz_id == quiz.id)

    @staticmethod
    def _validate_details(draft: QuizDraft) -> dict[str, object]:
        title = draft.title.strip()
        if not title:
            raise ValueError("Quiz title must not be empty.")
        return {
            "title": title,
            "description": draft.description.strip(),
            "category": draft.category.strip() or "General",
            "difficulty": draft.difficulty.strip().lower(),
            "time_limit_minutes": parse_time_limit_minutes(draft.time_limit_minutes),
        }

    def _validate_question(self, draft: QuestionDraft, *, require_correct: bool = False) -> QuestionDraft:
        """Validate and normalize a question before storage."""
        cleaned_text = draft.text.strip()
        if not cleaned_text:
            raise ValueError("Question text must not be empty.")
        options = self._validate_options(draft.options)
        if any(not 0 <= index < len(options) for index in draft.correct_indices):
            raise ValueError("Correct option index out of range.")
        if require_correct and not draft.correct_indices:
            raise ValueError("Mark at least one option as correct.")
        snippet = draft.code_snippet.strip("\n") if draft.code_snippet else None
        return QuestionDraft(
            text=cleaned_text,
            options=options,
            correct_indices=sorted(set(draft.correct_indices)),
            code_snippet=snippet or None,
            category=draft.category,
            difficulty=draft.difficulty,
        )

    def _next_question_id(self) -> int:
        self._question_counter += 1
        return self._question_counter

    def _next_option_id(self) -> int:
        self._option_counter += 1
        return self._option_counter

    @staticmethod
    def _validate_options(options: list[str]) -> list[str]:
        if not MIN_OPTIONS_PER_QUESTION <= len(options) <= MAX_OPTIONS_PER_QUESTION:
            raise ValueError(
                f"Each question must have between {MIN_OPTIONS_PER_QUESTION} "
                f"and {MAX_OPTIONS_PER_QUESTION} options."
            )
        cleaned = [option.strip() for option in options]
        if any(not option for option in cleaned):
            raise ValueError("Option text cannot be empty.")
        return cleaned
