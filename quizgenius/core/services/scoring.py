"""Scoring of submitted answers and result report assembly."""

from __future__ import annotations

from collections.abc import Iterable

from quizgenius.core.models import (
    Question,
    Quiz,
    QuizResult,
    ResultQuestion,
    ResultReport,
    UserAnswer,
    format_duration,
)

NO_ANSWER_TEXT = "No answer"


def is_answer_correct(question: Question, answer_id: int | None) -> bool:
    """An answer is correct when the chosen option belongs to the question and is flagged correct."""
    option = question.option_by_id(answer_id)
    return option is not None and option.is_correct


def score_answers(questions: Iterable[Question], answers: Iterable[UserAnswer]) -> int:
    """Count correct answers. Each question counts once; unknown question ids are ignored."""
    by_id = {question.id: question for question in questions}
    scored: set[int] = set()
    score = 0
    for answer in answers:
        question = by_id.get(answer.question_id)
        if question is None or question.id in scored:
            continue
        scored.add(question.id)
        if is_answer_correct(question, answer.answer_id):
            score += 1
    return score


def build_result_report(result: QuizResult, quiz: Quiz | None, questions: list[Question]) -> ResultReport:
    answers = {answer.question_id: answer.answer_id for answer in result.answers}
    rows: list[ResultQuestion] = []
    for question in questions:
        answer_id = answers.get(question.id)
        selected = question.option_by_id(answer_id)
        rows.append(
            ResultQuestion(
                id=question.id,
                text=question.text,
                code_snippet=question.code_snippet,
                user_answer=selected.text if selected is not None else NO_ANSWER_TEXT,
                correct_answer=", ".join(option.text for option in question.correct_options()),
                is_correct=is_answer_correct(question, answer_id),
            )
        )
    return ResultReport(
        id=result.id,
        quiz_id=result.quiz_id,
        quiz_title=quiz.title if quiz is not None else "",
        score=result.score,
        total_questions=len(questions),
        correct_answers=sum(1 for row in rows if row.is_correct),
        time_taken=format_duration(result.time_taken_seconds),
        completed_at=result.completed_at,
        questions=rows,
    )
