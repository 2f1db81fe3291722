"""FastAPI server that exposes the QuizGenius REST API."""

from __future__ import annotations

import logging
from threading import Thread

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
import uvicorn

from quizgenius.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from quizgenius.constants.quiz_constants import LEADERBOARD_DEFAULT_LIMIT
from quizgenius.core.models import (
    Question,
    QuestionDraft,
    Quiz,
    QuizDraft,
    ResultReport,
    UserAnswer,
)
from quizgenius.core.quiz_service import QuizService, QuizStatistics, UserStatistics
from quizgenius.core.services.achievements import Achievement, UserAchievement
from quizgenius.core.services.leaderboard import LeaderboardEntry
from quizgenius.core.services.quiz_generator import GenerationRequest

logger = logging.getLogger(__name__)


class AnswerPayload(BaseModel):
    questionId: int
    answerId: int | None = None


class SubmitPayload(BaseModel):
    userId: str = ""
    answers: list[AnswerPayload] | None = None
    timeTakenSeconds: int | None = None


class GeneratePayload(BaseModel):
    topic: str = ""
    difficulty: str = ""
    questionCount: str | int = ""
    timeLimit: str | int = ""
    includeCode: bool = False
    userId: str = ""


class OptionPayload(BaseModel):
    text: str = ""
    isCorrect: bool = False


class QuestionPayload(BaseModel):
    text: str = ""
    codeSnippet: str | None = None
    options: list[OptionPayload] = []


class QuizPayload(BaseModel):
    title: str = ""
    description: str = ""
    category: str = ""
    difficulty: str = ""
    timeLimit: str | int = ""
    userId: str = ""
    questions: list[QuestionPayload] = []


class LeaderboardUpdatePayload(BaseModel):
    userId: str = ""
    quizResultId: int | None = None


class AwardPayload(BaseModel):
    userId: str = ""
    achievementId: int | None = None


class CheckPayload(BaseModel):
    userId: str = ""


def _time_limit_from_payload(value: str | int) -> int:
    try:
        minutes = int(str(value).strip())
    except ValueError as exc:
        raise ValueError("Time limit must be a whole number of minutes") from exc
    if minutes <= 0:
        raise ValueError("Time limit must be a positive number of minutes")
    return minutes


def _question_draft(payload: QuestionPayload) -> QuestionDraft:
    return QuestionDraft(
        text=payload.text,
        options=[option.text for option in payload.options],
        correct_indices=[index for index, option in enumerate(payload.options) if option.isCorrect],
        code_snippet=payload.codeSnippet,
    )


def _quiz_draft(payload: QuizPayload) -> QuizDraft:
    return QuizDraft(
        title=payload.title,
        description=payload.description,
        category=payload.category,
        difficulty=payload.difficulty,
        time_limit_minutes=_time_limit_from_payload(payload.timeLimit),
        questions=[_question_draft(question) for question in payload.questions],
    )


def _quiz_payload(quiz: Quiz) -> dict[str, object]:
    return {
        "id": quiz.id,
        "title": quiz.title,
        "description": quiz.description,
        "category": quiz.category,
        "difficulty": quiz.difficulty,
        "questionCount": quiz.question_count,
        "timeLimit": str(quiz.time_limit_minutes),
        "userId": quiz.user_id,
        "active": quiz.active,
        "completionRate": quiz.completion_rate,
        "participantCount": quiz.participant_count,
        "createdAt": quiz.created_at.isoformat(),
    }


def _question_payload(question: Question) -> dict[str, object]:
    return {
        "id": question.id,
        "quizId": question.quiz_id,
        "text": question.text,
        "codeSnippet": question.code_snippet,
        "category": question.category,
        "difficulty": question.difficulty,
        "options": [
            {
                "id": option.id,
                "questionId": option.question_id,
                "text": option.text,
                "isCorrect": option.is_correct,
            }
            for option in question.options
        ],
    }


def _report_payload(report: ResultReport) -> dict[str, object]:
    return {
        "id": report.id,
        "quizId": report.quiz_id,
        "quizTitle": report.quiz_title,
        "score": report.score,
        "totalQuestions": report.total_questions,
        "correctAnswers": report.correct_answers,
        "timeTaken": report.time_taken,
        "completedAt": report.completed_at.isoformat(),
        "questions": [
            {
                "id": row.id,
                "text": row.text,
                "codeSnippet": row.code_snippet,
                "userAnswer": row.user_answer,
                "correctAnswer": row.correct_answer,
                "isCorrect": row.is_correct,
            }
            for row in report.questions
        ],
    }


def _leaderboard_payload(entry: LeaderboardEntry) -> dict[str, object]:
    return {
        "userId": entry.user_id,
        "totalScore": entry.total_score,
        "quizzesCompleted": entry.quizzes_completed,
        "averageScore": entry.average_score,
        "bestStreak": entry.best_streak,
        "currentStreak": entry.current_streak,
        "ranking": entry.ranking,
        "lastActive": entry.last_active.isoformat(),
    }


def _achievement_payload(achievement: Achievement) -> dict[str, object]:
    return {
        "id": achievement.id,
        "name": achievement.name,
        "description": achievement.description,
        "criteria": achievement.criteria,
        "icon": achievement.icon,
    }


def _user_achievement_payload(award: UserAchievement, achievement: Achievement | None = None) -> dict[str, object]:
    payload: dict[str, object] = {
        "id": award.id,
        "userId": award.user_id,
        "achievementId": award.achievement_id,
        "earnedAt": award.earned_at.isoformat(),
    }
    if achievement is not None:
        payload["achievement"] = _achievement_payload(achievement)
    return payload


def _quiz_statistics_payload(stats: QuizStatistics) -> dict[str, object]:
    return {
        "participantCount": stats.participant_count,
        "averageScore": stats.average_score,
        "completionRate": stats.completion_rate,
        "averageTimeTaken": stats.average_time_taken,
    }


def _user_statistics_payload(stats: UserStatistics) -> dict[str, object]:
    return {
        "quizzesTaken": stats.quizzes_taken,
        "averageScore": stats.average_score,
        "bestScore": stats.best_score,
        "totalTimeTaken": stats.total_time_taken,
        "rank": stats.rank,
        "percentile": stats.percentile,
    }


def create_api_app(quiz_service: QuizService) -> FastAPI:
    app = FastAPI(title="QuizGenius API", version="0.2.0")

    def quiz_service_dep() -> QuizService:
        return quiz_service

    @app.exception_handler(RequestValidationError)
    async def invalid_request_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.info("Rejected %s %s: %s", request.method, request.url.path, exc.errors())
        return JSONResponse(status_code=400, content={"detail": "Invalid request data"})

    # --- Quizzes ---

    @app.get("/api/quizzes")
    def list_quizzes(
        userId: str | None = None,
        service: QuizService = Depends(quiz_service_dep),
    ) -> list[dict[str, object]]:
        return [_quiz_payload(quiz) for quiz in service.list_quizzes(userId or None)]

    @app.post("/api/quizzes", status_code=201)
    def create_quiz(
        payload: QuizPayload,
        service: QuizService = Depends(quiz_service_dep),
    ) -> dict[str, object]:
        try:
            quiz = service.create_quiz(_quiz_draft(payload), payload.userId)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return {"message": "Quiz created successfully", "id": quiz.id}

    @app.post("/api/quizzes/generate", status_code=201)
    def generate_quiz(
        payload: GeneratePayload,
        service: QuizService = Depends(quiz_service_dep),
    ) -> dict[str, object]:
        try:
            request = GenerationRequest.parse(
                payload.topic,
                payload.difficulty,
                payload.questionCount,
                payload.timeLimit,
                payload.includeCode,
            )
            quiz = service.generate_quiz(request, payload.userId)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return {"message": "Quiz generated successfully", "id": quiz.id}

    @app.get("/api/quizzes/{quiz_id}")
    def get_quiz(quiz_id: int, service: QuizService = Depends(quiz_service_dep)) -> dict[str, object]:
        try:
            return _quiz_payload(service.get_quiz(quiz_id))
        except LookupError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc

    @app.get("/api/quizzes/{quiz_id}/questions")
    def get_questions(quiz_id: int, service: QuizService = Depends(quiz_service_dep)) -> list[dict[str, object]]:
        try:
            questions = service.get_questions(quiz_id)
        except LookupError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return [_question_payload(question) for question in questions]

    @app.put("/api/quizzes/{quiz_id}")
    def update_quiz(
        quiz_id: int,
        payload: QuizPayload,
        service: QuizService = Depends(quiz_service_dep),
    ) -> dict[str, object]:
        try:
            return _quiz_payload(service.update_quiz(quiz_id, _quiz_draft(payload)))
        except LookupError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

    @app.post("/api/quizzes/{quiz_id}/questions", status_code=201)
    def add_question(
        quiz_id: int,
        payload: QuestionPayload,
        service: QuizService = Depends(quiz_service_dep),
    ) -> dict[str, object]:
        try:
            return _question_payload(service.add_question(quiz_id, _question_draft(payload)))
        except LookupError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

    @app.delete("/api/quizzes/{quiz_id}")
    def delete_quiz(quiz_id: int, service: QuizService = Depends(quiz_service_dep)) -> dict[str, str]:
        try:
            service.delete_quiz(quiz_id)
        except LookupError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return {"message": "Quiz deleted successfully"}

    @app.get("/api/quizzes/{quiz_id}/statistics")
    def get_quiz_statistics(quiz_id: int, service: QuizService = Depends(quiz_service_dep)) -> dict[str, object]:
        try:
            return _quiz_statistics_payload(service.get_quiz_statistics(quiz_id))
        except LookupError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc

    # --- Submission & results ---

    @app.post("/api/quizzes/{quiz_id}/submit", status_code=201)
    def submit_quiz(
        quiz_id: int,
        payload: SubmitPayload,
        service: QuizService = Depends(quiz_service_dep),
    ) -> dict[str, object]:
        if not payload.userId or payload.answers is None:
            raise HTTPException(status_code=400, detail="Invalid request data")
        answers = [UserAnswer(question_id=a.questionId, answer_id=a.answerId) for a in payload.answers]
        try:
            result = service.submit_quiz(quiz_id, payload.userId, answers, payload.timeTakenSeconds)
        except LookupError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return {"message": "Quiz submitted successfully", "resultId": result.id, "score": result.score}

    @app.get("/api/results/{result_id}")
    def get_result(result_id: int, service: QuizService = Depends(quiz_service_dep)) -> dict[str, object]:
        try:
            return _report_payload(service.get_result_report(result_id))
        except LookupError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc

    @app.get("/api/users/{user_id}/statistics")
    def get_user_statistics(user_id: str, service: QuizService = Depends(quiz_service_dep)) -> dict[str, object]:
        return _user_statistics_payload(service.get_user_statistics(user_id))

    @app.get("/api/questions/bank")
    def get_bank_questions(
        category: str | None = None,
        service: QuizService = Depends(quiz_service_dep),
    ) -> list[dict[str, object]]:
        return [_question_payload(question) for question in service.get_bank_questions(category)]

    @app.put("/api/questions/{question_id}")
    def update_question(
        question_id: int,
        payload: QuestionPayload,
        service: QuizService = Depends(quiz_service_dep),
    ) -> dict[str, object]:
        try:
            return _question_payload(service.update_question(question_id, _question_draft(payload)))
        except LookupError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

    @app.delete("/api/questions/{question_id}")
    def delete_question(question_id: int, service: QuizService = Depends(quiz_service_dep)) -> dict[str, str]:
        try:
            service.delete_question(question_id)
        except LookupError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return {"message": "Question deleted successfully"}

    # --- Leaderboard ---

    @app.get("/api/leaderboard")
    def get_leaderboard(
        limit: int = LEADERBOARD_DEFAULT_LIMIT,
        service: QuizService = Depends(quiz_service_dep),
    ) -> list[dict[str, object]]:
        return [_leaderboard_payload(entry) for entry in service.get_leaderboard(limit)]

    @app.get("/api/leaderboard/user/{user_id}")
    def get_user_leaderboard(user_id: str, service: QuizService = Depends(quiz_service_dep)) -> dict[str, object]:
        try:
            return _leaderboard_payload(service.get_user_leaderboard(user_id))
        except LookupError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc

    @app.post("/api/leaderboard/update")
    def update_leaderboard(
        payload: LeaderboardUpdatePayload,
        service: QuizService = Depends(quiz_service_dep),
    ) -> dict[str, object]:
        try:
            entry, new_achievements = service.update_leaderboard(payload.userId, payload.quizResultId or 0)
        except LookupError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return {"leaderboard": _leaderboard_payload(entry), "newAchievements": new_achievements}

    # --- Achievements ---

    @app.get("/api/achievements")
    def list_achievements(service: QuizService = Depends(quiz_service_dep)) -> list[dict[str, object]]:
        return [_achievement_payload(achievement) for achievement in service.list_achievements()]

    @app.get("/api/achievements/user/{user_id}")
    def get_user_achievements(
        user_id: str,
        service: QuizService = Depends(quiz_service_dep),
    ) -> list[dict[str, object]]:
        return [
            _user_achievement_payload(award, achievement)
            for award, achievement in service.get_user_achievements(user_id)
        ]

    @app.post("/api/achievements/award", status_code=201)
    def award_achievement(
        payload: AwardPayload,
        service: QuizService = Depends(quiz_service_dep),
    ) -> dict[str, object]:
        try:
            award = service.award_achievement(payload.userId, payload.achievementId or 0)
        except LookupError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return _user_achievement_payload(award)

    @app.post("/api/achievements/check")
    def check_achievements(
        payload: CheckPayload,
        service: QuizService = Depends(quiz_service_dep),
    ) -> dict[str, object]:
        try:
            new_achievements = service.check_achievements(payload.userId)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return {"newAchievements": new_achievements}

    return app


def start_api_server(
    quiz_service: QuizService,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
) -> Thread:
    """Start the FastAPI server in a background daemon thread."""
    app = create_api_app(quiz_service)
    config = uvicorn.Config(app=app, host=host, port=port, log_level="info")
    server = uvicorn.Server(config)

    def run_server() -> None:
        server.run()

    thread = Thread(target=run_server, name="QuizApiServer", daemon=True)
    thread.start()
    logger.info("API server listening on http://%s:%s", host, port)
    return thread
