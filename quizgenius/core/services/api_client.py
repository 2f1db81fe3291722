"""HTTP client for the QuizGenius REST API."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
import logging
from typing import Any

import httpx

from quizgenius.constants.network_constants import API_BASE_URL, REQUEST_TIMEOUT_SECONDS
from quizgenius.core.models import (
    Option,
    Question,
    QuestionDraft,
    Quiz,
    QuizDraft,
    ResultQuestion,
    ResultReport,
    SubmissionReceipt,
    UserAnswer,
    parse_time_limit_minutes,
    utcnow,
)

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Raised when the API cannot be reached or answers with a non-2xx status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            pass
    return utcnow()


def quiz_from_payload(payload: dict[str, Any]) -> Quiz:
    return Quiz(
        id=int(payload["id"]),
        title=payload.get("title", ""),
        description=payload.get("description", ""),
        category=payload.get("category", ""),
        difficulty=payload.get("difficulty", ""),
        question_count=int(payload.get("questionCount") or 0),
        time_limit_minutes=parse_time_limit_minutes(payload.get("timeLimit")),
        user_id=payload.get("userId", ""),
        active=bool(payload.get("active", True)),
        completion_rate=int(payload.get("completionRate") or 0),
        participant_count=int(payload.get("participantCount") or 0),
        created_at=_parse_datetime(payload.get("createdAt")),
    )


def question_from_payload(payload: dict[str, Any]) -> Question:
    question_id = int(payload["id"])
    options = [
        Option(
            id=int(option["id"]),
            question_id=int(option.get("questionId", question_id)),
            text=option.get("text", ""),
            is_correct=bool(option.get("isCorrect", False)),
        )
        for option in payload.get("options") or []
    ]
    return Question(
        id=question_id,
        text=payload.get("text", ""),
        options=options,
        quiz_id=payload.get("quizId"),
        code_snippet=payload.get("codeSnippet"),
        category=payload.get("category"),
        difficulty=payload.get("difficulty"),
    )


def report_from_payload(payload: dict[str, Any]) -> ResultReport:
    return ResultReport(
        id=int(payload["id"]),
        quiz_id=int(payload["quizId"]),
        quiz_title=payload.get("quizTitle", ""),
        score=int(payload.get("score") or 0),
        total_questions=int(payload.get("totalQuestions") or 0),
        correct_answers=int(payload.get("correctAnswers") or 0),
        time_taken=payload.get("timeTaken", "00:00"),
        completed_at=_parse_datetime(payload.get("completedAt")),
        questions=[
            ResultQuestion(
                id=int(item["id"]),
                text=item.get("text", ""),
                code_snippet=item.get("codeSnippet"),
                user_answer=item.get("userAnswer", ""),
                correct_answer=item.get("correctAnswer", ""),
                is_correct=bool(item.get("isCorrect", False)),
            )
            for item in payload.get("questions") or []
        ],
    )


def question_draft_payload(draft: QuestionDraft) -> dict[str, Any]:
    return {
        "text": draft.text,
        "codeSnippet": draft.code_snippet,
        "options": [
            {"text": text, "isCorrect": index in draft.correct_indices}
            for index, text in enumerate(draft.options)
        ],
    }


def quiz_draft_payload(draft: QuizDraft) -> dict[str, Any]:
    return {
        "title": draft.title,
        "description": draft.description,
        "category": draft.category,
        "difficulty": draft.difficulty,
        "timeLimit": str(draft.time_limit_minutes),
        "questions": [question_draft_payload(question) for question in draft.questions],
    }


class QuizApiClient:
    """Typed wrapper around an ``httpx.Client`` pointed at the QuizGenius API.

    Any ``httpx.Client`` works, including FastAPI's ``TestClient`` and clients
    built on ``httpx.MockTransport``.
    """

    def __init__(self, client: httpx.Client) -> None:
        self._client = client

    @classmethod
    def from_base_url(
        cls,
        base_url: str = API_BASE_URL,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
    ) -> QuizApiClient:
        return cls(httpx.Client(base_url=base_url, timeout=timeout))

    def close(self) -> None:
        self._client.close()

    # --- Quizzes ---

    def fetch_quizzes(self, user_id: str | None = None) -> list[Quiz]:
        params = {"userId": user_id} if user_id else None
        payload = self._request("GET", "/api/quizzes", params=params)
        return [quiz_from_payload(item) for item in payload]

    def fetch_quiz(self, quiz_id: int) -> Quiz:
        return quiz_from_payload(self._request("GET", f"/api/quizzes/{quiz_id}"))

    def fetch_questions(self, quiz_id: int) -> list[Question]:
        payload = self._request("GET", f"/api/quizzes/{quiz_id}/questions")
        return [question_from_payload(item) for item in payload]

    def delete_quiz(self, quiz_id: int) -> None:
        self._request("DELETE", f"/api/quizzes/{quiz_id}")

    def generate_quiz(
        self,
        *,
        topic: str,
        difficulty: str,
        question_count: int,
        time_limit_minutes: int,
        user_id: str,
        include_code: bool = False,
    ) -> int:
        payload = self._request(
            "POST",
            "/api/quizzes/generate",
            json={
                "topic": topic,
                "difficulty": difficulty,
                "questionCount": str(question_count),
                "timeLimit": str(time_limit_minutes),
                "includeCode": include_code,
                "userId": user_id,
            },
        )
        return int(payload["id"])

    # --- Authoring ---

    def create_quiz(self, draft: QuizDraft, user_id: str) -> int:
        payload = self._request("POST", "/api/quizzes", json={**quiz_draft_payload(draft), "userId": user_id})
        return int(payload["id"])

    def update_quiz(self, quiz_id: int, draft: QuizDraft) -> Quiz:
        return quiz_from_payload(self._request("PUT", f"/api/quizzes/{quiz_id}", json=quiz_draft_payload(draft)))

    def add_question(self, quiz_id: int, draft: QuestionDraft) -> Question:
        payload = self._request("POST", f"/api/quizzes/{quiz_id}/questions", json=question_draft_payload(draft))
        return question_from_payload(payload)

    def update_question(self, question_id: int, draft: QuestionDraft) -> Question:
        payload = self._request("PUT", f"/api/questions/{question_id}", json=question_draft_payload(draft))
        return question_from_payload(payload)

    def delete_question(self, question_id: int) -> None:
        self._request("DELETE", f"/api/questions/{question_id}")

    # --- Submission & results ---

    def submit_quiz(
        self,
        quiz_id: int,
        user_id: str,
        answers: Iterable[UserAnswer],
        time_taken_seconds: int | None = None,
    ) -> SubmissionReceipt:
        body: dict[str, Any] = {
            "userId": user_id,
            "answers": [
                {"questionId": answer.question_id, "answerId": answer.answer_id}
                for answer in answers
            ],
        }
        if time_taken_seconds is not None:
            body["timeTakenSeconds"] = time_taken_seconds
        payload = self._request("POST", f"/api/quizzes/{quiz_id}/submit", json=body)
        try:
            result_id = int(payload["resultId"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ApiError("Scoring endpoint returned no result id.") from exc
        return SubmissionReceipt(result_id=result_id, score=payload.get("score"))

    def fetch_result(self, result_id: int) -> ResultReport:
        return report_from_payload(self._request("GET", f"/api/results/{result_id}"))

    # --- Leaderboard & achievements ---

    def fetch_leaderboard(self, limit: int = 10) -> list[dict[str, Any]]:
        return self._request("GET", "/api/leaderboard", params={"limit": limit})

    def update_leaderboard(self, user_id: str, result_id: int) -> dict[str, Any]:
        return self._request(
            "POST",
            "/api/leaderboard/update",
            json={"userId": user_id, "quizResultId": result_id},
        )

    def fetch_user_achievements(self, user_id: str) -> list[dict[str, Any]]:
        return self._request("GET", f"/api/achievements/user/{user_id}")

    def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            response = self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise ApiError(f"Unable to reach the quiz server: {exc}") from exc

        if response.is_error:
            raise ApiError(self._error_message(response), status_code=response.status_code)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            logger.warning("%s %s returned a non-JSON body", method, url)
            raise ApiError(
                "The quiz server sent an unreadable response.",
                status_code=response.status_code,
            ) from exc

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            detail = body.get("detail") or body.get("message")
            if isinstance(detail, str) and detail:
                return detail
        return f"Request failed with status {response.status_code}"
