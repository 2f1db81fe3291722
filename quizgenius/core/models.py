"""Domain models for quizzes, questions, answers and results."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from quizgenius.constants.quiz_constants import DEFAULT_TIME_LIMIT_MINUTES


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_time_limit_minutes(value: object) -> int:
    """Normalize a time limit that may arrive as an int or a numeric string."""
    try:
        minutes = int(str(value).strip())
    except (TypeError, ValueError):
        return DEFAULT_TIME_LIMIT_MINUTES
    if minutes <= 0:
        return DEFAULT_TIME_LIMIT_MINUTES
    return minutes


def format_duration(total_seconds: int) -> str:
    """Format seconds as ``MM:SS`` the way results and statistics display them."""
    total_seconds = max(0, int(total_seconds))
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes:02d}:{seconds:02d}"


@dataclass(slots=True)
class Option:
    """Answer option belonging to a question."""

    id: int
    question_id: int
    text: str
    is_correct: bool = False


@dataclass(slots=True)
class Question:
    """Multiple-choice question, either part of a quiz or a standalone bank entry."""

    id: int
    text: str
    options: list[Option] = field(default_factory=list)
    quiz_id: int | None = None
    code_snippet: str | None = None
    category: str | None = None
    difficulty: str | None = None

    def option_by_id(self, option_id: int | None) -> Option | None:
        if option_id is None:
            return None
        return next((option for option in self.options if option.id == option_id), None)

    def correct_options(self) -> list[Option]:
        return [option for option in self.options if option.is_correct]


@dataclass(slots=True)
class Quiz:
    """Quiz metadata. Questions are stored and fetched separately."""

    id: int
    title: str
    description: str
    category: str
    difficulty: str
    question_count: int = 0
    time_limit_minutes: int = DEFAULT_TIME_LIMIT_MINUTES
    user_id: str = ""
    active: bool = True
    completion_rate: int = 0
    participant_count: int = 0
    created_at: datetime = field(default_factory=utcnow)

    @property
    def time_limit_seconds(self) -> int:
        return self.time_limit_minutes * 60


@dataclass(slots=True)
class UserAnswer:
    """Selected option for one question; ``answer_id`` is None while unanswered."""

    question_id: int
    answer_id: int | None = None


@dataclass(frozen=True, slots=True)
class QuizResult:
    """Stored outcome of one submission. Never mutated after creation."""

    id: int
    quiz_id: int
    user_id: str
    score: int
    time_taken_seconds: int
    completed_at: datetime
    answers: tuple[UserAnswer, ...]


@dataclass(frozen=True, slots=True)
class SubmissionReceipt:
    """Response of the scoring endpoint."""

    result_id: int
    score: int | None = None


@dataclass(slots=True)
class ResultQuestion:
    """One question of a result report, with the user's and the correct answer text."""

    id: int
    text: str
    code_snippet: str | None
    user_answer: str
    correct_answer: str
    is_correct: bool


@dataclass(slots=True)
class ResultReport:
    """Result enriched with quiz and question details for the results view."""

    id: int
    quiz_id: int
    quiz_title: str
    score: int
    total_questions: int
    correct_answers: int
    time_taken: str
    completed_at: datetime
    questions: list[ResultQuestion] = field(default_factory=list)

    @property
    def percentage(self) -> int:
        if self.total_questions <= 0:
            return 0
        return round(self.correct_answers / self.total_questions * 100)


@dataclass(slots=True)
class QuestionDraft:
    """Question content before the repository assigns ids."""

    text: str
    options: list[str]
    correct_indices: list[int] = field(default_factory=list)
    code_snippet: str | None = None
    category: str | None = None
    difficulty: str | None = None

    @classmethod
    def from_form(cls, text: str, code_snippet: str, rows: list[tuple[str, bool]]) -> QuestionDraft:
        """Build a draft from editor rows of (option text, marked correct).

        Blank rows are skipped so two or three options can be entered in a
        four-row form.
        """
        options: list[str] = []
        correct_indices: list[int] = []
        for row_number, (option_text, is_correct) in enumerate(rows):
            option_text = option_text.strip()
            if not option_text:
                if is_correct:
                    letter = chr(ord("A") + row_number)
                    raise ValueError(f"Option {letter} is marked correct but has no text.")
                continue
            if is_correct:
                correct_indices.append(len(options))
            options.append(option_text)
        if not correct_indices:
            raise ValueError("Mark at least one option as correct.")
        return cls(
            text=text.strip(),
            options=options,
            correct_indices=correct_indices,
            code_snippet=code_snippet.strip("\n") or None,
        )


@dataclass(slots=True)
class QuizDraft:
    """Quiz content before storage, as read from the question bank or built by the generator."""

    title: str
    description: str
    category: str
    difficulty: str
    time_limit_minutes: int = DEFAULT_TIME_LIMIT_MINUTES
    topics: list[str] = field(default_factory=list)
    questions: list[QuestionDraft] = field(default_factory=list)
