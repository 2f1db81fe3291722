"""Utilities for importing quizzes from a human-friendly question bank file.

A bank file holds one or more sections. ``QUIZ:`` starts a quiz, ``BANK:``
starts a group of standalone questions for the given category. Header lines
come first, then question blocks separated by blank lines or '---'.

    QUIZ: Python Programming Challenge
    DESCRIPTION: Test your intermediate knowledge of Python.
    CATEGORY: Programming
    DIFFICULTY: intermediate
    TIMELIMIT: 15            (minutes, optional)
    TOPICS: python, py       (keywords the generator matches on)

    Q: What is the output of this code?
    CODE:
    ```
    def func(a, b=2):
        return a + b

    print(func(1))
    ```
    A: 2
    B: 3
    C: None
    D: Error
    CORRECT: B               (comma separated when several options are right)

Options run from A up to F and must be contiguous. Lines starting with '#'
outside a code fence are comments.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import textwrap

from quizgenius.constants.quiz_constants import (
    DEFAULT_TIME_LIMIT_MINUTES,
    MAX_OPTIONS_PER_QUESTION,
    MIN_OPTIONS_PER_QUESTION,
)
from quizgenius.core.models import QuestionDraft, QuizDraft


class QuizImportError(Exception):
    """Raised when a question bank cannot be parsed."""


@dataclass(slots=True)
class QuestionBank:
    """Container for the quizzes and standalone questions of one bank file."""

    quizzes: list[QuizDraft]
    standalone_questions: list[QuestionDraft]
    source_path: Path | None = None


_OPTION_ORDER = ["A", "B", "C", "D", "E", "F"][:MAX_OPTIONS_PER_QUESTION]
_SECTION_MARKERS = {"QUIZ", "BANK"}
_HEADER_MARKERS = {"DESCRIPTION", "CATEGORY", "DIFFICULTY", "TIMELIMIT", "TOPICS"}
_BLOCK_MARKERS = {"Q", "CODE", "CORRECT", *_OPTION_ORDER}
_FENCE = "```"


def load_question_bank(file_path: Path) -> QuestionBank:
    text = file_path.read_text(encoding="utf-8")
    bank = parse_question_bank(text)
    if not bank.quizzes and not bank.standalone_questions:
        raise QuizImportError("Question bank file did not contain any quizzes.")
    bank.source_path = file_path
    return bank


def parse_question_bank(text: str) -> QuestionBank:
    quizzes: list[QuizDraft] = []
    standalone: list[QuestionDraft] = []
    for kind, title, lines in _split_sections(text):
        headers, blocks = _split_headers(lines)
        if kind == "QUIZ":
            quizzes.append(_build_quiz(title, headers, blocks))
            continue
        difficulty = headers.get("DIFFICULTY", "").lower() or None
        for block in blocks:
            question = _parse_block(block)
            question.category = title
            question.difficulty = difficulty
            standalone.append(question)
    return QuestionBank(quizzes=quizzes, standalone_questions=standalone)


def _split_marker(line: str) -> tuple[str | None, str]:
    key, separator, value = line.partition(":")
    marker = key.strip().upper()
    if separator and marker in (_SECTION_MARKERS | _HEADER_MARKERS | _BLOCK_MARKERS):
        return marker, value.strip()
    return None, line


def _split_sections(text: str) -> list[tuple[str, str, list[str]]]:
    sections: list[tuple[str, str, list[str]]] = []
    current: list[str] | None = None
    in_fence = False
    for raw_line in text.splitlines():
        stripped = raw_line.strip()
        if stripped.startswith(_FENCE):
            in_fence = not in_fence
        elif not in_fence:
            if stripped.startswith("#"):
                continue
            marker, value = _split_marker(stripped)
            if marker in _SECTION_MARKERS:
                if not value:
                    raise QuizImportError(f"{marker} must include a title.")
                current = []
                sections.append((marker, value, current))
                continue
        if current is None:
            if stripped:
                raise QuizImportError(
                    f"Encountered text before the first QUIZ or BANK section: '{stripped}'."
                )
            continue
        current.append(raw_line)
    if in_fence:
        raise QuizImportError("Code block is missing its closing ```.")
    return sections


def _split_headers(lines: list[str]) -> tuple[dict[str, str], list[list[str]]]:
    headers: dict[str, str] = {}
    blocks: list[list[str]] = []
    current_block: list[str] = []
    in_fence = False
    for raw_line in lines:
        stripped = raw_line.strip()
        if stripped.startswith(_FENCE):
            in_fence = not in_fence
            current_block.append(raw_line)
            continue
        if in_fence:
            current_block.append(raw_line)
            continue
        if not stripped or stripped == "---":
            if current_block:
                blocks.append(current_block)
                current_block = []
            continue
        marker, value = _split_marker(stripped)
        if marker in _HEADER_MARKERS and not blocks and not current_block:
            headers[marker] = value
            continue
        current_block.append(raw_line)
    if current_block:
        blocks.append(current_block)
    return headers, blocks


def _build_quiz(title: str, headers: dict[str, str], blocks: list[list[str]]) -> QuizDraft:
    if not blocks:
        raise QuizImportError(f"Quiz '{title}' does not contain any questions.")
    difficulty = headers.get("DIFFICULTY", "").lower() or "intermediate"
    questions = [_parse_block(block) for block in blocks]
    for question in questions:
        question.difficulty = difficulty
    return QuizDraft(
        title=title,
        description=headers.get("DESCRIPTION", ""),
        category=headers.get("CATEGORY", "") or "General",
        difficulty=difficulty,
        time_limit_minutes=_parse_time_limit(headers.get("TIMELIMIT")),
        topics=[topic.strip().lower() for topic in headers.get("TOPICS", "").split(",") if topic.strip()],
        questions=questions,
    )


def _parse_time_limit(raw_value: str | None) -> int:
    if raw_value is None:
        return DEFAULT_TIME_LIMIT_MINUTES
    if not raw_value:
        raise QuizImportError("TIMELIMIT must include an integer value.")
    try:
        parsed_value = int(raw_value)
    except ValueError as exc:
        raise QuizImportError("TIMELIMIT must be an integer number of minutes.") from exc
    if parsed_value <= 0:
        raise QuizImportError("TIMELIMIT must be a positive integer.")
    return parsed_value


def _parse_block(block: list[str]) -> QuestionDraft:
    question_lines: list[str] = []
    options: dict[str, str] = {}
    correct_letters: list[str] = []
    code_lines: list[str] | None = None
    current_section: str | None = None
    in_fence = False

    for raw_line in block:
        stripped = raw_line.strip()
        if stripped.startswith(_FENCE):
            if in_fence:
                in_fence = False
                current_section = None
                continue
            if current_section != "CODE":
                raise QuizImportError("Code blocks must follow a CODE: marker.")
            in_fence = True
            code_lines = []
            continue
        if in_fence:
            code_lines.append(raw_line.rstrip())
            continue
        if not stripped:
            continue

        marker, value = _split_marker(stripped)
        if marker == "Q":
            question_lines = [value]
            current_section = "Q"
            continue

        if marker == "CODE":
            current_section = "CODE"
            if value:
                code_lines = [value]
                current_section = None
            continue

        if marker == "CORRECT":
            correct_letters = [letter.strip().upper() for letter in value.split(",") if letter.strip()]
            current_section = None
            continue

        if marker in _OPTION_ORDER:
            options[marker] = value
            current_section = marker
            continue

        if current_section == "Q":
            question_lines.append(stripped)
        elif current_section in _OPTION_ORDER:
            options[current_section] = options[current_section] + f"\n{stripped}"
        else:
            raise QuizImportError(f"Encountered text outside of a known section: '{stripped}'.")

    question_text = "\n".join(question_lines).strip()
    if not question_text:
        raise QuizImportError("Question text missing (Q: ...)")

    letters = _OPTION_ORDER[: len(options)]
    if len(options) < MIN_OPTIONS_PER_QUESTION or sorted(options) != letters:
        raise QuizImportError(
            f"Each question must define between {MIN_OPTIONS_PER_QUESTION} and "
            f"{MAX_OPTIONS_PER_QUESTION} options labelled from A without gaps."
        )
    option_list = [options[letter].strip() for letter in letters]
    if any(not option for option in option_list):
        raise QuizImportError("Option text cannot be empty.")

    correct_indices: list[int] = []
    for letter in correct_letters:
        if letter not in letters:
            raise QuizImportError(f"CORRECT must be one of {', '.join(letters)}.")
        index = letters.index(letter)
        if index not in correct_indices:
            correct_indices.append(index)

    code_snippet = None
    if code_lines:
        code_snippet = textwrap.dedent("\n".join(code_lines)).strip("\n") or None

    return QuestionDraft(
        text=question_text,
        options=option_list,
        correct_indices=correct_indices,
        code_snippet=code_snippet,
    )
