import random

import pytest

from quizgenius.core.models import QuestionDraft, QuizDraft
from quizgenius.core.services.quiz_generator import GenerationError, GenerationRequest, QuizGenerator


def template(title, topics, difficulty="beginner", code_flags=(False, False, True)):
    return QuizDraft(
        title=title,
        description=f"About {title}",
        category="Programming",
        difficulty=difficulty,
        topics=list(topics),
        questions=[
            QuestionDraft(
                text=f"{title} question {index}",
                options=["a", "b"],
                correct_indices=[0],
                code_snippet="x = 1" if has_code else None,
            )
            for index, has_code in enumerate(code_flags)
        ],
    )


@pytest.fixture
def generator():
    templates = [
        template("Python Basics", ["python", "py"]),
        template("Python Advanced", ["python"], difficulty="advanced"),
        template("Java Basics", ["java"]),
    ]
    return QuizGenerator(templates, rng=random.Random(3))


def test_parse_accepts_numeric_strings():
    request = GenerationRequest.parse(" Python ", "Intermediate", "5", "15", True)

    assert request == GenerationRequest("Python", "intermediate", 5, 15, True)


@pytest.mark.parametrize(
    ("args", "message"),
    [
        (("", "beginner", 5, 10), "Topic is required"),
        (("python", " ", 5, 10), "Difficulty is required"),
        (("python", "beginner", "five", 10), "whole number"),
        (("python", "beginner", 0, 10), "positive"),
        (("python", "beginner", 51, 10), "cannot exceed"),
        (("python", "beginner", 5, "-1"), "positive"),
    ],
)
def test_parse_rejects_bad_requests(args, message):
    with pytest.raises(GenerationError, match=message):
        GenerationRequest.parse(*args)


def test_matching_template_prefers_requested_difficulty(generator):
    draft = generator.generate(GenerationRequest.parse("advanced python tricks", "advanced", 2, 20))

    assert draft.title == "Python Advanced"
    assert draft.difficulty == "advanced"
    assert draft.time_limit_minutes == 20


def test_keywords_match_whole_words_only(generator):
    draft = generator.generate(GenerationRequest.parse("JavaScript", "beginner", 3, 10))

    assert draft.title == "JavaScript Beginner Quiz"
    assert draft.description == "Test your beginner knowledge about JavaScript."


def test_questions_are_padded_and_trimmed(generator):
    padded = generator.generate(GenerationRequest.parse("python", "beginner", 7, 10))
    trimmed = generator.generate(GenerationRequest.parse("python", "beginner", 2, 10))

    assert len(padded.questions) == 7
    assert padded.questions[3].text == padded.questions[0].text
    assert padded.questions[3] is not padded.questions[0]
    assert [q.text for q in trimmed.questions] == ["Python Basics question 0", "Python Basics question 1"]


def test_include_code_orders_code_questions_first(generator):
    draft = generator.generate(GenerationRequest.parse("py", "beginner", 3, 10, include_code=True))

    assert draft.questions[0].code_snippet == "x = 1"
    assert draft.questions[1].code_snippet is None


def test_empty_generator_raises():
    with pytest.raises(GenerationError):
        QuizGenerator([]).generate(GenerationRequest.parse("python", "beginner", 1, 5))
