import pytest

from quizgenius.core.quiz_importer import QuizImportError, load_question_bank, parse_question_bank
from quizgenius.core.quiz_service import SAMPLE_QUIZ_PATH

BANK_TEXT = """
# leading comment
QUIZ: Shell Basics
DESCRIPTION: Everyday shell commands.
CATEGORY: Tooling
DIFFICULTY: Beginner
TIMELIMIT: 5
TOPICS: shell, Bash

Q: Which command lists files?
A: ls
B: cd
CORRECT: A

---
Q: What does this print?
CODE:
```
    # indented comment
    echo hi
```
A: hi
B: nothing
C: error
CORRECT: A, C

BANK: Networking
DIFFICULTY: advanced

Q: Which port does HTTPS use by default?
CODE: curl https://example.com
A: 80
B: 443
CORRECT: B
"""


def test_parse_quiz_headers_and_questions():
    bank = parse_question_bank(BANK_TEXT)

    quiz = bank.quizzes[0]
    assert quiz.title == "Shell Basics"
    assert quiz.category == "Tooling"
    assert quiz.difficulty == "beginner"
    assert quiz.time_limit_minutes == 5
    assert quiz.topics == ["shell", "bash"]
    assert [q.text for q in quiz.questions] == ["Which command lists files?", "What does this print?"]


def test_parse_code_fence_and_multiple_correct():
    question = parse_question_bank(BANK_TEXT).quizzes[0].questions[1]

    assert question.code_snippet == "# indented comment\necho hi"
    assert question.correct_indices == [0, 2]
    assert question.options == ["hi", "nothing", "error"]


def test_parse_bank_section():
    bank = parse_question_bank(BANK_TEXT)

    assert len(bank.standalone_questions) == 1
    question = bank.standalone_questions[0]
    assert question.category == "Networking"
    assert question.difficulty == "advanced"
    assert question.code_snippet == "curl https://example.com"
    assert question.correct_indices == [1]


def test_defaults_when_headers_missing():
    quiz = parse_question_bank("QUIZ: Minimal\n\nQ: Yes?\nA: yes\nB: no\nCORRECT: A\n").quizzes[0]

    assert quiz.difficulty == "intermediate"
    assert quiz.category == "General"
    assert quiz.time_limit_minutes == 10
    assert quiz.topics == []


@pytest.mark.parametrize(
    "text",
    [
        "Q: orphan question\nA: a\nB: b\n",
        "QUIZ: Empty\nDESCRIPTION: nothing here\n",
        "QUIZ: Gap\n\nQ: x?\nA: a\nC: c\nCORRECT: A\n",
        "QUIZ: One option\n\nQ: x?\nA: a\nCORRECT: A\n",
        "QUIZ: Bad correct\n\nQ: x?\nA: a\nB: b\nCORRECT: D\n",
        "QUIZ: Bad limit\nTIMELIMIT: soon\n\nQ: x?\nA: a\nB: b\nCORRECT: A\n",
        "QUIZ: Open fence\n\nQ: x?\nCODE:\n```\nprint(1)\nA: a\n",
    ],
)
def test_invalid_banks_raise(text):
    with pytest.raises(QuizImportError):
        parse_question_bank(text)


def test_sample_bank_loads():
    bank = load_question_bank(SAMPLE_QUIZ_PATH)

    assert bank.source_path == SAMPLE_QUIZ_PATH
    assert [quiz.title for quiz in bank.quizzes] == [
        "JavaScript Basics Quiz",
        "Python Programming Challenge",
        "World History Advanced Quiz",
        "AI & Machine Learning Fundamentals",
    ]
    assert all(len(quiz.questions) == 5 for quiz in bank.quizzes)
    assert all(question.correct_indices for quiz in bank.quizzes for question in quiz.questions)
    assert len(bank.standalone_questions) == 4


def test_empty_bank_file_raises(tmp_path):
    path = tmp_path / "empty.txt"
    path.write_text("# nothing yet\n", encoding="utf-8")

    with pytest.raises(QuizImportError):
        load_question_bank(path)
