import pytest

from conftest import make_question
from quizgenius.core.models import UserAnswer, parse_time_limit_minutes
from quizgenius.core.services.answer_ledger import AnswerLedger
from quizgenius.core.services.question_loader import deduplicate_questions, load_questions
from quizgenius.core.services.session_timer import SessionTimer, format_time_remaining


def test_ledger_starts_blank_for_every_question():
    ledger = AnswerLedger([3, 1, 2])

    assert ledger.question_ids() == [3, 1, 2]
    assert ledger.answered_count() == 0
    assert ledger.unanswered_count() == 3
    assert ledger.entries() == [UserAnswer(3, None), UserAnswer(1, None), UserAnswer(2, None)]


def test_ledger_replaces_answers_and_ignores_unknown_questions():
    ledger = AnswerLedger([1, 2])

    assert ledger.record_answer(1, 10)
    assert ledger.record_answer(1, 11)
    assert not ledger.record_answer(99, 5)

    assert ledger.answer_for(1) == 11
    assert 99 not in ledger
    assert len(ledger) == 2
    assert ledger.answered_count() == 1


def test_deduplicate_keeps_first_occurrence_in_order():
    first = make_question(1)
    duplicate = make_question(1, correct_index=2)

    unique, removed = deduplicate_questions([first, make_question(2), duplicate])

    assert [q.id for q in unique] == [1, 2]
    assert unique[0] is first
    assert removed == 1


def test_load_questions_builds_matching_ledger():
    loaded = load_questions([make_question(1), make_question(2), make_question(1)])

    assert [q.id for q in loaded.questions] == [1, 2]
    assert loaded.ledger.question_ids() == [1, 2]
    assert loaded.duplicates_removed == 1


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("1", 60), (15, 900), (" 2 ", 120), ("abc", 600), (None, 600), ("0", 600)],
)
def test_timer_seed_from_time_limit(raw, expected):
    timer = SessionTimer()
    timer.seed(parse_time_limit_minutes(raw))

    assert timer.seconds_remaining == expected


def test_timer_reports_zero_crossing_once():
    timer = SessionTimer()
    timer.seed(1)

    crossings = [timer.tick() for _ in range(65)]

    assert crossings.count(True) == 1
    assert crossings.index(True) == 59
    assert timer.seconds_remaining == 0


def test_timer_start_and_cancel_use_the_scheduler(scheduler):
    timer = SessionTimer(scheduler, interval_ms=250)
    timer.seed(1)
    timer.start(lambda: None)
    timer.start(lambda: None)

    assert len(scheduler.calls) == 1
    assert scheduler.calls[0][0] == 250
    assert timer.is_running()

    timer.cancel()
    assert scheduler.handles[0].cancelled
    assert not timer.is_running()


def test_timer_without_scheduler_is_manual():
    timer = SessionTimer()
    timer.start(lambda: None)

    assert not timer.is_running()


def test_format_time_remaining():
    assert format_time_remaining(600) == "10:00"
    assert format_time_remaining(65) == "1:05"
    assert format_time_remaining(-3) == "0:00"
