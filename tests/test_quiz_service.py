import pytest

from conftest import make_question
from quizgenius.core.models import QuestionDraft, QuizDraft, UserAnswer
from quizgenius.core.quiz_service import QuizNotFoundError, QuizService
from quizgenius.core.services.achievements import AchievementTracker, UserHistory
from quizgenius.core.services.leaderboard import Leaderboard
from quizgenius.core.services.quiz_repository import QuizRepository
from quizgenius.core.services.scoring import build_result_report, score_answers


def correct_answers(service, quiz_id):
    return [
        UserAnswer(question.id, question.correct_options()[0].id)
        for question in service.get_questions(quiz_id)
    ]


def simple_draft(title="Custom", category="General", question_count=2, time_limit=10):
    return QuizDraft(
        title=title,
        description="",
        category=category,
        difficulty="beginner",
        time_limit_minutes=time_limit,
        questions=[
            QuestionDraft(text=f"Q{index}", options=["yes", "no"], correct_indices=[0])
            for index in range(question_count)
        ],
    )


# --- Scoring ---


def test_score_counts_each_question_once():
    questions = [make_question(1), make_question(2)]
    answers = [UserAnswer(1, 10), UserAnswer(1, 10), UserAnswer(2, 21), UserAnswer(99, 990)]

    assert score_answers(questions, answers) == 1


def test_score_rejects_option_from_another_question():
    questions = [make_question(1), make_question(2)]

    assert score_answers(questions, [UserAnswer(1, 20)]) == 0


def test_result_report_lists_every_correct_option(quiz_service):
    quiz = next(q for q in quiz_service.list_quizzes() if q.title == "Python Programming Challenge")
    questions = quiz_service.get_questions(quiz.id)
    multi = next(q for q in questions if len(q.correct_options()) == 2)
    second_correct = multi.correct_options()[1]

    result = quiz_service.submit_quiz(quiz.id, "alice", [UserAnswer(multi.id, second_correct.id)], 30)
    report = build_result_report(result, quiz, questions)
    row = next(r for r in report.questions if r.id == multi.id)

    assert row.is_correct
    assert row.correct_answer == "list(dict.fromkeys(my_list)), sorted(set(my_list), key=my_list.index)"
    assert report.correct_answers == 1
    assert report.time_taken == "00:30"
    unanswered = next(r for r in report.questions if r.id != multi.id)
    assert unanswered.user_answer == "No answer"


# --- Repository ---


def test_repository_rejects_invalid_questions():
    repository = QuizRepository()
    draft = simple_draft()
    draft.questions[0].options = ["only one"]

    with pytest.raises(ValueError):
        repository.add_quiz(draft, "alice")


def test_repository_delete_cascades():
    repository = QuizRepository()
    quiz = repository.add_quiz(simple_draft(), "alice")
    result = repository.add_result(quiz.id, "alice", 1, 12, [])

    assert repository.delete_quiz(quiz.id)
    assert repository.get_questions(quiz.id) == []
    assert repository.get_result(result.id) is None
    assert not repository.delete_quiz(quiz.id)


def test_repository_returns_copies():
    repository = QuizRepository()
    quiz = repository.add_quiz(simple_draft(), "alice")

    fetched = repository.get_quiz(quiz.id)
    fetched.title = "changed"
    repository.get_questions(quiz.id)[0].options.clear()

    assert repository.get_quiz(quiz.id).title == "Custom"
    assert len(repository.get_questions(quiz.id)[0].options) == 2


# --- Service ---


def test_sample_data_is_loaded(quiz_service):
    titles = [quiz.title for quiz in quiz_service.list_quizzes()]

    assert "JavaScript Basics Quiz" in titles
    assert len(titles) == 4
    assert all(quiz.question_count == 5 for quiz in quiz_service.list_quizzes())
    assert len(quiz_service.get_bank_questions()) == 4
    assert len(quiz_service.get_bank_questions("data science")) == 2


def test_list_quizzes_filters_by_owner(quiz_service):
    assert quiz_service.list_quizzes("nobody") == []
    assert len(quiz_service.list_quizzes("sample-user-1")) == 4


def test_missing_quiz_raises(quiz_service):
    with pytest.raises(QuizNotFoundError):
        quiz_service.get_quiz(999)
    with pytest.raises(QuizNotFoundError, match="No questions found"):
        quiz_service.get_questions(999)
    with pytest.raises(QuizNotFoundError):
        quiz_service.delete_quiz(999)


def test_submit_updates_participation(quiz_service):
    quiz_id = quiz_service.list_quizzes()[0].id
    answers = correct_answers(quiz_service, quiz_id)

    first = quiz_service.submit_quiz(quiz_id, "alice", answers, 90)
    quiz_service.submit_quiz(quiz_id, "bob", answers[:2], 120)
    quiz = quiz_service.get_quiz(quiz_id)

    assert first.score == 5
    assert quiz.participant_count == 2
    assert quiz.completion_rate == 70


def test_submit_validates_input(quiz_service):
    quiz_id = quiz_service.list_quizzes()[0].id

    with pytest.raises(ValueError):
        quiz_service.submit_quiz(quiz_id, "  ", [])
    with pytest.raises(ValueError):
        quiz_service.submit_quiz(quiz_id, "alice", [], -1)
    with pytest.raises(QuizNotFoundError):
        quiz_service.submit_quiz(999, "alice", [])


def test_quiz_statistics(quiz_service):
    quiz_id = quiz_service.list_quizzes()[0].id
    answers = correct_answers(quiz_service, quiz_id)
    quiz_service.submit_quiz(quiz_id, "alice", answers, 60)
    quiz_service.submit_quiz(quiz_id, "bob", answers[:3], 120)

    stats = quiz_service.get_quiz_statistics(quiz_id)

    assert stats.participant_count == 2
    assert stats.average_score == 4
    assert stats.completion_rate == 80
    assert stats.average_time_taken == "01:30"


def test_user_statistics_without_history(quiz_service):
    stats = quiz_service.get_user_statistics("ghost")

    assert (stats.quizzes_taken, stats.rank, stats.total_time_taken) == (0, 0, "00:00")


def test_update_leaderboard_counts_result_once(quiz_service):
    quiz_id = quiz_service.list_quizzes()[0].id
    result = quiz_service.submit_quiz(quiz_id, "alice", correct_answers(quiz_service, quiz_id), 30)

    entry, earned = quiz_service.update_leaderboard("alice", result.id)
    again, earned_again = quiz_service.update_leaderboard("alice", result.id)

    assert entry.total_score == 5
    assert again.total_score == 5
    assert again.quizzes_completed == 1
    assert set(earned) == {"First Quiz", "Quiz Master", "Speed Demon"}
    assert earned_again == []


def test_update_leaderboard_requires_existing_result(quiz_service):
    with pytest.raises(QuizNotFoundError):
        quiz_service.update_leaderboard("alice", 42)
    with pytest.raises(ValueError):
        quiz_service.update_leaderboard("", 1)


def test_leaderboard_ranking_and_user_statistics(quiz_service):
    quiz_id = quiz_service.list_quizzes()[0].id
    answers = correct_answers(quiz_service, quiz_id)
    low = quiz_service.submit_quiz(quiz_id, "bob", answers[:1], 200)
    high = quiz_service.submit_quiz(quiz_id, "alice", answers, 100)
    quiz_service.update_leaderboard("bob", low.id)
    quiz_service.update_leaderboard("alice", high.id)

    top = quiz_service.get_leaderboard(10)
    stats = quiz_service.get_user_statistics("alice")

    assert [entry.user_id for entry in top] == ["alice", "bob"]
    assert [entry.ranking for entry in top] == [1, 2]
    assert stats.rank == 1
    assert stats.percentile == 50
    assert stats.best_score == 5
    assert quiz_service.get_user_leaderboard("bob").current_streak == 0
    with pytest.raises(LookupError):
        quiz_service.get_user_leaderboard("ghost")


def test_generate_and_delete_quiz(quiz_service):
    from quizgenius.core.services.quiz_generator import GenerationRequest

    request = GenerationRequest.parse("Python decorators", "intermediate", "3", "12")
    quiz = quiz_service.generate_quiz(request, "alice")

    assert quiz.title == "Python Programming Challenge"
    assert quiz.question_count == 3
    assert quiz.time_limit_minutes == 12
    assert quiz.user_id == "alice"

    quiz_service.delete_quiz(quiz.id)
    with pytest.raises(QuizNotFoundError):
        quiz_service.get_quiz(quiz.id)


def test_generate_requires_user(quiz_service):
    from quizgenius.core.services.quiz_generator import GenerationRequest

    with pytest.raises(ValueError, match="User ID is required"):
        quiz_service.generate_quiz(GenerationRequest.parse("python", "beginner", 2, 5), "")


# --- Leaderboard & achievements ---


def test_streak_threshold_is_seventy_percent():
    leaderboard = Leaderboard()

    leaderboard.record_result("alice", 7, 10)
    leaderboard.record_result("alice", 8, 10)
    entry = leaderboard.record_result("alice", 6, 10)

    assert entry.best_streak == 2
    assert entry.current_streak == 0
    assert entry.average_score == 7


def test_award_is_idempotent():
    tracker = AchievementTracker()

    first, created = tracker.award("alice", 1)
    second, created_again = tracker.award("alice", 1)

    assert created and not created_again
    assert first == second
    assert len(tracker.user_achievements("alice")) == 1
    with pytest.raises(LookupError):
        tracker.award("alice", 99)


def test_perfect_streak_and_explorer_rules():
    service = QuizService(repository=QuizRepository())
    quiz_ids = [
        service._repository.add_quiz(simple_draft(title=f"Quiz {i}", category=f"Cat {i % 3}"), "owner").id
        for i in range(5)
    ]
    earned = []
    for quiz_id in quiz_ids:
        answers = [UserAnswer(q.id, q.options[0].id) for q in service.get_questions(quiz_id)]
        result = service.submit_quiz(quiz_id, "alice", answers, 600)
        _, new = service.update_leaderboard("alice", result.id)
        earned.extend(new)

    assert "Perfect Streak" in earned
    assert "Knowledge Explorer" in earned
    assert "Speed Demon" not in earned
    assert service.check_achievements("alice") == []


def test_evaluate_without_results_awards_nothing():
    tracker = AchievementTracker()

    assert tracker.evaluate("alice", UserHistory(results=[], quizzes={}, best_streak=0)) == []


# --- Authoring ---


def test_question_draft_from_editor_rows():
    draft = QuestionDraft.from_form("  Pick one  ", "print(1)\n", [("a", False), ("", False), ("c", True), ("  ", False)])

    assert draft.text == "Pick one"
    assert draft.options == ["a", "c"]
    assert draft.correct_indices == [1]
    assert draft.code_snippet == "print(1)"
    with pytest.raises(ValueError, match="Option B"):
        QuestionDraft.from_form("Q", "", [("a", True), ("", True)])
    with pytest.raises(ValueError, match="at least one"):
        QuestionDraft.from_form("Q", "", [("a", False), ("b", False)])


def test_repository_question_edits_keep_option_ids():
    repository = QuizRepository()
    quiz = repository.add_quiz(simple_draft(question_count=1), "alice")
    question = repository.get_questions(quiz.id)[0]
    old_ids = [option.id for option in question.options]

    updated = repository.update_question(
        question.id,
        QuestionDraft(text="Edited", options=["a", "b", "c"], correct_indices=[2], code_snippet="x = 1\n"),
    )

    assert updated.id == question.id
    assert updated.quiz_id == quiz.id
    assert updated.text == "Edited"
    assert updated.code_snippet == "x = 1"
    assert [option.id for option in updated.options[:2]] == old_ids
    assert updated.options[2].id not in old_ids
    assert [option.is_correct for option in updated.options] == [False, False, True]
    assert repository.get_quiz(quiz.id).question_count == 1


def test_repository_add_and_delete_question_track_count():
    repository = QuizRepository()
    quiz = repository.add_quiz(simple_draft(question_count=1), "alice")

    added = repository.add_question(quiz.id, QuestionDraft(text="New", options=["x", "y"], correct_indices=[1]))

    assert repository.get_quiz(quiz.id).question_count == 2
    assert (added.category, added.difficulty) == ("General", "beginner")
    assert repository.delete_question(added.id)
    assert repository.get_quiz(quiz.id).question_count == 1
    assert not repository.delete_question(added.id)
    with pytest.raises(ValueError, match="correct"):
        repository.add_question(quiz.id, QuestionDraft(text="No answer", options=["x", "y"]))


def test_create_and_edit_quiz(quiz_service):
    quiz = quiz_service.create_quiz(simple_draft(title="  My Quiz ", question_count=0), "alice")

    assert quiz.title == "My Quiz"
    assert quiz.user_id == "alice"
    assert quiz.question_count == 0
    with pytest.raises(QuizNotFoundError):
        quiz_service.get_questions(quiz.id)

    question = quiz_service.add_question(quiz.id, QuestionDraft(text="2 + 2?", options=["3", "4"], correct_indices=[1]))
    result = quiz_service.submit_quiz(quiz.id, "bob", [UserAnswer(question.id, question.options[1].id)], 5)
    renamed = quiz_service.update_quiz(
        quiz.id,
        QuizDraft(title="Arithmetic", description="Sums", category="Math", difficulty="Intermediate", time_limit_minutes=3),
    )

    assert result.score == 1
    assert renamed.title == "Arithmetic"
    assert renamed.difficulty == "intermediate"
    assert renamed.time_limit_minutes == 3
    assert renamed.question_count == 1
    assert quiz_service.get_questions(quiz.id)[0].category == "Math"
    assert [q.id for q in quiz_service.list_quizzes("alice")] == [quiz.id]


def test_authoring_rejects_invalid_input(quiz_service):
    without_answer = simple_draft()
    without_answer.questions[0].correct_indices = []
    valid_question = QuestionDraft(text="Q", options=["a", "b"], correct_indices=[0])

    with pytest.raises(ValueError, match="User ID"):
        quiz_service.create_quiz(simple_draft(), "  ")
    with pytest.raises(ValueError, match="title"):
        quiz_service.create_quiz(simple_draft(title=" "), "alice")
    with pytest.raises(ValueError, match="correct"):
        quiz_service.create_quiz(without_answer, "alice")
    assert quiz_service.list_quizzes("alice") == []
    with pytest.raises(QuizNotFoundError):
        quiz_service.add_question(999, valid_question)
    with pytest.raises(QuizNotFoundError):
        quiz_service.update_question(9999, valid_question)
    with pytest.raises(QuizNotFoundError):
        quiz_service.delete_question(9999)
