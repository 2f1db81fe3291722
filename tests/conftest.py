import pytest

from quizgenius.core.models import Option, Question, Quiz, SubmissionReceipt
from quizgenius.core.quiz_service import QuizService
from quizgenius.core.quiz_session import SessionController
from quizgenius.core.services.submission_gateway import SubmissionError


class FakeHandle:
    def __init__(self):
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler:
    """Records scheduled callbacks instead of running an event loop."""

    def __init__(self):
        self.calls = []
        self.handles = []

    def __call__(self, interval_ms, callback):
        handle = FakeHandle()
        self.calls.append((interval_ms, callback))
        self.handles.append(handle)
        return handle

    def fire(self, times=1):
        _, callback = self.calls[-1]
        for _ in range(times):
            callback()


class FakeGateway:
    """Stands in for SubmissionGateway; can fail or run a hook mid-request."""

    def __init__(self, result_id=7, score=2):
        self.result_id = result_id
        self.score = score
        self.fail_with = None
        self.during_submit = None
        self.calls = []

    def submit(self, quiz_id, user_id, ledger, time_taken_seconds=None):
        self.calls.append((quiz_id, user_id, ledger.entries(), time_taken_seconds))
        if self.during_submit is not None:
            self.during_submit()
        if self.fail_with is not None:
            raise SubmissionError(self.fail_with)
        return SubmissionReceipt(result_id=self.result_id, score=self.score)


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


def make_question(question_id, correct_index=0, option_count=3, code_snippet=None):
    options = [
        Option(
            id=question_id * 10 + index,
            question_id=question_id,
            text=f"Option {index}",
            is_correct=index == correct_index,
        )
        for index in range(option_count)
    ]
    return Question(id=question_id, text=f"Question {question_id}", options=options, code_snippet=code_snippet)


def make_quiz(quiz_id=1, time_limit_minutes=10):
    return Quiz(
        id=quiz_id,
        title="Sample",
        description="A sample quiz",
        category="Programming",
        difficulty="beginner",
        question_count=3,
        time_limit_minutes=time_limit_minutes,
    )


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def notices():
    return []


@pytest.fixture
def session(scheduler, gateway, clock, notices):
    controller = SessionController(
        api_client=None,
        user_id="user-1",
        scheduler=scheduler,
        gateway=gateway,
        on_notice=lambda title, message: notices.append((title, message)),
        clock=clock,
    )
    controller.set_active_quiz(make_quiz())
    controller.set_questions([make_question(1), make_question(2), make_question(3)])
    return controller


@pytest.fixture
def quiz_service():
    return QuizService.with_sample_data()
