from fastapi.testclient import TestClient
import pytest

from quizgenius.core.quiz_service import QuizService
from quizgenius.core.quiz_session import SessionController, SessionState, SubmitStatus
from quizgenius.core.services.api_client import QuizApiClient
from quizgenius.server.api_server import create_api_app


@pytest.fixture
def client(quiz_service):
    return TestClient(create_api_app(quiz_service))


def correct_payload(client, quiz_id):
    questions = client.get(f"/api/quizzes/{quiz_id}/questions").json()
    return [
        {"questionId": q["id"], "answerId": next(o["id"] for o in q["options"] if o["isCorrect"])}
        for q in questions
    ]


def test_list_and_get_quiz(client):
    quizzes = client.get("/api/quizzes").json()

    assert len(quizzes) == 4
    quiz = client.get(f"/api/quizzes/{quizzes[0]['id']}").json()
    assert quiz["title"] == "JavaScript Basics Quiz"
    assert quiz["timeLimit"] == "10"
    assert quiz["questionCount"] == 5


def test_unknown_quiz_is_404(client):
    assert client.get("/api/quizzes/999").status_code == 404
    response = client.get("/api/quizzes/999/questions")
    assert response.status_code == 404
    assert response.json()["detail"] == "No questions found for this quiz"


def test_questions_include_options(client):
    questions = client.get("/api/quizzes/1/questions").json()

    assert len(questions) == 5
    assert {"id", "questionId", "text", "isCorrect"} <= set(questions[0]["options"][0])
    assert questions[1]["codeSnippet"] == "console.log(typeof []);"


def test_submit_and_fetch_result(client):
    answers = correct_payload(client, 1)
    answers[0]["answerId"] = None

    response = client.post("/api/quizzes/1/submit", json={"userId": "alice", "answers": answers, "timeTakenSeconds": 75})

    assert response.status_code == 201
    body = response.json()
    assert body["score"] == 4
    report = client.get(f"/api/results/{body['resultId']}").json()
    assert report["quizTitle"] == "JavaScript Basics Quiz"
    assert report["correctAnswers"] == 4
    assert report["totalQuestions"] == 5
    assert report["timeTaken"] == "01:15"
    assert report["questions"][0]["userAnswer"] == "No answer"
    assert report["questions"][0]["isCorrect"] is False


@pytest.mark.parametrize(
    "payload",
    [{"answers": []}, {"userId": "alice"}, {"userId": "alice", "answers": "nope"}],
)
def test_submit_rejects_invalid_payloads(client, payload):
    response = client.post("/api/quizzes/1/submit", json=payload)

    assert response.status_code == 400
    assert response.json() == {"detail": "Invalid request data"}


def test_submit_to_unknown_quiz_is_404(client):
    response = client.post("/api/quizzes/999/submit", json={"userId": "alice", "answers": []})

    assert response.status_code == 404


def test_missing_result_is_404(client):
    assert client.get("/api/results/12345").status_code == 404


def test_generate_quiz_endpoint(client):
    response = client.post(
        "/api/quizzes/generate",
        json={"topic": "World History", "difficulty": "advanced", "questionCount": "3", "timeLimit": "20", "userId": "bob"},
    )

    assert response.status_code == 201
    quiz_id = response.json()["id"]
    mine = client.get("/api/quizzes", params={"userId": "bob"}).json()
    assert [quiz["id"] for quiz in mine] == [quiz_id]
    assert mine[0]["title"] == "World History Advanced Quiz"
    assert len(client.get(f"/api/quizzes/{quiz_id}/questions").json()) == 3


def test_generate_validation_errors(client):
    response = client.post("/api/quizzes/generate", json={"difficulty": "beginner", "questionCount": 3, "timeLimit": 5, "userId": "bob"})

    assert response.status_code == 400
    assert response.json()["detail"] == "Topic is required"


def test_delete_quiz(client):
    assert client.delete("/api/quizzes/2").json() == {"message": "Quiz deleted successfully"}
    assert client.get("/api/quizzes/2").status_code == 404
    assert client.delete("/api/quizzes/2").status_code == 404


def test_leaderboard_and_achievements_flow(client):
    submit = client.post("/api/quizzes/1/submit", json={"userId": "alice", "answers": correct_payload(client, 1), "timeTakenSeconds": 40})
    result_id = submit.json()["resultId"]

    update = client.post("/api/leaderboard/update", json={"userId": "alice", "quizResultId": result_id})

    assert update.status_code == 200
    assert update.json()["leaderboard"]["totalScore"] == 5
    assert "First Quiz" in update.json()["newAchievements"]
    top = client.get("/api/leaderboard", params={"limit": 5}).json()
    assert top[0]["userId"] == "alice"
    assert client.get("/api/leaderboard/user/alice").json()["ranking"] == 1
    assert client.get("/api/leaderboard/user/ghost").status_code == 404
    earned = client.get("/api/achievements/user/alice").json()
    assert {award["achievement"]["name"] for award in earned} >= {"First Quiz", "Quiz Master"}
    assert client.post("/api/achievements/check", json={"userId": "alice"}).json() == {"newAchievements": []}
    stats = client.get("/api/users/alice/statistics").json()
    assert stats["quizzesTaken"] == 1
    assert stats["rank"] == 1


def test_leaderboard_update_requires_ids(client):
    assert client.post("/api/leaderboard/update", json={"userId": "alice"}).status_code == 400
    assert client.post("/api/leaderboard/update", json={"userId": "alice", "quizResultId": 77}).status_code == 404


def test_award_and_list_achievements(client):
    catalogue = client.get("/api/achievements").json()
    assert [a["name"] for a in catalogue][:2] == ["First Quiz", "Quiz Master"]

    response = client.post("/api/achievements/award", json={"userId": "carol", "achievementId": 2})
    assert response.status_code == 201
    assert response.json()["achievementId"] == 2
    assert client.post("/api/achievements/award", json={"userId": "carol", "achievementId": 99}).status_code == 404
    assert client.post("/api/achievements/award", json={"userId": "carol"}).status_code == 400


def test_quiz_statistics_and_bank(client):
    client.post("/api/quizzes/1/submit", json={"userId": "alice", "answers": correct_payload(client, 1), "timeTakenSeconds": 60})

    stats = client.get("/api/quizzes/1/statistics").json()

    assert stats == {"participantCount": 1, "averageScore": 5, "completionRate": 100, "averageTimeTaken": "01:00"}
    bank = client.get("/api/questions/bank", params={"category": "Web Development"}).json()
    assert len(bank) == 2
    assert all(question["quizId"] is None for question in bank)


def test_session_against_live_app(client, scheduler, clock):
    session = SessionController(QuizApiClient(client), "dana", scheduler=scheduler, clock=clock)

    quiz = session.open_quiz(3)
    assert quiz.time_limit_minutes == 20
    assert session.seconds_remaining == 1200
    assert session.start()

    for question in session.questions:
        session.record_answer(question.id, question.correct_options()[0].id)
    clock.now += 125
    outcome = session.submit()

    assert outcome.status is SubmitStatus.SUBMITTED
    assert outcome.score == 5
    assert session.state is SessionState.COMPLETED
    report = QuizApiClient(client).fetch_result(outcome.result_id)
    assert report.percentage == 100
    assert report.time_taken == "02:05"


def test_session_open_missing_quiz_surfaces_404(client):
    from quizgenius.core.services.api_client import ApiError

    session = SessionController(QuizApiClient(client), "dana")

    with pytest.raises(ApiError) as excinfo:
        session.open_quiz(999)

    assert excinfo.value.status_code == 404
    assert session.state is SessionState.NOT_STARTED


def test_fresh_service_has_no_quizzes():
    client = TestClient(create_api_app(QuizService()))

    assert client.get("/api/quizzes").json() == []
    assert client.get("/api/leaderboard").json() == []


def test_create_quiz_and_manage_questions(client):
    response = client.post(
        "/api/quizzes",
        json={
            "title": "Capitals",
            "description": "Geography basics",
            "category": "Geography",
            "difficulty": "beginner",
            "timeLimit": "5",
            "userId": "erin",
            "questions": [
                {"text": "Capital of France?", "options": [{"text": "Paris", "isCorrect": True}, {"text": "Rome"}]}
            ],
        },
    )

    assert response.status_code == 201
    assert response.json()["message"] == "Quiz created successfully"
    quiz_id = response.json()["id"]
    quiz = client.get(f"/api/quizzes/{quiz_id}").json()
    assert (quiz["questionCount"], quiz["timeLimit"], quiz["userId"]) == (1, "5", "erin")

    added = client.post(
        f"/api/quizzes/{quiz_id}/questions",
        json={"text": "Capital of Spain?", "options": [{"text": "Lisbon"}, {"text": "Madrid", "isCorrect": True}]},
    )
    assert added.status_code == 201
    assert [o["isCorrect"] for o in added.json()["options"]] == [False, True]
    question_id = added.json()["id"]

    updated = client.put(
        f"/api/questions/{question_id}",
        json={"text": "Capital of Portugal?", "options": [{"text": "Lisbon", "isCorrect": True}, {"text": "Madrid"}]},
    )
    assert updated.status_code == 200
    assert updated.json()["text"] == "Capital of Portugal?"
    assert updated.json()["options"][0]["id"] == added.json()["options"][0]["id"]

    renamed = client.put(f"/api/quizzes/{quiz_id}", json={"title": "European Capitals", "timeLimit": 8})
    assert renamed.json()["title"] == "European Capitals"
    assert renamed.json()["timeLimit"] == "8"
    assert renamed.json()["questionCount"] == 2

    assert client.delete(f"/api/questions/{question_id}").json() == {"message": "Question deleted successfully"}
    assert len(client.get(f"/api/quizzes/{quiz_id}/questions").json()) == 1
    assert client.delete(f"/api/questions/{question_id}").status_code == 404


def test_authoring_validation_errors(client):
    valid_question = {"text": "Q", "options": [{"text": "a", "isCorrect": True}, {"text": "b"}]}

    missing_user = client.post("/api/quizzes", json={"title": "T", "timeLimit": "5"})
    bad_time = client.post("/api/quizzes", json={"title": "T", "timeLimit": "soon", "userId": "erin"})
    no_correct = client.post("/api/quizzes/1/questions", json={"text": "Q", "options": [{"text": "a"}, {"text": "b"}]})

    assert (missing_user.status_code, missing_user.json()["detail"]) == (400, "User ID is required")
    assert (bad_time.status_code, bad_time.json()["detail"]) == (400, "Time limit must be a whole number of minutes")
    assert (no_correct.status_code, no_correct.json()["detail"]) == (400, "Mark at least one option as correct.")
    assert client.post("/api/quizzes/999/questions", json=valid_question).status_code == 404
    assert client.put("/api/questions/999", json=valid_question).status_code == 404
    assert client.put("/api/quizzes/999", json={"title": "T", "timeLimit": 5}).status_code == 404
