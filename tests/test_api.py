from fastapi.testclient import TestClient

from survey_backend.auth import get_current_user
from survey_backend.dependencies import get_repository
from survey_backend.main import app
from survey_backend.schemas import Identity
from survey_backend.services.repository import SurveyRepository

from conftest import FailingStore, add_question, add_survey


def as_user(user_id):
    app.dependency_overrides[get_current_user] = lambda: Identity(id=user_id)


def test_hello(client):
    assert client.get("/api/hello").json() == {"message": "Hello from FastAPI"}


def test_get_survey_with_questions(client, store):
    sid = add_survey(store, title="Feedback", description="Tell us")
    add_question(store, sid, "Rate us", qtype="rating", minutes=1, maxRating=5)
    add_question(store, sid, "What is your name?", minutes=0)

    r = client.get(f"/api/surveys/{sid}")
    assert r.status_code == 200
    body = r.json()
    assert body["survey"]["title"] == "Feedback"
    assert body["survey"]["groupId"] == "G1"
    assert [q["question"] for q in body["questions"]] == ["What is your name?", "Rate us"]
    assert body["questions"][1]["maxRating"] == 5
    assert body["acceptingResponses"] is True
    assert body["alreadyResponded"] is False


def test_get_missing_survey(client):
    assert client.get("/api/surveys/nope").status_code == 404


def test_submit_then_duplicate(client, store):
    sid = add_survey(store)
    q1 = add_question(store, sid, "What is your name?")
    q2 = add_question(store, sid, "Rate", qtype="rating", minutes=1)

    r = client.post(f"/api/surveys/{sid}/responses", json={"answers": {q1: "Grace Hopper", q2: 5}})
    assert r.status_code == 201
    assert set(r.json()) == {"responseId", "studentId"}

    again = client.post(f"/api/surveys/{sid}/responses", json={"answers": {q1: "Grace Hopper"}})
    assert again.status_code == 409
    assert client.get(f"/api/surveys/{sid}").json()["alreadyResponded"] is True


def test_submit_to_missing_survey(client):
    r = client.post("/api/surveys/nope/responses", json={"answers": {"q": "x"}})
    assert r.status_code == 404


def test_transport_failure_is_retryable(user):
    store = FailingStore({"surveys"})
    app.dependency_overrides[get_repository] = lambda: SurveyRepository(store)
    app.dependency_overrides[get_current_user] = lambda: user
    try:
        r = TestClient(app).post("/api/surveys/s1/responses", json={"answers": {}})
    finally:
        app.dependency_overrides.clear()
    assert r.status_code == 503
    assert "try again" in r.json()["detail"]


def test_creator_only_views(client, store):
    sid = add_survey(store, owner="creator-1")
    q1 = add_question(store, sid, "Rate", qtype="rating")
    client.post(f"/api/surveys/{sid}/responses", json={"answers": {q1: 4}})

    assert client.get(f"/api/surveys/{sid}/responses").status_code == 403
    assert client.get(f"/api/surveys/{sid}/stats").status_code == 403

    as_user("creator-1")
    responses = client.get(f"/api/surveys/{sid}/responses").json()
    assert [r["userId"] for r in responses] == ["U1"]
    stats = client.get(f"/api/surveys/{sid}/stats").json()
    assert stats["totalResponses"] == 1
    assert stats["perQuestion"][q1] == {"responses": 1, "values": [4]}


def test_my_surveys_and_analytics(client, store):
    sid = add_survey(store, owner="U1", title="Mine")
    add_survey(store, owner="U2")
    client.post(f"/api/surveys/{sid}/responses", json={"answers": {"q": "a"}})

    surveys = client.get("/api/users/me/surveys").json()
    assert [s["id"] for s in surveys] == [sid]

    analytics = client.get("/api/users/me/analytics").json()
    assert analytics["totalSurveys"] == 1
    assert analytics["totalResponses"] == 1
    assert analytics["averageResponsesPerSurvey"] == 1
    assert analytics["perSurvey"] == [{"id": sid, "title": "Mine", "responseCount": 1}]


def test_empty_analytics(client):
    analytics = client.get("/api/users/me/analytics").json()
    assert analytics == {
        "totalSurveys": 0,
        "totalResponses": 0,
        "averageResponsesPerSurvey": 0,
        "perSurvey": [],
    }


def test_malformed_survey_is_retryable(client, store):
    sid = add_survey(store, status="active")
    r = client.post(f"/api/surveys/{sid}/responses", json={"answers": {"q": "x"}})
    assert r.status_code == 503
    assert client.get(f"/api/surveys/{sid}").status_code == 503
