"""
HTTP tests for the interview API.

Runs the FastAPI app in-process with an oracle-free orchestrator.
"""

import random

import pytest
from fastapi.testclient import TestClient

from hirebridge.api.app import create_app
from hirebridge.api.routes import limiter
from hirebridge.app.evaluation import EvaluationAggregator
from hirebridge.app.orchestrator import InterviewOrchestrator
from hirebridge.app.scoring import AnswerScorer
from hirebridge.app.selector import QuestionSelector
from hirebridge.infra.persistence.session_store import InMemorySessionStore


@pytest.fixture
def client(settings, monkeypatch):
    monkeypatch.setattr(limiter, "enabled", False)

    orchestrator = InterviewOrchestrator(
        store=InMemorySessionStore(),
        selector=QuestionSelector(rng=random.Random(7)),
        scorer=AnswerScorer(None, settings),
        aggregator=EvaluationAggregator(None, settings),
        settings=settings,
    )
    app = create_app(orchestrator=orchestrator)

    with TestClient(app) as test_client:
        yield test_client


def _start(client, role="Software Developer"):
    response = client.post("/api/interview/start", json={"role": role})
    assert response.status_code == 200
    return response.json()


class TestInterviewFlow:
    """start -> next -> finish over HTTP."""

    def test_start_returns_welcome(self, client):
        data = _start(client)

        assert data["isWelcome"] is True
        assert data["questionNumber"] == 0
        assert "Software Developer" in data["question"]
        assert data["interviewId"]
        assert "difficulty" not in data

    def test_first_question(self, client):
        interview_id = _start(client)["interviewId"]

        response = client.post("/api/interview/next", json={
            "interviewId": interview_id,
            "role": "Software Developer",
            "lastAnswer": "I'm ready",
            "isFirstQuestion": True,
        })

        assert response.status_code == 200
        data = response.json()
        assert data["questionNumber"] == 1
        assert data["isWelcome"] is False
        assert data["difficulty"] == "easy"
        assert data["topic_tag"]
        assert data["question_type"] in ("conceptual", "coding", "debugging")

    def test_full_interview(self, client):
        interview_id = _start(client)["interviewId"]
        client.post("/api/interview/next", json={"interviewId": interview_id, "isFirstQuestion": True})

        response = client.post("/api/interview/next", json={
            "interviewId": interview_id,
            "lastAnswer": "Functions are callable, classes are blueprints.",
        })
        assert response.json()["questionNumber"] == 2
        assert response.json()["difficulty"] == "medium"  # default score 5

        response = client.post("/api/interview/finish", json={"interviewId": interview_id})

        assert response.status_code == 200
        report = response.json()
        assert report["answeredQuestions"] == 1
        assert report["totalQuestions"] == 2
        assert report["avgScore"] == 5
        assert report["score"] == 50
        assert report["rating"] == "Average"
        assert report["status"] == "evaluated"
        assert report["source"] == "fallback"
        assert isinstance(report["strengths"], list)

    def test_resume_returns_pending_question(self, client):
        interview_id = _start(client)["interviewId"]
        first = client.post(
            "/api/interview/next",
            json={"interviewId": interview_id, "isFirstQuestion": True},
        ).json()

        resumed = client.post("/api/interview/start", json={
            "role": "Software Developer",
            "interviewId": interview_id,
        }).json()

        assert resumed == first

    def test_empty_answer_repeats_question(self, client):
        interview_id = _start(client)["interviewId"]
        first = client.post(
            "/api/interview/next",
            json={"interviewId": interview_id, "isFirstQuestion": True},
        ).json()

        again = client.post(
            "/api/interview/next",
            json={"interviewId": interview_id, "lastAnswer": ""},
        ).json()

        assert again == first


class TestErrors:
    """Client errors map to 4xx with an error body."""

    def test_unsupported_role(self, client):
        response = client.post("/api/interview/start", json={"role": "Astronaut"})

        assert response.status_code == 400
        assert "Astronaut" in response.json()["error"]

    def test_unknown_interview_id(self, client):
        response = client.post(
            "/api/interview/next",
            json={"interviewId": "missing", "lastAnswer": "hello"},
        )

        assert response.status_code == 400
        assert response.json()["error"]

    def test_missing_interview_id_is_validation_error(self, client):
        response = client.post("/api/interview/next", json={"lastAnswer": "hello"})

        assert response.status_code == 422

    def test_unknown_role_on_next(self, client):
        interview_id = _start(client)["interviewId"]

        response = client.post(
            "/api/interview/next",
            json={"interviewId": interview_id, "role": "Chef"},
        )

        assert response.status_code == 400


class TestFinish:
    """The finish endpoint always answers with a report."""

    def test_accepts_session_id_alias(self, client):
        interview_id = _start(client)["interviewId"]

        response = client.post("/api/interview/finish", json={"sessionId": interview_id})

        assert response.status_code == 200
        assert response.json()["status"] == "incomplete"

    def test_empty_body(self, client):
        response = client.post("/api/interview/finish")

        assert response.status_code == 200
        assert response.json()["score"] == 0

    def test_non_json_body(self, client):
        response = client.post(
            "/api/interview/finish",
            content=b"interviewId=abc",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 200
        assert response.json()["status"] == "completed"

    @pytest.mark.parametrize("body", [{"interviewId": 123}, ["abc"], "abc"])
    def test_mistyped_body(self, client, body):
        response = client.post("/api/interview/finish", json=body)

        assert response.status_code == 200
        assert response.json()["score"] == 0

    def test_unknown_session(self, client):
        response = client.post("/api/interview/finish", json={"interviewId": "missing"})

        assert response.status_code == 200
        assert response.json()["status"] == "completed"


class TestInfoEndpoints:
    """Stats, catalog and health."""

    def test_stats(self, client):
        interview_id = _start(client)["interviewId"]

        response = client.get("/api/interview/stats", params={"interviewId": interview_id})

        assert response.status_code == 200
        data = response.json()
        assert data["interviewId"] == interview_id
        assert data["phase"] == "welcome"
        assert data["questions_asked"] == 0

    def test_stats_unknown_session(self, client):
        response = client.get("/api/interview/stats", params={"interviewId": "missing"})

        assert response.status_code == 400

    def test_roles(self, client):
        response = client.get("/api/roles")

        assert response.status_code == 200
        roles = {r["role"]: r["questions"] for r in response.json()}
        assert set(roles) == {
            "Software Developer", "Data Analyst", "AI / ML Engineer", "HR / Management",
        }
        assert all(counts["easy"] > 0 for counts in roles.values())

    def test_health(self, client):
        _start(client)

        response = client.get("/api/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["active_sessions"] == 1
        assert data["oracle_enabled"] is False
