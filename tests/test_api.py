import random

import pytest
from fastapi.testclient import TestClient

from agents.case_author import CaseAuthor
from api.main import app
from api.routes import interview as routes
from conftest import (
    FakeChatModel,
    ScriptedGrader,
    ScriptedOracle,
    case_draft,
    grading_reply,
    interviewer_reply,
)
from errors import GradingError
from state import FeedbackReport


@pytest.fixture(autouse=True)
def clear_store():
    routes.sessions.clear()
    routes.authored_cases.clear()
    yield
    routes.sessions.clear()
    routes.authored_cases.clear()
    app.dependency_overrides.clear()


@pytest.fixture
def grader():
    return ScriptedGrader(FeedbackReport.model_validate(grading_reply()))


@pytest.fixture
def client(grader):
    def fake_agents():
        return routes.Agents(
            ScriptedOracle(
                interviewer_reply(),
                interviewer_reply(
                    current_phase="CASE_OPENING",
                    completion_percentage=20,
                    data_revealed=["Profits fell 20%"],
                    message_content="Our client is EcoDrink.",
                ),
            ),
            grader,
            CaseAuthor(
                FakeChatModel(case_draft()),
                FakeChatModel(
                    {
                        "summary": "Former bank analyst.",
                        "suggested_industry": "Financial Services",
                        "suggested_difficulty": "Intermediate",
                    }
                ),
            ),
        )

    app.dependency_overrides[routes.get_agents] = fake_agents
    app.dependency_overrides[routes.get_rng] = lambda: random.Random(0)
    return TestClient(app)


def _start(client, case_id="ecodrink_profitability", **extra):
    response = client.post("/api/interviews", json={"case_id": case_id, **extra})
    assert response.status_code == 200, response.text
    return response.json()


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_list_cases_hides_ground_truth(client):
    response = client.get("/api/cases")
    assert response.status_code == 200
    cases = response.json()
    assert len(cases) == 12
    assert all("ground_truth" not in c for c in cases)


def test_list_cases_filtered(client):
    response = client.get("/api/cases", params={"industry": "Financial Services"})
    assert [c["id"] for c in response.json()] == ["fintech_pricing_strategy"]


def test_select_relaxes_facets(client):
    response = client.post(
        "/api/cases/select",
        json={"industry": "Financial Services", "difficulty": "Advanced (Partner Level)"},
    )
    assert response.status_code == 200
    assert response.json()["id"] == "fintech_pricing_strategy"


def test_full_interview(client, grader):
    started = _start(client, candidate_id="cand-1")
    session_id = started["session_id"]
    assert started["opening_message"] == "Welcome. Tell me about yourself."
    assert started["case"]["id"] == "ecodrink_profitability"

    response = client.post(f"/api/interviews/{session_id}/respond", json={"message": "I studied economics."})
    assert response.status_code == 200
    body = response.json()
    assert body["interviewer_message"] == "Our client is EcoDrink."
    assert body["current_phase"] == "CASE_OPENING"
    assert body["degraded"] is False

    status = client.get(f"/api/interviews/{session_id}/status").json()
    assert status == {
        "status": "active",
        "current_phase": "CASE_OPENING",
        "message_count": 1,
        "revealed_facts": ["Profits fell 20%"],
    }

    transcript = client.get(f"/api/interviews/{session_id}/transcript").json()
    assert [t["role"] for t in transcript] == ["interviewer", "candidate", "interviewer"]

    report = client.post(f"/api/interviews/{session_id}/finish")
    assert report.status_code == 200
    assert report.json()["scores"]["judgment"] == 8

    again = client.post(f"/api/interviews/{session_id}/finish")
    assert again.status_code == 409
    assert grader.calls == 1

    late = client.post(f"/api/interviews/{session_id}/respond", json={"message": "One more thing"})
    assert late.status_code == 409


def test_start_with_style_override(client):
    started = _start(client, case_style="Candidate-Led (BCG/Bain Style)")
    assert started["case"]["case_style"] == "Candidate-Led (BCG/Bain Style)"


def test_empty_message_rejected(client):
    session_id = _start(client)["session_id"]
    response = client.post(f"/api/interviews/{session_id}/respond", json={"message": "   "})
    assert response.status_code == 422


def test_unknown_session_and_case(client):
    assert client.get("/api/interviews/nope/status").status_code == 404
    assert client.post("/api/interviews", json={"case_id": "nope"}).status_code == 404


def test_grading_failure_returns_502_and_keeps_session(client, grader):
    grader.error = GradingError("grader unavailable")
    session_id = _start(client)["session_id"]

    response = client.post(f"/api/interviews/{session_id}/finish")
    assert response.status_code == 502

    status = client.get(f"/api/interviews/{session_id}/status").json()
    assert status["status"] == "active"


def test_abandon(client):
    session_id = _start(client)["session_id"]
    response = client.post(f"/api/interviews/{session_id}/abandon")
    assert response.json()["status"] == "abandoned"
    assert client.post(f"/api/interviews/{session_id}/finish").status_code == 409


def test_generated_case_can_be_interviewed(client):
    response = client.post("/api/cases/generate", json={"industry": "Financial Services"})
    assert response.status_code == 200
    generated = response.json()
    assert generated["id"].startswith("generated_")
    assert generated["industry"] == "Financial Services"

    started = _start(client, case_id=generated["id"])
    assert started["case"]["title"] == "SolarCo Market Entry"


def test_extract_case(client):
    response = client.post("/api/cases/extract", json={"transcript": "Interviewer: Your client..."})
    assert response.status_code == 200
    assert response.json()["id"].startswith("extracted_")


def test_resume_match(client):
    response = client.post("/api/resume/analyze", json={"resume_text": "Analyst at a bank"})
    assert response.status_code == 200
    body = response.json()
    assert body["analysis"]["summary"] == "Former bank analyst."
    assert body["case"]["id"] == "fintech_pricing_strategy"


def test_missing_api_key_is_401(no_api_key):
    client = TestClient(app)
    response = client.post("/api/interviews", json={"case_id": "ecodrink_profitability"})
    assert response.status_code == 401
    assert response.json()["detail"] == "API key missing. Please provide a key."
    assert routes.sessions == {}


def test_session_key_header_is_used(monkeypatch, no_api_key):
    seen = []
    monkeypatch.setattr(routes.ReasoningOracle, "ensure_credentials", lambda self: seen.append(self._api_key))
    monkeypatch.setattr(routes.ReasoningOracle, "advance", lambda self, *a, **k: interviewer_reply())

    client = TestClient(app)
    response = client.post(
        "/api/interviews",
        json={"case_id": "ecodrink_profitability"},
        headers={"X-Api-Key": "sk-session"},
    )
    assert response.status_code == 200
    assert seen and set(seen) == {"sk-session"}


def test_start_with_inline_case(client, case):
    payload = case.model_dump(mode="json")
    payload["id"] = "my_own_case"
    started = _start(client, case_id=None, case=payload)
    assert started["case"]["id"] == "my_own_case"


def test_start_needs_a_case(client):
    assert client.post("/api/interviews", json={}).status_code == 422
