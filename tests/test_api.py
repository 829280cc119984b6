"""Tests for the operator HTTP API."""

import pytest
from fastapi.testclient import TestClient

from arauditor.api import routes
from arauditor.api.app import create_app
from arauditor.audit.session import AuditorSession

from conftest import FakeInferenceClient, make_camera


@pytest.fixture
def api(stats, fake_client):
    session = AuditorSession(fake_client, stats, make_camera(), period=15, cooldown=12)
    routes.auditor_instance = session
    with TestClient(create_app()) as client:
        yield client, session, fake_client
    routes.auditor_instance = None


def test_health(api):
    client, _, _ = api
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_scan_before_camera_is_not_dispatched(api):
    client, _, fake = api
    response = client.post("/api/v1/auditor/scan")
    assert response.status_code == 200
    assert response.json()["dispatched"] is False
    assert fake.analyze_calls == []


def test_scan_focus_and_remediate_flow(api):
    client, session, fake = api

    started = client.post("/api/v1/camera/start").json()
    assert started["started"] is True
    assert started["sensorStatus"] == "ACTIVE"

    scan = client.post("/api/v1/auditor/scan").json()
    assert scan["dispatched"] is True
    assert scan["state"]["result"]["complianceScore"] == 42
    assert len(scan["state"]["overlay"]["regions"]) == 1

    focus = client.post("/api/v1/auditor/focus", json={"index": 0}).json()
    assert focus["panel"]["category"] == "RAMP"

    prefill = client.post("/api/v1/auditor/issues/0/remediate-prefill").json()
    assert prefill["sidebarTab"] == "remediate"
    assert prefill["instruction"].startswith("REDUCE BARRIER: RAMP")

    submit = client.post("/api/v1/remediation/submit").json()
    assert submit["rendered"] is True
    assert submit["state"] == "RENDERED"
    assert fake.edit_calls[0][1] == prefill["instruction"]

    compare = client.post("/api/v1/remediation/compare", json={"holding": True}).json()
    assert compare["showOriginal"] is True

    flushed = client.post("/api/v1/remediation/flush").json()
    assert flushed["state"] == "IDLE"


def test_focus_invalid_index_is_404(api):
    client, _, _ = api
    response = client.post("/api/v1/auditor/focus", json={"index": 3})
    assert response.status_code == 404


def test_submit_without_frame_is_409(api):
    client, _, fake = api
    client.put("/api/v1/remediation/instruction", json={"instruction": "add ramp"})
    response = client.post("/api/v1/remediation/submit")
    assert response.status_code == 409
    assert fake.edit_calls == []


def test_camera_denied_returns_notice(stats, fake_client):
    routes.auditor_instance = AuditorSession(fake_client, stats, make_camera(opened=False))
    with TestClient(create_app()) as client:
        body = client.post("/api/v1/camera/start").json()
    routes.auditor_instance = None

    assert body["started"] is False
    assert body["sensorStatus"] == "DENIED"
    assert len(body["notifications"]) == 1


def test_advisor_endpoints(api):
    client, _, fake = api
    fake.chat_replies.append("Ramps need handrails on both sides.")

    blank = client.post("/api/v1/advisor/ask", json={"text": "  "})
    assert blank.status_code == 422

    answer = client.post("/api/v1/advisor/ask", json={"text": "Do ramps need handrails?"}).json()
    assert answer["text"] == "Ramps need handrails on both sides."

    messages = client.get("/api/v1/advisor/messages").json()
    assert [m["role"] for m in messages] == ["model", "user", "model"]


def test_health_reports_session_context(api):
    client, _, _ = api
    assert client.get("/health").json()["auditor"] == (
        "sensor=OFFLINE scan=idle live=off remediation=IDLE"
    )
    client.post("/api/v1/camera/start")
    assert "sensor=ACTIVE" in client.get("/health").json()["auditor"]


def test_non_finite_box_never_reaches_state(stats):
    issue = {
        "category": "RAMP",
        "complianceStatus": "WARNING",
        "description": "d",
        "recommendation": "r",
        "costEstimate": "$",
        "boundingBox": [float("nan"), 100, 300, 300],
    }
    fake = FakeInferenceClient(analyze_payloads=[{"issues": [issue], "complianceScore": 50}])
    routes.auditor_instance = AuditorSession(fake, stats, make_camera(), period=15, cooldown=12)
    with TestClient(create_app()) as client:
        client.post("/api/v1/camera/start")
        scan = client.post("/api/v1/auditor/scan")
        state = client.get("/api/v1/auditor/state")
    routes.auditor_instance = None

    assert scan.status_code == 200
    assert state.status_code == 200
    assert state.json()["result"]["issues"] == []
    assert state.json()["result"]["complianceScore"] == 50
