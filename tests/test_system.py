"""Tests for the system routes and the app-wide HTTP error handler."""

from unittest.mock import PropertyMock, patch

from clipguard.core.dependencies import ModerationGate


def test_health_reports_gate_state(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "moderation_saturated": False}

    with patch.object(ModerationGate, "saturated", new_callable=PropertyMock, return_value=True):
        assert client.get("/health").json()["moderation_saturated"] is True


def test_gate_is_sized_from_settings(client):
    from clipguard.config import settings
    from clipguard.main import app

    assert app.state.moderation_gate.max_runs == settings.max_concurrent_runs


def test_crawlers_are_disallowed(client):
    response = client.get("/robots.txt")
    assert response.status_code == 200
    assert response.text == "User-agent: *\nDisallow: /"


def test_http_errors_keep_cors_header(client):
    response = client.get("/no-such-route")
    assert response.status_code == 404
    assert response.headers["access-control-allow-origin"] == "*"
    assert response.json() == {"detail": "Not Found"}
