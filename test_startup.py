"""
Startup checks: the app imports cleanly and a failed client setup disables generation.
"""
from fastapi.testclient import TestClient

from image.client import ai_service


def test_application_imports():
    from app import app

    paths = app.openapi()["paths"]
    assert "/healthz" in paths
    assert "/api/references" in paths
    assert "/api/sessions/{session_id}/generate" in paths


def test_startup_failure_leaves_service_unavailable(monkeypatch):
    from app import app
    from image import client as client_module

    def failing_factory():
        raise ValueError("Missing key inputs argument!")

    monkeypatch.setattr(client_module, "_default_client_factory", failing_factory)

    with TestClient(app) as client:
        assert client.get("/healthz").json()["ai_service_ready"] is False
        session_id = client.post("/api/sessions").json()["id"]
        state = client.get(f"/api/sessions/{session_id}").json()

    assert ai_service.init_error == "Missing key inputs argument!"
    assert state["prompt_enabled"] is False
    assert state["generate_enabled"] is False
    assert state["service_error"]


def test_startup_builds_client(monkeypatch):
    from app import app
    from image import client as client_module

    sentinel = object()
    monkeypatch.setattr(client_module, "_default_client_factory", lambda: sentinel)

    with TestClient(app):
        assert ai_service.client is sentinel
        assert ai_service.ready
