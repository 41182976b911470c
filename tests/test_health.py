"""Tests for the health check, routing fallbacks and error envelope."""

import logging

import pytest
from fastapi.testclient import TestClient

from task_api.config import Settings
from task_api.main import ENDPOINTS, create_app
from task_api.models import TaskStats
from task_api.store import TaskStore


class BrokenStore(TaskStore):
    def stats(self) -> TaskStats:
        """Fail the way an unexpected bug would."""
        raise RuntimeError("database exploded")


def test_health_check(client: TestClient) -> None:
    """Test that health check reports the API as running."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["message"] == "API is running!"
    assert "timestamp" in data


def test_unknown_route(client: TestClient) -> None:
    """Test that unmatched paths return the route-not-found envelope."""
    response = client.get("/api/nothing-here")
    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Route not found"}


def test_unsupported_method_is_route_not_found(client: TestClient) -> None:
    """Test that a known path with an unsupported method is reported as a missing route."""
    response = client.patch("/api/tasks/1", json={"title": "x"})
    assert response.status_code == 404
    assert response.json()["message"] == "Route not found"


def test_unhandled_error_returns_generic_500() -> None:
    """Test that unexpected failures do not leak details to the client."""
    app = create_app(store=BrokenStore(), settings=Settings())
    client = TestClient(app, raise_server_exceptions=False)
    response = client.get("/api/stats")
    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Something went wrong!"}


def test_cors_allows_any_origin(client: TestClient) -> None:
    """Test that cross-origin requests are permitted."""
    response = client.get("/health", headers={"Origin": "http://example.com"})
    assert response.headers["access-control-allow-origin"] == "*"


def test_unhandled_error_keeps_cors_headers() -> None:
    """Test that browser clients can read the 500 envelope cross-origin."""
    app = create_app(store=BrokenStore(), settings=Settings())
    client = TestClient(app, raise_server_exceptions=False)
    response = client.get("/api/stats", headers={"Origin": "http://example.com"})
    assert response.status_code == 500
    assert response.headers["access-control-allow-origin"] == "*"
    assert response.json()["message"] == "Something went wrong!"


def test_unhandled_error_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    """Test that the traceback of an unexpected failure is logged server-side."""
    client = TestClient(create_app(store=BrokenStore(), settings=Settings()))
    with caplog.at_level(logging.ERROR, logger="task_api.main"):
        client.get("/api/stats")
    record = next(r for r in caplog.records if r.name == "task_api.main")
    assert "GET /api/stats" in record.getMessage()
    assert record.exc_info is not None


def test_startup_logs_task_count_and_endpoints(caplog: pytest.LogCaptureFixture) -> None:
    """Test that starting the app logs the seeded tasks and the endpoint list."""
    app = create_app(store=TaskStore(), settings=Settings())
    with caplog.at_level(logging.INFO, logger="task_api.main"):
        with TestClient(app) as client:
            assert client.get("/health").status_code == 200
    messages = [r.getMessage() for r in caplog.records if r.name == "task_api.main"]
    assert "Task API ready with 2 tasks" in messages
    for endpoint in ENDPOINTS:
        assert f"  {endpoint}" in messages
    assert messages[-1] == "Task API shutting down"
