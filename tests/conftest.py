"""Pytest fixtures for the Task Store API tests."""

import pytest
from fastapi.testclient import TestClient

from task_api.config import Settings
from task_api.main import create_app
from task_api.store import TaskStore


@pytest.fixture
def store() -> TaskStore:
    """A fresh store holding the two seed tasks."""
    return TaskStore()


@pytest.fixture
def client(store: TaskStore) -> TestClient:
    """Create a test client for the API."""
    return TestClient(create_app(store=store, settings=Settings()))
