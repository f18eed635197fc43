# tests/conftest.py

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from daily_planner.main import create_app
from daily_planner.storage import JsonFileStorage


@pytest.fixture()
def tasks_file(tmp_path: Path) -> Path:
    return tmp_path / "data" / "tasks.json"


@pytest.fixture()
def storage(tasks_file: Path) -> JsonFileStorage:
    return JsonFileStorage(tasks_file)


@pytest.fixture()
def client(storage: JsonFileStorage) -> TestClient:
    """API client backed by a real JSON file in a per-test tmp dir."""
    return TestClient(create_app(storage))


@pytest.fixture()
def report_body() -> dict:
    return {"date": "2024-06-01", "startTime": "09:00", "description": "Write report"}
