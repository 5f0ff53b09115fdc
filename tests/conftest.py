"""Shared test fixtures for the Leylines tests."""

import pytest
from fastapi.testclient import TestClient

from leylines_api.app.core import db
from leylines_api.app.core.config import settings
from leylines_api.app.main import app


@pytest.fixture(autouse=True)
def database(tmp_path, monkeypatch):
    """Point the store at a fresh SQLite file for every test."""
    db.close_connection()
    monkeypatch.setattr(settings, "database_url", str(tmp_path / "leylines-test.db"))
    yield
    db.close_connection()


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client
