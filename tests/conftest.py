"""
Shared pytest fixtures for YayTravel tests.

Provides:
- A throwaway SQLite store per test
- A TestClient wired to that store
- A registered user and its bearer headers
"""

import os
import tempfile

os.environ.setdefault("YAYTRAVEL_LOG_DIR", tempfile.mkdtemp(prefix="yaytravel-logs-"))

import pytest
from fastapi.testclient import TestClient

from yaytravel.api.routes_conversation import get_title_service
from yaytravel.db.sqlite_store import SQLiteStore, get_db
from yaytravel.main import app


USER = {
    "FirstName": "Charlie",
    "LastName": "Day",
    "email": "charlie@example.com",
    "phoneNumber": "+1-555-0100",
    "password": "s3cret-pass",
    "country": "France",
    "city": "Paris",
}


class FakeTitleService:
    def __init__(self, title="Paris in July"):
        self.title = title
        self.calls = []

    def generate_title(self, text):
        self.calls.append(text)
        return self.title


@pytest.fixture
def store(tmp_path):
    db = SQLiteStore(str(tmp_path / "test.sqlite3"))
    yield db
    db.close()


@pytest.fixture
def title_service():
    return FakeTitleService()


@pytest.fixture
def client(store, title_service):
    app.dependency_overrides[get_db] = lambda: store
    app.dependency_overrides[get_title_service] = lambda: title_service
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def user(client):
    resp = client.post("/users/", json=USER)
    assert resp.status_code == 201
    return resp.json()


@pytest.fixture
def auth_headers(client, user):
    resp = client.post("/token", data={"username": USER["email"], "password": USER["password"]})
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


@pytest.fixture
def conversation_id(client, auth_headers):
    resp = client.post("/conversations/", headers=auth_headers)
    assert resp.status_code == 200
    return resp.json()
