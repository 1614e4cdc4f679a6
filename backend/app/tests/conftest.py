"""
Shared fixtures: in-memory SQLite database and API helpers.
"""
import os

# Must be set before the app (and its engine) is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["AUTO_CREATE_TABLES"] = "false"

import pytest
from datetime import date, timedelta
from fastapi.testclient import TestClient
from app.main import app
from app.db.base import Base
from app.db.session import engine, SessionLocal
from app import models  # noqa: F401

PNG_DATA_URI = (
    "data:image/png;base64,"
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)


@pytest.fixture(autouse=True)
def reset_database():
    """Give every test an empty schema."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def register(client):
    """Register a user through the API; returns (token, user_id)."""
    def _register(username: str, password: str = "secret1", mantra: str = "Wander often"):
        response = client.post(
            "/api/auth/register",
            json={"username": username, "password": password, "mantra": mantra}
        )
        assert response.status_code == 201, response.text
        body = response.json()
        return body["token"], body["user"]["id"]
    return _register


def trip_payload(**overrides) -> dict:
    start = date.today() + timedelta(days=30)
    payload = {
        "title": "Hiking the Dolomites",
        "description": "A week of hut-to-hut hiking.",
        "destination": "Cortina d'Ampezzo",
        "start_date": start.isoformat(),
        "end_date": (start + timedelta(days=6)).isoformat(),
        "min_participants": 2,
        "max_participants": 4,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def create_trip(client):
    """Create a trip through the API; returns the response body."""
    def _create_trip(token: str, **overrides):
        response = client.post("/api/trips", json=trip_payload(**overrides), headers=auth_header(token))
        assert response.status_code == 201, response.text
        return response.json()
    return _create_trip
