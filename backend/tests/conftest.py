"""Shared fixtures. Environment is set before any app module reads settings."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("CORS_ORIGINS", "http://localhost:3000,https://app.example.com")

import pytest
from fastapi.testclient import TestClient

from app.api.dependencies import get_user_repository
from app.main import app
from fakes import FakeUserRepository


VALID_USER = {
    "email": "Jane.Doe@Example.com",
    "password": "Secret123",
    "first_name": "Jane",
    "last_name": "Doe",
}


@pytest.fixture
def repository():
    return FakeUserRepository()


@pytest.fixture
def client(repository):
    app.dependency_overrides[get_user_repository] = lambda: repository
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def user_payload():
    return dict(VALID_USER)


@pytest.fixture
def created_user(client, user_payload):
    response = client.post("/api/users", json=user_payload)
    assert response.status_code == 201
    return response.json()["data"]
