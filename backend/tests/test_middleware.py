"""Tests for CORS handling, request logging and error interception."""

import logging

import pytest

from app.api.dependencies import get_user_service
from app.config import settings
from app.errors import ErrorKind, RequestValidationFailed, UnauthorizedError
from app.main import app
from app.middleware import STATUS_BY_KIND, resolve_allowed_origin

ALLOWED = "http://localhost:3000"


class ExplodingService:
    def __init__(self, exc):
        self.exc = exc

    async def list_users(self, page, limit):
        raise self.exc


@pytest.fixture
def failing_client(client):
    def use(exc):
        app.dependency_overrides[get_user_service] = lambda: ExplodingService(exc)
        return client
    return use


class TestResolveAllowedOrigin:

    def test_wildcard_echoes_origin(self):
        assert resolve_allowed_origin("https://x.test", ["*"]) == "https://x.test"

    def test_wildcard_without_origin(self):
        assert resolve_allowed_origin(None, ["*"]) == "*"

    def test_listed_origin(self):
        assert resolve_allowed_origin("https://b.test", ["https://a.test", "https://b.test"]) == "https://b.test"

    def test_unlisted_origin_falls_back_to_first(self):
        assert resolve_allowed_origin("https://evil.test", ["https://a.test", "https://b.test"]) == "https://a.test"


class TestPreflight:

    def test_options_short_circuits(self, client):
        response = client.options("/api/users/anything/at/all", headers={"Origin": ALLOWED})

        assert response.status_code == 204
        assert response.content == b""
        assert response.headers["access-control-allow-origin"] == ALLOWED
        assert response.headers["access-control-allow-methods"] == "GET, POST, PUT, PATCH, DELETE, OPTIONS"
        assert response.headers["access-control-allow-headers"] == "Content-Type, Authorization"
        assert response.headers["access-control-max-age"] == "86400"

    def test_unlisted_origin(self, client):
        response = client.options("/api/users", headers={"Origin": "https://evil.test"})

        assert response.headers["access-control-allow-origin"] == settings.cors_origins_list[0]


class TestResponseHeaders:

    def test_success_response_gets_cors_headers(self, client):
        response = client.get("/health", headers={"Origin": "https://app.example.com"})

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "https://app.example.com"
        assert "access-control-max-age" not in response.headers

    def test_not_found_gets_cors_headers(self, client):
        response = client.get("/nowhere", headers={"Origin": ALLOWED})

        assert response.status_code == 404
        assert response.headers["access-control-allow-origin"] == ALLOWED


class TestErrorInterception:

    def test_unexpected_error_becomes_500(self, failing_client):
        response = failing_client(RuntimeError("database exploded")).get(
            "/api/users", headers={"Origin": ALLOWED}
        )

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "database exploded"}
        assert response.headers["access-control-allow-origin"] == ALLOWED

    def test_message_hidden_in_production(self, failing_client, monkeypatch):
        monkeypatch.setattr(settings, "environment", "production")

        response = failing_client(RuntimeError("secret detail")).get("/api/users")

        assert response.status_code == 500
        assert response.json()["error"] == "Internal server error"

    def test_unauthorized_kind(self, failing_client):
        response = failing_client(UnauthorizedError("Unauthorized")).get("/api/users")

        assert response.status_code == 401
        assert response.json() == {"success": False, "error": "Unauthorized"}

    def test_validation_kind_carries_field_errors(self, failing_client):
        exc = RequestValidationFailed({"email": ["Invalid email format"]})
        response = failing_client(exc).get("/api/users")

        assert response.status_code == 422
        assert response.json()["errors"] == {"email": ["Invalid email format"]}

    def test_every_kind_has_a_status(self):
        assert set(STATUS_BY_KIND) == set(ErrorKind)


def test_request_is_logged(client, caplog):
    with caplog.at_level(logging.INFO, logger="app.access"):
        client.get("/health?verbose=1")

    assert "GET /health" in caplog.messages
