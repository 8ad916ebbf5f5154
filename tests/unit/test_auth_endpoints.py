"""Unit tests for /auth endpoints using TestClient with mocked services."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from courier.api.dependencies import get_auth_service
from courier.errors import ConflictError, CredentialError

REGISTER_BODY = {
    "username": "alice",
    "password": "pw1",
    "first_name": "Alice",
    "last_name": "Smith",
    "phone": "555-0100",
}


@pytest.fixture
def auth_service(client):
    service = MagicMock()
    service.register = AsyncMock(return_value="token-abc")
    service.login = AsyncMock(return_value="token-xyz")
    client.app.dependency_overrides[get_auth_service] = lambda: service
    return service


class TestRegister:
    """Tests for POST /auth/register."""

    def test_returns_201_with_token(self, client, auth_service):
        response = client.post("/auth/register", json=REGISTER_BODY)

        assert response.status_code == 201
        assert response.json() == {"token": "token-abc"}
        auth_service.register.assert_awaited_once_with(
            username="alice",
            password="pw1",
            first_name="Alice",
            last_name="Smith",
            phone="555-0100",
        )

    def test_duplicate_username_returns_409(self, client, auth_service):
        auth_service.register.side_effect = ConflictError("Username 'alice' is already taken")

        response = client.post("/auth/register", json=REGISTER_BODY)

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "CONFLICT"

    def test_missing_field_returns_400(self, client, auth_service):
        body = {k: v for k, v in REGISTER_BODY.items() if k != "phone"}

        response = client.post("/auth/register", json=body)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"
        auth_service.register.assert_not_awaited()

    def test_invalid_username_chars_returns_400(self, client, auth_service):
        response = client.post("/auth/register", json={**REGISTER_BODY, "username": "al ice"})

        assert response.status_code == 400

    def test_whitespace_password_returns_400(self, client, auth_service):
        response = client.post("/auth/register", json={**REGISTER_BODY, "password": "   "})

        assert response.status_code == 400


class TestLogin:
    """Tests for POST /auth/login."""

    def test_returns_token(self, client, auth_service):
        response = client.post("/auth/login", json={"username": "alice", "password": "pw1"})

        assert response.status_code == 200
        assert response.json() == {"token": "token-xyz"}

    def test_bad_credentials_return_401(self, client, auth_service):
        auth_service.login.side_effect = CredentialError()

        response = client.post("/auth/login", json={"username": "alice", "password": "nope"})

        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Invalid username or password"

    def test_unknown_user_and_wrong_password_responses_identical(self, client, auth_service):
        auth_service.login.side_effect = CredentialError(reason="wrong_password")
        wrong_password = client.post("/auth/login", json={"username": "alice", "password": "nope"})

        auth_service.login.side_effect = CredentialError(reason="unknown_user")
        unknown_user = client.post("/auth/login", json={"username": "ghost", "password": "nope"})

        assert wrong_password.status_code == unknown_user.status_code == 401
        assert wrong_password.json() == unknown_user.json()

    def test_correlation_id_echoed(self, client, auth_service):
        response = client.post(
            "/auth/login",
            json={"username": "alice", "password": "pw1"},
            headers={"X-Correlation-Id": "corr-123"},
        )

        assert response.headers["X-Correlation-Id"] == "corr-123"
