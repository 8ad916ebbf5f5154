"""Unit tests for the request context middleware."""

from unittest.mock import AsyncMock, MagicMock
from uuid import UUID

import pytest

from courier.api.dependencies import get_auth_service
from courier.api.middleware import resolve_correlation_id
from courier.errors import CredentialError


class TestResolveCorrelationId:
    """Tests for resolve_correlation_id."""

    def test_keeps_well_formed_id(self):
        assert resolve_correlation_id("req-42.a_b") == "req-42.a_b"

    @pytest.mark.parametrize(
        "value",
        [None, "", "x" * 65, "bad id", "id\nforged=1", '{"event":"x"}'],
    )
    def test_replaces_missing_or_unsafe_id(self, value):
        result = resolve_correlation_id(value)

        assert result != value
        assert UUID(result).version == 4


class TestResponseHeader:
    """Tests for the X-Correlation-Id response header."""

    def test_generated_when_absent(self, client):
        response = client.get("/health")

        assert UUID(response.headers["X-Correlation-Id"]).version == 4

    def test_unsafe_header_not_echoed(self, client):
        response = client.get("/health", headers={"X-Correlation-Id": "a b c"})

        assert response.headers["X-Correlation-Id"] != "a b c"

    def test_same_id_on_error_responses(self, client):
        service = MagicMock()
        service.login = AsyncMock(side_effect=CredentialError())
        client.app.dependency_overrides[get_auth_service] = lambda: service

        response = client.post(
            "/auth/login",
            json={"username": "alice", "password": "nope"},
            headers={"X-Correlation-Id": "corr-err-1"},
        )

        assert response.status_code == 401
        assert response.headers["X-Correlation-Id"] == "corr-err-1"
