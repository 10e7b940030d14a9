"""Tests for the error-to-response mapping and global exception handlers."""

import asyncio
import json
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from lead_api.core.errors import (
    AppError,
    ConfigurationAppError,
    DeliveryAppError,
    MalformedRequestAppError,
    RateLimitAppError,
    ValidationAppError,
)
from lead_api.core.exception_handlers import (
    GENERIC_ERROR_MESSAGE,
    error_response,
    general_exception_handler,
    setup_exception_handlers,
    status_code_for,
)


@pytest.fixture
def app_with_handlers() -> FastAPI:
    """Create FastAPI app with exception handlers registered."""
    app = FastAPI()
    setup_exception_handlers(app)
    return app


@pytest.fixture
def client(app_with_handlers: FastAPI) -> TestClient:
    return TestClient(app_with_handlers, raise_server_exceptions=False)


@pytest.mark.parametrize(
    ("error_type", "expected_status"),
    [
        (ConfigurationAppError, 500),
        (RateLimitAppError, 429),
        (MalformedRequestAppError, 400),
        (ValidationAppError, 400),
        (DeliveryAppError, 500),
        (AppError, 400),
    ],
)
def test_status_code_mapping(error_type: type[AppError], expected_status: int) -> None:
    assert status_code_for(error_type(code="c", message="m")) == expected_status


def _body(response) -> dict:
    return json.loads(bytes(response.body).decode())


def test_error_response_exposes_only_message() -> None:
    exc = ValidationAppError(
        code="invalid_lead",
        message="Nieprawidłowy adres email",
        details={"errors": ["Nieprawidłowy adres email"]},
    )
    response = error_response(exc)

    assert response.status_code == 400
    assert _body(response) == {"error": "Nieprawidłowy adres email"}


def test_rate_limit_response_headers() -> None:
    exc = RateLimitAppError(
        code="rate_limit_exceeded",
        message="Zbyt wiele zgłoszeń.",
        details={"limit": 5, "remaining": 0, "reset_at": 1060, "retry_after": 42},
    )
    response = error_response(exc)

    assert response.status_code == 429
    assert response.headers["Retry-After"] == "42"
    assert response.headers["X-RateLimit-Limit"] == "5"
    assert response.headers["X-RateLimit-Remaining"] == "0"
    assert response.headers["X-RateLimit-Reset"] == "1060"


def test_other_errors_have_no_rate_limit_headers() -> None:
    response = error_response(DeliveryAppError(code="delivery_failed", message="x"))
    assert "Retry-After" not in response.headers


class TestRaisedErrors:
    def test_raised_app_error_uses_same_mapping(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-config")
        async def test_endpoint():
            raise ConfigurationAppError(code="mail_missing_api_key", message="Konfiguracja serwera nieprawidłowa.")

        response = client.get("/test-config")

        assert response.status_code == 500
        assert response.json() == {"error": "Konfiguracja serwera nieprawidłowa."}

    def test_unexpected_exception_returns_generic_500(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-crash")
        async def test_endpoint():
            raise RuntimeError("database connection failed")

        response = client.get("/test-crash")

        assert response.status_code == 500
        assert response.json() == {"error": GENERIC_ERROR_MESSAGE}
        assert "database" not in response.text


def test_general_exception_handler_never_leaks_stack_trace():
    request = AsyncMock()
    request.url.path = "/api/lead"
    request.method = "POST"

    response = asyncio.run(general_exception_handler(request, ValueError("Test error with details")))

    text = bytes(response.body).decode()
    assert response.status_code == 500
    assert "Traceback" not in text
    assert "ValueError" not in text
    assert "details" not in text


def test_setup_exception_handlers_registers_handlers(app_with_handlers: FastAPI):
    assert AppError in app_with_handlers.exception_handlers
    assert Exception in app_with_handlers.exception_handlers
