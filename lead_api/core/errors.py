"""Application-level exception types.

This module defines the error taxonomy of the lead submission pipeline.
Pipeline stages return these as values; adapters raise them at their own
boundary. Either way they end up as a ``{"error": message}`` response.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability.

    Details are logged server-side and never serialized to the client.
    """

    code: str
    hint: str
    errors: list[str]
    missing: list[str]
    limit: int
    remaining: int
    reset_at: int
    retry_after: int
    provider_status: int
    message_kind: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable, client-safe error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ConfigurationAppError(AppError):
    """Raised when required server configuration is missing."""


class RateLimitAppError(AppError):
    """Raised when a client exceeded its submission budget."""


class MalformedRequestAppError(AppError):
    """Raised when the request body is not a JSON object."""


class ValidationAppError(AppError):
    """Raised when one or more lead fields fail validation."""


class DeliveryAppError(AppError):
    """Raised when the email provider failed to accept a message."""
