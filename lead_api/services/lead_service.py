"""Lead submission pipeline.

Runs the stages of a form submission strictly in order, each one a possible
exit point:

    config check → rate check → parse → validate → sanitize → deliver

Stages hand back either their product or an ``AppError`` value; the first
error returned ends the pipeline and becomes the HTTP response. Nothing is
retried: both emails are sent one after the other and a failure of either
one fails the whole submission.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Union

from lead_api.adapters.mail.base import AbstractMailer, EmailMessage
from lead_api.adapters.mail.factory import create_mailer
from lead_api.adapters.rate_limit.base import AbstractRateLimiter
from lead_api.core.config import DeliverySettings, LeadSettings, ResendSettings
from lead_api.core.errors import (
    AppError,
    ConfigurationAppError,
    DeliveryAppError,
    MalformedRequestAppError,
    RateLimitAppError,
    ValidationAppError,
)
from lead_api.services.lead_composer import (
    TIMEZONE,
    confirmation_html,
    confirmation_subject,
    format_lead_html,
    format_lead_text,
    lead_subject,
)
from lead_api.services.lead_validation import join_errors, validate_lead
from lead_api.utils.sanitizer import sanitize_submission

logger = logging.getLogger(__name__)

CONFIG_ERROR_MESSAGE = "Konfiguracja serwera nieprawidłowa. Proszę spróbować później."
RATE_LIMIT_MESSAGE = "Zbyt wiele zgłoszeń. Proszę spróbować za chwilę."
MALFORMED_REQUEST_MESSAGE = "Nieprawidłowe dane."
DELIVERY_FAILED_MESSAGE = "Nie udało się wysłać zgłoszenia. Proszę spróbować ponownie."

MailerFactory = Callable[[ResendSettings], AbstractMailer]


@dataclass(frozen=True)
class LeadAccepted:
    """Successful submission: both messages were accepted by the provider."""

    notification_id: str
    confirmation_id: str


LeadOutcome = Union[LeadAccepted, AppError]


def build_lead_notification(
    data: dict[str, str],
    lead_settings: LeadSettings,
    submitted_at: datetime,
) -> EmailMessage:
    """Business alert, replying straight to the submitter."""
    return EmailMessage(
        sender=lead_settings.from_email or "",
        to=lead_settings.to_email or "",
        reply_to=data["email"],
        subject=lead_subject(data),
        text=format_lead_text(data, submitted_at),
        html=format_lead_html(data, submitted_at),
    )


def build_confirmation(data: dict[str, str], lead_settings: LeadSettings) -> EmailMessage:
    """Thank-you message to the submitter."""
    return EmailMessage(
        sender=lead_settings.from_email or "",
        to=data["email"],
        reply_to=lead_settings.reply_to_email or data["email"],
        subject=confirmation_subject(),
        html=confirmation_html(),
    )


class LeadService:
    """Processes lead submissions against an explicitly owned rate limiter.

    Attributes:
        rate_limiter: Per-client admission table; owned by the application.
        mailer_factory: Builds the delivery collaborator from request-time
            provider settings.
    """

    def __init__(
        self,
        *,
        rate_limiter: AbstractRateLimiter,
        mailer_factory: MailerFactory = create_mailer,
        rate_limit_enabled: bool = True,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        self.rate_limiter = rate_limiter
        self.mailer_factory = mailer_factory
        self.rate_limit_enabled = rate_limit_enabled
        self._now = now or (lambda: datetime.now(TIMEZONE))

    async def submit(
        self,
        *,
        client_id: str,
        body: bytes,
        delivery: DeliverySettings,
    ) -> LeadOutcome:
        """Run one submission through the whole pipeline.

        Args:
            client_id: Requester identifier used for rate limiting.
            body: Raw request body.
            delivery: Delivery settings read for this request.

        Returns:
            LeadAccepted on success, otherwise the AppError of the first
            stage that failed.
        """
        config_error = self._check_config(delivery)
        if config_error is not None:
            return config_error

        rate_error = self._check_rate(client_id)
        if rate_error is not None:
            return rate_error

        raw = self._parse(body)
        if isinstance(raw, AppError):
            return raw

        validation_error = self._validate(raw)
        if validation_error is not None:
            return validation_error

        data = sanitize_submission(raw)
        return await self._deliver(data, delivery)

    def _check_config(self, delivery: DeliverySettings) -> ConfigurationAppError | None:
        missing = delivery.missing()
        if not missing:
            return None
        logger.error("lead.config_missing", extra={"missing": missing})
        return ConfigurationAppError(
            code="server_misconfigured",
            message=CONFIG_ERROR_MESSAGE,
            details={"missing": missing},
        )

    def _check_rate(self, client_id: str) -> RateLimitAppError | None:
        if not self.rate_limit_enabled:
            return None

        result = self.rate_limiter.consume(client_id)
        if result.allowed:
            logger.info(
                "rate_limit.allowed",
                extra={
                    "client_id": client_id,
                    "limit": result.limit,
                    "remaining": result.remaining,
                },
            )
            return None

        retry_after = result.retry_after_seconds or 0
        logger.warning(
            "rate_limit.exceeded",
            extra={
                "client_id": client_id,
                "limit": result.limit,
                "retry_after_s": retry_after,
            },
        )
        return RateLimitAppError(
            code="rate_limit_exceeded",
            message=RATE_LIMIT_MESSAGE,
            details={
                "limit": result.limit,
                "remaining": result.remaining,
                "reset_at": result.reset_at,
                "retry_after": retry_after,
            },
        )

    def _parse(self, body: bytes) -> dict[str, Any] | MalformedRequestAppError:
        try:
            payload = json.loads(body)
        except (ValueError, RecursionError):
            payload = None

        if not isinstance(payload, dict):
            logger.info("lead.malformed_body", extra={"body_bytes": len(body)})
            return MalformedRequestAppError(
                code="malformed_request",
                message=MALFORMED_REQUEST_MESSAGE,
            )
        return payload

    def _validate(self, raw: dict[str, Any]) -> ValidationAppError | None:
        errors = validate_lead(raw)
        if not errors:
            return None
        logger.info("lead.validation_failed", extra={"error_count": len(errors)})
        return ValidationAppError(
            code="invalid_lead",
            message=join_errors(errors),
            details={"errors": errors},
        )

    async def _send(self, mailer: AbstractMailer, message: EmailMessage, kind: str) -> str | DeliveryAppError:
        try:
            return await mailer.send(message)
        except DeliveryAppError as exc:
            logger.error(
                "lead.delivery_failed",
                extra={"message_kind": kind, "error_code": exc.code, "error_msg": exc.message},
            )
        except Exception as exc:
            logger.exception(
                "lead.delivery_failed",
                extra={"message_kind": kind, "error_type": type(exc).__name__},
            )
        return DeliveryAppError(
            code="delivery_failed",
            message=DELIVERY_FAILED_MESSAGE,
            details={"message_kind": kind},
        )

    async def _deliver(self, data: dict[str, str], delivery: DeliverySettings) -> LeadOutcome:
        mailer = self.mailer_factory(delivery.resend)

        notification = build_lead_notification(data, delivery.lead, self._now())
        notification_id = await self._send(mailer, notification, "notification")
        if isinstance(notification_id, DeliveryAppError):
            return notification_id

        confirmation = build_confirmation(data, delivery.lead)
        confirmation_id = await self._send(mailer, confirmation, "confirmation")
        if isinstance(confirmation_id, DeliveryAppError):
            return confirmation_id

        logger.info(
            "lead.accepted",
            extra={
                "building_type": data.get("buildingType"),
                "area": data.get("area"),
                "location": data.get("location"),
                "notification_id": notification_id,
                "confirmation_id": confirmation_id,
            },
        )
        return LeadAccepted(notification_id=notification_id, confirmation_id=confirmation_id)
