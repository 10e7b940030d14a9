"""Pytest configuration and fixtures shared across all test modules.

Environment variables are set before any application import so the global
settings object and the request-time delivery settings see them.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["APP_ENV"] = "testing"

os.environ.setdefault("RESEND_API_KEY", "re_test_key_123")
os.environ.setdefault("LEAD_TO_EMAIL", "biuro@example.com")
os.environ.setdefault("LEAD_FROM_EMAIL", "formularz@example.com")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime
from unittest.mock import Mock
from zoneinfo import ZoneInfo

import pytest

from lead_api.adapters.mail.base import AbstractMailer, EmailMessage
from lead_api.core.errors import DeliveryAppError


class RecordingMailer(AbstractMailer):
    """Mailer double that records messages and can fail a given call."""

    def __init__(self, fail_on_call: int | None = None, exc: Exception | None = None) -> None:
        self.sent: list[EmailMessage] = []
        self.fail_on_call = fail_on_call
        self.exc = exc

    async def send(self, message: EmailMessage) -> str:
        self.sent.append(message)
        if self.fail_on_call is not None and len(self.sent) == self.fail_on_call:
            raise self.exc or DeliveryAppError(code="mail_rejected", message="Resend returned HTTP 422")
        return f"msg-{len(self.sent)}"


@pytest.fixture
def clock() -> Mock:
    """Controllable UNIX clock starting at t=1000s."""
    return Mock(return_value=1000.0)


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 3, 5, 14, 7, 9, tzinfo=ZoneInfo("Europe/Warsaw"))


@pytest.fixture
def valid_lead() -> dict[str, str]:
    """Fully valid submission with required fields only."""
    return {
        "buildingType": "istniejący",
        "area": "150",
        "location": "małopolskie",
        "email": "jan.kowalski@example.com",
        "phone": "+48 600 100 200",
    }


@pytest.fixture
def full_lead(valid_lead: dict[str, str]) -> dict[str, str]:
    """Valid submission with every optional field filled in."""
    return {
        **valid_lead,
        "currentHeating": "kocioł gazowy",
        "installation": "grzejniki",
        "hasPV": "tak",
        "pvPower": "6.5",
        "hasStorage": "tak",
        "storageCapacity": "10",
        "notes": "Proszę o kontakt po 16.\nDom z 1985 r.",
    }
