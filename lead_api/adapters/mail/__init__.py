"""Mail adapter layer - abstracts over transactional email providers."""

from lead_api.adapters.mail.base import AbstractMailer, EmailMessage
from lead_api.adapters.mail.factory import create_mailer
from lead_api.adapters.mail.resend_client import ResendMailer

__all__ = [
    "AbstractMailer",
    "EmailMessage",
    "ResendMailer",
    "create_mailer",
]
