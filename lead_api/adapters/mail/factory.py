"""Factory for creating mailer instances from request-time settings."""

from lead_api.adapters.mail.base import AbstractMailer
from lead_api.adapters.mail.resend_client import ResendMailer
from lead_api.core.config import ResendSettings
from lead_api.core.errors import ConfigurationAppError


def create_mailer(resend_settings: ResendSettings) -> AbstractMailer:
    """Build the Resend mailer for the current request.

    Args:
        resend_settings: Provider settings read for this request.

    Returns:
        AbstractMailer: Configured mailer instance.

    Raises:
        ConfigurationAppError: If no API key is configured.
    """
    if not resend_settings.api_key:
        raise ConfigurationAppError(
            code="mail_missing_api_key",
            message="Resend provider requires RESEND_API_KEY environment variable",
        )
    return ResendMailer(
        api_key=resend_settings.api_key,
        base_url=resend_settings.base_url,
        timeout_seconds=resend_settings.timeout_seconds,
    )
