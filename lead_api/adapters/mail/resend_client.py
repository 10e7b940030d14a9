"""Resend email client adapter."""

from typing import Any

import httpx

from lead_api.adapters.mail.base import AbstractMailer, EmailMessage
from lead_api.core.errors import DeliveryAppError


class ResendMailer(AbstractMailer):
    """Client for the Resend ``POST /emails`` endpoint.

    Talks to the REST API directly with an async httpx client. No retries
    are performed; a failed send is reported to the caller as-is.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.resend.com",
        timeout_seconds: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the Resend client.

        Args:
            api_key: Resend API key used as a bearer token.
            base_url: API base URL.
            timeout_seconds: Timeout for each request in seconds.
            transport: Optional httpx transport (tests pass a MockTransport).
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    def _build_payload(self, message: EmailMessage) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "from": message.sender,
            "to": [message.to],
            "subject": message.subject,
        }
        if message.reply_to:
            payload["reply_to"] = message.reply_to
        if message.text is not None:
            payload["text"] = message.text
        if message.html is not None:
            payload["html"] = message.html
        return payload

    async def send(self, message: EmailMessage) -> str:
        """Send a message through Resend.

        Args:
            message: Rendered message.

        Returns:
            str: Resend message id (empty string if the API omitted it).

        Raises:
            DeliveryAppError: On transport errors, non-2xx responses or an
                unreadable response body.
        """
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.post(
                    "/emails",
                    json=self._build_payload(message),
                    headers=headers,
                )
        except httpx.HTTPError as exc:
            raise DeliveryAppError(
                code="mail_transport_error",
                message=f"Resend request failed: {type(exc).__name__}",
                details={"hint": str(exc)},
            ) from exc

        if not response.is_success:
            raise DeliveryAppError(
                code="mail_rejected",
                message=f"Resend returned HTTP {response.status_code}",
                details={
                    "provider_status": response.status_code,
                    "hint": response.text[:200],
                },
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise DeliveryAppError(
                code="mail_invalid_response",
                message="Resend returned a non-JSON response",
                details={"provider_status": response.status_code},
            ) from exc

        return str(body.get("id", "")) if isinstance(body, dict) else ""
