"""Resend email transport adapter."""

from typing import Optional

import httpx

from lead_funnel.application.dtos.notification import EmailMessage
from lead_funnel.application.ports.email_transport import EmailTransport
from lead_funnel.domain.errors import TransportFailure
from lead_funnel.infrastructure.config.settings import settings
from lead_funnel.infrastructure.logging.logger import logger


class ResendEmailTransport(EmailTransport):
    """Sends transactional email through the Resend REST API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        from_email: Optional[str] = None,
        api_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize Resend transport.

        Args:
            api_key: Resend API key (defaults to settings.resend_api_key)
            from_email: Sender address (defaults to settings.resend_from_email)
            api_url: Emails endpoint (defaults to settings.resend_api_url)
            timeout_seconds: Request timeout (defaults to settings.email_timeout_seconds)
            transport: Optional httpx transport (used by tests)
        """
        self._api_key = api_key or settings.resend_api_key
        self._from_email = from_email or settings.resend_from_email
        self._api_url = api_url or settings.resend_api_url
        self._timeout = timeout_seconds or settings.email_timeout_seconds
        self._transport = transport

        if not self._api_key:
            raise ValueError("Resend API key is required")

    async def send(self, message: EmailMessage) -> str:
        """
        Deliver an email through Resend.

        Args:
            message: Rendered email

        Returns:
            Resend message id

        Raises:
            TransportFailure: On network errors or non-2xx responses
        """
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    self._api_url,
                    headers={
                        "Authorization": f"Bearer {self._api_key}",
                        "Content-Type": "application/json",
                    },
                    json={
                        "from": self._from_email,
                        "to": [message.recipient],
                        "subject": message.subject,
                        "html": message.html,
                    },
                )
        except httpx.HTTPError as e:
            logger.error(f"Resend request failed: {str(e)}")
            raise TransportFailure(f"Resend request failed: {str(e)}") from e

        if response.status_code >= 400:
            try:
                detail = response.json().get("message") or response.text
            except ValueError:
                detail = response.text
            logger.error(f"Resend API error: {response.status_code} {detail}")
            raise TransportFailure(f"Resend API error {response.status_code}: {detail}")

        return str(response.json().get("id", ""))
