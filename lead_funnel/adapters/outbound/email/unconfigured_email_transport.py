"""Email transport used when no provider key is configured."""

from lead_funnel.application.dtos.notification import EmailMessage
from lead_funnel.application.ports.email_transport import EmailTransport
from lead_funnel.domain.errors import TransportFailure


class UnconfiguredEmailTransport(EmailTransport):
    """Transport that always fails, so leads stay un-notified until email is configured."""

    async def send(self, message: EmailMessage) -> str:
        """
        Refuse to send.

        Raises:
            TransportFailure: Always
        """
        raise TransportFailure(
            "RESEND_API_KEY environment variable is missing",
            error="Email service not configured",
        )
