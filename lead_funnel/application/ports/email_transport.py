"""Email transport port interface."""

from abc import ABC, abstractmethod

from lead_funnel.application.dtos.notification import EmailMessage


class EmailTransport(ABC):
    """Port interface for transactional email delivery."""

    @abstractmethod
    async def send(self, message: EmailMessage) -> str:
        """
        Deliver an email.

        Args:
            message: Rendered email

        Returns:
            Provider message identifier

        Raises:
            TransportFailure: If delivery fails or the transport is not configured
        """
        pass
