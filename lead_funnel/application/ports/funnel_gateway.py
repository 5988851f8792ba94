"""Funnel gateway port (visitor session side of the HTTP API)."""

from abc import ABC, abstractmethod
from typing import Optional

from lead_funnel.application.dtos.lead import LeadResolution
from lead_funnel.domain.value_objects.chat_message import ChatMessage


class FunnelGateway(ABC):
    """Port interface for the server operations a visitor session calls."""

    @abstractmethod
    async def create_or_merge_lead(
        self, task_id: str, phone: str, name: Optional[str] = None, email: Optional[str] = None
    ) -> Optional[LeadResolution]:
        """
        Create a lead or merge into the existing one with the same phone or email.

        Returns:
            Resolution, or None if the server returned no lead

        Raises:
            Exception: On transport or server failure
        """
        pass

    @abstractmethod
    async def find_lead_id(
        self, task_id: str, phone: Optional[str], email: Optional[str]
    ) -> Optional[str]:
        """
        Look up an existing lead id by phone OR email under a task.

        Returns:
            Lead id, or None if no lead matches
        """
        pass

    @abstractmethod
    async def chat_reply(self, task_id: str, transcript: list[ChatMessage], message: str) -> str:
        """
        Ask the agent for its reply to a visitor message.

        Raises:
            Exception: If the responder fails
        """
        pass

    @abstractmethod
    async def save_conversation(self, lead_id: str, transcript: list[ChatMessage]) -> None:
        """Upload the full transcript for a lead."""
        pass

    @abstractmethod
    async def notify_lead(self, lead_id: str) -> bool:
        """
        Dispatch the abandonment notification with an observable request.

        Returns:
            True if the server accepted the dispatch
        """
        pass

    @abstractmethod
    async def notify_completion(
        self, task_id: str, lead_id: str, rating: Optional[int] = None
    ) -> bool:
        """
        Dispatch the explicit-completion notification.

        Returns:
            True if the server accepted the dispatch
        """
        pass

    @abstractmethod
    def send_beacon(self, lead_id: str) -> bool:
        """
        Best-effort notification that does not rely on the event loop surviving.

        Returns:
            True if the request was handed off
        """
        pass
