"""Conversation repository port."""

from abc import ABC, abstractmethod
from typing import Optional

from lead_funnel.application.dtos.conversation import Conversation


class ConversationRepository(ABC):
    """Port interface for conversation transcripts keyed by lead."""

    @abstractmethod
    async def get(self, lead_id: str) -> Optional[Conversation]:
        """
        Get the conversation stored for a lead.

        Args:
            lead_id: Lead identifier

        Returns:
            Conversation DTO, or None if nothing was saved yet
        """
        pass

    @abstractmethod
    async def upsert(self, conversation: Conversation) -> None:
        """
        Insert or overwrite the conversation for its lead.

        Args:
            conversation: Conversation DTO (full transcript)
        """
        pass

    @abstractmethod
    async def update_summary(self, lead_id: str, summary: str) -> None:
        """
        Store a summary on an existing conversation.

        Args:
            lead_id: Lead identifier
            summary: Summary text
        """
        pass
