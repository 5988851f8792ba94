"""Conversation store use case."""

from typing import Optional

from lead_funnel.application.dtos.conversation import Conversation
from lead_funnel.application.ports.conversation_repository import ConversationRepository
from lead_funnel.application.ports.lead_repository import LeadRepository
from lead_funnel.domain.errors import NotFoundError
from lead_funnel.domain.value_objects.chat_message import ChatMessage
from lead_funnel.infrastructure.logging.logger import log_turn


class SaveConversation:
    """Upserts the full transcript of a lead (last writer wins)."""

    def __init__(
        self,
        lead_repository: LeadRepository,
        conversation_repository: ConversationRepository,
    ) -> None:
        self._lead_repository = lead_repository
        self._conversation_repository = conversation_repository

    async def save(
        self,
        lead_id: str,
        transcript: list[ChatMessage],
        summary: Optional[str] = None,
        turn_id: Optional[str] = None,
    ) -> Conversation:
        """
        Store the complete transcript for a lead.

        Args:
            lead_id: Lead identifier
            transcript: Full ordered transcript
            summary: New summary; None keeps the stored one
            turn_id: Optional request identifier for logging

        Returns:
            Stored conversation

        Raises:
            NotFoundError: If the lead does not exist
        """
        lead = await self._lead_repository.get(lead_id)
        if lead is None:
            raise NotFoundError(f"Lead {lead_id} does not exist", error="Lead not found")

        if summary is None:
            existing = await self._conversation_repository.get(lead_id)
            if existing is not None:
                summary = existing.summary

        conversation = Conversation(
            lead_id=lead_id,
            transcript=list(transcript),
            summary=summary,
            is_public=False,
        )
        await self._conversation_repository.upsert(conversation)

        log_turn(
            session_id=lead_id,
            turn_id=turn_id or "unknown",
            component="conversation_store",
            entries=len(transcript),
            has_summary=summary is not None,
        )
        return conversation

    async def get(self, lead_id: str) -> Conversation:
        """
        Load the conversation stored for a lead.

        Raises:
            NotFoundError: If nothing was stored for the lead
        """
        conversation = await self._conversation_repository.get(lead_id)
        if conversation is None:
            raise NotFoundError(
                f"No conversation for lead {lead_id}", error="Conversation not found"
            )
        return conversation
