"""In-memory conversation repository adapter."""

from typing import Optional

from lead_funnel.application.dtos.conversation import Conversation
from lead_funnel.application.ports.conversation_repository import ConversationRepository
from lead_funnel.domain.errors import NotFoundError


class InMemoryConversationRepository(ConversationRepository):
    """In-memory implementation of conversation repository."""

    def __init__(self) -> None:
        """Initialize in-memory repository."""
        self._storage: dict[str, Conversation] = {}

    async def get(self, lead_id: str) -> Optional[Conversation]:
        """Get the conversation stored for a lead."""
        return self._storage.get(lead_id)

    async def upsert(self, conversation: Conversation) -> None:
        """Insert or overwrite the conversation for its lead."""
        self._storage[conversation.lead_id] = conversation

    async def update_summary(self, lead_id: str, summary: str) -> None:
        """Store a summary on an existing conversation."""
        if lead_id not in self._storage:
            raise NotFoundError(f"No conversation for lead {lead_id}", error="Conversation not found")
        self._storage[lead_id] = self._storage[lead_id].model_copy(update={"summary": summary})
