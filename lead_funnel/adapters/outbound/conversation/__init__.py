"""Conversation repository adapters."""

from lead_funnel.adapters.outbound.conversation.conversation_repository import (
    InMemoryConversationRepository,
)
from lead_funnel.adapters.outbound.conversation.postgres_conversation_repository import (
    PostgresConversationRepository,
)

__all__ = [
    "InMemoryConversationRepository",
    "PostgresConversationRepository",
]
