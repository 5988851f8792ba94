"""Conversation DTOs."""

from typing import Optional

from lead_funnel.application.dtos.base import DTO
from lead_funnel.domain.value_objects.chat_message import ChatMessage


class Conversation(DTO):
    """Full transcript stored for a lead (one per lead, overwritten wholesale)."""

    lead_id: str
    transcript: list[ChatMessage] = []
    summary: Optional[str] = None
    is_public: bool = False


class LeadAnalysis(DTO):
    """Advisory analysis of a conversation for the funnel owner."""

    summary: str
    pains: list[str] = []
    benefits: list[str] = []
    sales_script: str = ""
