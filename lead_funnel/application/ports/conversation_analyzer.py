"""Conversation analyzer port interface."""

from abc import ABC, abstractmethod

from lead_funnel.application.dtos.conversation import LeadAnalysis
from lead_funnel.domain.value_objects.chat_message import ChatMessage


class ConversationAnalyzer(ABC):
    """Port interface for owner-facing conversation analysis."""

    @abstractmethod
    def analyze(self, transcript: list[ChatMessage]) -> LeadAnalysis:
        """
        Analyze a conversation between the agent and a lead.

        Args:
            transcript: Full conversation

        Returns:
            Summary, pains, benefits and a suggested sales script

        Raises:
            UpstreamFailure: If the model call fails
        """
        pass
