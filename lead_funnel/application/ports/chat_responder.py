"""Chat responder port interface."""

from abc import ABC, abstractmethod

from lead_funnel.domain.value_objects.chat_message import ChatMessage


class ChatResponder(ABC):
    """Port interface for the AI agent that answers visitors."""

    @abstractmethod
    def generate_reply(self, script: str, transcript: list[ChatMessage], message: str) -> str:
        """
        Generate the agent's next reply.

        Args:
            script: Task script (free-text instructions for the agent)
            transcript: Conversation so far
            message: New visitor message

        Returns:
            Reply text

        Raises:
            UpstreamFailure: If the model call fails or returns nothing
        """
        pass
