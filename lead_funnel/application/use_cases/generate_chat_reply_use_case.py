"""Generate chat reply use case (server side of POST /chat)."""

from typing import Optional

from lead_funnel.application.ports.chat_responder import ChatResponder
from lead_funnel.application.ports.task_repository import TaskRepository
from lead_funnel.domain.errors import ConfigurationError, NotFoundError, UpstreamFailure
from lead_funnel.domain.value_objects.chat_message import ChatMessage
from lead_funnel.infrastructure.logging.logger import log_turn


class GenerateChatReply:
    """Asks the chat responder for the agent's next reply under a task's script."""

    def __init__(
        self,
        task_repository: TaskRepository,
        chat_responder: Optional[ChatResponder] = None,
    ) -> None:
        """
        Initialize use case.

        Args:
            task_repository: Repository for tasks
            chat_responder: Chat responder, or None when the LLM is disabled
        """
        self._task_repository = task_repository
        self._chat_responder = chat_responder

    async def execute(
        self,
        task_id: str,
        transcript: list[ChatMessage],
        message: str,
        turn_id: Optional[str] = None,
    ) -> str:
        """
        Generate a reply.

        Args:
            task_id: Task whose script drives the agent
            transcript: Conversation so far
            message: New visitor message
            turn_id: Optional request identifier for logging

        Returns:
            Reply text

        Raises:
            NotFoundError: If the task does not exist
            ConfigurationError: If no chat responder is configured
            UpstreamFailure: If the responder fails
        """
        task = await self._task_repository.get(task_id)
        if task is None:
            raise NotFoundError(f"Task {task_id} does not exist", error="Task not found")
        if self._chat_responder is None:
            raise ConfigurationError(
                "LLM_ENABLED is false or OPENAI_API_KEY is missing",
                error="Chat responder not configured",
            )

        # Capture prompts are not part of the dialogue the agent is scripted for
        history = [m for m in transcript if not m.capture]

        reply = self._chat_responder.generate_reply(task.script, history, message)
        if not reply:
            raise UpstreamFailure("Chat responder returned an empty reply")

        log_turn(
            session_id=task_id,
            turn_id=turn_id or "unknown",
            component="chat",
            history_length=len(history),
            reply_length=len(reply),
        )
        return reply
