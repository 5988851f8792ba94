"""OpenAI chat responder adapter."""

from typing import Optional

from lead_funnel.adapters.outbound.llm.openai_client_factory import build_openai_client
from lead_funnel.application.ports.chat_responder import ChatResponder
from lead_funnel.domain.errors import UpstreamFailure
from lead_funnel.domain.value_objects.chat_message import ChatMessage, Speaker
from lead_funnel.infrastructure.config.settings import settings

# Prepended to every task script
META_INSTRUCTIONS = """## Mandatory instructions (META):
1. Answer briefly - at most 120 words, unless the user explicitly asked for a long answer or this is the final summary of the process.
2. Between milestones, wait for the user's answer before moving on.
3. Ask one question at a time and do not flood the user with information.
4. Be focused, clear and friendly.
5. Use emoji in moderation.
6. Break lines for readability; separate points with an empty line.

---
## Task instructions:
"""


class OpenAIChatResponder(ChatResponder):
    """Chat responder backed by the OpenAI chat completions API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout_seconds: Optional[int] = None,
    ) -> None:
        """
        Initialize OpenAI chat responder.

        Args:
            api_key: OpenAI API key (defaults to settings.openai_api_key)
            model: Model name (defaults to settings.openai_model)
            timeout_seconds: Request timeout in seconds
        """
        self._model = model or settings.openai_model
        self._client = build_openai_client(api_key, timeout_seconds)

    def _build_messages(self, script: str, transcript: list[ChatMessage], message: str) -> list:
        messages = [{"role": "system", "content": META_INSTRUCTIONS + (script or "")}]
        # The model needs the conversation to start with a user turn; drop leading
        # agent entries such as the opening question.
        history = list(transcript)
        while history and history[0].speaker == Speaker.AGENT:
            history.pop(0)
        for entry in history:
            role = "user" if entry.speaker == Speaker.VISITOR else "assistant"
            messages.append({"role": role, "content": entry.text})
        messages.append({"role": "user", "content": message})
        return messages

    def generate_reply(self, script: str, transcript: list[ChatMessage], message: str) -> str:
        """
        Generate the agent's next reply.

        Args:
            script: Task script
            transcript: Conversation so far
            message: New visitor message

        Returns:
            Reply text

        Raises:
            UpstreamFailure: If the API call fails or returns an empty reply
        """
        try:
            response = self._client.chat.completions.create(
                model=self._model,
                messages=self._build_messages(script, transcript, message),
                temperature=0.7,
                max_tokens=500,
            )
        except Exception as e:
            raise UpstreamFailure(f"OpenAI API call failed: {str(e)}") from e

        if not response.choices or response.choices[0].message.content is None:
            raise UpstreamFailure("Empty response from OpenAI API")

        reply = response.choices[0].message.content.strip()
        if not reply:
            raise UpstreamFailure("Empty reply from OpenAI API")
        return reply
