"""OpenAI conversation analyzer adapter."""

import json
import re
from typing import Optional

from lead_funnel.adapters.outbound.llm.openai_client_factory import build_openai_client
from lead_funnel.application.dtos.conversation import LeadAnalysis
from lead_funnel.application.ports.conversation_analyzer import ConversationAnalyzer
from lead_funnel.domain.errors import UpstreamFailure
from lead_funnel.domain.value_objects.chat_message import ChatMessage, Speaker
from lead_funnel.infrastructure.config.settings import settings
from lead_funnel.infrastructure.logging.logger import logger

ANALYSIS_PROMPT = """Analyze the following conversation between a sales bot and a potential customer.

Conversation:
{conversation}

Return JSON only (no markdown) with this shape:
{{
  "summary": "short summary of what the customer said and answered (2-3 sentences)",
  "pains": ["pain 1", "pain 2", "pain 3"],
  "benefits": ["potential benefit 1", "benefit 2"],
  "salesScript": "short outline for a sales call: 3-5 key points to talk about"
}}

Pains and benefits must be specific to what the customer said.
The script must build on the pains and benefits you identified.
Answer in the language the customer used."""

_CODE_FENCE = re.compile(r"```(?:json)?\n?")


class OpenAIConversationAnalyzer(ConversationAnalyzer):
    """Conversation analyzer backed by the OpenAI chat completions API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout_seconds: Optional[int] = None,
    ) -> None:
        self._model = model or settings.openai_model
        self._client = build_openai_client(api_key, timeout_seconds)

    @staticmethod
    def _format_conversation(transcript: list[ChatMessage]) -> str:
        return "\n".join(
            f"{'User' if m.speaker == Speaker.VISITOR else 'Bot'}: {m.text}" for m in transcript
        )

    @staticmethod
    def _parse(raw: str) -> LeadAnalysis:
        """
        Parse the model's JSON answer, tolerating markdown code fences.

        Unparseable answers degrade to an empty analysis rather than failing.
        """
        text = _CODE_FENCE.sub("", raw).strip()
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            logger.warning(f"Failed to parse conversation analysis: {str(e)}")
            return LeadAnalysis(summary="Could not summarize the conversation")

        return LeadAnalysis(
            summary=str(data.get("summary") or ""),
            pains=[str(p) for p in data.get("pains") or []],
            benefits=[str(b) for b in data.get("benefits") or []],
            sales_script=str(data.get("salesScript") or data.get("sales_script") or ""),
        )

    def analyze(self, transcript: list[ChatMessage]) -> LeadAnalysis:
        """
        Analyze a conversation.

        Args:
            transcript: Full conversation

        Returns:
            LeadAnalysis DTO

        Raises:
            UpstreamFailure: If the API call fails or returns nothing
        """
        prompt = ANALYSIS_PROMPT.format(conversation=self._format_conversation(transcript))
        try:
            response = self._client.chat.completions.create(
                model=self._model,
                messages=[{"role": "user", "content": prompt}],
                temperature=0.2,
                response_format={"type": "json_object"},
            )
        except Exception as e:
            raise UpstreamFailure(f"OpenAI API call failed: {str(e)}") from e

        if not response.choices or not response.choices[0].message.content:
            raise UpstreamFailure("Empty response from OpenAI API")

        return self._parse(response.choices[0].message.content)
