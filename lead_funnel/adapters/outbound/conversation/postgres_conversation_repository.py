"""Postgres-backed conversation repository adapter."""

import json
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lead_funnel.adapters.outbound.persistence.models import ConversationModel
from lead_funnel.application.dtos.conversation import Conversation
from lead_funnel.application.ports.conversation_repository import ConversationRepository
from lead_funnel.domain.errors import NotFoundError
from lead_funnel.domain.value_objects.chat_message import ChatMessage
from lead_funnel.infrastructure.db import get_db_session
from lead_funnel.infrastructure.logging.logger import logger


class PostgresConversationRepository(ConversationRepository):
    """Postgres implementation of conversation repository."""

    def _serialize_transcript(self, transcript: list[ChatMessage]) -> list[dict]:
        """
        Serialize transcript entries to JSON-compatible dictionaries.

        Args:
            transcript: Ordered transcript

        Returns:
            List of {speaker, text, capture} dictionaries in the same order
        """
        return [
            {"speaker": message.speaker.value, "text": message.text, "capture": message.capture}
            for message in transcript
        ]

    def _deserialize_transcript(self, data: list[dict]) -> list[ChatMessage]:
        """
        Deserialize stored entries back into chat messages.

        Args:
            data: Stored list of dictionaries

        Returns:
            Ordered transcript
        """
        return [
            ChatMessage(
                speaker=item["speaker"],
                text=item.get("text", ""),
                capture=bool(item.get("capture", False)),
            )
            for item in data
        ]

    async def get(self, lead_id: str) -> Optional[Conversation]:
        """
        Get the conversation stored for a lead.

        Args:
            lead_id: Lead identifier

        Returns:
            Conversation DTO, or None if not found
        """
        db: Session = get_db_session()
        try:
            model = (
                db.query(ConversationModel).filter(ConversationModel.lead_id == lead_id).first()
            )
            if model is None:
                return None

            data = model.full_chat
            if isinstance(data, str):
                data = json.loads(data)

            return Conversation(
                lead_id=model.lead_id,
                transcript=self._deserialize_transcript(data or []),
                summary=model.summary,
                is_public=bool(model.is_public),
            )
        except SQLAlchemyError as e:
            logger.error(f"Database error while getting conversation for lead {lead_id}: {str(e)}")
            raise
        except (json.JSONDecodeError, KeyError, ValueError) as e:
            logger.error(f"Error deserializing conversation for lead {lead_id}: {str(e)}")
            return None
        finally:
            db.close()

    async def upsert(self, conversation: Conversation) -> None:
        """
        Insert or overwrite the conversation for its lead.

        Args:
            conversation: Conversation DTO (full transcript)
        """
        db: Session = get_db_session()
        try:
            full_chat = self._serialize_transcript(conversation.transcript)
            model = (
                db.query(ConversationModel)
                .filter(ConversationModel.lead_id == conversation.lead_id)
                .first()
            )
            now = datetime.now(timezone.utc)

            if model:
                model.full_chat = full_chat
                model.summary = conversation.summary
                model.is_public = conversation.is_public
                model.updated_at = now
            else:
                model = ConversationModel(
                    lead_id=conversation.lead_id,
                    full_chat=full_chat,
                    summary=conversation.summary,
                    is_public=conversation.is_public,
                    created_at=now,
                    updated_at=now,
                )
                db.add(model)

            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                f"Database error while saving conversation for lead {conversation.lead_id}: {str(e)}"
            )
            raise
        finally:
            db.close()

    async def update_summary(self, lead_id: str, summary: str) -> None:
        """
        Store a summary on an existing conversation.

        Args:
            lead_id: Lead identifier
            summary: Summary text
        """
        db: Session = get_db_session()
        try:
            model = (
                db.query(ConversationModel).filter(ConversationModel.lead_id == lead_id).first()
            )
            if model is None:
                raise NotFoundError(
                    f"No conversation for lead {lead_id}", error="Conversation not found"
                )
            model.summary = summary
            model.updated_at = datetime.now(timezone.utc)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Database error while updating summary for lead {lead_id}: {str(e)}")
            raise
        finally:
            db.close()
