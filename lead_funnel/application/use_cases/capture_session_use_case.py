"""Capture session use case: the visitor-side chat and identity capture flow."""

from typing import Optional

from lead_funnel.application.ports.funnel_gateway import FunnelGateway
from lead_funnel.application.ports.identity_cache import IdentityCache
from lead_funnel.application.use_cases.user_messages_he import UserMessagesHE
from lead_funnel.domain.entities.capture_session import CaptureSession, CaptureStage
from lead_funnel.domain.value_objects.chat_message import Speaker
from lead_funnel.domain.value_objects.contact_identity import (
    is_valid_email,
    is_valid_phone,
    normalize_phone,
)
from lead_funnel.infrastructure.logging.logger import log_capture_stage, log_turn, logger


class CaptureSessionUseCase:
    """
    Drives one visitor's conversation.

    Ordinary turns go to the chat responder. After `capture_trigger_turns`
    answered visitor turns the agent's latest reply is held back and the
    session asks for name, email and phone in that order. Once the phone is
    valid the lead is resolved, the identity cached, and the held reply shown.
    """

    def __init__(
        self,
        gateway: FunnelGateway,
        identity_cache: IdentityCache,
        capture_trigger_turns: int = 2,
    ) -> None:
        """
        Initialize capture session use case.

        Args:
            gateway: Funnel API gateway
            identity_cache: Durable identity cache of the visitor's profile
            capture_trigger_turns: Answered dialogue turns before identity capture starts
        """
        self._gateway = gateway
        self._identity_cache = identity_cache
        self._capture_trigger_turns = capture_trigger_turns

    def _set_stage(self, session: CaptureSession, stage: CaptureStage, turn_id: str) -> None:
        log_capture_stage(
            session.session_id,
            turn_id,
            stage_before=session.stage.value,
            stage_after=stage.value,
        )
        session.stage = stage

    async def start(self, session: CaptureSession, opening_question: str) -> list[str]:
        """
        Open the conversation.

        A complete identity cached from an earlier visit skips capture
        entirely and resolves the lead straight away.

        Args:
            session: Fresh capture session
            opening_question: Task's first agent message

        Returns:
            Agent messages to show
        """
        shown = []
        if opening_question:
            session.append(Speaker.AGENT, opening_question)
            shown.append(opening_question)

        cached = await self._identity_cache.load()
        if cached is not None and cached.is_complete():
            session.name = cached.name
            session.email = cached.email
            session.phone = cached.phone
            self._set_stage(session, CaptureStage.DONE, "start")
            await self._resolve_lead(session, "start")

        return shown

    async def submit(
        self, session: CaptureSession, text: str, turn_id: Optional[str] = None
    ) -> list[str]:
        """
        Handle one visitor message.

        Args:
            session: Capture session
            text: Raw visitor input
            turn_id: Optional turn identifier for logging

        Returns:
            Agent messages to show (empty when the input was blank)
        """
        turn_id = turn_id or "unknown"
        text = (text or "").strip()
        if not text:
            return []
        session.touch()

        if session.stage == CaptureStage.ASK_NAME:
            return self._handle_name(session, text, turn_id)
        if session.stage == CaptureStage.ASK_EMAIL:
            return self._handle_email(session, text, turn_id)
        if session.stage == CaptureStage.ASK_PHONE:
            return await self._handle_phone(session, text, turn_id)
        return await self._handle_dialogue(session, text, turn_id)

    async def _handle_dialogue(self, session: CaptureSession, text: str, turn_id: str) -> list[str]:
        history = list(session.transcript)
        try:
            reply = await self._gateway.chat_reply(session.task_id, history, text)
        except Exception as e:
            # The message is dropped so the visitor can simply resend it
            logger.warning(f"Chat reply failed for session {session.session_id}: {str(e)}")
            log_turn(session.session_id, turn_id, "capture", chat_failed=True)
            return [UserMessagesHE.RETRY]

        session.append(Speaker.VISITOR, text)

        if session.stage == CaptureStage.DONE:
            session.append(Speaker.AGENT, reply)
            await self._save_transcript(session, turn_id)
            return [reply]

        session.free_turns += 1
        session.free_replies += 1
        if (
            session.free_turns >= self._capture_trigger_turns
            and session.free_replies >= session.free_turns
        ):
            session.pending_reply = reply
            session.append(Speaker.AGENT, UserMessagesHE.ASK_NAME, capture=True)
            self._set_stage(session, CaptureStage.ASK_NAME, turn_id)
            return [UserMessagesHE.ASK_NAME]

        session.append(Speaker.AGENT, reply)
        return [reply]

    def _handle_name(self, session: CaptureSession, text: str, turn_id: str) -> list[str]:
        session.append(Speaker.VISITOR, text, capture=True)
        session.name = text
        prompt = UserMessagesHE.ask_email(text)
        session.append(Speaker.AGENT, prompt, capture=True)
        self._set_stage(session, CaptureStage.ASK_EMAIL, turn_id)
        return [prompt]

    def _handle_email(self, session: CaptureSession, text: str, turn_id: str) -> list[str]:
        session.append(Speaker.VISITOR, text, capture=True)
        if not is_valid_email(text):
            session.append(Speaker.AGENT, UserMessagesHE.INVALID_EMAIL, capture=True)
            log_turn(session.session_id, turn_id, "capture", invalid_field="email")
            return [UserMessagesHE.INVALID_EMAIL]

        session.email = text
        session.append(Speaker.AGENT, UserMessagesHE.ASK_PHONE, capture=True)
        self._set_stage(session, CaptureStage.ASK_PHONE, turn_id)
        return [UserMessagesHE.ASK_PHONE]

    async def _handle_phone(self, session: CaptureSession, text: str, turn_id: str) -> list[str]:
        session.append(Speaker.VISITOR, text, capture=True)
        if not is_valid_phone(text):
            session.append(Speaker.AGENT, UserMessagesHE.INVALID_PHONE, capture=True)
            log_turn(session.session_id, turn_id, "capture", invalid_field="phone")
            return [UserMessagesHE.INVALID_PHONE]

        session.phone = normalize_phone(text)
        await self._resolve_lead(session, turn_id)
        try:
            await self._identity_cache.store(session.identity)
        except Exception as e:
            # Only the next visit loses its prefill; this one still completes
            logger.warning(f"Could not cache identity for session {session.session_id}: {str(e)}")
        self._set_stage(session, CaptureStage.DONE, turn_id)

        shown = []
        if session.pending_reply and session.append_agent_once(session.pending_reply):
            shown.append(session.pending_reply)
        session.pending_reply = None

        await self._save_transcript(session, turn_id)
        return shown

    async def _resolve_lead(self, session: CaptureSession, turn_id: str) -> None:
        """Resolve the lead id, falling back to a lookup; may leave it unset."""
        try:
            resolution = await self._gateway.create_or_merge_lead(
                session.task_id, session.phone, name=session.name, email=session.email
            )
            if resolution is not None:
                session.lead_id = resolution.lead.id
        except Exception as e:
            logger.warning(f"Lead creation failed for session {session.session_id}: {str(e)}")

        if session.lead_id is None:
            try:
                session.lead_id = await self._gateway.find_lead_id(
                    session.task_id, session.phone, session.email
                )
            except Exception as e:
                logger.warning(f"Lead lookup failed for session {session.session_id}: {str(e)}")

        if session.lead_id is None:
            log_turn(session.session_id, turn_id, "capture", lead_id=None, lead_missing=True)
        else:
            log_turn(session.session_id, turn_id, "capture", lead_id=session.lead_id)

    async def _save_transcript(self, session: CaptureSession, turn_id: str) -> None:
        if session.lead_id is None:
            return
        try:
            await self._gateway.save_conversation(session.lead_id, list(session.transcript))
        except Exception as e:
            logger.error(f"Failed to save transcript for lead {session.lead_id}: {str(e)}")
            log_turn(session.session_id, turn_id, "capture", transcript_saved=False)
