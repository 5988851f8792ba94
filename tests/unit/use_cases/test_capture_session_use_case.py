"""Unit tests for the capture session use case."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, Mock

import pytest

from lead_funnel.adapters.outbound.identity_cache import InMemoryIdentityCache
from lead_funnel.application.dtos.lead import Lead, LeadResolution
from lead_funnel.application.ports.funnel_gateway import FunnelGateway
from lead_funnel.application.use_cases.capture_session_use_case import CaptureSessionUseCase
from lead_funnel.application.use_cases.user_messages_he import UserMessagesHE
from lead_funnel.domain.entities.capture_session import CaptureSession, CaptureStage
from lead_funnel.domain.errors import UpstreamFailure
from lead_funnel.domain.value_objects.chat_message import Speaker, count_dialogue_turns
from lead_funnel.domain.value_objects.contact_identity import ContactIdentity


def _resolution(lead_id="lead-1"):
    return LeadResolution(
        lead=Lead(
            id=lead_id,
            task_id="task-1",
            phone="0501234567",
            name="Dana",
            email="dana@example.com",
            created_at=datetime.now(timezone.utc),
        ),
        was_updated=False,
    )


@pytest.fixture
def gateway():
    """Create a gateway mock answering chat turns in order."""
    gateway = Mock(spec=FunnelGateway)
    gateway.chat_reply.side_effect = ["reply 1", "reply 2", "reply 3", "reply 4"]
    gateway.create_or_merge_lead.return_value = _resolution()
    gateway.find_lead_id.return_value = None
    gateway.save_conversation.return_value = None
    return gateway


@pytest.fixture
def identity_cache():
    """Create an empty identity cache."""
    return InMemoryIdentityCache()


@pytest.fixture
def use_case(gateway, identity_cache):
    """Create capture use case with the default trigger."""
    return CaptureSessionUseCase(gateway, identity_cache, capture_trigger_turns=2)


@pytest.fixture
def session():
    """Create a fresh capture session."""
    return CaptureSession(session_id="session-1", task_id="task-1")


async def _reach_ask_name(use_case, session):
    await use_case.start(session, "What brings you here?")
    await use_case.submit(session, "first message")
    return await use_case.submit(session, "second message")


@pytest.mark.asyncio
async def test_start_appends_opening_question(use_case, session):
    """Test the opening question is the first agent entry."""
    shown = await use_case.start(session, "What brings you here?")

    assert shown == ["What brings you here?"]
    assert session.transcript[0].speaker == Speaker.AGENT
    assert session.transcript[0].text == "What brings you here?"
    assert session.stage == CaptureStage.FREE_CHAT


@pytest.mark.asyncio
async def test_first_turn_stays_in_free_chat(use_case, session, gateway):
    """Test a single answered turn does not start capture."""
    await use_case.start(session, "What brings you here?")
    shown = await use_case.submit(session, "first message")

    assert shown == ["reply 1"]
    assert session.stage == CaptureStage.FREE_CHAT
    assert session.free_turns == 1
    gateway.chat_reply.assert_awaited_once()


@pytest.mark.asyncio
async def test_second_answered_turn_asks_for_name_and_holds_reply(use_case, session):
    """Test the second answered turn diverts to the name prompt."""
    shown = await _reach_ask_name(use_case, session)

    assert shown == [UserMessagesHE.ASK_NAME]
    assert session.stage == CaptureStage.ASK_NAME
    assert session.pending_reply == "reply 2"
    assert session.transcript[-1].text == UserMessagesHE.ASK_NAME
    assert session.transcript[-1].capture is True
    assert all(entry.text != "reply 2" for entry in session.transcript)


@pytest.mark.asyncio
async def test_full_capture_scenario_rejects_invalid_email(use_case, session, gateway, identity_cache):
    """Test two turns, name, invalid email, valid email, phone."""
    await _reach_ask_name(use_case, session)

    shown = await use_case.submit(session, "Dana")
    assert shown == [UserMessagesHE.ask_email("Dana")]
    assert session.stage == CaptureStage.ASK_EMAIL

    shown = await use_case.submit(session, "not-an-email")
    assert shown == [UserMessagesHE.INVALID_EMAIL]
    assert session.stage == CaptureStage.ASK_EMAIL
    assert session.email is None

    shown = await use_case.submit(session, "dana@example.com")
    assert shown == [UserMessagesHE.ASK_PHONE]
    assert session.stage == CaptureStage.ASK_PHONE

    shown = await use_case.submit(session, "050-123-4567")
    assert shown == ["reply 2"]
    assert session.stage == CaptureStage.DONE
    assert session.lead_id == "lead-1"
    assert session.transcript[-1].text == "reply 2"
    assert session.pending_reply is None

    gateway.create_or_merge_lead.assert_awaited_once_with(
        "task-1", "0501234567", name="Dana", email="dana@example.com"
    )
    gateway.save_conversation.assert_awaited_once()
    saved_lead_id, saved_transcript = gateway.save_conversation.await_args.args
    assert saved_lead_id == "lead-1"
    assert count_dialogue_turns(saved_transcript) == 2

    cached = await identity_cache.load()
    assert cached == ContactIdentity(name="Dana", phone="0501234567", email="dana@example.com")


@pytest.mark.asyncio
async def test_invalid_phone_reprompts(use_case, session, gateway):
    """Test an invalid phone keeps the session in ask_phone."""
    await _reach_ask_name(use_case, session)
    await use_case.submit(session, "Dana")
    await use_case.submit(session, "dana@example.com")

    shown = await use_case.submit(session, "12345")

    assert shown == [UserMessagesHE.INVALID_PHONE]
    assert session.stage == CaptureStage.ASK_PHONE
    gateway.create_or_merge_lead.assert_not_awaited()


@pytest.mark.asyncio
async def test_capture_turns_do_not_count_as_dialogue(use_case, session, gateway):
    """Test capture answers are flagged and the count resumes after capture."""
    await _reach_ask_name(use_case, session)
    await use_case.submit(session, "Dana")
    await use_case.submit(session, "dana@example.com")
    await use_case.submit(session, "0501234567")

    assert session.free_turns == 2
    assert count_dialogue_turns(session.transcript) == 2

    shown = await use_case.submit(session, "third message")

    assert shown == ["reply 3"]
    assert session.stage == CaptureStage.DONE
    assert count_dialogue_turns(session.transcript) == 3


@pytest.mark.asyncio
async def test_every_reply_after_capture_saves_transcript(use_case, session, gateway):
    """Test a full transcript save follows each agent reply once done."""
    await _reach_ask_name(use_case, session)
    await use_case.submit(session, "Dana")
    await use_case.submit(session, "dana@example.com")
    await use_case.submit(session, "0501234567")
    await use_case.submit(session, "third message")
    await use_case.submit(session, "fourth message")

    assert gateway.save_conversation.await_count == 3
    last_transcript = gateway.save_conversation.await_args.args[1]
    assert last_transcript[-1].text == "reply 4"


@pytest.mark.asyncio
async def test_empty_input_is_ignored(use_case, session, gateway):
    """Test blank input changes nothing."""
    await use_case.start(session, "What brings you here?")

    shown = await use_case.submit(session, "   ")

    assert shown == []
    assert len(session.transcript) == 1
    gateway.chat_reply.assert_not_awaited()


@pytest.mark.asyncio
async def test_chat_failure_returns_retry_and_drops_message(use_case, session, gateway):
    """Test a responder failure leaves the transcript and counters untouched."""
    gateway.chat_reply.side_effect = UpstreamFailure("OpenAI API call failed")
    await use_case.start(session, "What brings you here?")

    shown = await use_case.submit(session, "first message")

    assert shown == [UserMessagesHE.RETRY]
    assert len(session.transcript) == 1
    assert session.free_turns == 0
    assert session.stage == CaptureStage.FREE_CHAT


@pytest.mark.asyncio
async def test_cached_identity_skips_capture(gateway, session):
    """Test a complete cached identity goes straight to done and resolves the lead."""
    cache = InMemoryIdentityCache(
        ContactIdentity(name="Dana", phone="0501234567", email="dana@example.com")
    )
    use_case = CaptureSessionUseCase(gateway, cache, capture_trigger_turns=2)

    await use_case.start(session, "What brings you here?")

    assert session.stage == CaptureStage.DONE
    assert session.lead_id == "lead-1"
    gateway.create_or_merge_lead.assert_awaited_once_with(
        "task-1", "0501234567", name="Dana", email="dana@example.com"
    )

    await use_case.submit(session, "first message")
    shown = await use_case.submit(session, "second message")

    assert shown == ["reply 2"]
    assert session.stage == CaptureStage.DONE
    assert gateway.save_conversation.await_count == 2


@pytest.mark.asyncio
async def test_partial_cached_identity_does_not_skip_capture(gateway, session):
    """Test an incomplete cached identity is ignored."""
    cache = InMemoryIdentityCache(ContactIdentity(name="Dana", phone="0501234567"))
    use_case = CaptureSessionUseCase(gateway, cache, capture_trigger_turns=2)

    await use_case.start(session, "What brings you here?")

    assert session.stage == CaptureStage.FREE_CHAT
    gateway.create_or_merge_lead.assert_not_awaited()


@pytest.mark.asyncio
async def test_resolver_failure_falls_back_to_lookup(use_case, session, gateway):
    """Test a failed create-or-merge recovers the lead id by lookup."""
    gateway.create_or_merge_lead.side_effect = RuntimeError("500 from /leads")
    gateway.find_lead_id.return_value = "lead-9"

    await _reach_ask_name(use_case, session)
    await use_case.submit(session, "Dana")
    await use_case.submit(session, "dana@example.com")
    await use_case.submit(session, "0501234567")

    assert session.lead_id == "lead-9"
    gateway.find_lead_id.assert_awaited_once_with("task-1", "0501234567", "dana@example.com")
    gateway.save_conversation.assert_awaited_once()


@pytest.mark.asyncio
async def test_empty_resolution_falls_back_to_lookup(use_case, session, gateway):
    """Test an empty create-or-merge result also triggers the lookup."""
    gateway.create_or_merge_lead.return_value = None
    gateway.find_lead_id.return_value = "lead-7"

    await _reach_ask_name(use_case, session)
    await use_case.submit(session, "Dana")
    await use_case.submit(session, "dana@example.com")
    await use_case.submit(session, "0501234567")

    assert session.lead_id == "lead-7"


@pytest.mark.asyncio
async def test_session_continues_without_lead_id(use_case, session, gateway):
    """Test the chat continues when no lead id can be recovered."""
    gateway.create_or_merge_lead.side_effect = RuntimeError("network down")
    gateway.find_lead_id.side_effect = RuntimeError("network down")

    await _reach_ask_name(use_case, session)
    await use_case.submit(session, "Dana")
    await use_case.submit(session, "dana@example.com")
    shown = await use_case.submit(session, "0501234567")

    assert shown == ["reply 2"]
    assert session.stage == CaptureStage.DONE
    assert session.lead_id is None
    gateway.save_conversation.assert_not_awaited()

    shown = await use_case.submit(session, "third message")
    assert shown == ["reply 3"]
    gateway.save_conversation.assert_not_awaited()


@pytest.mark.asyncio
async def test_transcript_save_failure_does_not_break_chat(use_case, session, gateway):
    """Test a failed transcript save is logged and the reply still shown."""
    gateway.save_conversation.side_effect = RuntimeError("timeout")

    await _reach_ask_name(use_case, session)
    await use_case.submit(session, "Dana")
    await use_case.submit(session, "dana@example.com")
    shown = await use_case.submit(session, "0501234567")

    assert shown == ["reply 2"]
    assert session.stage == CaptureStage.DONE


@pytest.mark.asyncio
async def test_identity_cache_failure_still_completes_capture(use_case, session, gateway, identity_cache):
    """Test an unwritable identity cache does not strand the session before DONE."""
    identity_cache.store = AsyncMock(side_effect=OSError("read-only profile dir"))

    await _reach_ask_name(use_case, session)
    await use_case.submit(session, "Dana")
    await use_case.submit(session, "dana@example.com")
    shown = await use_case.submit(session, "0501234567")

    assert shown == ["reply 2"]
    assert session.stage == CaptureStage.DONE
    assert session.lead_id == "lead-1"
    identity_cache.store.assert_awaited_once()
    gateway.save_conversation.assert_awaited_once()

    shown = await use_case.submit(session, "third message")
    assert shown == ["reply 3"]
