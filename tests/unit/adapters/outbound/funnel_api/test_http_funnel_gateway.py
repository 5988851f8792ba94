"""Unit tests for the HTTP funnel gateway adapter."""

import json

import httpx
import pytest

from lead_funnel.adapters.outbound.funnel_api import HttpFunnelGateway
from lead_funnel.domain.errors import UpstreamFailure
from lead_funnel.domain.value_objects.chat_message import ChatMessage, Speaker

LEAD = {
    "id": "lead-1",
    "task_id": "T1",
    "phone": "0501234567",
    "name": "Dana",
    "email": "dana@example.com",
    "rating": None,
    "notified": False,
    "created_at": "2024-01-15T10:30:00Z",
}


def _gateway(handler, requests: list) -> HttpFunnelGateway:
    def record(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    mock = httpx.MockTransport(record)
    return HttpFunnelGateway(
        base_url="http://funnel.test",
        timeout_seconds=5,
        beacon_timeout_seconds=1,
        transport=mock,
        beacon_transport=mock,
    )


@pytest.mark.asyncio
async def test_create_or_merge_lead_parses_resolution():
    """Test the lead endpoint response becomes a resolution."""
    requests: list[httpx.Request] = []
    gateway = _gateway(
        lambda request: httpx.Response(200, json={"success": True, "lead": LEAD, "was_updated": True}),
        requests,
    )

    resolution = await gateway.create_or_merge_lead("T1", "0501234567", name="Dana")

    assert resolution.lead.id == "lead-1"
    assert resolution.was_updated is True
    assert requests[0].method == "POST"
    assert requests[0].url.path == "/leads"
    assert json.loads(requests[0].content)["phone"] == "0501234567"


@pytest.mark.asyncio
async def test_create_or_merge_lead_error_status_raises():
    """Test a rejected lead request raises for the caller's fallback."""
    gateway = _gateway(lambda request: httpx.Response(500, json={"error": "boom"}), [])

    with pytest.raises(httpx.HTTPStatusError):
        await gateway.create_or_merge_lead("T1", "0501234567")


@pytest.mark.asyncio
async def test_find_lead_id_sends_only_given_keys():
    """Test lookup passes the task and the keys it has."""
    requests: list[httpx.Request] = []
    gateway = _gateway(lambda request: httpx.Response(200, json={"lead": LEAD}), requests)

    lead_id = await gateway.find_lead_id("T1", None, "dana@example.com")

    assert lead_id == "lead-1"
    params = requests[0].url.params
    assert params["task_id"] == "T1"
    assert params["email"] == "dana@example.com"
    assert "phone" not in params


@pytest.mark.asyncio
async def test_find_lead_id_not_found_returns_none():
    """Test a 404 lookup means no lead."""
    gateway = _gateway(lambda request: httpx.Response(404, json={"error": "Lead not found"}), [])

    assert await gateway.find_lead_id("T1", "0501234567", None) is None


@pytest.mark.asyncio
async def test_chat_reply_sends_history():
    """Test the chat request carries the transcript with capture flags."""
    requests: list[httpx.Request] = []
    gateway = _gateway(lambda request: httpx.Response(200, json={"reply": "Tell me more"}), requests)
    transcript = [
        ChatMessage(Speaker.AGENT, "Hi"),
        ChatMessage(Speaker.VISITOR, "Dana", capture=True),
    ]

    reply = await gateway.chat_reply("T1", transcript, "I sell shoes")

    assert reply == "Tell me more"
    body = json.loads(requests[0].content)
    assert body["message"] == "I sell shoes"
    assert body["history"] == [
        {"speaker": "agent", "text": "Hi", "capture": False},
        {"speaker": "visitor", "text": "Dana", "capture": True},
    ]


@pytest.mark.asyncio
async def test_chat_reply_failure_raises_upstream_failure():
    """Test a failing chat endpoint raises UpstreamFailure."""
    gateway = _gateway(lambda request: httpx.Response(502, json={"error": "down"}), [])

    with pytest.raises(UpstreamFailure):
        await gateway.chat_reply("T1", [], "hi")


@pytest.mark.asyncio
async def test_chat_reply_empty_raises_upstream_failure():
    """Test an empty reply raises UpstreamFailure."""
    gateway = _gateway(lambda request: httpx.Response(200, json={"reply": ""}), [])

    with pytest.raises(UpstreamFailure):
        await gateway.chat_reply("T1", [], "hi")


@pytest.mark.asyncio
async def test_save_conversation_puts_transcript():
    """Test the transcript is written to the lead's conversation."""
    requests: list[httpx.Request] = []
    gateway = _gateway(lambda request: httpx.Response(200, json={"success": True}), requests)

    await gateway.save_conversation("lead-1", [ChatMessage(Speaker.AGENT, "Hi")])

    assert requests[0].method == "PUT"
    assert requests[0].url.path == "/conversations/lead-1"


@pytest.mark.asyncio
async def test_notify_lead_reports_rejection():
    """Test notify_lead returns False on an error status."""
    ok = _gateway(lambda request: httpx.Response(200, json={"status": "sent"}), [])
    rejected = _gateway(lambda request: httpx.Response(500, json={"error": "boom"}), [])

    assert await ok.notify_lead("lead-1") is True
    assert await rejected.notify_lead("lead-1") is False


@pytest.mark.asyncio
async def test_notify_completion_omits_missing_rating():
    """Test the rating is only sent when given."""
    requests: list[httpx.Request] = []
    gateway = _gateway(lambda request: httpx.Response(200, json={"status": "sent"}), requests)

    await gateway.notify_completion("T1", "lead-1")
    await gateway.notify_completion("T1", "lead-1", rating=5)

    assert json.loads(requests[0].content) == {"task_id": "T1", "lead_id": "lead-1"}
    assert json.loads(requests[1].content)["rating"] == 5


def test_send_beacon_posts_synchronously():
    """Test the beacon reaches the lead notification endpoint."""
    requests: list[httpx.Request] = []
    gateway = _gateway(lambda request: httpx.Response(200, json={"status": "sent"}), requests)

    assert gateway.send_beacon("lead-1") is True
    assert requests[0].url.path == "/notifications/lead"
    assert json.loads(requests[0].content) == {"lead_id": "lead-1"}


def test_send_beacon_network_error_returns_false():
    """Test an undeliverable beacon is reported, not raised."""

    def fail(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    gateway = _gateway(fail, [])

    assert gateway.send_beacon("lead-1") is False


def test_send_beacon_read_timeout_counts_as_sent():
    """Test a beacon the server received but answered too slowly is reported sent."""
    requests: list[httpx.Request] = []

    def slow(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    gateway = _gateway(slow, requests)

    assert gateway.send_beacon("lead-1") is True
    assert len(requests) == 1


def test_send_beacon_connect_timeout_returns_false():
    """Test a beacon that never connected is reported undelivered."""

    def unreachable(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    gateway = _gateway(unreachable, [])

    assert gateway.send_beacon("lead-1") is False
