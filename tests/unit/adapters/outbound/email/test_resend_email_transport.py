"""Unit tests for Resend email transport adapter."""

import json

import httpx
import pytest

from lead_funnel.adapters.outbound.email import ResendEmailTransport, UnconfiguredEmailTransport
from lead_funnel.application.dtos.notification import EmailMessage
from lead_funnel.domain.errors import TransportFailure

MESSAGE = EmailMessage(recipient="owner@example.com", subject="New lead", html="<p>hi</p>")


def _transport(handler, requests: list) -> ResendEmailTransport:
    def record(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    return ResendEmailTransport(
        api_key="re_test",
        from_email="Magnt.AI <noreply@magnt.ai>",
        api_url="https://api.resend.com/emails",
        timeout_seconds=5,
        transport=httpx.MockTransport(record),
    )


@pytest.mark.asyncio
async def test_send_posts_message_and_returns_id():
    """Test a successful send returns the provider id."""
    requests: list[httpx.Request] = []
    transport = _transport(lambda request: httpx.Response(200, json={"id": "email-1"}), requests)

    email_id = await transport.send(MESSAGE)

    assert email_id == "email-1"
    request = requests[0]
    assert request.headers["Authorization"] == "Bearer re_test"
    assert json.loads(request.content) == {
        "from": "Magnt.AI <noreply@magnt.ai>",
        "to": ["owner@example.com"],
        "subject": "New lead",
        "html": "<p>hi</p>",
    }


@pytest.mark.asyncio
async def test_error_status_raises_transport_failure():
    """Test a rejected message surfaces the provider's message."""
    transport = _transport(
        lambda request: httpx.Response(422, json={"message": "Invalid `to` field"}), []
    )

    with pytest.raises(TransportFailure) as exc_info:
        await transport.send(MESSAGE)

    assert "Invalid `to` field" in exc_info.value.details


@pytest.mark.asyncio
async def test_network_error_raises_transport_failure():
    """Test connection failures become transport failures."""

    def fail(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    transport = _transport(fail, [])

    with pytest.raises(TransportFailure):
        await transport.send(MESSAGE)


def test_missing_api_key_is_rejected(monkeypatch):
    """Test the adapter refuses to start without a key."""
    monkeypatch.setattr(
        "lead_funnel.adapters.outbound.email.resend_email_transport.settings.resend_api_key",
        "",
    )

    with pytest.raises(ValueError):
        ResendEmailTransport(api_key=None)


@pytest.mark.asyncio
async def test_unconfigured_transport_always_fails():
    """Test the placeholder transport never reports success."""
    with pytest.raises(TransportFailure) as exc_info:
        await UnconfiguredEmailTransport().send(MESSAGE)

    assert exc_info.value.error == "Email service not configured"
