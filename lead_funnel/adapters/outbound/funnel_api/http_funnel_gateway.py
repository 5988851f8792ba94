"""HTTP funnel gateway adapter: calls the funnel API from a visitor session."""

from typing import Any, Optional

import httpx

from lead_funnel.application.dtos.lead import Lead, LeadResolution
from lead_funnel.application.ports.funnel_gateway import FunnelGateway
from lead_funnel.domain.errors import UpstreamFailure
from lead_funnel.domain.value_objects.chat_message import ChatMessage
from lead_funnel.infrastructure.config.settings import settings
from lead_funnel.infrastructure.logging.logger import logger


def _serialize_transcript(transcript: list[ChatMessage]) -> list[dict[str, Any]]:
    return [
        {"speaker": m.speaker.value, "text": m.text, "capture": m.capture} for m in transcript
    ]


class HttpFunnelGateway(FunnelGateway):
    """Funnel gateway over the JSON HTTP API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        beacon_timeout_seconds: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        beacon_transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """
        Initialize HTTP gateway.

        Args:
            base_url: Funnel API base URL (defaults to settings.funnel_api_base_url)
            timeout_seconds: Timeout for awaited requests
            beacon_timeout_seconds: Timeout for the synchronous beacon
            transport: Optional async httpx transport (used by tests)
            beacon_transport: Optional sync httpx transport (used by tests)
        """
        self._base_url = (base_url or settings.funnel_api_base_url).rstrip("/")
        self._timeout = timeout_seconds or settings.funnel_api_timeout_seconds
        self._beacon_timeout = beacon_timeout_seconds or settings.beacon_timeout_seconds
        self._transport = transport
        self._beacon_transport = beacon_transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url, timeout=self._timeout, transport=self._transport
        )

    async def create_or_merge_lead(
        self, task_id: str, phone: str, name: Optional[str] = None, email: Optional[str] = None
    ) -> Optional[LeadResolution]:
        """
        POST /leads.

        Raises:
            httpx.HTTPStatusError: On a non-2xx response
            httpx.HTTPError: On network failure
        """
        async with self._client() as client:
            response = await client.post(
                "/leads",
                json={"task_id": task_id, "name": name, "phone": phone, "email": email},
            )
            response.raise_for_status()
            data = response.json()

        if not data.get("lead"):
            return None
        return LeadResolution(
            lead=Lead.model_validate(data["lead"]),
            was_updated=bool(data.get("was_updated", False)),
        )

    async def find_lead_id(
        self, task_id: str, phone: Optional[str], email: Optional[str]
    ) -> Optional[str]:
        """GET /leads/lookup. Returns None on 404."""
        params = {"task_id": task_id}
        if phone:
            params["phone"] = phone
        if email:
            params["email"] = email

        async with self._client() as client:
            response = await client.get("/leads/lookup", params=params)
            if response.status_code == 404:
                return None
            response.raise_for_status()
            lead = response.json().get("lead") or {}
        return lead.get("id")

    async def chat_reply(self, task_id: str, transcript: list[ChatMessage], message: str) -> str:
        """
        POST /chat.

        Raises:
            UpstreamFailure: If the request fails or the reply is empty
        """
        try:
            async with self._client() as client:
                response = await client.post(
                    "/chat",
                    json={
                        "task_id": task_id,
                        "message": message,
                        "history": _serialize_transcript(transcript),
                    },
                )
                response.raise_for_status()
                reply = response.json().get("reply")
        except httpx.HTTPError as e:
            raise UpstreamFailure(f"Chat request failed: {str(e)}") from e

        if not reply:
            raise UpstreamFailure("Chat endpoint returned an empty reply")
        return reply

    async def save_conversation(self, lead_id: str, transcript: list[ChatMessage]) -> None:
        """PUT /conversations/{lead_id}."""
        async with self._client() as client:
            response = await client.put(
                f"/conversations/{lead_id}",
                json={"transcript": _serialize_transcript(transcript)},
            )
            response.raise_for_status()

    async def notify_lead(self, lead_id: str) -> bool:
        """POST /notifications/lead."""
        async with self._client() as client:
            response = await client.post("/notifications/lead", json={"lead_id": lead_id})
        if response.status_code >= 400:
            logger.error(
                f"Lead notification rejected for {lead_id}: {response.status_code} {response.text}"
            )
            return False
        return True

    async def notify_completion(
        self, task_id: str, lead_id: str, rating: Optional[int] = None
    ) -> bool:
        """POST /notifications/complete."""
        payload: dict[str, Any] = {"task_id": task_id, "lead_id": lead_id}
        if rating is not None:
            payload["rating"] = rating

        async with self._client() as client:
            response = await client.post("/notifications/complete", json=payload)
        if response.status_code >= 400:
            logger.error(
                f"Completion notification rejected for {lead_id}: "
                f"{response.status_code} {response.text}"
            )
            return False
        return True

    def send_beacon(self, lead_id: str) -> bool:
        """
        Fire POST /notifications/lead without the event loop.

        Uses a blocking client with a short timeout so it can run from an
        unload handler. The response is not inspected.

        Returns:
            True if the request reached the server, including when the
            server was too slow to answer within the beacon timeout
        """
        try:
            with httpx.Client(
                base_url=self._base_url,
                timeout=self._beacon_timeout,
                transport=self._beacon_transport,
            ) as client:
                client.post("/notifications/lead", json={"lead_id": lead_id})
            return True
        except httpx.ReadTimeout as e:
            # The request was written out; only the reply is missing
            logger.info(f"Beacon for lead {lead_id} sent, response not awaited: {str(e)}")
            return True
        except httpx.HTTPError as e:
            logger.warning(f"Beacon for lead {lead_id} was not delivered: {str(e)}")
            return False
