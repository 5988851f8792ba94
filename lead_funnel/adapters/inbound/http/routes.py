"""HTTP routes."""

from typing import Optional
from uuid import uuid4

from fastapi import APIRouter, Depends, Query, status

from lead_funnel.adapters.inbound.http.schemas import (
    ChatRequest,
    ChatResponse,
    ConversationResponse,
    CreateLeadRequest,
    CreateLeadResponse,
    ErrorResponse,
    LeadLookupResponse,
    NotificationResponse,
    NotifyCompletionRequest,
    NotifyLeadRequest,
    SaveConversationRequest,
    SuccessResponse,
    TranscriptEntry,
)
from lead_funnel.application.dtos.notification import NotificationResult
from lead_funnel.domain.errors import NotFoundError
from lead_funnel.infrastructure.config.settings import settings
from lead_funnel.infrastructure.logging.logger import log_turn
from lead_funnel.infrastructure.wiring.container import Container, get_container

router = APIRouter()

_ERRORS = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
}


def _notification_response(result: NotificationResult) -> NotificationResponse:
    return NotificationResponse(
        status=result.status,
        variant=result.variant.value if result.variant else None,
        sent_to=result.sent_to,
        email_id=result.email_id,
    )


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check() -> dict[str, str]:
    """
    Health check endpoint for liveness/readiness.

    Returns:
        Health status
    """
    return {"status": "ok"}


@router.post(
    "/leads",
    status_code=status.HTTP_200_OK,
    response_model=CreateLeadResponse,
    responses=_ERRORS,
)
async def create_lead(
    request: CreateLeadRequest, container: Container = Depends(get_container)
) -> CreateLeadResponse:
    """
    Create a lead, or merge into the one sharing its phone or email.

    Args:
        request: Task id, phone and optional name/email

    Returns:
        The lead and whether an existing one was updated
    """
    turn_id = str(uuid4())
    log_turn(session_id=request.task_id, turn_id=turn_id, component="http", route="create_lead")

    resolution = await container.resolve_lead.execute(
        request.task_id,
        request.phone,
        name=request.name,
        email=request.email,
        turn_id=turn_id,
    )
    return CreateLeadResponse(lead=resolution.lead, was_updated=resolution.was_updated)


@router.get(
    "/leads/lookup",
    status_code=status.HTTP_200_OK,
    response_model=LeadLookupResponse,
    responses=_ERRORS,
)
async def lookup_lead(
    task_id: str = Query(..., min_length=1),
    phone: Optional[str] = None,
    email: Optional[str] = None,
    container: Container = Depends(get_container),
) -> LeadLookupResponse:
    """
    Find an existing lead by phone OR email under a task.

    Returns:
        The oldest matching lead

    Raises:
        NotFoundError: If no lead matches
    """
    lead = await container.resolve_lead.find(task_id, phone=phone, email=email)
    if lead is None:
        raise NotFoundError(f"No lead matches under task {task_id}", error="Lead not found")
    return LeadLookupResponse(lead=lead)


@router.put(
    "/conversations/{lead_id}",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse,
    responses=_ERRORS,
)
async def save_conversation(
    lead_id: str,
    request: SaveConversationRequest,
    container: Container = Depends(get_container),
) -> SuccessResponse:
    """
    Store the full transcript of a lead (last writer wins).

    Args:
        lead_id: Lead identifier
        request: Full transcript and optional summary
    """
    turn_id = str(uuid4())
    await container.save_conversation.save(
        lead_id,
        [entry.to_message() for entry in request.transcript],
        summary=request.summary,
        turn_id=turn_id,
    )
    return SuccessResponse()


@router.get(
    "/conversations/{lead_id}",
    status_code=status.HTTP_200_OK,
    response_model=ConversationResponse,
    responses=_ERRORS,
)
async def get_conversation(
    lead_id: str, container: Container = Depends(get_container)
) -> ConversationResponse:
    """
    Get the stored transcript of a lead.

    Args:
        lead_id: Lead identifier

    Returns:
        Transcript in its original order and the summary
    """
    conversation = await container.save_conversation.get(lead_id)
    return ConversationResponse(
        lead_id=conversation.lead_id,
        transcript=[TranscriptEntry.from_message(m) for m in conversation.transcript],
        summary=conversation.summary,
    )


@router.post(
    "/chat",
    status_code=status.HTTP_200_OK,
    response_model=ChatResponse,
    responses=_ERRORS,
)
async def chat(request: ChatRequest, container: Container = Depends(get_container)) -> ChatResponse:
    """
    Get the agent's reply to a visitor message.

    Args:
        request: Task id, new message and the transcript so far

    Returns:
        Agent reply
    """
    turn_id = str(uuid4())
    log_turn(
        session_id=request.task_id,
        turn_id=turn_id,
        component="http",
        route="chat",
        message_length=len(request.message),
        history_length=len(request.history),
    )

    reply = await container.generate_chat_reply.execute(
        request.task_id,
        [entry.to_message() for entry in request.history],
        request.message,
        turn_id=turn_id,
    )
    return ChatResponse(reply=reply)


@router.post(
    "/notifications/lead",
    status_code=status.HTTP_200_OK,
    response_model=NotificationResponse,
    responses=_ERRORS,
)
async def notify_lead(
    request: NotifyLeadRequest, container: Container = Depends(get_container)
) -> NotificationResponse:
    """
    Notify the task owner about a lead (abandonment path). Idempotent per lead.

    Args:
        request: Lead id

    Returns:
        Dispatch status
    """
    turn_id = str(uuid4())
    log_turn(session_id=request.lead_id, turn_id=turn_id, component="http", route="notify_lead")

    result = await container.dispatch_lead_notification.execute(request.lead_id, turn_id=turn_id)
    return _notification_response(result)


@router.post(
    "/notifications/complete",
    status_code=status.HTTP_200_OK,
    response_model=NotificationResponse,
    responses=_ERRORS,
)
async def notify_completion(
    request: NotifyCompletionRequest, container: Container = Depends(get_container)
) -> NotificationResponse:
    """
    Store the visitor's rating and notify the owner (explicit-completion path).

    Shares the idempotent dispatch of /notifications/lead.

    Args:
        request: Task id, lead id and optional rating

    Returns:
        Dispatch status
    """
    turn_id = str(uuid4())
    log_turn(
        session_id=request.lead_id,
        turn_id=turn_id,
        component="http",
        route="notify_completion",
        task_id=request.task_id,
        rating=request.rating,
    )

    result = await container.dispatch_lead_notification.complete(
        request.task_id, request.lead_id, rating=request.rating, turn_id=turn_id
    )
    return _notification_response(result)


@router.get("/debug/leads", status_code=status.HTTP_200_OK)
async def list_leads_debug(
    task_id: Optional[str] = None, container: Container = Depends(get_container)
) -> dict:
    """
    List stored leads (only enabled if DEBUG_MODE=true).

    Args:
        task_id: Optional task filter

    Returns:
        Stored leads and their count

    Raises:
        NotFoundError: If DEBUG_MODE is disabled
    """
    if not settings.debug_mode:
        raise NotFoundError("Set DEBUG_MODE=true to enable it", error="Debug endpoint is disabled")

    leads = await container.lead_repository.list(task_id=task_id)
    return {
        "count": len(leads),
        "leads": [lead.model_dump(mode="json") for lead in leads],
    }
