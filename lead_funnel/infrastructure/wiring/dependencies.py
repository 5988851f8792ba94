"""Dependency injection factory functions."""

from typing import Optional
from uuid import uuid4

from lead_funnel.adapters.inbound.page.visitor_page import VisitorPage
from lead_funnel.adapters.outbound.conversation import (
    InMemoryConversationRepository,
    PostgresConversationRepository,
)
from lead_funnel.adapters.outbound.email import ResendEmailTransport, UnconfiguredEmailTransport
from lead_funnel.adapters.outbound.funnel_api import HttpFunnelGateway
from lead_funnel.adapters.outbound.idempotency import InMemoryIdempotencyStore, RedisIdempotencyStore
from lead_funnel.adapters.outbound.identity_cache import (
    FileIdentityCache,
    InMemoryIdentityCache,
    RedisIdentityCache,
)
from lead_funnel.adapters.outbound.lead import InMemoryLeadRepository, PostgresLeadRepository
from lead_funnel.adapters.outbound.llm.openai_chat_responder import OpenAIChatResponder
from lead_funnel.adapters.outbound.llm.openai_conversation_analyzer import (
    OpenAIConversationAnalyzer,
)
from lead_funnel.adapters.outbound.task import InMemoryTaskRepository, PostgresTaskRepository
from lead_funnel.application.ports.chat_responder import ChatResponder
from lead_funnel.application.ports.conversation_analyzer import ConversationAnalyzer
from lead_funnel.application.ports.conversation_repository import ConversationRepository
from lead_funnel.application.ports.email_transport import EmailTransport
from lead_funnel.application.ports.funnel_gateway import FunnelGateway
from lead_funnel.application.ports.idempotency_store import IdempotencyStore
from lead_funnel.application.ports.identity_cache import IdentityCache
from lead_funnel.application.ports.lead_repository import LeadRepository
from lead_funnel.application.ports.task_repository import TaskRepository
from lead_funnel.application.use_cases.capture_session_use_case import CaptureSessionUseCase
from lead_funnel.application.use_cases.notification_arbiter import NotificationArbiter
from lead_funnel.domain.entities.capture_session import CaptureSession
from lead_funnel.infrastructure.config.settings import settings
from lead_funnel.infrastructure.logging.logger import logger


def _require_database_url(setting_name: str) -> None:
    if not settings.database_url:
        raise ValueError(f"DATABASE_URL is required when {setting_name}=postgres")


def create_task_repository() -> TaskRepository:
    """
    Factory function to create task repository.

    Returns:
        TaskRepository instance
    """
    if settings.task_repository == "postgres":
        _require_database_url("TASK_REPOSITORY")
        return PostgresTaskRepository()
    else:
        return InMemoryTaskRepository()


def create_lead_repository() -> LeadRepository:
    """
    Factory function to create lead repository.

    Returns:
        LeadRepository instance
    """
    if settings.lead_repository == "postgres":
        _require_database_url("LEAD_REPOSITORY")
        return PostgresLeadRepository()
    else:
        return InMemoryLeadRepository()


def create_conversation_repository() -> ConversationRepository:
    """
    Factory function to create conversation repository.

    Returns:
        ConversationRepository instance
    """
    if settings.conversation_repository == "postgres":
        _require_database_url("CONVERSATION_REPOSITORY")
        return PostgresConversationRepository()
    else:
        return InMemoryConversationRepository()


def create_chat_responder() -> Optional[ChatResponder]:
    """
    Factory function to create the chat responder if the LLM is enabled.

    Returns:
        ChatResponder instance if enabled, None otherwise
    """
    if not settings.llm_enabled:
        return None

    try:
        return OpenAIChatResponder()
    except ValueError as e:
        # Missing API key: /chat answers with a configuration error
        logger.warning(f"Chat responder disabled: {str(e)}")
        return None


def create_conversation_analyzer() -> Optional[ConversationAnalyzer]:
    """
    Factory function to create the conversation analyzer if the LLM is enabled.

    Returns:
        ConversationAnalyzer instance if enabled, None otherwise
    """
    if not settings.llm_enabled:
        return None

    try:
        return OpenAIConversationAnalyzer()
    except ValueError as e:
        # Notifications still go out, with the "analysis unavailable" body
        logger.warning(f"Conversation analyzer disabled: {str(e)}")
        return None


def create_email_transport() -> EmailTransport:
    """
    Factory function to create email transport.

    Returns:
        EmailTransport instance (Resend, or one that always fails when unconfigured)
    """
    if not settings.resend_api_key:
        return UnconfiguredEmailTransport()
    return ResendEmailTransport()


def create_idempotency_store() -> IdempotencyStore:
    """
    Factory function to create the dispatch lock store.

    The in-memory store only guards dispatches inside one process; use
    Redis when the API runs with several workers.

    Returns:
        IdempotencyStore instance (Redis or in-memory)
    """
    if settings.notification_lock_backend == "redis":
        if not settings.redis_url:
            raise ValueError("REDIS_URL is required when NOTIFICATION_LOCK_BACKEND=redis")
        return RedisIdempotencyStore(settings.redis_url)
    return InMemoryIdempotencyStore()


def create_identity_cache(profile_id: str) -> IdentityCache:
    """
    Factory function to create the visitor-side identity cache.

    Args:
        profile_id: Browser profile identifier

    Returns:
        IdentityCache instance
    """
    if settings.identity_cache == "redis":
        return RedisIdentityCache(settings.redis_url, profile_id)
    if settings.identity_cache == "file":
        return FileIdentityCache(settings.identity_cache_dir, profile_id)
    return InMemoryIdentityCache()


def create_funnel_gateway() -> FunnelGateway:
    """
    Factory function to create the funnel API gateway.

    Returns:
        FunnelGateway instance
    """
    return HttpFunnelGateway()


def create_visitor_page(
    task_id: str,
    opening_question: str,
    profile_id: str = "default",
    gateway: Optional[FunnelGateway] = None,
    identity_cache: Optional[IdentityCache] = None,
) -> VisitorPage:
    """
    Factory function to create a visitor page with its session, capture flow and arbiter.

    Args:
        task_id: Task the page shows
        opening_question: Task's first agent message
        profile_id: Browser profile identifier for the identity cache
        gateway: Optional gateway (defaults to the HTTP gateway)
        identity_cache: Optional identity cache (defaults per settings)

    Returns:
        VisitorPage instance
    """
    gateway = gateway or create_funnel_gateway()
    identity_cache = identity_cache or create_identity_cache(profile_id)
    session = CaptureSession(session_id=str(uuid4()), task_id=task_id)

    capture = CaptureSessionUseCase(
        gateway,
        identity_cache,
        capture_trigger_turns=settings.capture_trigger_turns,
    )
    arbiter = NotificationArbiter(
        session,
        gateway,
        inactivity_timeout_seconds=settings.inactivity_timeout_seconds,
        hidden_confirmation_seconds=settings.hidden_confirmation_seconds,
    )
    return VisitorPage(session, opening_question, capture, arbiter)
