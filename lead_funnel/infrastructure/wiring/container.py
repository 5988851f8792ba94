"""Dependency injection container."""

from typing import Optional

from lead_funnel.application.ports.chat_responder import ChatResponder
from lead_funnel.application.ports.conversation_analyzer import ConversationAnalyzer
from lead_funnel.application.ports.conversation_repository import ConversationRepository
from lead_funnel.application.ports.email_transport import EmailTransport
from lead_funnel.application.ports.idempotency_store import IdempotencyStore
from lead_funnel.application.ports.lead_repository import LeadRepository
from lead_funnel.application.ports.task_repository import TaskRepository
from lead_funnel.application.use_cases.dispatch_lead_notification_use_case import (
    DispatchLeadNotification,
)
from lead_funnel.application.use_cases.generate_chat_reply_use_case import GenerateChatReply
from lead_funnel.application.use_cases.resolve_lead_use_case import ResolveLead
from lead_funnel.application.use_cases.save_conversation_use_case import SaveConversation
from lead_funnel.infrastructure.config.settings import settings
from lead_funnel.infrastructure.wiring.dependencies import (
    create_chat_responder,
    create_conversation_analyzer,
    create_conversation_repository,
    create_email_transport,
    create_idempotency_store,
    create_lead_repository,
    create_task_repository,
)


class Container:
    """Dependency injection container for the server-side use cases."""

    def __init__(
        self,
        task_repository: Optional[TaskRepository] = None,
        lead_repository: Optional[LeadRepository] = None,
        conversation_repository: Optional[ConversationRepository] = None,
        email_transport: Optional[EmailTransport] = None,
        idempotency_store: Optional[IdempotencyStore] = None,
        chat_responder: Optional[ChatResponder] = None,
        conversation_analyzer: Optional[ConversationAnalyzer] = None,
    ) -> None:
        """
        Initialize container with dependencies.

        Any dependency left as None is built from settings.
        """
        # Repositories
        self._task_repository = task_repository or create_task_repository()
        self._lead_repository = lead_repository or create_lead_repository()
        self._conversation_repository = conversation_repository or create_conversation_repository()

        # External services (responder and analyzer stay None when the LLM is disabled)
        self._email_transport = email_transport or create_email_transport()
        self._idempotency_store = idempotency_store or create_idempotency_store()
        self._chat_responder = chat_responder or create_chat_responder()
        self._conversation_analyzer = conversation_analyzer or create_conversation_analyzer()

        # Use cases
        self._resolve_lead = ResolveLead(self._task_repository, self._lead_repository)
        self._save_conversation = SaveConversation(
            self._lead_repository, self._conversation_repository
        )
        self._generate_chat_reply = GenerateChatReply(self._task_repository, self._chat_responder)
        self._dispatch_lead_notification = DispatchLeadNotification(
            self._lead_repository,
            self._task_repository,
            self._conversation_repository,
            self._email_transport,
            self._idempotency_store,
            conversation_analyzer=self._conversation_analyzer,
            analysis_min_turns=settings.analysis_min_turns,
            lock_ttl_seconds=settings.notification_lock_ttl_seconds,
            site_url=settings.site_url,
        )

    @property
    def task_repository(self) -> TaskRepository:
        """Get task repository."""
        return self._task_repository

    @property
    def lead_repository(self) -> LeadRepository:
        """Get lead repository."""
        return self._lead_repository

    @property
    def resolve_lead(self) -> ResolveLead:
        """Get resolve lead use case."""
        return self._resolve_lead

    @property
    def save_conversation(self) -> SaveConversation:
        """Get conversation store use case."""
        return self._save_conversation

    @property
    def generate_chat_reply(self) -> GenerateChatReply:
        """Get chat reply use case."""
        return self._generate_chat_reply

    @property
    def dispatch_lead_notification(self) -> DispatchLeadNotification:
        """Get notification composer use case."""
        return self._dispatch_lead_notification


_container: Optional[Container] = None


def get_container() -> Container:
    """
    FastAPI dependency returning the process-wide container.

    Built on first use so importing the routes does not touch settings-driven
    backends. Tests override this dependency.
    """
    global _container
    if _container is None:
        _container = Container()
    return _container
