"""Dispatch lead notification use case (the owner notification composer)."""

import logging
from typing import Optional

from lead_funnel.application.dtos.conversation import Conversation, LeadAnalysis
from lead_funnel.application.dtos.lead import Lead
from lead_funnel.application.dtos.notification import (
    EmailVariant,
    NotificationResult,
    NotificationStatus,
)
from lead_funnel.application.dtos.task import Task
from lead_funnel.application.ports.conversation_analyzer import ConversationAnalyzer
from lead_funnel.application.ports.conversation_repository import ConversationRepository
from lead_funnel.application.ports.email_transport import EmailTransport
from lead_funnel.application.ports.idempotency_store import IdempotencyStore
from lead_funnel.application.ports.lead_repository import LeadRepository
from lead_funnel.application.ports.task_repository import TaskRepository
from lead_funnel.application.use_cases.lead_notification_email import render_lead_notification
from lead_funnel.domain.errors import ConfigurationError, NotFoundError, ValidationError
from lead_funnel.domain.value_objects.chat_message import count_dialogue_turns
from lead_funnel.infrastructure.logging.logger import log_notification, logger


class DispatchLeadNotification:
    """
    Emails the task owner about a lead, at most once per lead.

    Both the abandonment path and the explicit-completion path end here. The
    lead's notified flag makes repeat dispatches no-ops, and a short-lived
    per-lead lock keeps two dispatches landing together from both sending.
    The lead is flagged only after the transport accepted the email, so a
    failed send can be retried.
    """

    LOCK_KEY_PREFIX = "notify:"

    def __init__(
        self,
        lead_repository: LeadRepository,
        task_repository: TaskRepository,
        conversation_repository: ConversationRepository,
        email_transport: EmailTransport,
        idempotency_store: IdempotencyStore,
        conversation_analyzer: Optional[ConversationAnalyzer] = None,
        analysis_min_turns: int = 4,
        lock_ttl_seconds: int = 60,
        site_url: str = "https://magnt.ai",
    ) -> None:
        """
        Initialize composer.

        Args:
            lead_repository: Repository for leads
            task_repository: Repository for tasks and owner emails
            conversation_repository: Repository for transcripts and summaries
            email_transport: Outbound email transport
            idempotency_store: Store for the per-lead dispatch lock
            conversation_analyzer: Optional analyzer (None when the LLM is disabled)
            analysis_min_turns: Dialogue turns required before analysis is attempted
            lock_ttl_seconds: Lifetime of the dispatch lock
            site_url: Public site URL used in the email
        """
        self._lead_repository = lead_repository
        self._task_repository = task_repository
        self._conversation_repository = conversation_repository
        self._email_transport = email_transport
        self._idempotency_store = idempotency_store
        self._conversation_analyzer = conversation_analyzer
        self._analysis_min_turns = analysis_min_turns
        self._lock_ttl_seconds = lock_ttl_seconds
        self._site_url = site_url

    async def _load_lead(self, lead_id: str) -> Lead:
        lead = await self._lead_repository.get(lead_id)
        if lead is None:
            raise NotFoundError(f"Lead {lead_id} does not exist", error="Lead not found")
        return lead

    async def _resolve_recipient(self, task: Task) -> str:
        if task.notify_email:
            return task.notify_email
        if task.owner_id:
            owner_email = await self._task_repository.get_owner_email(task.owner_id)
            if owner_email:
                return owner_email
        raise ConfigurationError(
            "Task has no notify_email and its owner has no email. "
            "Please set notify_email in task settings.",
            error="No recipient email found",
        )

    def _analyze(self, lead_id: str, conversation: Conversation) -> Optional[LeadAnalysis]:
        if self._conversation_analyzer is None:
            logger.warning(f"No conversation analyzer configured, skipping analysis for {lead_id}")
            return None
        try:
            return self._conversation_analyzer.analyze(conversation.transcript)
        except Exception as e:
            # Analysis is advisory; the owner still gets the lead
            logger.warning(f"Conversation analysis failed for lead {lead_id}: {str(e)}")
            return None

    async def _store_summary(self, lead_id: str, summary: str) -> None:
        try:
            await self._conversation_repository.update_summary(lead_id, summary)
        except Exception as e:
            logger.warning(f"Could not store summary for lead {lead_id}: {str(e)}")

    async def execute(self, lead_id: str, turn_id: Optional[str] = None) -> NotificationResult:
        """
        Notify the owner about a lead unless that already happened.

        Args:
            lead_id: Lead identifier
            turn_id: Optional request identifier for logging

        Returns:
            NotificationResult (SENT, ALREADY_NOTIFIED or IN_FLIGHT)

        Raises:
            NotFoundError: If the lead or its task does not exist
            ConfigurationError: If no recipient address can be resolved
            TransportFailure: If the email could not be sent (lead stays unflagged)
        """
        turn_id = turn_id or "unknown"

        lead = await self._load_lead(lead_id)
        if lead.notified:
            log_notification(lead_id, turn_id, NotificationStatus.ALREADY_NOTIFIED.value)
            return NotificationResult(lead_id=lead_id, status=NotificationStatus.ALREADY_NOTIFIED)

        lock_key = f"{self.LOCK_KEY_PREFIX}{lead_id}"
        if not await self._idempotency_store.try_acquire(lock_key, self._lock_ttl_seconds):
            log_notification(lead_id, turn_id, NotificationStatus.IN_FLIGHT.value)
            return NotificationResult(lead_id=lead_id, status=NotificationStatus.IN_FLIGHT)

        try:
            # Another dispatch may have finished between the first read and the lock
            lead = await self._load_lead(lead_id)
            if lead.notified:
                log_notification(lead_id, turn_id, NotificationStatus.ALREADY_NOTIFIED.value)
                return NotificationResult(
                    lead_id=lead_id, status=NotificationStatus.ALREADY_NOTIFIED
                )
            return await self._compose_and_send(lead, turn_id)
        finally:
            await self._idempotency_store.release(lock_key)

    async def _compose_and_send(self, lead: Lead, turn_id: str) -> NotificationResult:
        task = await self._task_repository.get(lead.task_id)
        if task is None:
            raise NotFoundError(f"Task {lead.task_id} does not exist", error="Task not found")

        try:
            recipient = await self._resolve_recipient(task)
        except ConfigurationError:
            log_notification(lead.id, turn_id, "no_recipient", level=logging.ERROR)
            raise

        conversation = await self._conversation_repository.get(lead.id)
        transcript = conversation.transcript if conversation else []
        turns = count_dialogue_turns(transcript)

        analysis = None
        if turns >= self._analysis_min_turns and conversation is not None:
            analysis = self._analyze(lead.id, conversation)
            if analysis is not None:
                await self._store_summary(lead.id, analysis.summary)

        if turns < self._analysis_min_turns:
            variant = EmailVariant.LOW_ENGAGEMENT
        elif analysis is not None:
            variant = EmailVariant.ANALYSIS
        else:
            variant = EmailVariant.ANALYSIS_UNAVAILABLE

        message = render_lead_notification(
            recipient=recipient,
            task=task,
            lead=lead,
            variant=variant,
            dialogue_turns=turns,
            analysis_min_turns=self._analysis_min_turns,
            site_url=self._site_url,
            analysis=analysis,
            stored_summary=conversation.summary if conversation else None,
        )

        try:
            email_id = await self._email_transport.send(message)
        except Exception:
            log_notification(
                lead.id, turn_id, "failed", level=logging.ERROR, variant=variant.value, to=recipient
            )
            raise

        await self._lead_repository.mark_notified(lead.id)
        log_notification(
            lead.id,
            turn_id,
            NotificationStatus.SENT.value,
            variant=variant.value,
            dialogue_turns=turns,
            to=recipient,
            email_id=email_id,
        )
        return NotificationResult(
            lead_id=lead.id,
            status=NotificationStatus.SENT,
            variant=variant,
            dialogue_turns=turns,
            sent_to=recipient,
            email_id=email_id,
        )

    async def complete(
        self,
        task_id: str,
        lead_id: str,
        rating: Optional[int] = None,
        turn_id: Optional[str] = None,
    ) -> NotificationResult:
        """
        Explicit-completion path: store the rating, then dispatch.

        Args:
            task_id: Task the visitor completed
            lead_id: Lead identifier
            rating: Optional rating from 1 to 5
            turn_id: Optional request identifier for logging

        Returns:
            NotificationResult from the shared dispatch

        Raises:
            ValidationError: If the rating is out of range
            NotFoundError: If the lead does not exist or belongs to another task
        """
        if rating is not None and not 1 <= rating <= 5:
            raise ValidationError(f"Rating must be between 1 and 5, got {rating}", error="Invalid rating")

        lead = await self._load_lead(lead_id)
        if lead.task_id != task_id:
            raise NotFoundError(
                f"Lead {lead_id} does not belong to task {task_id}", error="Lead not found"
            )

        if rating is not None:
            await self._lead_repository.set_rating(lead_id, rating)

        return await self.execute(lead_id, turn_id=turn_id)
