"""Resolve lead use case: create a lead or merge into the existing one."""

from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from lead_funnel.application.dtos.lead import Lead, LeadResolution
from lead_funnel.application.ports.lead_repository import LeadRepository
from lead_funnel.application.ports.task_repository import TaskRepository
from lead_funnel.domain.errors import ConflictRace, NotFoundError, ValidationError
from lead_funnel.domain.value_objects.contact_identity import (
    is_valid_email,
    is_valid_phone,
    normalize_phone,
)
from lead_funnel.infrastructure.logging.logger import log_lead_resolution, logger


class ResolveLead:
    """
    Find-or-create the canonical lead for a contact submission.

    Two submissions under one task that share a phone or an email end up on
    the same lead. A duplicate-key race on insert is resolved by re-reading
    the winner and merging into it.
    """

    def __init__(self, task_repository: TaskRepository, lead_repository: LeadRepository) -> None:
        """
        Initialize resolve lead use case.

        Args:
            task_repository: Repository for tasks
            lead_repository: Repository for leads
        """
        self._task_repository = task_repository
        self._lead_repository = lead_repository

    @staticmethod
    def _clean(value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None

    def _validate(self, phone: Optional[str], email: Optional[str]) -> tuple[str, Optional[str]]:
        if not phone:
            raise ValidationError("task_id and phone are required", error="Missing required fields")
        if not is_valid_phone(phone):
            raise ValidationError(f"Invalid phone number format: {phone}", error="Invalid phone")
        if email and not is_valid_email(email):
            raise ValidationError(f"Invalid email format: {email}", error="Invalid email")
        return normalize_phone(phone), email

    async def _merge(
        self, existing: Lead, name: Optional[str], phone: str, email: Optional[str], turn_id: str
    ) -> LeadResolution:
        try:
            updated = await self._lead_repository.update_identity(
                existing.id,
                name=name or existing.name,
                email=email or existing.email,
                phone=phone,
            )
        except Exception as e:
            # The lead exists; a capture in progress should not fail on enrichment
            logger.warning(f"Error updating lead {existing.id}, keeping stored record: {str(e)}")
            log_lead_resolution(
                existing.task_id, turn_id, existing.id, False, phone, update_failed=True
            )
            return LeadResolution(lead=existing, was_updated=False)

        log_lead_resolution(updated.task_id, turn_id, updated.id, True, phone)
        return LeadResolution(lead=updated, was_updated=True)

    async def execute(
        self,
        task_id: str,
        phone: str,
        name: Optional[str] = None,
        email: Optional[str] = None,
        turn_id: Optional[str] = None,
    ) -> LeadResolution:
        """
        Create a lead, or merge the submission into the matching one.

        Args:
            task_id: Task identifier
            phone: Phone number (required)
            name: Optional name
            email: Optional email
            turn_id: Optional request identifier for logging

        Returns:
            LeadResolution with was_updated=True when an existing lead was merged

        Raises:
            ValidationError: If the phone is missing or malformed, or the email is malformed
            NotFoundError: If the task does not exist
        """
        turn_id = turn_id or "unknown"
        name = self._clean(name)
        email = self._clean(email)
        phone, email = self._validate(self._clean(phone), email)

        task = await self._task_repository.get(task_id)
        if task is None:
            raise NotFoundError(f"Task {task_id} does not exist", error="Task not found")

        existing = await self._lead_repository.find_by_identity(task_id, phone, email)
        if existing is not None:
            return await self._merge(existing, name, phone, email, turn_id)

        lead = Lead(
            id=str(uuid4()),
            task_id=task_id,
            phone=phone,
            name=name,
            email=email,
            created_at=datetime.now(timezone.utc),
        )
        try:
            created = await self._lead_repository.insert(lead)
        except ConflictRace:
            # A concurrent submission won the insert; merge into its row
            existing = await self._lead_repository.find_by_identity(task_id, phone, email)
            if existing is None:
                raise
            logger.info(f"Lead insert raced for task {task_id}, merging into {existing.id}")
            return await self._merge(existing, name, phone, email, turn_id)

        log_lead_resolution(task_id, turn_id, created.id, False, phone)
        return LeadResolution(lead=created, was_updated=False)

    async def find(
        self, task_id: str, phone: Optional[str] = None, email: Optional[str] = None
    ) -> Optional[Lead]:
        """
        Look up an existing lead by phone OR email under a task.

        Args:
            task_id: Task identifier
            phone: Phone to match (may be empty)
            email: Email to match (may be empty)

        Returns:
            Oldest matching lead, or None
        """
        phone = normalize_phone(phone) if phone else ""
        email = self._clean(email)
        if not phone and not email:
            return None
        return await self._lead_repository.find_by_identity(task_id, phone, email)
