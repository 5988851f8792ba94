"""In-memory lead repository adapter."""

from typing import Optional

from lead_funnel.application.dtos.lead import Lead
from lead_funnel.application.ports.lead_repository import LeadRepository
from lead_funnel.domain.errors import ConflictRace, NotFoundError


class InMemoryLeadRepository(LeadRepository):
    """In-memory implementation of lead repository."""

    def __init__(self) -> None:
        """Initialize in-memory repository."""
        self._storage: list[Lead] = []

    def _index(self, lead_id: str) -> int:
        for i, lead in enumerate(self._storage):
            if lead.id == lead_id:
                return i
        raise NotFoundError(f"Lead {lead_id} does not exist", error="Lead not found")

    async def get(self, lead_id: str) -> Optional[Lead]:
        """
        Get a lead by id.

        Args:
            lead_id: Lead identifier

        Returns:
            Lead DTO, or None if not found
        """
        for lead in self._storage:
            if lead.id == lead_id:
                return lead
        return None

    async def find_by_identity(
        self, task_id: str, phone: str, email: Optional[str] = None
    ) -> Optional[Lead]:
        """
        Find the oldest lead under a task matching the phone OR the email.

        Storage order is insertion order, so the first match is the oldest.
        """
        for lead in self._storage:
            if lead.task_id != task_id:
                continue
            if lead.phone == phone or (email and lead.email == email):
                return lead
        return None

    async def insert(self, lead: Lead) -> Lead:
        """
        Insert a new lead, enforcing one lead per (task_id, phone).

        Raises:
            ConflictRace: If the phone is already used under the task
        """
        for existing in self._storage:
            if existing.task_id == lead.task_id and existing.phone == lead.phone:
                raise ConflictRace(f"Lead with this phone already exists for task {lead.task_id}")
        self._storage.append(lead)
        return lead

    async def update_identity(
        self, lead_id: str, name: Optional[str], email: Optional[str], phone: str
    ) -> Lead:
        """Overwrite the identity fields of an existing lead."""
        index = self._index(lead_id)
        current = self._storage[index]
        for other in self._storage:
            if other.id != lead_id and other.task_id == current.task_id and other.phone == phone:
                raise ConflictRace(f"Phone already belongs to lead {other.id}")
        updated = current.model_copy(update={"name": name, "email": email, "phone": phone})
        self._storage[index] = updated
        return updated

    async def set_rating(self, lead_id: str, rating: int) -> None:
        """Store the visitor's rating for a lead."""
        index = self._index(lead_id)
        self._storage[index] = self._storage[index].model_copy(update={"rating": rating})

    async def mark_notified(self, lead_id: str) -> None:
        """Flag a lead as notified."""
        index = self._index(lead_id)
        self._storage[index] = self._storage[index].model_copy(update={"notified": True})

    async def list(self, task_id: Optional[str] = None) -> list[Lead]:
        """
        List leads.

        Args:
            task_id: Optional task filter

        Returns:
            List of leads
        """
        if task_id is None:
            return self._storage.copy()
        return [lead for lead in self._storage if lead.task_id == task_id]
