"""Lead repository port."""

from abc import ABC, abstractmethod
from typing import Optional

from lead_funnel.application.dtos.lead import Lead


class LeadRepository(ABC):
    """Port interface for lead repository."""

    @abstractmethod
    async def get(self, lead_id: str) -> Optional[Lead]:
        """
        Get a lead by id.

        Args:
            lead_id: Lead identifier

        Returns:
            Lead DTO, or None if not found
        """
        pass

    @abstractmethod
    async def find_by_identity(
        self, task_id: str, phone: str, email: Optional[str] = None
    ) -> Optional[Lead]:
        """
        Find the oldest lead under a task matching the phone OR the email.

        Args:
            task_id: Task identifier
            phone: Phone to match exactly
            email: Email to match exactly (clause skipped when empty)

        Returns:
            Matching Lead DTO, or None
        """
        pass

    @abstractmethod
    async def insert(self, lead: Lead) -> Lead:
        """
        Insert a new lead.

        Args:
            lead: Lead DTO to insert

        Returns:
            Stored Lead DTO

        Raises:
            ConflictRace: If a lead with the same (task_id, phone) already exists
        """
        pass

    @abstractmethod
    async def update_identity(
        self, lead_id: str, name: Optional[str], email: Optional[str], phone: str
    ) -> Lead:
        """
        Overwrite the identity fields of an existing lead.

        Args:
            lead_id: Lead identifier
            name: Name to store
            email: Email to store
            phone: Phone to store

        Returns:
            Updated Lead DTO
        """
        pass

    @abstractmethod
    async def set_rating(self, lead_id: str, rating: int) -> None:
        """
        Store the visitor's rating for a lead.

        Args:
            lead_id: Lead identifier
            rating: Rating from 1 to 5
        """
        pass

    @abstractmethod
    async def mark_notified(self, lead_id: str) -> None:
        """
        Flag a lead as notified so later dispatches become no-ops.

        Args:
            lead_id: Lead identifier
        """
        pass

    @abstractmethod
    async def list(self, task_id: Optional[str] = None) -> list[Lead]:
        """
        List leads, optionally restricted to one task.

        Args:
            task_id: Optional task filter

        Returns:
            List of leads (used for debug purposes)
        """
        pass
