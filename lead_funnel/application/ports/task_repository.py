"""Task repository port."""

from abc import ABC, abstractmethod
from typing import Optional

from lead_funnel.application.dtos.task import Task


class TaskRepository(ABC):
    """Port interface for read-only task lookups."""

    @abstractmethod
    async def get(self, task_id: str) -> Optional[Task]:
        """
        Get a task by id.

        Args:
            task_id: Task identifier

        Returns:
            Task DTO, or None if not found
        """
        pass

    @abstractmethod
    async def get_owner_email(self, owner_id: str) -> Optional[str]:
        """
        Get the account email of a task owner.

        Args:
            owner_id: Owner (user) identifier

        Returns:
            Email address, or None if the owner has none
        """
        pass
