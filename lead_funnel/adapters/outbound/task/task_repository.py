"""In-memory task repository adapter."""

from typing import Optional

from lead_funnel.application.dtos.task import Task
from lead_funnel.application.ports.task_repository import TaskRepository


class InMemoryTaskRepository(TaskRepository):
    """In-memory implementation of task repository, seeded at construction."""

    def __init__(
        self,
        tasks: Optional[list[Task]] = None,
        owner_emails: Optional[dict[str, str]] = None,
    ) -> None:
        """
        Initialize in-memory repository.

        Args:
            tasks: Tasks to serve
            owner_emails: Mapping of owner id to account email
        """
        self._tasks: dict[str, Task] = {task.id: task for task in tasks or []}
        self._owner_emails: dict[str, str] = dict(owner_emails or {})

    def add(self, task: Task, owner_email: Optional[str] = None) -> None:
        """Register a task (and optionally its owner's email)."""
        self._tasks[task.id] = task
        if owner_email and task.owner_id:
            self._owner_emails[task.owner_id] = owner_email

    async def get(self, task_id: str) -> Optional[Task]:
        """Get a task by id."""
        return self._tasks.get(task_id)

    async def get_owner_email(self, owner_id: str) -> Optional[str]:
        """Get the account email of a task owner."""
        return self._owner_emails.get(owner_id)
