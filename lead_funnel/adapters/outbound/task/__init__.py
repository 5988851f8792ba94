"""Task repository adapters."""

from lead_funnel.adapters.outbound.task.postgres_task_repository import PostgresTaskRepository
from lead_funnel.adapters.outbound.task.task_repository import InMemoryTaskRepository

__all__ = [
    "InMemoryTaskRepository",
    "PostgresTaskRepository",
]
