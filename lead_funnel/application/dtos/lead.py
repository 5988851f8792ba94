"""Lead DTOs."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from lead_funnel.application.dtos.base import DTO


class Lead(DTO):
    """Lead DTO: one contact per task, merged by phone or email."""

    id: str
    task_id: str
    phone: str
    name: Optional[str] = None
    email: Optional[str] = None
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    notified: bool = False
    created_at: datetime

    class Config:
        """Pydantic configuration."""

        json_schema_extra = {
            "example": {
                "id": "4b0f7c36-90a4-4c5e-9a55-6f1b0c7f1e2a",
                "task_id": "task_123",
                "phone": "0501234567",
                "name": "Dana Levi",
                "email": "dana@example.com",
                "rating": None,
                "notified": False,
                "created_at": "2024-01-15T10:30:00Z",
            }
        }


class LeadResolution(DTO):
    """Outcome of a create-or-merge lead request."""

    lead: Lead
    was_updated: bool
