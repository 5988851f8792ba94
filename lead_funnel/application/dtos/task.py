"""Task DTOs."""

from typing import Optional

from lead_funnel.application.dtos.base import DTO


class Task(DTO):
    """Task (funnel) DTO. Authored elsewhere; read-only for the capture flow."""

    id: str
    title: str
    description: str = ""
    script: str = ""
    opening_question: str = ""
    notify_email: Optional[str] = None
    is_public: bool = True
    show_others: bool = False
    source_post_url: Optional[str] = None
    owner_id: Optional[str] = None
