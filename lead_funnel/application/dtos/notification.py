"""Notification DTOs."""

from enum import Enum
from typing import Optional

from lead_funnel.application.dtos.base import DTO


class NotificationStatus(str, Enum):
    """Outcome of a notification dispatch."""

    SENT = "sent"
    ALREADY_NOTIFIED = "already_notified"
    IN_FLIGHT = "in_flight"


class EmailVariant(str, Enum):
    """Which body the owner email carries."""

    ANALYSIS = "analysis"
    LOW_ENGAGEMENT = "low_engagement"
    ANALYSIS_UNAVAILABLE = "analysis_unavailable"


class EmailMessage(DTO):
    """Rendered email ready for the transport."""

    recipient: str
    subject: str
    html: str


class NotificationResult(DTO):
    """Result of dispatching an owner notification for a lead."""

    lead_id: str
    status: NotificationStatus
    variant: Optional[EmailVariant] = None
    dialogue_turns: Optional[int] = None
    sent_to: Optional[str] = None
    email_id: Optional[str] = None
