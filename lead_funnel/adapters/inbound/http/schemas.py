"""HTTP adapter request and response schemas."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from lead_funnel.application.dtos.lead import Lead
from lead_funnel.application.dtos.notification import NotificationStatus
from lead_funnel.domain.value_objects.chat_message import ChatMessage, Speaker


class TranscriptEntry(BaseModel):
    """One transcript entry on the wire."""

    speaker: Speaker
    text: str
    capture: bool = False

    def to_message(self) -> ChatMessage:
        return ChatMessage(speaker=self.speaker, text=self.text, capture=self.capture)

    @classmethod
    def from_message(cls, message: ChatMessage) -> "TranscriptEntry":
        return cls(speaker=message.speaker, text=message.text, capture=message.capture)


class CreateLeadRequest(BaseModel):
    """Create-or-merge lead request."""

    task_id: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    name: Optional[str] = None
    email: Optional[str] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "task_id": "task_123",
                "name": "Dana Levi",
                "phone": "050-1234567",
                "email": "dana@example.com",
            }
        }
    )


class CreateLeadResponse(BaseModel):
    """Create-or-merge lead response."""

    success: bool = True
    lead: Lead
    was_updated: bool


class LeadLookupResponse(BaseModel):
    """Lead lookup response."""

    lead: Lead


class SaveConversationRequest(BaseModel):
    """Full transcript upload."""

    transcript: list[TranscriptEntry]
    summary: Optional[str] = None


class SuccessResponse(BaseModel):
    """Generic success response."""

    success: bool = True


class ConversationResponse(BaseModel):
    """Stored conversation."""

    lead_id: str
    transcript: list[TranscriptEntry]
    summary: Optional[str] = None


class ChatRequest(BaseModel):
    """Chat turn request from a visitor session."""

    task_id: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    history: list[TranscriptEntry] = []

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "task_id": "task_123",
                "message": "אני מחפש דרך להביא יותר לקוחות",
                "history": [{"speaker": "agent", "text": "מה הכי מעסיק אותך בעסק?"}],
            }
        }
    )


class ChatResponse(BaseModel):
    """Chat turn response."""

    reply: str


class NotifyLeadRequest(BaseModel):
    """Abandonment-path notification request."""

    lead_id: str = Field(..., min_length=1)


class NotifyCompletionRequest(BaseModel):
    """Explicit-completion notification request."""

    task_id: str = Field(..., min_length=1)
    lead_id: str = Field(..., min_length=1)
    rating: Optional[int] = Field(default=None, ge=1, le=5)


class NotificationResponse(BaseModel):
    """Notification dispatch response."""

    success: bool = True
    status: NotificationStatus
    variant: Optional[str] = None
    sent_to: Optional[str] = None
    email_id: Optional[str] = None


class ErrorResponse(BaseModel):
    """Failure envelope returned for every handled error."""

    error: str
    details: str = ""
