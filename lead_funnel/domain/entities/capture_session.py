"""Capture session entity (ephemeral, one per open visitor page)."""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from lead_funnel.domain.value_objects.chat_message import ChatMessage, Speaker
from lead_funnel.domain.value_objects.contact_identity import ContactIdentity


class CaptureStage(str, Enum):
    """Capture stages in the order they are asked at runtime."""

    FREE_CHAT = "free_chat"
    ASK_NAME = "ask_name"
    ASK_EMAIL = "ask_email"
    ASK_PHONE = "ask_phone"
    DONE = "done"


class NotifiedGuard:
    """
    Single-fire cell shared by reference between all arbiter triggers.

    Timers and listeners hold the guard object itself, never a copy of its
    value, so every check sees the current state.
    """

    def __init__(self) -> None:
        self._fired = False

    @property
    def fired(self) -> bool:
        """Whether a trigger already claimed the dispatch."""
        return self._fired

    def try_claim(self) -> bool:
        """
        Check-and-set the guard.

        Returns:
            True for the first caller only
        """
        if self._fired:
            return False
        self._fired = True
        return True


@dataclass
class CaptureSession:
    """Capture session entity."""

    session_id: str
    task_id: str
    stage: CaptureStage = CaptureStage.FREE_CHAT
    transcript: list[ChatMessage] = field(default_factory=list)
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    lead_id: Optional[str] = None
    free_turns: int = 0  # visitor turns outside any capture interval
    free_replies: int = 0  # agent replies to those turns
    pending_reply: Optional[str] = None  # agent reply to resume with after capture
    guard: NotifiedGuard = field(default_factory=NotifiedGuard)
    last_activity: float = field(default_factory=time.monotonic)

    def touch(self) -> None:
        """Record visitor activity."""
        self.last_activity = time.monotonic()

    @property
    def in_capture(self) -> bool:
        """Whether the session is inside a capture interval."""
        return self.stage in (CaptureStage.ASK_NAME, CaptureStage.ASK_EMAIL, CaptureStage.ASK_PHONE)

    @property
    def identity(self) -> ContactIdentity:
        """Identity collected so far."""
        return ContactIdentity(name=self.name, phone=self.phone, email=self.email)

    def append(self, speaker: Speaker, text: str, capture: bool = False) -> None:
        """Append an entry to the transcript."""
        self.transcript.append(ChatMessage(speaker=speaker, text=text, capture=capture))

    def append_agent_once(self, text: str) -> bool:
        """
        Append an agent entry unless it is already the last entry.

        Returns:
            True if the entry was appended
        """
        if self.transcript and self.transcript[-1].text == text:
            return False
        self.append(Speaker.AGENT, text)
        return True
