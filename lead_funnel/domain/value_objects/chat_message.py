"""Chat message value object."""

from dataclasses import dataclass
from enum import Enum


class Speaker(str, Enum):
    """Who said a transcript entry."""

    VISITOR = "visitor"
    AGENT = "agent"


@dataclass(frozen=True)
class ChatMessage:
    """One transcript entry."""

    speaker: Speaker
    text: str
    capture: bool = False  # part of an identity capture interval

    def __post_init__(self) -> None:
        """Coerce raw speaker strings."""
        if not isinstance(self.speaker, Speaker):
            object.__setattr__(self, "speaker", Speaker(self.speaker))


def count_dialogue_turns(transcript: list[ChatMessage]) -> int:
    """Count visitor entries that are not part of a capture interval."""
    return sum(1 for m in transcript if m.speaker == Speaker.VISITOR and not m.capture)
