# Role: Client-visible conversation state. One ConversationSession per browser tab / terminal.
# The SessionController is its only writer.

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from rezervo.models.message import Message

ToastType = Literal["error", "info", "success"]


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"

    @property
    def other(self) -> "Theme":
        return Theme.DARK if self is Theme.LIGHT else Theme.LIGHT


@dataclass(frozen=True)
class Toast:
    type: ToastType
    message: str
    expires_at: float


class ConversationSession(BaseModel):
    conversation_id: Optional[str] = None
    transcript: List[Message] = Field(default_factory=list)

    # Key line: group -> values in the order the user picked them (an ordered set).
    pending_selections: Dict[str, List[str]] = Field(default_factory=dict)

    sending: bool = False
    theme: Theme = Theme.DARK
    started: bool = False

    def last_message(self) -> Optional[Message]:
        return self.transcript[-1] if self.transcript else None

    def selected(self, group: str) -> List[str]:
        return list(self.pending_selections.get(group, []))
