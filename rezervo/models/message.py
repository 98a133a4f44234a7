# Role: Transcript message schema. Mirrors the backend's message shape (role + text + optional suggestion chips)
# and decodes it leniently, since the backend is trusted but not strictly typed.

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

Role = Literal["user", "assistant"]


class Suggestion(BaseModel):
    model_config = ConfigDict(extra="allow")

    title: str = ""
    action: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("title", mode="before")
    @classmethod
    def _coerce_title(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator("action", mode="before")
    @classmethod
    def _coerce_action(cls, v: Any) -> Dict[str, Any]:
        return v if isinstance(v, dict) else {}


class Message(BaseModel):
    model_config = ConfigDict(extra="allow")

    # Key line: the backend may omit role; anything it sends is rendered as assistant output.
    role: Role = "assistant"
    text: str = ""
    suggestions: Optional[List[Suggestion]] = None

    @field_validator("role", mode="before")
    @classmethod
    def _coerce_role(cls, v: Any) -> str:
        return "user" if v == "user" else "assistant"

    @field_validator("text", mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator("suggestions", mode="before")
    @classmethod
    def _coerce_suggestions(cls, v: Any) -> Optional[List[Any]]:
        if not isinstance(v, list):
            return None
        return [s for s in v if isinstance(s, (dict, Suggestion))]

    @classmethod
    def user(cls, text: str) -> "Message":
        return cls(role="user", text=text)

    @classmethod
    def assistant(cls, text: str) -> "Message":
        return cls(role="assistant", text=text)

    @property
    def has_suggestions(self) -> bool:
        return bool(self.suggestions)
