# Role: Transport adapter for the conversational backend. One POST per turn, bearer auth, typed result.
# Config is validated at construction; send() never touches the network when required values are missing.

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests
from pydantic import ValidationError

from rezervo.api.errors import BackendError, ChatClientError, ConfigurationError, NetworkError
from rezervo.config import ChatConfig
from rezervo.models.message import Message

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChatResponse:
    conversation_id: Optional[str] = None
    messages: List[Message] = field(default_factory=list)


@dataclass(frozen=True)
class ChatResult:
    ok: bool
    response: Optional[ChatResponse] = None
    error: Optional[ChatClientError] = None

    def raise_for_error(self) -> ChatResponse:
        if self.error is not None:
            raise self.error
        return self.response or ChatResponse()


def decode_response(payload: Any) -> ChatResponse:
    # 1) Non-object bodies decode to an empty response
    # 2) conversationId only counts when it's a non-empty string
    # 3) messages must be a list; entries that don't validate are dropped
    if not isinstance(payload, dict):
        return ChatResponse()

    conversation_id = payload.get("conversationId")
    if not isinstance(conversation_id, str) or not conversation_id:
        conversation_id = None

    raw_messages = payload.get("messages")
    if not isinstance(raw_messages, list):
        raw_messages = []

    messages: List[Message] = []
    for item in raw_messages:
        if not isinstance(item, dict):
            continue
        try:
            messages.append(Message.model_validate(item))
        except ValidationError as e:
            logger.warning("Dropping malformed message from backend: %s", e)

    return ChatResponse(conversation_id=conversation_id, messages=messages)


class ChatClient:
    def __init__(self, config: ChatConfig, session: Optional[requests.Session] = None) -> None:
        self.config = config
        self.missing = config.missing()
        self._session = session or requests.Session()

        if self.missing:
            logger.warning("Chat client is missing configuration: %s", ", ".join(self.missing))

    @property
    def configured(self) -> bool:
        return not self.missing

    def send(self, body: Dict[str, Any]) -> ChatResult:
        if self.missing:
            return ChatResult(ok=False, error=ConfigurationError(self.missing))

        try:
            resp = self._session.post(
                self.config.chat_url,
                json=body,
                headers={
                    "Content-Type": "application/json",
                    "Authorization": f"Bearer {self.config.anon_key}",
                },
                timeout=self.config.timeout_seconds,
            )
        except requests.RequestException as e:
            logger.warning("Chat request failed before a response: %s", e)
            return ChatResult(ok=False, error=NetworkError(f"chat request failed: {e}", cause=e))

        logger.debug("POST %s -> %s", self.config.chat_url, resp.status_code)

        if not 200 <= resp.status_code < 300:
            logger.warning("Chat backend returned %s", resp.status_code)
            return ChatResult(ok=False, error=BackendError(resp.status_code, resp.text))

        try:
            payload = resp.json()
        except ValueError:
            # Key line: a 2xx with an unreadable body is an empty turn, not a failure.
            logger.warning("Chat backend returned a non-JSON body; treating as empty")
            payload = None

        return ChatResult(ok=True, response=decode_response(payload))
