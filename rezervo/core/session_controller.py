# Role: Owner of all client-visible state for one conversation. Front ends call its operations
# (send, chip click, bootstrap, reset, theme) and render session/toast afterwards.
# It glues together: the single-flight guard, duplicate-submit suppression, echo bubbles,
# request body construction, the transport adapter, and response reconciliation.

from __future__ import annotations

import json
import logging
import re
import time
from typing import Any, Callable, Dict, List, Optional, Pattern

from rezervo.api.chat_client import ChatClient, ChatResponse
from rezervo.api.errors import ChatClientError
from rezervo.config import format_startup_error
from rezervo.core.store import (
    SLOT_CONVERSATION_ID,
    SLOT_STARTED,
    InMemorySessionStore,
    PersistedSessionStore,
)
from rezervo.core.theme import persist_theme, resolve_theme
from rezervo.models.action import Generic, SubmitSelection, ToggleLocal, parse_action
from rezervo.models.message import Message, Suggestion
from rezervo.models.session import ConversationSession, Theme, Toast, ToastType

logger = logging.getLogger(__name__)

CHANNEL = "web"
LOCALE = "en-GB"

DUPLICATE_WINDOW_SECONDS = 1.2
TOAST_LIFETIME_SECONDS = 3.5
BOOKING_CONFIRMED_PATTERN = re.compile(r"booking confirmed", re.IGNORECASE)

BOOKING_TOAST = "Booking confirmed 🎉 Email on the way."
ERROR_TOAST = "Network error. Please try again."
DEFAULT_GREETING = "hello"


class SessionController:
    def __init__(
        self,
        client: ChatClient,
        store: Optional[PersistedSessionStore] = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        auto_greet: bool = True,
        system_prefers_light: Optional[Callable[[], bool]] = None,
        duplicate_window_seconds: float = DUPLICATE_WINDOW_SECONDS,
        toast_lifetime_seconds: float = TOAST_LIFETIME_SECONDS,
        booking_pattern: Pattern[str] = BOOKING_CONFIRMED_PATTERN,
    ) -> None:
        # Key line: client, store and clock are injectable for testing.
        self.client = client
        self.store = store if store is not None else InMemorySessionStore()
        self.clock = clock
        self.auto_greet = auto_greet
        self.duplicate_window_seconds = duplicate_window_seconds
        self.toast_lifetime_seconds = toast_lifetime_seconds
        self.booking_pattern = booking_pattern

        self.startup_error: Optional[str] = format_startup_error(client.missing)
        self.session = ConversationSession(
            conversation_id=self.store.get(SLOT_CONVERSATION_ID) or None,
            theme=resolve_theme(self.store, system_prefers_light),
            started=self.store.get(SLOT_STARTED) == "1",
        )
        self.composer_text = ""

        self._toast: Optional[Toast] = None
        self._last_request_key = ""
        self._last_request_ts: Optional[float] = None
        self._bootstrapped = False

    # ----------------------------
    # Read-only views for renderers
    # ----------------------------
    @property
    def sending(self) -> bool:
        return self.session.sending

    @property
    def transcript(self) -> List[Message]:
        return self.session.transcript

    @property
    def show_landing(self) -> bool:
        # Landing hero only exists when the backend isn't greeting us on its own.
        return not self.auto_greet and not self.session.started

    def current_toast(self) -> Optional[Toast]:
        if self._toast is not None and self.clock() >= self._toast.expires_at:
            self._toast = None
        return self._toast

    def is_selected(self, suggestion: Suggestion) -> bool:
        action = parse_action(suggestion.action)
        if not isinstance(action, ToggleLocal):
            return False
        return action.value in self.session.pending_selections.get(action.group, [])

    def last_suggestions(self) -> List[Suggestion]:
        last = self.session.last_message()
        if last is None or last.role != "assistant" or not last.suggestions:
            return []
        return list(last.suggestions)

    # ----------------------------
    # Gates
    # ----------------------------
    def _can_trigger(self) -> bool:
        if self.session.sending:
            logger.debug("Rejected trigger: a request is already in flight")
            return False
        if self.startup_error:
            logger.debug("Rejected trigger: configuration is incomplete")
            return False
        return True

    def _is_duplicate(self, payload_text: Optional[str], action: Optional[Dict[str, Any]]) -> bool:
        # Key line: every attempt refreshes the window, so a burst of identical clicks is one request.
        key = json.dumps({"t": payload_text or None, "a": action}, sort_keys=True)
        now = self.clock()
        duplicate = (
            key == self._last_request_key
            and self._last_request_ts is not None
            and now - self._last_request_ts < self.duplicate_window_seconds
        )
        self._last_request_key = key
        self._last_request_ts = now
        if duplicate:
            logger.debug("Dropped duplicate submission within %.1fs", self.duplicate_window_seconds)
        return duplicate

    # ----------------------------
    # Transcript helpers
    # ----------------------------
    def _append_user_echo(self, text: str) -> None:
        # Echo user text once (and only once).
        last = self.session.last_message()
        if last is not None and last.role == "user" and last.text == text:
            return
        self.session.transcript.append(Message.user(text))

    def _clear_stale_suggestions(self) -> None:
        # Key line: only the most recent assistant message can carry live chips.
        for message in reversed(self.session.transcript):
            if message.role == "assistant":
                if message.suggestions:
                    message.suggestions = None
                return

    def _mark_started(self) -> None:
        if not self.session.started:
            self.session.started = True
        self.store.set(SLOT_STARTED, "1")

    def show_toast(self, type: ToastType, message: str) -> None:
        self._toast = Toast(type=type, message=message, expires_at=self.clock() + self.toast_lifetime_seconds)

    def dismiss_toast(self) -> None:
        self._toast = None

    # ----------------------------
    # Send
    # ----------------------------
    def build_request_body(
        self, payload_text: Optional[str] = None, action: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {"channel": CHANNEL, "locale": LOCALE}
        if self.session.conversation_id:
            body["conversationId"] = self.session.conversation_id
        if payload_text:
            body["text"] = payload_text
        # Key line: an empty action is still an action; only the greeting sends neither.
        if action is not None:
            body["action"] = action
        return body

    def handle_send(self, payload_text: Optional[str] = None, action: Optional[Dict[str, Any]] = None) -> bool:
        """
        Send one turn to the backend. Returns False when the trigger was rejected
        (duplicate within the window, request in flight, or incomplete configuration).
        """
        if self._is_duplicate(payload_text, action):
            return False
        if not self._can_trigger():
            return False
        return self._send(payload_text, action)

    def _send(self, payload_text: Optional[str], action: Optional[Dict[str, Any]]) -> bool:
        # 1) Enter Sending
        # 2) Echo typed text
        # 3) Call the transport adapter and reconcile its result
        # 4) Always leave Sending and clear the composer
        self.session.sending = True
        try:
            if payload_text:
                self._append_user_echo(payload_text)

            result = self.client.send(self.build_request_body(payload_text, action))
            if result.ok:
                self._apply_response(result.response or ChatResponse())
            else:
                self._apply_failure(result.error)
        finally:
            self.session.sending = False
            self.composer_text = ""
        return True

    def _apply_response(self, response: ChatResponse) -> None:
        if response.conversation_id and response.conversation_id != self.session.conversation_id:
            logger.info("Conversation id assigned: %s", response.conversation_id)
            self.session.conversation_id = response.conversation_id
            self.store.set(SLOT_CONVERSATION_ID, response.conversation_id)

        self.session.transcript.extend(response.messages)

        if response.messages and self.booking_pattern.search(response.messages[-1].text):
            self.show_toast("success", BOOKING_TOAST)

    def _apply_failure(self, error: Optional[ChatClientError]) -> None:
        text = error.message if error is not None and error.message else "Something went wrong"
        self.session.transcript.append(Message.assistant(text))
        self.show_toast("error", ERROR_TOAST)

    # ----------------------------
    # Composer / landing entry points
    # ----------------------------
    def submit_text(self, text: str) -> bool:
        text = (text or "").strip()
        if not text:
            return False
        if not self._can_trigger() or self._is_duplicate(text, None):
            return False
        self._clear_stale_suggestions()
        self._mark_started()
        return self._send(text, None)

    def start_with_text(self, text: str = "") -> bool:
        text = (text or "").strip() or DEFAULT_GREETING
        if not self._can_trigger() or self._is_duplicate(text, None):
            return False
        self._clear_stale_suggestions()
        self._mark_started()
        return self._send(text, None)

    # ----------------------------
    # Chips
    # ----------------------------
    def handle_chip_click(self, suggestion: Optional[Suggestion]) -> bool:
        """
        Dispatch a chip click. Toggles stay local; submits and everything else
        echo a user bubble, retire the chips they came from, and send.
        """
        if suggestion is None:
            return False
        if not self._can_trigger():
            return False

        action = parse_action(suggestion.action)

        if isinstance(action, ToggleLocal):
            self.toggle_selection(action.group, action.value)
            return False

        if isinstance(action, SubmitSelection):
            values = self.session.selected(action.group)
            sent = self._echo_and_send(action.summary(values), action.outbound_action(values))
            if sent:
                self.clear_selections(action.group)
            return sent

        if isinstance(action, Generic):
            return self._echo_and_send(suggestion.title, action.payload)
        return False

    def _echo_and_send(self, echo: str, action: Dict[str, Any]) -> bool:
        if self._is_duplicate(None, action):
            return False
        self._clear_stale_suggestions()
        if echo:
            self._append_user_echo(echo)
        self._mark_started()
        return self._send(None, action)

    def toggle_selection(self, group: str, value: str) -> None:
        values = self.session.pending_selections.setdefault(group, [])
        if value in values:
            values.remove(value)
        else:
            values.append(value)

    def clear_selections(self, group: str) -> None:
        self.session.pending_selections[group] = []

    # ----------------------------
    # Lifecycle
    # ----------------------------
    def bootstrap(self) -> bool:
        # Auto-greeting: at most once, and never over an existing conversation.
        if self._bootstrapped or not self.auto_greet:
            return False
        if self.startup_error or self.session.conversation_id:
            return False
        self._bootstrapped = True
        return self.handle_send()

    def reset(self) -> None:
        self.store.clear(SLOT_CONVERSATION_ID)
        self.store.clear(SLOT_STARTED)
        self.session.conversation_id = None
        self.session.transcript = []
        self.session.pending_selections = {}
        self.session.started = False
        self.composer_text = ""
        self._last_request_key = ""
        self._last_request_ts = None
        self._bootstrapped = False
        logger.info("Conversation reset")

        if self.auto_greet:
            self.bootstrap()

    # ----------------------------
    # Theme
    # ----------------------------
    def set_theme(self, theme: Theme) -> None:
        self.session.theme = Theme(theme)
        persist_theme(self.store, self.session.theme)

    def toggle_theme(self) -> Theme:
        self.set_theme(self.session.theme.other)
        return self.session.theme
