# Role: Persisted key-value slots that survive a reload (conversation id, theme, started flag).
# The controller only sees the PersistedSessionStore protocol; the front end picks the backing.

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, MutableMapping, Optional, Protocol

logger = logging.getLogger(__name__)

SLOT_CONVERSATION_ID = "rezervo_conversation_id"
SLOT_THEME = "rezervo_theme"
SLOT_STARTED = "rezervo_started"


class PersistedSessionStore(Protocol):
    def get(self, slot: str) -> Optional[str]: ...

    def set(self, slot: str, value: str) -> None: ...

    def clear(self, slot: str) -> None: ...


class InMemorySessionStore:
    def __init__(self, data: Optional[MutableMapping[str, str]] = None) -> None:
        # Key line: callers may hand in a mapping that outlives us (e.g. Streamlit's session_state).
        self._data: MutableMapping[str, str] = data if data is not None else {}

    def get(self, slot: str) -> Optional[str]:
        return self._data.get(slot)

    def set(self, slot: str, value: str) -> None:
        self._data[slot] = value

    def clear(self, slot: str) -> None:
        self._data.pop(slot, None)


class JsonFileSessionStore:
    """
    One JSON object on disk, rewritten on every change.
    A missing or unreadable file starts empty rather than failing the session.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._data: Dict[str, str] = self._load()

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable state file %s: %s", self.path, e)
            return {}
        if not isinstance(raw, dict):
            return {}
        return {str(k): str(v) for k, v in raw.items() if v is not None}

    def _flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._data, indent=2), encoding="utf-8")

    def get(self, slot: str) -> Optional[str]:
        return self._data.get(slot)

    def set(self, slot: str, value: str) -> None:
        self._data[slot] = value
        self._flush()

    def clear(self, slot: str) -> None:
        if self._data.pop(slot, None) is not None:
            self._flush()


class QueryParamsSessionStore:
    """
    Slots kept in the page URL's query string (Streamlit's st.query_params),
    so a browser reload lands on the same conversation and theme.
    """

    PARAM_NAMES: Dict[str, str] = {
        SLOT_CONVERSATION_ID: "cid",
        SLOT_THEME: "theme",
        SLOT_STARTED: "started",
    }

    def __init__(self, params: MutableMapping[str, str]) -> None:
        self._params = params

    def _name(self, slot: str) -> str:
        return self.PARAM_NAMES.get(slot, slot)

    def get(self, slot: str) -> Optional[str]:
        value = self._params.get(self._name(slot))
        return value or None

    def set(self, slot: str, value: str) -> None:
        name = self._name(slot)
        # Key line: writing a query param triggers a browser history update; skip no-op writes.
        if self._params.get(name) != value:
            self._params[name] = value

    def clear(self, slot: str) -> None:
        self._params.pop(self._name(slot), None)
