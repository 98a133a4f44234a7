# Role: Light/dark preference. Persisted choice wins, then the system signal, then dark.

from __future__ import annotations

from typing import Callable, Optional

from rezervo.core.store import SLOT_THEME, PersistedSessionStore
from rezervo.models.session import Theme


def resolve_theme(
    store: PersistedSessionStore,
    system_prefers_light: Optional[Callable[[], bool]] = None,
) -> Theme:
    stored = store.get(SLOT_THEME)
    if stored in {Theme.LIGHT.value, Theme.DARK.value}:
        return Theme(stored)

    if system_prefers_light is not None and system_prefers_light():
        return Theme.LIGHT
    return Theme.DARK


def persist_theme(store: PersistedSessionStore, theme: Theme) -> None:
    store.set(SLOT_THEME, theme.value)
