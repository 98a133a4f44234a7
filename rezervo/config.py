# Role: Central configuration module. Loads .env into environment variables, computes runtime flags (DEBUG),
# and resolves the ChatConfig the transport adapter is built from. Resolved once at startup, never re-read.

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

DEBUG: bool = False

CHAT_URL_ENV = "CHAT_URL"
CHAT_ANON_KEY_ENV = "CHAT_ANON_KEY"

_TRUTHY = {"1", "true", "yes"}


def load_env() -> None:
    """
    Load .env into os.environ, then recompute DEBUG.
    This makes DEBUG correct even if load_env() is called after import.
    """
    global DEBUG
    load_dotenv()
    DEBUG = os.getenv("DEBUG", "0").lower() in _TRUTHY


def _optional_float(raw: Optional[str]) -> Optional[float]:
    if raw is None or not raw.strip():
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    return value if value > 0 else None


@dataclass(frozen=True)
class ChatConfig:
    chat_url: str = ""
    anon_key: str = ""
    timeout_seconds: Optional[float] = None
    auto_greet: bool = True
    state_file: Path = Path.home() / ".rezervo" / "state.json"
    theme_preference: Optional[str] = None

    @classmethod
    def from_env(cls) -> "ChatConfig":
        # Key line: blank values count as missing, same as unset ones.
        theme = os.getenv("REZERVO_THEME_PREFERENCE", "").strip().lower()
        state_file = os.getenv("REZERVO_STATE_FILE", "").strip()
        return cls(
            chat_url=os.getenv(CHAT_URL_ENV, "").strip(),
            anon_key=os.getenv(CHAT_ANON_KEY_ENV, "").strip(),
            timeout_seconds=_optional_float(os.getenv("CHAT_TIMEOUT_SECONDS")),
            auto_greet=os.getenv("REZERVO_AUTO_GREET", "1").lower() in _TRUTHY,
            state_file=Path(state_file).expanduser() if state_file else cls.state_file,
            theme_preference=theme if theme in {"light", "dark"} else None,
        )

    def missing(self) -> List[str]:
        # Order matters: the diagnostic names values in this order.
        missing: List[str] = []
        if not self.chat_url:
            missing.append(CHAT_URL_ENV)
        if not self.anon_key:
            missing.append(CHAT_ANON_KEY_ENV)
        return missing


def format_startup_error(missing: List[str]) -> Optional[str]:
    if not missing:
        return None
    return (
        f"Missing environment variable(s): {', '.join(missing)}. "
        "Set them in your hosting environment variables and redeploy."
    )
