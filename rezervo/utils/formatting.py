# Role: Small render helpers shared by the Streamlit UI and the CLI.

from __future__ import annotations

import re
from typing import List

from rezervo.models.message import Message

_SUCCESS_PREFIX_RE = re.compile(r"^\s*✅")
_BOOKING_CONFIRMED_WORDS_RE = re.compile(r"\bbooking confirmed\b", re.IGNORECASE)


def message_lines(message: Message) -> List[str]:
    # Key line: embedded line breaks render as separate visual lines.
    return (message.text or "").split("\n")


def is_success_message(message: Message) -> bool:
    text = message.text or ""
    return bool(_SUCCESS_PREFIX_RE.search(text) or _BOOKING_CONFIRMED_WORDS_RE.search(text))
