import logging
import re
import sys
from typing import Iterable

_BEARER_RE = re.compile(r"(Bearer\s+)\S+", re.IGNORECASE)


class RedactSecretsFilter(logging.Filter):
    """Mask bearer tokens and configured keys before a record is written."""

    def __init__(self, secrets: Iterable[str] = ()):
        super().__init__()
        self.secrets = [s for s in secrets if s]

    def filter(self, record: logging.LogRecord) -> bool:
        message = _BEARER_RE.sub(r"\1***", record.getMessage())
        for secret in self.secrets:
            message = message.replace(secret, "***")
        record.msg = message
        record.args = None
        return True


def setup_logging(level: str = "INFO", secrets: Iterable[str] = ()) -> None:
    """
    Configure logging for the chat client.

    Only the ``rezervo`` loggers follow ``level``; everything else (Streamlit,
    urllib3) stays at WARNING so a DEBUG run shows our request flow, not theirs.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.addFilter(RedactSecretsFilter(secrets))
    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[handler],
    )
    logging.getLogger("rezervo").setLevel(getattr(logging, level.upper(), logging.INFO))
