"""Transport error taxonomy for the chat endpoint."""
from typing import List, Optional


class ChatClientError(Exception):
    """Base class for every failure the chat client reports."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ConfigurationError(ChatClientError):
    """Required configuration is absent. Raised before any network attempt."""

    def __init__(self, missing: List[str]):
        self.missing = list(missing)
        super().__init__(f"Missing {', '.join(self.missing)}. Set them in your hosting env vars.")


class BackendError(ChatClientError):
    """The backend answered with a non-2xx status."""

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"chat failed: {status_code} {body}")


class NetworkError(ChatClientError):
    """The request never produced a response (DNS, connection refused, aborted)."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message)
