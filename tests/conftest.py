import json

import pytest
import requests

from rezervo.api.chat_client import ChatClient
from rezervo.config import ChatConfig
from rezervo.core.session_controller import SessionController
from rezervo.core.store import InMemorySessionStore


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else json.dumps(payload)

    def json(self):
        if self._payload is None:
            return json.loads(self.text)
        return self._payload


class FakeHTTPSession:
    """Records every POST and answers from a queue (last answer repeats)."""

    def __init__(self, responses=None):
        self.responses = list(responses or [FakeResponse(payload={"messages": []})])
        self.posts = []

    def post(self, url, json=None, headers=None, timeout=None):
        self.posts.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        answer = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(answer, Exception):
            raise answer
        return answer

    @property
    def bodies(self):
        return [p["json"] for p in self.posts]


class FakeClock:
    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def config():
    return ChatConfig(chat_url="https://chat.example.test/functions/v1/chat", anon_key="anon-key")


@pytest.fixture
def http():
    return FakeHTTPSession()


@pytest.fixture
def client(config, http):
    return ChatClient(config, session=http)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return InMemorySessionStore()


@pytest.fixture
def make_controller(client, store, clock):
    """Build a controller; auto-greet is off unless asked for so tests control every send."""

    def _make(auto_greet=False, **kwargs):
        kwargs.setdefault("client", client)
        kwargs.setdefault("store", store)
        return SessionController(clock=clock, auto_greet=auto_greet, **kwargs)

    return _make


@pytest.fixture
def respond(http):
    """Queue backend answers: respond({"messages": [...]}, status=200)."""

    def _respond(*payloads, status=200):
        http.responses = [FakeResponse(status_code=status, payload=p) for p in payloads]

    return _respond


@pytest.fixture
def network_down(http):
    def _down():
        http.responses = [requests.ConnectionError("connection refused")]

    return _down
