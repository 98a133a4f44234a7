import requests

from rezervo.api.chat_client import ChatClient, decode_response
from rezervo.api.errors import BackendError, ConfigurationError, NetworkError
from rezervo.config import ChatConfig

from tests.conftest import FakeHTTPSession, FakeResponse


class TestConfigurationGate:
    def test_missing_url_fails_before_network(self, http):
        client = ChatClient(ChatConfig(chat_url="", anon_key="anon-key"), session=http)

        result = client.send({"channel": "web", "locale": "en-GB"})

        assert not result.ok
        assert isinstance(result.error, ConfigurationError)
        assert result.error.missing == ["CHAT_URL"]
        assert "CHAT_URL" in result.error.message
        assert http.posts == []

    def test_names_every_missing_value(self, http):
        client = ChatClient(ChatConfig(), session=http)

        result = client.send({})

        assert result.error.missing == ["CHAT_URL", "CHAT_ANON_KEY"]
        assert not client.configured
        assert http.posts == []


class TestRequest:
    def test_posts_json_with_bearer_header(self, client, http, config):
        body = {"channel": "web", "locale": "en-GB", "text": "hi"}

        result = client.send(body)

        assert result.ok
        assert len(http.posts) == 1
        post = http.posts[0]
        assert post["url"] == config.chat_url
        assert post["json"] == body
        assert post["headers"]["Authorization"] == "Bearer anon-key"
        assert post["headers"]["Content-Type"] == "application/json"
        assert post["timeout"] is None

    def test_passes_configured_timeout(self, http):
        config = ChatConfig(chat_url="https://chat.example.test", anon_key="k", timeout_seconds=20.0)
        ChatClient(config, session=http).send({})

        assert http.posts[0]["timeout"] == 20.0


class TestErrors:
    def test_non_2xx_is_backend_error(self, config):
        http = FakeHTTPSession([FakeResponse(status_code=500, text="boom")])

        result = ChatClient(config, session=http).send({})

        assert not result.ok
        assert isinstance(result.error, BackendError)
        assert result.error.status_code == 500
        assert result.error.body == "boom"
        assert result.error.message == "chat failed: 500 boom"

    def test_redirect_status_is_not_success(self, config):
        http = FakeHTTPSession([FakeResponse(status_code=302, text="")])

        result = ChatClient(config, session=http).send({})

        assert isinstance(result.error, BackendError)

    def test_connection_failure_is_network_error(self, config):
        http = FakeHTTPSession([requests.ConnectionError("connection refused")])

        result = ChatClient(config, session=http).send({})

        assert isinstance(result.error, NetworkError)
        assert "connection refused" in result.error.message

    def test_raise_for_error_reraises(self, config):
        http = FakeHTTPSession([FakeResponse(status_code=401, text="nope")])
        result = ChatClient(config, session=http).send({})

        try:
            result.raise_for_error()
        except BackendError as e:
            assert e.status_code == 401
        else:
            raise AssertionError("expected BackendError")


class TestDecoding:
    def test_decodes_conversation_and_messages(self):
        response = decode_response(
            {
                "conversationId": "c-1",
                "messages": [
                    {"role": "assistant", "text": "Hola!", "suggestions": [{"title": "Book", "action": {"type": "x"}}]},
                ],
            }
        )

        assert response.conversation_id == "c-1"
        assert [m.text for m in response.messages] == ["Hola!"]
        assert response.messages[0].suggestions[0].title == "Book"

    def test_missing_or_non_list_messages_default_to_empty(self):
        assert decode_response({"conversationId": "c-1"}).messages == []
        assert decode_response({"messages": "nope"}).messages == []
        assert decode_response(None).messages == []
        assert decode_response(["not", "an", "object"]).conversation_id is None

    def test_skips_non_object_entries(self):
        response = decode_response({"messages": ["junk", 3, {"text": "kept"}]})

        assert [m.text for m in response.messages] == ["kept"]
        assert response.messages[0].role == "assistant"

    def test_non_json_success_body_is_empty_turn(self, config):
        http = FakeHTTPSession([FakeResponse(status_code=200, text="<html>")])

        result = ChatClient(config, session=http).send({})

        assert result.ok
        assert result.response.messages == []
