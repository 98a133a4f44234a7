import json

from rezervo.core.store import (
    SLOT_CONVERSATION_ID,
    SLOT_STARTED,
    SLOT_THEME,
    InMemorySessionStore,
    JsonFileSessionStore,
    QueryParamsSessionStore,
)
from rezervo.core.session_controller import SessionController
from rezervo.core.theme import resolve_theme
from rezervo.models.session import Theme


class TestJsonFileSessionStore:
    def test_survives_reload(self, tmp_path):
        path = tmp_path / "nested" / "state.json"
        JsonFileSessionStore(path).set(SLOT_CONVERSATION_ID, "c-1")

        assert JsonFileSessionStore(path).get(SLOT_CONVERSATION_ID) == "c-1"

    def test_clear_removes_slot_on_disk(self, tmp_path):
        path = tmp_path / "state.json"
        store = JsonFileSessionStore(path)
        store.set(SLOT_CONVERSATION_ID, "c-1")
        store.set(SLOT_THEME, "light")

        store.clear(SLOT_CONVERSATION_ID)

        assert json.loads(path.read_text(encoding="utf-8")) == {SLOT_THEME: "light"}

    def test_corrupt_file_starts_empty(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("{not json", encoding="utf-8")

        assert JsonFileSessionStore(path).get(SLOT_CONVERSATION_ID) is None


class TestQueryParamsSessionStore:
    def test_slots_use_short_param_names(self):
        params = {}
        store = QueryParamsSessionStore(params)

        store.set(SLOT_CONVERSATION_ID, "c-1")
        store.set(SLOT_THEME, "light")
        store.set(SLOT_STARTED, "1")

        assert params == {"cid": "c-1", "theme": "light", "started": "1"}

    def test_controller_resumes_from_url_after_reload(self, client, clock):
        params = {}
        first = SessionController(client, QueryParamsSessionStore(params), clock=clock, auto_greet=False)
        first.toggle_theme()
        first.start_with_text("hi")
        first.session.conversation_id = "c-7"
        first.store.set(SLOT_CONVERSATION_ID, "c-7")

        # A reload builds a fresh controller over the same URL.
        reloaded = SessionController(client, QueryParamsSessionStore(params), clock=clock, auto_greet=True)

        assert reloaded.session.conversation_id == "c-7"
        assert reloaded.session.theme is first.session.theme
        assert reloaded.session.started is True
        assert reloaded.bootstrap() is False

    def test_clear_and_blank_values(self):
        params = {"cid": ""}
        store = QueryParamsSessionStore(params)

        assert store.get(SLOT_CONVERSATION_ID) is None
        store.set(SLOT_CONVERSATION_ID, "c-1")
        store.clear(SLOT_CONVERSATION_ID)
        store.clear(SLOT_STARTED)

        assert params == {}


def test_in_memory_store_writes_through_to_given_mapping():
    backing = {}
    store = InMemorySessionStore(backing)

    store.set(SLOT_THEME, "dark")
    store.clear("never-set")

    assert backing == {SLOT_THEME: "dark"}


class TestResolveTheme:
    def test_persisted_value_wins(self):
        store = InMemorySessionStore({SLOT_THEME: "light"})

        assert resolve_theme(store, lambda: False) is Theme.LIGHT

    def test_unknown_persisted_value_falls_back_to_system(self):
        store = InMemorySessionStore({SLOT_THEME: "sepia"})

        assert resolve_theme(store, lambda: True) is Theme.LIGHT

    def test_defaults_to_dark(self):
        assert resolve_theme(InMemorySessionStore()) is Theme.DARK
