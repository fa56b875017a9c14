import json

from randomencounter.backend.state import build_initial_state
from randomencounter.backend.store import InMemoryStateStore, PostgresStateStore, create_store


def test_create_store_returns_postgres_store_when_database_url_present() -> None:
    store = create_store(database_url="postgresql://local", namespace="Campaign")

    assert isinstance(store, PostgresStateStore)
    assert store.namespace == "Campaign"


def test_create_store_returns_in_memory_store_when_database_url_missing() -> None:
    store = create_store(database_url=None)

    assert isinstance(store, InMemoryStateStore)


def test_in_memory_store_installs_initial_state_on_first_load() -> None:
    store = InMemoryStateStore()

    assert store.load() == build_initial_state()


def test_in_memory_store_hands_out_copies() -> None:
    store = InMemoryStateStore()
    state = store.load()
    state["encounters"]["Swamp"] = []

    assert "Swamp" not in store.load()["encounters"]

    store.save(state)
    state["encounters"]["Desert"] = []

    assert list(store.load()["encounters"]) == ["Default Category", "Swamp"]


class _FakeCursor:
    def __init__(self, rows: list) -> None:
        self.commands: list[tuple[str, tuple]] = []
        self._rows = rows

    def execute(self, sql: str, params: tuple) -> None:
        self.commands.append((sql, params))

    def fetchone(self):
        return self._rows.pop(0) if self._rows else None

    def __enter__(self) -> "_FakeCursor":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        return None


class _FakeConnection:
    def __init__(self, rows: list) -> None:
        self.cursor_instance = _FakeCursor(rows)
        self.committed = False

    def cursor(self) -> _FakeCursor:
        return self.cursor_instance

    def commit(self) -> None:
        self.committed = True

    def __enter__(self) -> "_FakeConnection":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        return None


class _PostgresStoreWithFakeConnection(PostgresStateStore):
    def __init__(self, rows: list | None = None) -> None:
        super().__init__(database_url="postgresql://local", namespace="RandomEncounter")
        self.fake_connection = _FakeConnection(rows or [])

    def _connect(self) -> _FakeConnection:
        return self.fake_connection


def test_postgres_load_returns_existing_document() -> None:
    stored = {"encounters": {"Forest": []}, "version": "1.0"}
    store = _PostgresStoreWithFakeConnection(rows=[(stored,)])

    state = store.load()

    assert state == stored
    commands = store.fake_connection.cursor_instance.commands
    assert len(commands) == 1
    assert "SELECT state_json" in commands[0][0]
    assert commands[0][1] == ("RandomEncounter",)


def test_postgres_load_decodes_text_json() -> None:
    store = _PostgresStoreWithFakeConnection(rows=[(json.dumps({"encounters": {}, "version": "1.0"}),)])

    assert store.load() == {"encounters": {}, "version": "1.0"}


def test_postgres_load_installs_initial_state_when_missing() -> None:
    store = _PostgresStoreWithFakeConnection(rows=[])

    state = store.load()

    assert state == build_initial_state()
    commands = store.fake_connection.cursor_instance.commands
    assert len(commands) == 2
    assert "INSERT INTO script_state" in commands[1][0]
    assert json.loads(commands[1][1][2]) == build_initial_state()
    assert store.fake_connection.committed is True


def test_postgres_save_upserts_document() -> None:
    store = _PostgresStoreWithFakeConnection()
    state = {"encounters": {"Forest": [{"description": "Fog", "uses": 1, "id": "f1"}]}, "version": "1.0"}

    store.save(state)

    commands = store.fake_connection.cursor_instance.commands
    assert len(commands) == 1
    assert "ON CONFLICT (namespace)" in commands[0][0]
    namespace, version, payload, _ = commands[0][1]
    assert (namespace, version) == ("RandomEncounter", "1.0")
    assert json.loads(payload) == state
    assert store.fake_connection.committed is True
