import pytest

fastapi = pytest.importorskip("fastapi")
pytest.importorskip("httpx")
from fastapi.testclient import TestClient

from randomencounter.backend.api import create_app
from randomencounter.backend.config import BackendSettings
from randomencounter.backend.store import InMemoryStateStore

GM_TOKEN = "gm-secret"


def _settings(public_rolls: bool = False) -> BackendSettings:
    return BackendSettings(
        server_salt="test-salt",
        database_url=None,
        host="127.0.0.1",
        port=8000,
        gm_token=GM_TOKEN,
        public_rolls=public_rolls,
    )


def _client(public_rolls: bool = False) -> TestClient:
    return TestClient(create_app(store=InMemoryStateStore(), settings=_settings(public_rolls)))


def test_non_command_chat_is_not_handled() -> None:
    client = _client()

    response = client.post("/api/chat", json={"token": GM_TOKEN, "who": "GM", "content": "hello"})

    assert response.status_code == 200
    assert response.json() == {"handled": False, "reply": None, "macros": None}


def test_gm_can_add_category_and_receives_macros() -> None:
    client = _client()

    response = client.post("/api/chat", json={"token": GM_TOKEN, "who": "GM", "content": "!encounter add|Forest"})

    assert response.status_code == 200
    data = response.json()
    assert data["handled"] is True
    assert data["reply"]["status"] == "success"
    assert data["reply"]["whisper_to"] == "gm"
    assert data["reply"]["chat_text"].startswith("/w gm ")
    assert any("Forest" in macro["action"] for macro in data["macros"])


def test_player_without_gm_token_cannot_mutate() -> None:
    client = _client()

    response = client.post("/api/chat", json={"who": "Alice", "content": "!encounter add|Forest"})

    data = response.json()
    assert data["reply"]["status"] == "error"
    assert data["reply"]["whisper_to"] == "Alice"
    state = client.get("/api/state", params={"token": GM_TOKEN}).json()["state"]
    assert "Forest" not in state["encounters"]


def test_state_requires_gm_token() -> None:
    client = _client()

    forbidden = client.get("/api/state", params={"token": "wrong"})
    allowed = client.get("/api/state", params={"token": GM_TOKEN})

    assert forbidden.status_code == 403
    assert allowed.status_code == 200
    assert "Default Category" in allowed.json()["state"]["encounters"]


def test_macros_endpoint_lists_current_categories() -> None:
    client = _client()

    response = client.get("/api/macros")

    assert response.status_code == 200
    roll = next(macro for macro in response.json()["macros"] if macro["name"] == "RandomEncounter-roll")
    assert roll["action"] == "!encounter roll|?{Category|All,|Default Category}"


def test_public_rolls_are_broadcast_to_websocket_listeners() -> None:
    app = create_app(store=InMemoryStateStore(), settings=_settings(public_rolls=True))

    with TestClient(app) as client:
        with client.websocket_connect("/ws/chat") as websocket:
            response = client.post(
                "/api/chat",
                json={"token": GM_TOKEN, "who": "GM", "content": "!encounter roll"},
            )
            message = websocket.receive_json()

    assert response.json()["reply"]["whisper_to"] is None
    assert message["type"] == "chat.reply"
    assert "[[2d4 + 4]]" in message["reply"]["text"]
