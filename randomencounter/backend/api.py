"""FastAPI endpoints standing in for the virtual tabletop chat host."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Query, WebSocket, WebSocketDisconnect
from pydantic import BaseModel, Field

from .config import DEV_GM_TOKEN, BackendSettings, load_settings, setup_logging
from .handler import EncounterCommandHandler
from .models import ChatMessage, ChatReply, MacroDefinition
from .security import GmIdentity, generate_gm_token
from .store import StateStore, create_store

logger = logging.getLogger(__name__)


class ChatRequest(BaseModel):
    token: str = ""
    who: str = Field(default="GM", min_length=1, max_length=200)
    content: str = Field(min_length=1, max_length=20000)


class ReplyPayload(BaseModel):
    speaker: str
    text: str
    status: str
    whisper_to: str | None
    chat_text: str


class MacroPayload(BaseModel):
    name: str
    action: str


class ChatResponse(BaseModel):
    handled: bool
    reply: ReplyPayload | None = None
    macros: list[MacroPayload] | None = None


class StateResponse(BaseModel):
    state: dict[str, Any]


class MacrosResponse(BaseModel):
    macros: list[MacroPayload]


def _reply_payload(reply: ChatReply) -> ReplyPayload:
    return ReplyPayload(
        speaker=reply.speaker,
        text=reply.text,
        status=reply.status.value,
        whisper_to=reply.whisper_to,
        chat_text=reply.as_chat_text(),
    )


def _macro_payloads(macros: tuple[MacroDefinition, ...]) -> list[MacroPayload]:
    return [MacroPayload(name=macro.name, action=macro.action) for macro in macros]


class ChatWebSocketHub:
    def __init__(self) -> None:
        self._connections: set[WebSocket] = set()

    async def connect(self, websocket: WebSocket) -> None:
        self._connections.add(websocket)
        await websocket.accept()

    def disconnect(self, websocket: WebSocket) -> None:
        self._connections.discard(websocket)

    async def broadcast_reply(self, reply: ReplyPayload) -> None:
        stale_connections: list[WebSocket] = []
        for websocket in list(self._connections):
            try:
                await websocket.send_json({"type": "chat.reply", "reply": reply.model_dump()})
            except RuntimeError:
                stale_connections.append(websocket)
        for websocket in stale_connections:
            self.disconnect(websocket)


def create_app(store: StateStore | None = None, settings: BackendSettings | None = None) -> FastAPI:
    app = FastAPI(title="RandomEncounter API", version="1.0.0")
    app_settings = settings if settings is not None else load_settings()
    state_store = store if store is not None else create_store(app_settings.database_url, app_settings.namespace)
    handler = EncounterCommandHandler(store=state_store, settings=app_settings)
    gm_identity = GmIdentity.from_token(app_settings.gm_token, app_settings.server_salt)
    websocket_hub = ChatWebSocketHub()
    app.state.websocket_hub = websocket_hub
    app.state.handler = handler

    def get_handler() -> EncounterCommandHandler:
        return handler

    @app.post("/api/chat", response_model=ChatResponse)
    async def post_chat(
        payload: ChatRequest,
        local_handler: EncounterCommandHandler = Depends(get_handler),
    ) -> ChatResponse:
        message = ChatMessage(content=payload.content, who=payload.who, is_gm=gm_identity.is_gm(payload.token))
        result = local_handler.handle(message)
        if result is None:
            return ChatResponse(handled=False)

        reply = _reply_payload(result.reply)
        if result.reply.whisper_to is None:
            await websocket_hub.broadcast_reply(reply)
        macros = _macro_payloads(result.macros) if result.macros is not None else None
        return ChatResponse(handled=True, reply=reply, macros=macros)

    @app.get("/api/state", response_model=StateResponse)
    def get_state(
        token: str = Query(min_length=1),
        local_handler: EncounterCommandHandler = Depends(get_handler),
    ) -> StateResponse:
        if not gm_identity.is_gm(token):
            raise HTTPException(status_code=403, detail="Only the GM can read the encounter state")
        return StateResponse(state=local_handler.current_state())

    @app.get("/api/macros", response_model=MacrosResponse)
    def get_macros(local_handler: EncounterCommandHandler = Depends(get_handler)) -> MacrosResponse:
        return MacrosResponse(macros=_macro_payloads(local_handler.current_macros()))

    @app.websocket("/ws/chat")
    async def chat_ws(websocket: WebSocket) -> None:
        await websocket_hub.connect(websocket)
        try:
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            websocket_hub.disconnect(websocket)

    return app


def main() -> None:
    import uvicorn

    settings = load_settings()
    setup_logging(settings.log_level)
    if settings.gm_token == DEV_GM_TOKEN:
        logger.warning(
            "RANDOMENCOUNTER_GM_TOKEN is not set; anyone presenting %r is the GM. Try for example: %s",
            DEV_GM_TOKEN,
            generate_gm_token(),
        )
    logger.info("Starting RandomEncounter API on %s:%s", settings.host, settings.port)
    uvicorn.run(create_app(settings=settings), host=settings.host, port=settings.port)


app = create_app()


if __name__ == "__main__":
    main()
