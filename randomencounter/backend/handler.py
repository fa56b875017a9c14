"""Chat dispatcher: parse, validate, apply, persist and render one command."""

from __future__ import annotations

import logging
from typing import Any

from .config import BackendSettings, load_settings
from .engine import RandomSource, apply_command
from .ids import IdGenerator
from .macros import build_macros
from .models import (
    ChatMessage,
    ChatReply,
    Command,
    CommandError,
    HandleResult,
    MacroDefinition,
    RenderedMessage,
    RollEncounter,
)
from .parser import is_command, parse_command
from .render import render_error, render_result
from .state import STATE_VERSION
from .store import StateStore
from .validators import validate_command

DISPLAY_NAME = f"RandomEncounter v{STATE_VERSION}"
GM_WHISPER_TARGET = "gm"

logger = logging.getLogger(__name__)


class EncounterCommandHandler:
    def __init__(
        self,
        store: StateStore,
        settings: BackendSettings | None = None,
        rng: RandomSource | None = None,
        id_generator: IdGenerator | None = None,
    ) -> None:
        self._store = store
        self._settings = settings if settings is not None else load_settings()
        self._rng = rng
        self._id_generator = id_generator

    def handle(self, message: ChatMessage) -> HandleResult | None:
        """Handle one chat message; returns ``None`` when it is not an ``!encounter`` command."""
        if not is_command(message.content):
            return None

        sender = GM_WHISPER_TARGET if message.is_gm else message.who
        try:
            parsed = parse_command(message.content)
            state = self._store.load()
            command = validate_command(parsed, state, is_gm=message.is_gm)
            outcome = apply_command(state, command, rng=self._rng, id_generator=self._id_generator)
        except CommandError as exc:
            logger.info("Rejected command from %s: %s", message.who, message.content)
            return HandleResult(reply=self._reply(render_error(exc.message), whisper_to=sender))

        state_changed = outcome.state != state
        if state_changed:
            self._store.save(outcome.state)
            logger.debug("Saved state after %s", type(command).__name__)

        macros: tuple[MacroDefinition, ...] | None = None
        if list(outcome.state["encounters"]) != list(state.get("encounters", {})):
            macros = build_macros(outcome.state["encounters"])
            logger.info("Category names changed; regenerated %d macros", len(macros))

        reply = self._reply(render_result(outcome.result), whisper_to=self._route(command, sender))
        return HandleResult(reply=reply, macros=macros, state_changed=state_changed)

    def current_macros(self) -> tuple[MacroDefinition, ...]:
        return build_macros(self._store.load().get("encounters", {}))

    def current_state(self) -> dict[str, Any]:
        return self._store.load()

    def _route(self, command: Command, sender: str) -> str | None:
        if isinstance(command, RollEncounter):
            return None if self._settings.public_rolls else GM_WHISPER_TARGET
        return sender

    def _reply(self, rendered: RenderedMessage, whisper_to: str | None) -> ChatReply:
        return ChatReply(speaker=DISPLAY_NAME, text=rendered.html, status=rendered.status, whisper_to=whisper_to)

