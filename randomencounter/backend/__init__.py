"""Backend package for the RandomEncounter chat command handler."""

from .config import BackendSettings, load_settings, setup_logging
from .engine import apply_command
from .handler import EncounterCommandHandler
from .models import ChatMessage, ChatReply, CommandError, HandleResult, MessageStatus
from .parser import parse_command
from .state import build_initial_state
from .store import InMemoryStateStore, PostgresStateStore, StateStore, create_store
from .validators import validate_command

__all__ = [
    "apply_command",
    "BackendSettings",
    "build_initial_state",
    "ChatMessage",
    "ChatReply",
    "CommandError",
    "create_store",
    "EncounterCommandHandler",
    "HandleResult",
    "InMemoryStateStore",
    "load_settings",
    "MessageStatus",
    "parse_command",
    "PostgresStateStore",
    "setup_logging",
    "StateStore",
    "validate_command",
]
