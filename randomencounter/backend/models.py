"""Domain models for parsed commands, command results and chat replies."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union


class CommandError(Exception):
    """User-facing command failure; ``message`` may contain HTML."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class MessageStatus(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    SUCCESS = "success"
    GENERIC = "generic"


@dataclass(frozen=True)
class ParsedCommand:
    keyword: str
    arguments: tuple[str, ...]
    raw_arguments: str = ""


# Validated commands. Every member of ``Command`` is handled by engine.apply_command.


@dataclass(frozen=True)
class ShowHelp:
    pass


@dataclass(frozen=True)
class AddCategory:
    category: str


@dataclass(frozen=True)
class AddEncounters:
    category: str
    descriptions: tuple[str, ...]
    uses: int | None = None


@dataclass(frozen=True)
class DeleteTargets:
    categories: tuple[str, ...]
    encounter_ids: tuple[str, ...]
    not_found: tuple[str, ...] = ()


@dataclass(frozen=True)
class RenameCategory:
    category: str
    new_name: str


@dataclass(frozen=True)
class SetUses:
    encounter_id: str
    uses: int | None


@dataclass(frozen=True)
class DisplayCategories:
    categories: tuple[str, ...] = ()


@dataclass(frozen=True)
class RollEncounter:
    categories: tuple[str, ...] = ()


@dataclass(frozen=True)
class ImportEncounters:
    encounters: dict[str, list[dict[str, Any]]]


@dataclass(frozen=True)
class ExportEncounters:
    pass


Command = Union[
    ShowHelp,
    AddCategory,
    AddEncounters,
    DeleteTargets,
    RenameCategory,
    SetUses,
    DisplayCategories,
    RollEncounter,
    ImportEncounters,
    ExportEncounters,
]


# Structured results, rendered to chat markup by render.py.


@dataclass(frozen=True)
class HelpRequested:
    pass


@dataclass(frozen=True)
class CategoryAdded:
    category: str


@dataclass(frozen=True)
class EncountersAdded:
    category: str
    encounters: tuple[dict[str, Any], ...]


@dataclass(frozen=True)
class TargetsDeleted:
    categories: tuple[str, ...]
    encounter_ids: tuple[str, ...]
    not_found: tuple[str, ...] = ()


@dataclass(frozen=True)
class CategoryRenamed:
    old_name: str
    new_name: str


@dataclass(frozen=True)
class UsesUpdated:
    encounter_id: str
    uses: int | None


@dataclass(frozen=True)
class EncounterListing:
    categories: dict[str, list[dict[str, Any]]]


@dataclass(frozen=True)
class EncounterRolled:
    category: str
    encounter: dict[str, Any]


@dataclass(frozen=True)
class EncountersImported:
    category_count: int
    encounter_count: int
    generated_ids: int = 0


@dataclass(frozen=True)
class EncountersExported:
    document: str


CommandResult = Union[
    HelpRequested,
    CategoryAdded,
    EncountersAdded,
    TargetsDeleted,
    CategoryRenamed,
    UsesUpdated,
    EncounterListing,
    EncounterRolled,
    EncountersImported,
    EncountersExported,
]


@dataclass(frozen=True)
class CommandOutcome:
    state: dict[str, Any]
    result: CommandResult


@dataclass(frozen=True)
class RenderedMessage:
    status: MessageStatus
    html: str


@dataclass(frozen=True)
class ChatMessage:
    content: str
    who: str = "GM"
    is_gm: bool = True


@dataclass(frozen=True)
class ChatReply:
    speaker: str
    text: str
    status: MessageStatus
    whisper_to: str | None = None

    def as_chat_text(self) -> str:
        if self.whisper_to is None:
            return self.text
        if self.whisper_to == "gm":
            return f"/w gm {self.text}"
        return f'/w "{self.whisper_to}" {self.text}'


@dataclass(frozen=True)
class MacroDefinition:
    name: str
    action: str


@dataclass(frozen=True)
class HandleResult:
    reply: ChatReply
    macros: tuple[MacroDefinition, ...] | None = None
    state_changed: bool = False
