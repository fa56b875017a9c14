"""Argument validation for parsed chat commands.

Each validator checks a parsed command against the current state and returns
a fully normalized command from :mod:`models`, or raises ``CommandError``
before anything is mutated.
"""

from __future__ import annotations

import html
import re
from typing import Annotated, Any, Sequence

from pydantic import BaseModel, Field, StrictInt, StrictStr, TypeAdapter, ValidationError, field_validator

from .models import (
    AddCategory,
    AddEncounters,
    Command,
    CommandError,
    DeleteTargets,
    DisplayCategories,
    ExportEncounters,
    ImportEncounters,
    ParsedCommand,
    RenameCategory,
    RollEncounter,
    SetUses,
    ShowHelp,
)
from .parser import ADD, ARGUMENT_SEPARATOR, DELETE, DISPLAY, EXPORT, IMPORT, PREFIX, ROLL, UPDATE
from .state import all_encounter_ids, is_rollable, select_categories

SIGNED_INTEGER_PATTERN = re.compile(r"^[+-]?\d+$")
UNLIMITED_TOKEN = "undefined"
GM_ONLY_COMMANDS = frozenset({ADD, DELETE, UPDATE, IMPORT, EXPORT})
MAX_REPORTED_IMPORT_ERRORS = 3


class ImportedEncounter(BaseModel):
    description: StrictStr
    uses: Annotated[StrictInt, Field(ge=0)] | None = None
    id: StrictStr | None = None

    @field_validator("description")
    @classmethod
    def _description_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("description must not be blank")
        return value

    @field_validator("id")
    @classmethod
    def _id_addressable(cls, value: str | None) -> str | None:
        if value is None:
            return value
        if not value.strip():
            raise ValueError("id must not be blank")
        if value != value.strip():
            raise ValueError("id must not start or end with whitespace")
        if ARGUMENT_SEPARATOR in value:
            raise ValueError(f"id must not contain {ARGUMENT_SEPARATOR!r}")
        return value


_IMPORT_DOCUMENT = TypeAdapter(dict[str, list[ImportedEncounter]])


def _code(value: str) -> str:
    return f"<code>{html.escape(value)}</code>"


def _code_list(values: Sequence[str]) -> str:
    return ", ".join(_code(value) for value in values)


def _non_blank(arguments: Sequence[str]) -> list[str]:
    return [argument for argument in arguments if argument]


def _unique(values: Sequence[str]) -> list[str]:
    return list(dict.fromkeys(values))


def validate_command(parsed: ParsedCommand, state: dict[str, Any], *, is_gm: bool = True) -> Command:
    keyword = parsed.keyword
    if not keyword:
        return ShowHelp()
    if keyword in GM_ONLY_COMMANDS and not is_gm:
        raise CommandError(f"Only the GM can use {_code(f'{PREFIX} {keyword}')}.")

    encounters = state.get("encounters", {})
    if keyword == ADD:
        return validate_add(parsed.arguments, encounters)
    if keyword == DELETE:
        return validate_delete(parsed.arguments, encounters)
    if keyword == UPDATE:
        return validate_update(parsed.arguments, encounters)
    if keyword == DISPLAY:
        return DisplayCategories(categories=tuple(validate_category_names(parsed.arguments, encounters)))
    if keyword == ROLL:
        return validate_roll(parsed.arguments, encounters)
    if keyword == IMPORT:
        return validate_import(parsed.raw_arguments)
    if keyword == EXPORT:
        return ExportEncounters()
    raise CommandError(f"{_code(keyword)} is not a valid command.")


def validate_add(arguments: Sequence[str], encounters: dict[str, list[dict[str, Any]]]) -> AddCategory | AddEncounters:
    values = _non_blank(arguments)
    if not values:
        raise CommandError(
            f"A category name is required. Use {_code(f'{PREFIX} add|<category>')} to create a category, or "
            f"{_code(f'{PREFIX} add|<category>|<description>|<optional uses>')} to add encounters to one."
        )

    category, descriptions = values[0], values[1:]
    uses: int | None = None
    if descriptions and SIGNED_INTEGER_PATTERN.match(descriptions[-1]):
        uses = int(descriptions[-1])
        if uses < 0:
            raise CommandError(f"Uses cannot be negative, got {_code(descriptions[-1])}.")
        descriptions = descriptions[:-1]

    if not descriptions:
        if len(arguments) > 1:
            raise CommandError("At least one encounter description is required when adding encounters.")
        if category in encounters:
            raise CommandError(f"The encounter category {_code(category)} already exists.")
        if category in all_encounter_ids(encounters):
            raise CommandError(f"{_code(category)} is already used as an encounter ID and cannot name a category.")
        return AddCategory(category=category)

    if category not in encounters:
        raise CommandError(
            f"The encounter category {_code(category)} does not exist. Check that the category is correct "
            "or add a new category before attempting to add encounters to it."
        )
    return AddEncounters(category=category, descriptions=tuple(descriptions), uses=uses)


def validate_delete(arguments: Sequence[str], encounters: dict[str, list[dict[str, Any]]]) -> DeleteTargets:
    tokens = _unique(_non_blank(arguments))
    if not tokens:
        raise CommandError("At least one category name or encounter ID to delete is required.")

    encounter_ids = all_encounter_ids(encounters)
    categories: list[str] = []
    ids: list[str] = []
    not_found: list[str] = []
    for token in tokens:
        if token in encounters:
            categories.append(token)
        elif token in encounter_ids:
            ids.append(token)
        else:
            not_found.append(token)

    if not categories and not ids:
        raise CommandError(f"No category or encounter matched {_code_list(not_found)}. Nothing was deleted.")
    return DeleteTargets(categories=tuple(categories), encounter_ids=tuple(ids), not_found=tuple(not_found))


def validate_update(arguments: Sequence[str], encounters: dict[str, list[dict[str, Any]]]) -> RenameCategory | SetUses:
    tokens = _non_blank(arguments)
    if len(tokens) != 2:
        raise CommandError(
            f"The update command takes exactly two arguments: {_code(f'{PREFIX} update|<category or ID>|<new value>')}."
        )

    target, value = tokens
    encounter_ids = all_encounter_ids(encounters)
    is_category = target in encounters
    is_encounter = target in encounter_ids
    if is_category and is_encounter:
        raise CommandError(f"{_code(target)} matches both a category and an encounter ID.")

    if is_category:
        if value != target and value in encounters:
            raise CommandError(f"The encounter category {_code(value)} already exists.")
        if value in encounter_ids:
            raise CommandError(f"{_code(value)} is already used as an encounter ID and cannot name a category.")
        return RenameCategory(category=target, new_name=value)

    if is_encounter:
        if value.lower() == UNLIMITED_TOKEN:
            return SetUses(encounter_id=target, uses=None)
        if not SIGNED_INTEGER_PATTERN.match(value):
            raise CommandError(
                f"Uses must be a whole number or {_code(UNLIMITED_TOKEN)} for unlimited uses, got {_code(value)}."
            )
        uses = int(value)
        if uses < 0:
            raise CommandError(f"Uses cannot be negative, got {_code(value)}.")
        return SetUses(encounter_id=target, uses=uses)

    raise CommandError(f"No category or encounter ID matched {_code(target)}.")


def validate_category_names(arguments: Sequence[str], encounters: dict[str, list[dict[str, Any]]]) -> list[str]:
    names = _unique(_non_blank(arguments))
    missing = [name for name in names if name not in encounters]
    if missing:
        noun = "category does" if len(missing) == 1 else "categories do"
        raise CommandError(f"The following {noun} not exist: {_code_list(missing)}.")
    return names


def validate_roll(arguments: Sequence[str], encounters: dict[str, list[dict[str, Any]]]) -> RollEncounter:
    names = validate_category_names(arguments, encounters)
    selected = select_categories(encounters, names)
    if not any(is_rollable(encounter) for name in selected for encounter in encounters[name]):
        scope = _code_list(selected) if names else "any category"
        raise CommandError(f"There are no encounters with uses remaining in {scope}.")
    return RollEncounter(categories=tuple(names))


def _describe_import_error(error: dict[str, Any]) -> str:
    location = ".".join(str(part) for part in error.get("loc", ()))
    message = html.escape(str(error.get("msg", "invalid value")))
    if location:
        return f"{_code(location)}: {message}"
    return message


def validate_import(raw_document: str) -> ImportEncounters:
    if not raw_document.strip():
        raise CommandError(f"A JSON document is required: {_code(f'{PREFIX} import|<json>')}.")

    try:
        document = _IMPORT_DOCUMENT.validate_json(raw_document.strip())
    except ValidationError as exc:
        details = "<br/>".join(_describe_import_error(error) for error in exc.errors()[:MAX_REPORTED_IMPORT_ERRORS])
        raise CommandError(f"The imported encounters are not valid:<br/>{details}") from exc

    imported: dict[str, list[dict[str, Any]]] = {}
    seen_ids: set[str] = set()
    for raw_name, entries in document.items():
        name = raw_name.strip()
        if not name:
            raise CommandError("Imported category names must not be blank.")
        if ARGUMENT_SEPARATOR in name:
            raise CommandError(f"Imported category names must not contain {_code(ARGUMENT_SEPARATOR)}: {_code(name)}.")
        if name in imported:
            raise CommandError(f"The category {_code(name)} appears more than once in the import.")
        records: list[dict[str, Any]] = []
        for entry in entries:
            if entry.id is not None:
                if entry.id in seen_ids:
                    raise CommandError(f"The encounter ID {_code(entry.id)} appears more than once in the import.")
                seen_ids.add(entry.id)
            records.append({"description": entry.description, "uses": entry.uses, "id": entry.id})
        imported[name] = records

    clashes = sorted(seen_ids & set(imported))
    if clashes:
        raise CommandError(f"Encounter IDs cannot match category names: {_code_list(clashes)}.")
    return ImportEncounters(encounters=imported)
