"""Reducer for validated encounter commands."""

from __future__ import annotations

import copy
import html
import json
import random
from typing import Any, Protocol, Sequence

from .ids import IdGenerator, default_id_generator
from .models import (
    AddCategory,
    AddEncounters,
    CategoryAdded,
    CategoryRenamed,
    Command,
    CommandError,
    CommandOutcome,
    DeleteTargets,
    DisplayCategories,
    EncounterListing,
    EncounterRolled,
    EncountersAdded,
    EncountersExported,
    EncountersImported,
    ExportEncounters,
    HelpRequested,
    ImportEncounters,
    RenameCategory,
    RollEncounter,
    SetUses,
    ShowHelp,
    TargetsDeleted,
    UsesUpdated,
)
from .state import all_encounter_ids, build_encounter, find_encounter, is_rollable, select_categories


class RandomSource(Protocol):
    def choice(self, seq: Sequence[Any]) -> Any:
        ...


def apply_command(
    state: dict[str, Any],
    command: Command,
    *,
    rng: RandomSource | None = None,
    id_generator: IdGenerator | None = None,
) -> CommandOutcome:
    """Apply a validated command to a copy of ``state``; the input is left untouched."""
    next_state = copy.deepcopy(state)
    next_state.setdefault("encounters", {})
    ids = id_generator if id_generator is not None else default_id_generator

    if isinstance(command, ShowHelp):
        return CommandOutcome(state=next_state, result=HelpRequested())
    if isinstance(command, AddCategory):
        return _apply_add_category(next_state, command)
    if isinstance(command, AddEncounters):
        return _apply_add_encounters(next_state, command, ids)
    if isinstance(command, DeleteTargets):
        return _apply_delete(next_state, command)
    if isinstance(command, RenameCategory):
        return _apply_rename(next_state, command)
    if isinstance(command, SetUses):
        return _apply_set_uses(next_state, command)
    if isinstance(command, DisplayCategories):
        return _apply_display(next_state, command)
    if isinstance(command, RollEncounter):
        return _apply_roll(next_state, command, rng if rng is not None else random)
    if isinstance(command, ImportEncounters):
        return _apply_import(next_state, command, ids)
    if isinstance(command, ExportEncounters):
        return _apply_export(next_state)
    raise TypeError(f"Unsupported command type: {type(command).__name__}")


def _taken_names(encounters: dict[str, list[dict[str, Any]]]) -> set[str]:
    return all_encounter_ids(encounters) | set(encounters)


def _apply_add_category(state: dict[str, Any], command: AddCategory) -> CommandOutcome:
    state["encounters"][command.category] = []
    return CommandOutcome(state=state, result=CategoryAdded(category=command.category))


def _apply_add_encounters(state: dict[str, Any], command: AddEncounters, ids: IdGenerator) -> CommandOutcome:
    encounters = state["encounters"]
    taken = _taken_names(encounters)
    added = [build_encounter(description, command.uses, ids.next_id(taken)) for description in command.descriptions]
    encounters[command.category].extend(added)
    return CommandOutcome(
        state=state,
        result=EncountersAdded(category=command.category, encounters=tuple(copy.deepcopy(added))),
    )


def _apply_delete(state: dict[str, Any], command: DeleteTargets) -> CommandOutcome:
    removed_categories = set(command.categories)
    removed_ids = set(command.encounter_ids)
    state["encounters"] = {
        name: [encounter for encounter in records if str(encounter["id"]) not in removed_ids]
        for name, records in state["encounters"].items()
        if name not in removed_categories
    }
    return CommandOutcome(
        state=state,
        result=TargetsDeleted(
            categories=command.categories,
            encounter_ids=command.encounter_ids,
            not_found=command.not_found,
        ),
    )


def _apply_rename(state: dict[str, Any], command: RenameCategory) -> CommandOutcome:
    state["encounters"] = {
        (command.new_name if name == command.category else name): records
        for name, records in state["encounters"].items()
    }
    return CommandOutcome(state=state, result=CategoryRenamed(old_name=command.category, new_name=command.new_name))


def _apply_set_uses(state: dict[str, Any], command: SetUses) -> CommandOutcome:
    found = find_encounter(state["encounters"], command.encounter_id)
    if found is None:
        raise CommandError(f"No encounter has the ID <code>{html.escape(command.encounter_id)}</code>.")
    _, encounter = found
    encounter["uses"] = command.uses
    return CommandOutcome(state=state, result=UsesUpdated(encounter_id=command.encounter_id, uses=command.uses))


def _apply_display(state: dict[str, Any], command: DisplayCategories) -> CommandOutcome:
    encounters = state["encounters"]
    listing = {name: copy.deepcopy(encounters[name]) for name in select_categories(encounters, command.categories)}
    return CommandOutcome(state=state, result=EncounterListing(categories=listing))


def _apply_roll(state: dict[str, Any], command: RollEncounter, rng: RandomSource) -> CommandOutcome:
    encounters = state["encounters"]
    pool = [
        (name, encounter)
        for name in select_categories(encounters, command.categories)
        for encounter in encounters[name]
        if is_rollable(encounter)
    ]
    if not pool:
        raise CommandError("There are no encounters with uses remaining to roll.")

    category, encounter = rng.choice(pool)
    if encounter.get("uses") is not None:
        encounter["uses"] -= 1
    return CommandOutcome(state=state, result=EncounterRolled(category=category, encounter=copy.deepcopy(encounter)))


def _apply_import(state: dict[str, Any], command: ImportEncounters, ids: IdGenerator) -> CommandOutcome:
    taken = _taken_names(state["encounters"]) | set(command.encounters)
    taken |= {str(entry["id"]) for entries in command.encounters.values() for entry in entries if entry.get("id")}

    imported: dict[str, list[dict[str, Any]]] = {}
    generated = 0
    for name, entries in command.encounters.items():
        records: list[dict[str, Any]] = []
        for entry in entries:
            encounter_id = entry.get("id")
            if not encounter_id:
                encounter_id = ids.next_id(taken)
                generated += 1
            records.append(build_encounter(entry["description"], entry.get("uses"), str(encounter_id)))
        imported[name] = records

    state["encounters"] = imported
    return CommandOutcome(
        state=state,
        result=EncountersImported(
            category_count=len(imported),
            encounter_count=sum(len(records) for records in imported.values()),
            generated_ids=generated,
        ),
    )


def export_document(encounters: dict[str, list[dict[str, Any]]]) -> str:
    """Serialize the store as JSON; unlimited uses are omitted rather than written as null."""
    exported = {
        name: [
            {key: value for key, value in encounter.items() if not (key == "uses" and value is None)}
            for encounter in records
        ]
        for name, records in encounters.items()
    }
    return json.dumps(exported, indent=2, ensure_ascii=False)


def _apply_export(state: dict[str, Any]) -> CommandOutcome:
    return CommandOutcome(state=state, result=EncountersExported(document=export_document(state["encounters"])))
