"""State builders and lookups for the encounter store document."""

from __future__ import annotations

import copy
from typing import Any, Iterable

STATE_VERSION = "1.0"
DEFAULT_CATEGORY = "Default Category"
SEED_ENCOUNTER = {
    "description": "A random encounter was rolled with [[2d4 + 4]] creatures!",
    "uses": None,
    "id": "0",
}


def build_initial_state() -> dict[str, Any]:
    """Return the install-time state: one category holding the seed encounter."""
    return {
        "encounters": {DEFAULT_CATEGORY: [copy.deepcopy(SEED_ENCOUNTER)]},
        "version": STATE_VERSION,
    }


def build_encounter(description: str, uses: int | None, encounter_id: str) -> dict[str, Any]:
    return {"description": description, "uses": uses, "id": encounter_id}


def all_encounter_ids(encounters: dict[str, list[dict[str, Any]]]) -> set[str]:
    return {str(encounter["id"]) for records in encounters.values() for encounter in records}


def find_encounter(encounters: dict[str, list[dict[str, Any]]], encounter_id: str) -> tuple[str, dict[str, Any]] | None:
    """Return the category and record holding the id, if any."""
    for category, records in encounters.items():
        for encounter in records:
            if str(encounter["id"]) == encounter_id:
                return category, encounter
    return None


def is_rollable(encounter: dict[str, Any]) -> bool:
    uses = encounter.get("uses")
    return uses is None or uses > 0


def select_categories(encounters: dict[str, list[dict[str, Any]]], names: Iterable[str]) -> list[str]:
    """Resolve a category selection; an empty selection means every category in store order."""
    selected = list(names)
    if not selected:
        return list(encounters)
    return selected
