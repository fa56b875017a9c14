"""Quick-invoke macro definitions mirroring the chat commands."""

from __future__ import annotations

from typing import Iterable

from .models import MacroDefinition
from .parser import ADD, DELETE, DISPLAY, EXPORT, PREFIX, ROLL, UPDATE

MACRO_PREFIX = "RandomEncounter"

# Characters with meaning inside a ?{...} roll query.
_QUERY_ESCAPES = {"|": "&#124;", ",": "&#44;", "}": "&#125;"}


def escape_query_option(value: str) -> str:
    return "".join(_QUERY_ESCAPES.get(char, char) for char in value)


def category_query(category_names: Iterable[str], *, include_all: bool = False) -> str:
    options = [escape_query_option(name) for name in category_names]
    if include_all:
        options.insert(0, "All,")
    if not options:
        return "?{Category name}"
    return "?{Category|" + "|".join(options) + "}"


def build_macros(category_names: Iterable[str]) -> tuple[MacroDefinition, ...]:
    names = list(category_names)
    return (
        MacroDefinition(name=f"{MACRO_PREFIX}-add-category", action=f"{PREFIX} {ADD}|?{{New category name}}"),
        MacroDefinition(
            name=f"{MACRO_PREFIX}-add",
            action=(
                f"{PREFIX} {ADD}|{category_query(names)}|?{{Encounter description}}"
                "|?{Uses (leave blank for unlimited)}"
            ),
        ),
        MacroDefinition(name=f"{MACRO_PREFIX}-delete", action=f"{PREFIX} {DELETE}|?{{Category name or encounter ID}}"),
        MacroDefinition(
            name=f"{MACRO_PREFIX}-update",
            action=f"{PREFIX} {UPDATE}|?{{Category name or encounter ID}}|?{{New category name or uses}}",
        ),
        MacroDefinition(
            name=f"{MACRO_PREFIX}-display",
            action=f"{PREFIX} {DISPLAY}|{category_query(names, include_all=True)}",
        ),
        MacroDefinition(
            name=f"{MACRO_PREFIX}-roll",
            action=f"{PREFIX} {ROLL}|{category_query(names, include_all=True)}",
        ),
        MacroDefinition(name=f"{MACRO_PREFIX}-export", action=f"{PREFIX} {EXPORT}"),
    )
