"""HTML rendering of command results for chat output."""

from __future__ import annotations

import html
from typing import Any

from .models import (
    CategoryAdded,
    CategoryRenamed,
    CommandResult,
    EncounterListing,
    EncounterRolled,
    EncountersAdded,
    EncountersExported,
    EncountersImported,
    HelpRequested,
    MessageStatus,
    RenderedMessage,
    TargetsDeleted,
    UsesUpdated,
)
from .parser import ADD, DELETE, DISPLAY, EXPORT, IMPORT, PREFIX, ROLL, UPDATE

STATUS_COLORS = {
    MessageStatus.ERROR: "#c0392b",
    MessageStatus.WARNING: "#e67e22",
    MessageStatus.SUCCESS: "#27ae60",
    MessageStatus.GENERIC: "#7f8c8d",
}

HELP_ROWS = (
    (
        "Add Category",
        f"{PREFIX} {ADD}|?{{Category name}}",
        f"{PREFIX} {ADD}|&lt;category&gt;",
        "Creates a new, empty encounter category. The name must not already be in use.",
    ),
    (
        "Add Encounters",
        f"{PREFIX} {ADD}|?{{Category name}}|?{{Encounter description}}|?{{Uses (blank for unlimited)}}",
        f"{PREFIX} {ADD}|&lt;category&gt;|&lt;description&gt;[|&lt;description&gt;...][|&lt;uses&gt;]",
        "Adds one encounter per description to an existing category. A trailing whole number sets how many "
        "times each new encounter can be rolled; without it the encounters have unlimited uses.",
    ),
    (
        "Delete",
        f"{PREFIX} {DELETE}|?{{Category name or encounter ID}}",
        f"{PREFIX} {DELETE}|&lt;category or ID&gt;[|&lt;category or ID&gt;...]",
        "Deletes whole categories or single encounters. Unknown names are reported without stopping the rest.",
    ),
    (
        "Update",
        f"{PREFIX} {UPDATE}|?{{Category name or encounter ID}}|?{{New name or uses}}",
        f"{PREFIX} {UPDATE}|&lt;category or ID&gt;|&lt;new value&gt;",
        "Renames a category, or sets the remaining uses of an encounter. "
        "Use <code>undefined</code> for unlimited uses.",
    ),
    (
        "Display",
        f"{PREFIX} {DISPLAY}",
        f"{PREFIX} {DISPLAY}[|&lt;category&gt;...]",
        "Lists the encounters of the given categories, or of every category when none are given.",
    ),
    (
        "Roll",
        f"{PREFIX} {ROLL}",
        f"{PREFIX} {ROLL}[|&lt;category&gt;...]",
        "Rolls a random encounter with uses remaining from the given categories, or from all of them. "
        "Encounters with limited uses lose one use when rolled.",
    ),
    (
        "Import",
        f"{PREFIX} {IMPORT}|?{{Encounters JSON}}",
        f"{PREFIX} {IMPORT}|&lt;json&gt;",
        "Replaces every category and encounter with the given JSON document.",
    ),
    (
        "Export",
        f"{PREFIX} {EXPORT}",
        f"{PREFIX} {EXPORT}",
        "Shows every category and encounter as a JSON document that can be imported later.",
    ),
)


def _escape(value: Any) -> str:
    return html.escape(str(value))


def _code(value: Any) -> str:
    return f"<code>{_escape(value)}</code>"


def format_uses(uses: int | None) -> str:
    return "unlimited" if uses is None else str(uses)


def wrap_message(status: MessageStatus, body: str) -> str:
    color = STATUS_COLORS[status]
    return (
        f"<div style='border: 1px solid {color}; border-left: 6px solid {color}; padding: 5px 8px;'>"
        f"{body}</div>"
    )


def render_help() -> str:
    header = (
        "<thead><tr><th style='padding: 2px;'>Command</th>"
        "<th style='padding: 2px 2px 2px 10px;'>Description</th></tr></thead>"
    )
    rows = "".join(
        "<tr style='border-bottom: 1px solid gray;'>"
        f"<td style='vertical-align: top; padding: 5px;'><a href=\"{action}\">{label}</a></td>"
        f"<td style='padding: 5px 5px 5px 10px;'><div><code>{usage}</code></div><br/><div>{description}</div></td>"
        "</tr>"
        for label, action, usage, description in HELP_ROWS
    )
    return f"<table style='border: 2px solid gray;'>{header}<tbody>{rows}</tbody></table>"


def render_encounter(encounter: dict[str, Any]) -> str:
    encounter_id = str(encounter["id"])
    return (
        "<li style='margin-bottom: 5px;'>"
        f"<div>{encounter['description']}</div>"
        f"<div>Uses: {format_uses(encounter.get('uses'))} | ID: {_code(encounter_id)} "
        f"<a href=\"{PREFIX} {DELETE}|{_escape(encounter_id)}\">Delete</a></div>"
        "</li>"
    )


def render_listing(categories: dict[str, list[dict[str, Any]]]) -> str:
    if not categories:
        return "<div><i>There are no encounter categories.</i></div>"
    sections = []
    for name, encounters in categories.items():
        if encounters:
            body = "<ul>" + "".join(render_encounter(encounter) for encounter in encounters) + "</ul>"
        else:
            body = "<div><i>No encounters in this category.</i></div>"
        sections.append(f"<div><h4>{_escape(name)}</h4>{body}</div>")
    return "".join(sections)


def _render_deleted(result: TargetsDeleted) -> RenderedMessage:
    lines = []
    if result.categories:
        lines.append(f"<div>Deleted categories: {', '.join(_code(name) for name in result.categories)}</div>")
    if result.encounter_ids:
        lines.append(f"<div>Deleted encounters: {', '.join(_code(eid) for eid in result.encounter_ids)}</div>")
    if result.not_found:
        lines.append(f"<div>Not found: {', '.join(_code(token) for token in result.not_found)}</div>")
    status = MessageStatus.WARNING if result.not_found else MessageStatus.SUCCESS
    return RenderedMessage(status=status, html="".join(lines))


def _render_body(result: CommandResult) -> RenderedMessage:
    if isinstance(result, HelpRequested):
        return RenderedMessage(status=MessageStatus.GENERIC, html=render_help())
    if isinstance(result, CategoryAdded):
        return RenderedMessage(
            status=MessageStatus.SUCCESS,
            html=f"The encounter category {_code(result.category)} was created.",
        )
    if isinstance(result, EncountersAdded):
        count = len(result.encounters)
        noun = "encounter was" if count == 1 else "encounters were"
        return RenderedMessage(
            status=MessageStatus.SUCCESS,
            html=f"{count} {noun} added to {_code(result.category)}.<ul>"
            + "".join(render_encounter(encounter) for encounter in result.encounters)
            + "</ul>",
        )
    if isinstance(result, TargetsDeleted):
        return _render_deleted(result)
    if isinstance(result, CategoryRenamed):
        return RenderedMessage(
            status=MessageStatus.SUCCESS,
            html=f"The category {_code(result.old_name)} was renamed to {_code(result.new_name)}.",
        )
    if isinstance(result, UsesUpdated):
        return RenderedMessage(
            status=MessageStatus.SUCCESS,
            html=f"The encounter {_code(result.encounter_id)} now has {format_uses(result.uses)} uses.",
        )
    if isinstance(result, EncounterListing):
        return RenderedMessage(status=MessageStatus.GENERIC, html=render_listing(result.categories))
    if isinstance(result, EncounterRolled):
        encounter = result.encounter
        return RenderedMessage(
            status=MessageStatus.GENERIC,
            html=(
                f"<div><b>Random encounter</b> from {_escape(result.category)}</div>"
                f"<div style='margin: 5px 0;'>{encounter['description']}</div>"
                f"<div><small>Uses remaining: {format_uses(encounter.get('uses'))}</small></div>"
            ),
        )
    if isinstance(result, EncountersImported):
        return RenderedMessage(
            status=MessageStatus.SUCCESS,
            html=(
                f"Imported {result.encounter_count} encounters in {result.category_count} categories"
                f" ({result.generated_ids} new IDs generated)."
            ),
        )
    if isinstance(result, EncountersExported):
        return RenderedMessage(status=MessageStatus.GENERIC, html=f"<pre>{_escape(result.document)}</pre>")
    raise TypeError(f"Unsupported result type: {type(result).__name__}")


def render_result(result: CommandResult) -> RenderedMessage:
    body = _render_body(result)
    return RenderedMessage(status=body.status, html=wrap_message(body.status, body.html))


def render_error(message: str) -> RenderedMessage:
    return RenderedMessage(status=MessageStatus.ERROR, html=wrap_message(MessageStatus.ERROR, message))
