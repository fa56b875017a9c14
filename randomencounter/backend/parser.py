"""Split raw chat text into a command keyword and pipe-delimited arguments."""

from __future__ import annotations

import html
import re

from .models import CommandError, ParsedCommand

PREFIX = "!encounter"
ARGUMENT_SEPARATOR = "|"

ADD = "add"
DELETE = "delete"
UPDATE = "update"
DISPLAY = "display"
ROLL = "roll"
IMPORT = "import"
EXPORT = "export"

COMMAND_KEYWORDS = (ADD, DELETE, UPDATE, DISPLAY, ROLL, IMPORT, EXPORT)

_PREFIX_PATTERN = re.compile(rf"^{re.escape(PREFIX)}(?=$|\s|\|)", re.IGNORECASE)


def is_command(text: str) -> bool:
    return bool(_PREFIX_PATTERN.match(text or ""))


def parse_command(text: str) -> ParsedCommand | None:
    """Return the parsed command, or ``None`` when the text is not addressed to us.

    ``!encounter`` alone yields an empty keyword, which the validators treat
    as a help request.
    """
    match = _PREFIX_PATTERN.match(text or "")
    if match is None:
        return None

    remainder = text[match.end():]
    keyword_raw, separator, raw_arguments = remainder.partition(ARGUMENT_SEPARATOR)
    keyword = keyword_raw.strip().lower()
    if keyword and keyword not in COMMAND_KEYWORDS:
        raise CommandError(
            f"<code>{html.escape(keyword)}</code> is not a valid command. "
            f"Send <code>{PREFIX}</code> in chat for a list of valid commands."
        )

    arguments = tuple(part.strip() for part in raw_arguments.split(ARGUMENT_SEPARATOR)) if separator else ()
    return ParsedCommand(keyword=keyword, arguments=arguments, raw_arguments=raw_arguments)
