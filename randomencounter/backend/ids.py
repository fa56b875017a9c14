"""Encounter id generation."""

from __future__ import annotations

import time

BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def to_base36(value: int) -> str:
    if value < 0:
        raise ValueError("base36 encoding requires a non-negative integer")
    if value == 0:
        return "0"
    digits: list[str] = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(BASE36_DIGITS[remainder])
    return "".join(reversed(digits))


class IdGenerator:
    """Monotonic counter seeded from wall-clock milliseconds, base36 encoded.

    Ids are unique against the ``taken`` set passed to :meth:`next_id`, which
    should hold every id and category name currently in the store. Two
    processes started in the same millisecond can still hand out equal ids.
    """

    def __init__(self, seed: int | None = None) -> None:
        self._counter = seed if seed is not None else int(time.time() * 1000)

    def next_id(self, taken: set[str]) -> str:
        candidate = to_base36(self._counter)
        self._counter += 1
        while candidate in taken:
            candidate = to_base36(self._counter)
            self._counter += 1
        taken.add(candidate)
        return candidate


default_id_generator = IdGenerator()
