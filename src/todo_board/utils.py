"""Provide identifier, date, and text-collation helpers."""

from __future__ import annotations

import time
import unicodedata
from datetime import date, datetime
from typing import Any, Iterable, Optional


class IdSource:
    """Clock-derived, strictly increasing integer ids.

    Returns the current time in milliseconds unless that would not exceed the
    last issued id, in which case it returns ``last + 1``.  Tasks and subtasks
    draw from one source so ids are unique across the whole collection.
    """

    def __init__(self, clock: Any = None, start: int = 0) -> None:
        self._clock = clock or time.time
        self._last = int(start)

    def next_id(self) -> int:
        candidate = int(self._clock() * 1000)
        if candidate <= self._last:
            candidate = self._last + 1
        self._last = candidate
        return candidate

    def advance_past(self, ids: Iterable[int]) -> None:
        """Make sure every future id is greater than all of *ids*."""
        for value in ids:
            if value > self._last:
                self._last = int(value)


def _parse_date(value: Any) -> Optional[date]:
    """Coerce *value* into a calendar date, or ``None``.

    Accepts ``date``/``datetime`` objects and ISO strings, including the
    ``2023-06-30T00:00:00.000Z`` form produced by JavaScript ``Date`` JSON.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        pass
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        return None


def _format_date(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def collation_key(text: str) -> tuple[str, str, tuple[bool, ...]]:
    """Sort key approximating natural-language collation.

    Letters compare ignoring accents and case first, then accents, then case
    with lowercase before uppercase (``"apple" < "Apple" < "banana"``).
    """
    decomposed = unicodedata.normalize("NFKD", text)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()
    return base, decomposed.casefold(), tuple(ch.isupper() for ch in decomposed)
