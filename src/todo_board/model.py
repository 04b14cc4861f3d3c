"""Task and subtask model for the todo board.

Records are frozen dataclasses: every change produces a new value through
:func:`dataclasses.replace`, so a collection snapshot handed to the display
layer can never be altered behind its back.  Both records serialize to plain
dicts using the same keys the browser widget stored (``dueDate`` and friends).
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Any, Optional

from .utils import _format_date, _parse_date


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Category(str, Enum):
    """Fixed set of task categories."""

    WORK = "Work"
    PERSONAL = "Personal"
    SHOPPING = "Shopping"
    HEALTH = "Health"


class Priority(str, Enum):
    """Task priority; ``high`` sorts first."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def sort_key(self) -> int:
        return {"high": 0, "medium": 1, "low": 2}[self.value]


def _coerce_enum(enum_cls: type[Enum], raw: Any, default: Enum) -> Any:
    if raw is None:
        return default
    if isinstance(raw, enum_cls):
        return raw
    try:
        return enum_cls(str(raw))
    except (ValueError, KeyError):
        return default


def _coerce_bool(raw: Any, default: bool = False) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, int) and raw in (0, 1):
        return bool(raw)
    if isinstance(raw, str):
        text = raw.strip().lower()
        if text in ("true", "false"):
            return text == "true"
    return default


def _coerce_tags(raw: Any) -> tuple[str, ...]:
    """A saved string is a single tag; ``None`` and blank entries are dropped."""
    if raw is None:
        return ()
    if isinstance(raw, str):
        raw = [raw]
    elif not isinstance(raw, (list, tuple)):
        return ()
    tags = (str(tag).strip() for tag in raw if tag is not None)
    return tuple(tag for tag in tags if tag)


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Subtask:
    id: int
    text: str
    completed: bool = False

    def toggled(self) -> "Subtask":
        return replace(self, completed=not self.completed)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "text": self.text, "completed": self.completed}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Subtask":
        return cls(
            id=int(data["id"]),
            text=str(data.get("text", "")),
            completed=_coerce_bool(data.get("completed")),
        )


@dataclass(frozen=True)
class Task:
    """A to-do item with scheduling metadata and an owned subtask list.

    ``completed`` is independent of subtask completion.  ``tags`` keeps the
    caller's order and does not deduplicate.
    """

    id: int
    text: str
    completed: bool = False
    category: Category = Category.WORK
    due_date: Optional[date] = None
    priority: Priority = Priority.MEDIUM
    subtasks: tuple[Subtask, ...] = field(default_factory=tuple)
    tags: tuple[str, ...] = field(default_factory=tuple)

    # ------------------------------------------------------------------
    # Derived copies
    # ------------------------------------------------------------------

    def toggled(self) -> "Task":
        return replace(self, completed=not self.completed)

    def with_subtasks(self, subtasks: tuple[Subtask, ...]) -> "Task":
        return replace(self, subtasks=subtasks)

    def find_subtask(self, subtask_id: int) -> Optional[Subtask]:
        for sub in self.subtasks:
            if sub.id == subtask_id:
                return sub
        return None

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dict for JSON/YAML persistence."""
        return {
            "id": self.id,
            "text": self.text,
            "completed": self.completed,
            "category": self.category.value,
            "dueDate": _format_date(self.due_date),
            "priority": self.priority.value,
            "subtasks": [s.to_dict() for s in self.subtasks],
            "tags": list(self.tags),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Task":
        """Deserialize from a plain dict, falling back on unknown enum values.

        Raises ``KeyError``/``ValueError``/``TypeError`` when ``id`` is missing or
        not an integer; callers loading a whole collection skip such entries.
        """
        raw_subtasks = data.get("subtasks") or []
        due_raw = data["dueDate"] if "dueDate" in data else data.get("due_date")
        return cls(
            id=int(data["id"]),
            text=str(data.get("text", "")),
            completed=_coerce_bool(data.get("completed")),
            category=_coerce_enum(Category, data.get("category"), Category.WORK),
            due_date=_parse_date(due_raw),
            priority=_coerce_enum(Priority, data.get("priority"), Priority.MEDIUM),
            subtasks=tuple(Subtask.from_dict(s) for s in raw_subtasks if isinstance(s, dict)),
            tags=_coerce_tags(data.get("tags")),
        )


def tasks_to_dicts(tasks: tuple[Task, ...] | list[Task]) -> list[dict[str, Any]]:
    return [t.to_dict() for t in tasks]
