"""Derived views over a task snapshot: filtering, search, sorting, stats.

Everything here is a pure function of ``(tasks, spec)``; nothing mutates the
collection it is given.  :class:`ViewCache` memoizes the last result by
snapshot identity for callers that recompute on every render.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Callable, Iterable, Optional, Sequence

from .model import Category, Task
from .utils import collation_key

# Tasks without a due date sort as if due on the Unix epoch, so they come
# before every later date.
MISSING_DUE_DATE = date(1970, 1, 1)

ALL = "all"


class StatusFilter(str, Enum):
    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"


class SortKey(str, Enum):
    DUE_DATE = "dueDate"
    PRIORITY = "priority"
    ALPHABETICAL = "alphabetical"


@dataclass(frozen=True)
class ViewSpec:
    """Which tasks to show and in what order.

    ``category_filter`` of ``None`` means every category.
    """

    status_filter: StatusFilter = StatusFilter.ALL
    category_filter: Optional[Category] = None
    search_term: str = ""
    sort_key: SortKey = SortKey.DUE_DATE

    @classmethod
    def coerce(
        cls,
        status_filter: Any = StatusFilter.ALL,
        category_filter: Any = None,
        search_term: Optional[str] = "",
        sort_key: Any = SortKey.DUE_DATE,
    ) -> "ViewSpec":
        """Build a spec from loose values (strings, ``"all"``, enums).

        Raises ``ValueError`` for values outside the allowed sets.
        """
        if category_filter is None or category_filter == ALL:
            category: Optional[Category] = None
        else:
            category = Category(category_filter)
        return cls(
            status_filter=StatusFilter(status_filter),
            category_filter=category,
            search_term=search_term or "",
            sort_key=SortKey(sort_key),
        )

    def updated(self, **changes: Any) -> "ViewSpec":
        merged = {
            "status_filter": self.status_filter,
            "category_filter": self.category_filter,
            "search_term": self.search_term,
            "sort_key": self.sort_key,
        }
        merged.update(changes)
        return ViewSpec.coerce(**merged)

    def to_dict(self) -> dict[str, str]:
        return {
            "statusFilter": self.status_filter.value,
            "categoryFilter": self.category_filter.value if self.category_filter else ALL,
            "searchTerm": self.search_term,
            "sortKey": self.sort_key.value,
        }


@dataclass(frozen=True)
class Stats:
    total: int
    active: int
    completed: int


@dataclass(frozen=True)
class View:
    tasks: tuple[Task, ...]
    stats: Stats


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------

def matches_status(task: Task, status_filter: StatusFilter) -> bool:
    if status_filter == StatusFilter.ACTIVE:
        return not task.completed
    if status_filter == StatusFilter.COMPLETED:
        return task.completed
    return True


def matches_category(task: Task, category_filter: Optional[Category]) -> bool:
    return category_filter is None or task.category == category_filter


def matches_search(task: Task, search_term: str) -> bool:
    """Case-insensitive substring match on the text or any tag."""
    if not search_term:
        return True
    needle = search_term.lower()
    if needle in task.text.lower():
        return True
    return any(needle in tag.lower() for tag in task.tags)


def filter_tasks(tasks: Iterable[Task], spec: ViewSpec) -> list[Task]:
    return [
        t for t in tasks
        if matches_status(t, spec.status_filter)
        and matches_category(t, spec.category_filter)
        and matches_search(t, spec.search_term)
    ]


# ---------------------------------------------------------------------------
# Sorting
# ---------------------------------------------------------------------------

def _due_date_key(task: Task) -> date:
    return task.due_date if task.due_date is not None else MISSING_DUE_DATE


def _priority_key(task: Task) -> int:
    return task.priority.sort_key


def _alphabetical_key(task: Task) -> Any:
    return collation_key(task.text)


_SORT_KEYS: dict[SortKey, Callable[[Task], Any]] = {
    SortKey.DUE_DATE: _due_date_key,
    SortKey.PRIORITY: _priority_key,
    SortKey.ALPHABETICAL: _alphabetical_key,
}


def sort_tasks(tasks: Iterable[Task], sort_key: SortKey) -> list[Task]:
    """Stable sort: equal keys keep their incoming (insertion) order."""
    return sorted(tasks, key=_SORT_KEYS[SortKey(sort_key)])


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------

def compute_stats(tasks: Sequence[Task]) -> Stats:
    """Counts over the full collection, independent of any view spec."""
    total = len(tasks)
    completed = sum(1 for t in tasks if t.completed)
    return Stats(total=total, active=total - completed, completed=completed)


def compute_view(tasks: Sequence[Task], spec: Optional[ViewSpec] = None) -> View:
    spec = spec or ViewSpec()
    visible = sort_tasks(filter_tasks(tasks, spec), spec.sort_key)
    return View(tasks=tuple(visible), stats=compute_stats(tasks))


class ViewCache:
    """Remember the last computed view keyed by snapshot identity and spec."""

    def __init__(self) -> None:
        self._tasks: Optional[Sequence[Task]] = None
        self._spec: Optional[ViewSpec] = None
        self._view: Optional[View] = None
        self.hits = 0
        self.misses = 0

    def get(self, tasks: Sequence[Task], spec: ViewSpec) -> View:
        if self._view is not None and tasks is self._tasks and spec == self._spec:
            self.hits += 1
            return self._view
        self.misses += 1
        self._view = compute_view(tasks, spec)
        self._tasks = tasks
        self._spec = spec
        return self._view