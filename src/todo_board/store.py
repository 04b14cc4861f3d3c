"""In-memory task store built on immutable snapshots.

The store owns one tuple of :class:`Task` values in insertion order.  Every
mutation builds a new tuple from the old one and swaps it in, so a snapshot
obtained from :attr:`TaskStore.snapshot` never changes afterwards.  A mutation
aimed at an id that is not present leaves the very same tuple in place.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Union

from loguru import logger

from .model import Category, Priority, Subtask, Task
from .utils import IdSource, _parse_date

CategoryLike = Union[Category, str]
PriorityLike = Union[Priority, str]


def seed_tasks() -> tuple[Task, ...]:
    """Starter collection used when nothing has been saved yet."""
    return (
        Task(
            id=1,
            text="Learn React",
            category=Category.WORK,
            due_date=date(2023, 6, 30),
            priority=Priority.HIGH,
            subtasks=(
                Subtask(id=11, text="Study Hooks", completed=True),
                Subtask(id=12, text="Practice with a project"),
            ),
            tags=("programming", "frontend"),
        ),
        Task(
            id=2,
            text="Build a todo app",
            completed=True,
            category=Category.WORK,
            due_date=date(2023, 6, 15),
            priority=Priority.MEDIUM,
            subtasks=(
                Subtask(id=21, text="Design UI", completed=True),
                Subtask(id=22, text="Implement functionality", completed=True),
            ),
            tags=("project", "react"),
        ),
        Task(
            id=3,
            text="Exercise",
            category=Category.HEALTH,
            due_date=date(2023, 6, 20),
            priority=Priority.LOW,
            subtasks=(
                Subtask(id=31, text="30 min cardio"),
                Subtask(id=32, text="15 min stretching"),
            ),
            tags=("fitness", "health"),
        ),
    )


def _all_ids(tasks: Iterable[Task]) -> list[int]:
    ids: list[int] = []
    for t in tasks:
        ids.append(t.id)
        ids.extend(s.id for s in t.subtasks)
    return ids


class TaskStore:
    """Authoritative, ordered task collection.

    Parameters
    ----------
    tasks:
        Initial collection (e.g. the seed or a loaded blob).
    id_source:
        Shared id generator for tasks and subtasks.  It is advanced past every
        id already in *tasks*.
    """

    def __init__(self, tasks: Iterable[Task] = (), id_source: Optional[IdSource] = None) -> None:
        self._ids = id_source or IdSource()
        self._tasks: tuple[Task, ...] = ()
        self.replace_all(tasks)

    # -- reads --------------------------------------------------------------

    @property
    def snapshot(self) -> tuple[Task, ...]:
        return self._tasks

    def __len__(self) -> int:
        return len(self._tasks)

    def get(self, task_id: int) -> Optional[Task]:
        for t in self._tasks:
            if t.id == task_id:
                return t
        return None

    def _index_of(self, task_id: int) -> Optional[int]:
        for i, t in enumerate(self._tasks):
            if t.id == task_id:
                return i
        return None

    def _swap(self, index: int, task: Task) -> None:
        self._tasks = self._tasks[:index] + (task,) + self._tasks[index + 1:]

    # -- whole-collection ---------------------------------------------------

    def replace_all(self, tasks: Iterable[Task]) -> None:
        """Swap in a whole new collection (load / reset)."""
        self._tasks = tuple(tasks)
        self._ids.advance_past(_all_ids(self._tasks))

    # -- task mutations -----------------------------------------------------

    def create(
        self,
        text: str,
        category: CategoryLike = Category.WORK,
        due_date: Optional[date] = None,
        priority: PriorityLike = Priority.MEDIUM,
        tags: Iterable[str] = (),
    ) -> int:
        """Append a new, not-completed task with no subtasks and return its id.

        *tags* must already be normalized (trimmed, no blanks); see
        :func:`todo_board.validation.parse_tags`.  A ``datetime`` due date is
        truncated to its calendar date.
        """
        task = Task(
            id=self._ids.next_id(),
            text=text,
            category=Category(category),
            due_date=_parse_date(due_date),
            priority=Priority(priority),
            tags=tuple(tags),
        )
        self._tasks = self._tasks + (task,)
        logger.debug("Created task id={} text={!r}", task.id, task.text)
        return task.id

    def delete(self, task_id: int) -> bool:
        """Remove a task together with its subtasks.  Absent ids are ignored."""
        idx = self._index_of(task_id)
        if idx is None:
            return False
        self._tasks = self._tasks[:idx] + self._tasks[idx + 1:]
        logger.debug("Deleted task id={}", task_id)
        return True

    def toggle_completed(self, task_id: int) -> bool:
        idx = self._index_of(task_id)
        if idx is None:
            return False
        task = self._tasks[idx].toggled()
        self._swap(idx, task)
        logger.debug("Task id={} completed={}", task_id, task.completed)
        return True

    # -- subtask mutations --------------------------------------------------

    def add_subtask(self, task_id: int, text: str) -> Optional[int]:
        """Append a subtask to *task_id*; returns ``None`` if the task is absent."""
        idx = self._index_of(task_id)
        if idx is None:
            return None
        task = self._tasks[idx]
        sub = Subtask(id=self._ids.next_id(), text=text)
        self._swap(idx, task.with_subtasks(task.subtasks + (sub,)))
        logger.debug("Added subtask id={} to task id={}", sub.id, task_id)
        return sub.id

    def toggle_subtask_completed(self, task_id: int, subtask_id: int) -> bool:
        idx = self._index_of(task_id)
        if idx is None:
            return False
        task = self._tasks[idx]
        if task.find_subtask(subtask_id) is None:
            return False
        subtasks = tuple(s.toggled() if s.id == subtask_id else s for s in task.subtasks)
        self._swap(idx, task.with_subtasks(subtasks))
        return True

    def delete_subtask(self, task_id: int, subtask_id: int) -> bool:
        idx = self._index_of(task_id)
        if idx is None:
            return False
        task = self._tasks[idx]
        if task.find_subtask(subtask_id) is None:
            return False
        subtasks = tuple(s for s in task.subtasks if s.id != subtask_id)
        self._swap(idx, task.with_subtasks(subtasks))
        logger.debug("Deleted subtask id={} from task id={}", subtask_id, task_id)
        return True
