"""Provide the public `todo_board` package exports."""

from __future__ import annotations

from .board import TodoBoard, open_board
from .model import Category, Priority, Subtask, Task
from .persistence import FileAdapter, MemoryAdapter, PersistenceAdapter
from .store import TaskStore, seed_tasks
from .view import SortKey, Stats, StatusFilter, View, ViewSpec, compute_view

__all__ = [
    "Category",
    "FileAdapter",
    "MemoryAdapter",
    "PersistenceAdapter",
    "Priority",
    "SortKey",
    "Stats",
    "StatusFilter",
    "Subtask",
    "Task",
    "TaskStore",
    "TodoBoard",
    "View",
    "ViewSpec",
    "compute_view",
    "open_board",
    "seed_tasks",
]
