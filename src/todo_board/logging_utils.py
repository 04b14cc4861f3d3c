"""Configure loguru output and format tasks and stats for log lines."""

from __future__ import annotations

import sys

from loguru import logger

from .model import Task
from .view import Stats


def configure_logging(level: str = "INFO") -> None:
    """Configure loguru logger with the specified level."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{module}</cyan>:<cyan>{line}</cyan> - "
            "{message}"
        ),
    )


def summarize_task(task: Task) -> str:
    """One-line description, e.g. ``Exercise [Health | Due: Jun 20, 2023 | Priority: low]``."""
    due = task.due_date.strftime("%b %d, %Y") if task.due_date else "No date"
    line = f"{task.text} [{task.category.value} | Due: {due} | Priority: {task.priority.value}]"
    if task.subtasks:
        done = sum(1 for s in task.subtasks if s.completed)
        line += f" ({done}/{len(task.subtasks)} subtasks)"
    return line


def format_stats(stats: Stats) -> str:
    return f"Total: {stats.total} | Active: {stats.active} | Completed: {stats.completed}"
