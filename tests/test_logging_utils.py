"""Tests for logging_utils module."""

from __future__ import annotations

import io
import sys
from datetime import date

from loguru import logger

from todo_board.logging_utils import configure_logging, format_stats, summarize_task
from todo_board.model import Category, Priority, Subtask, Task
from todo_board.view import Stats


class TestSummarizeTask:
    def test_with_due_date_and_subtasks(self) -> None:
        t = Task(
            id=3,
            text="Exercise",
            category=Category.HEALTH,
            due_date=date(2023, 6, 20),
            priority=Priority.LOW,
            subtasks=(Subtask(31, "cardio", True), Subtask(32, "stretch")),
        )
        assert summarize_task(t) == "Exercise [Health | Due: Jun 20, 2023 | Priority: low] (1/2 subtasks)"

    def test_without_due_date(self) -> None:
        t = Task(id=1, text="Someday")
        assert summarize_task(t) == "Someday [Work | Due: No date | Priority: medium]"


def test_format_stats() -> None:
    assert format_stats(Stats(total=3, active=2, completed=1)) == "Total: 3 | Active: 2 | Completed: 1"


def test_configure_logging_filters_by_level(monkeypatch) -> None:
    buf = io.StringIO()
    monkeypatch.setattr(sys, "stderr", buf)
    configure_logging("warning")
    try:
        logger.info("hidden message")
        logger.warning("visible message")
    finally:
        logger.remove()
        logger.add(sys.__stderr__, level="INFO")
    assert "visible message" in buf.getvalue()
    assert "hidden message" not in buf.getvalue()
