"""Tests for the board session (todo_board/board.py)."""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Any, Optional

import pytest
from loguru import logger

from todo_board.board import TodoBoard, open_board
from todo_board.config import load_board_config
from todo_board.model import Category, Priority
from todo_board.persistence import MemoryAdapter
from todo_board.store import seed_tasks
from todo_board.view import SortKey, Stats, StatusFilter


class BrokenAdapter:
    def __init__(self, saved: Optional[list[dict[str, Any]]] = None) -> None:
        self.saved = saved
        self.save_attempts = 0

    def load(self) -> Optional[list[dict[str, Any]]]:
        if self.saved is None:
            raise OSError("storage unavailable")
        return self.saved

    def save(self, collection: list[dict[str, Any]]) -> None:
        self.save_attempts += 1
        raise OSError("disk full")


@pytest.fixture
def adapter() -> MemoryAdapter:
    return MemoryAdapter()


@pytest.fixture
def board(adapter: MemoryAdapter) -> TodoBoard:
    return TodoBoard(adapter).open()


class TestOpen:
    def test_seeds_when_nothing_saved(self, board: TodoBoard) -> None:
        assert board.tasks == seed_tasks()

    def test_no_seed(self, adapter: MemoryAdapter) -> None:
        assert TodoBoard(adapter, seed=False).tasks == ()

    def test_saved_state_replaces_seed(self) -> None:
        adapter = MemoryAdapter([{"id": 77, "text": "Saved", "dueDate": "2024-02-29"}])
        board = TodoBoard(adapter).open()
        assert [t.text for t in board.tasks] == ["Saved"]
        assert board.tasks[0].due_date == date(2024, 2, 29)

    def test_saved_subtask_id_clash_dropped(self) -> None:
        adapter = MemoryAdapter(
            [
                {"id": 1, "text": "A", "subtasks": [{"id": 5, "text": "x"}]},
                {"id": 2, "text": "B", "subtasks": [{"id": 5, "text": "y"}]},
            ]
        )
        board = TodoBoard(adapter).open()
        assert [s.id for s in board.tasks[0].subtasks] == [5]
        assert board.tasks[1].subtasks == ()
        new_id = board.add_subtask(2, "z")
        assert new_id not in (1, 2, 5)

    def test_saved_empty_list_is_not_seeded(self) -> None:
        board = TodoBoard(MemoryAdapter([])).open()
        assert board.tasks == ()

    def test_load_failure_falls_back_to_seed(self) -> None:
        board = TodoBoard(BrokenAdapter()).open()
        assert board.tasks == seed_tasks()

    def test_mutation_before_open_loads_first(self) -> None:
        adapter = MemoryAdapter([{"id": 5, "text": "Saved"}])
        board = TodoBoard(adapter)
        tid = board.create("New")
        assert [t.id for t in board.tasks] == [5, tid]
        assert tid > 5

    def test_open_is_idempotent(self, board: TodoBoard) -> None:
        tid = board.create("x")
        board.open()
        assert board.get(tid) is not None

    def test_in_memory_board(self) -> None:
        board = TodoBoard()
        tid = board.create("no storage")
        assert board.get(tid) is not None


class TestSaving:
    def test_saves_after_every_change(self, board: TodoBoard, adapter: MemoryAdapter) -> None:
        tid = board.create("Write report", Category.WORK, date(2024, 5, 1), Priority.HIGH, ["docs"])
        sid = board.add_subtask(tid, "outline")
        assert sid is not None
        board.toggle_subtask_completed(tid, sid)
        board.delete_subtask(tid, sid)
        board.toggle_completed(tid)
        board.delete(tid)
        assert adapter.save_count == 6
        assert adapter.load() == [t.to_dict() for t in seed_tasks()]

    def test_noop_mutations_do_not_save(self, board: TodoBoard, adapter: MemoryAdapter) -> None:
        board.delete(404)
        board.toggle_completed(404)
        assert board.add_subtask(404, "x") is None
        board.toggle_subtask_completed(1, 404)
        board.delete_subtask(404, 11)
        assert adapter.save_count == 0
        assert board.tasks == seed_tasks()

    def test_save_failure_does_not_break_mutation(self) -> None:
        broken = BrokenAdapter(saved=[])
        board = TodoBoard(broken).open()
        tid = board.create("still works")
        assert board.toggle_completed(tid)
        assert board.get(tid).completed is True  # type: ignore[union-attr]
        assert broken.save_attempts == 2

    def test_saved_blob_reloads(self, board: TodoBoard, adapter: MemoryAdapter) -> None:
        tid = board.create("Persist me", tags=["keep"])
        board.add_subtask(tid, "child")
        reopened = TodoBoard(adapter).open()
        assert reopened.tasks == board.tasks

    def test_reset(self, board: TodoBoard, adapter: MemoryAdapter) -> None:
        board.delete(1)
        board.reset()
        assert board.tasks == seed_tasks()
        assert adapter.load() == [t.to_dict() for t in seed_tasks()]


class TestValidatedInput:
    def test_submit_task_normalizes_tags(self, board: TodoBoard) -> None:
        tid = board.submit_task(text="Yoga", category="Health", priority="low", tags=" stretch, ,calm ,", due_date="2024-03-01")
        assert tid is not None
        task = board.get(tid)
        assert task is not None
        assert task.tags == ("stretch", "calm")
        assert task.category == Category.HEALTH
        assert task.due_date == date(2024, 3, 1)

    def test_submit_task_defaults(self, board: TodoBoard) -> None:
        tid = board.submit_task(text="Plain")
        task = board.get(tid)  # type: ignore[arg-type]
        assert task is not None
        assert task.category == Category.WORK
        assert task.priority == Priority.MEDIUM
        assert task.due_date is None
        assert task.tags == ()

    def test_blank_task_rejected(self, board: TodoBoard, adapter: MemoryAdapter) -> None:
        assert board.submit_task(text="   ") is None
        assert board.submit_task(text="ok", category="Chores") is None
        assert len(board.tasks) == 3
        assert adapter.save_count == 0

    def test_submit_subtask(self, board: TodoBoard) -> None:
        assert board.submit_subtask(1, "  ") is None
        sid = board.submit_subtask(1, "Read the docs")
        assert sid is not None
        assert board.get(1).subtasks[-1].text == "Read the docs"  # type: ignore[union-attr]
        assert board.submit_subtask(404, "orphan") is None


class TestView:
    def test_default_view(self, board: TodoBoard) -> None:
        view = board.view()
        assert [t.id for t in view.tasks] == [2, 3, 1]
        assert view.stats == Stats(total=3, active=2, completed=1)
        assert board.stats == view.stats

    def test_update_view(self, board: TodoBoard) -> None:
        spec = board.update_view(status_filter="active", sort_key="priority")
        assert spec.status_filter == StatusFilter.ACTIVE
        assert [t.id for t in board.view().tasks] == [1, 3]

        board.update_view(search_term="FIT")
        assert [t.id for t in board.view().tasks] == [3]
        assert board.view_spec.sort_key == SortKey.PRIORITY

    def test_update_view_logs_new_spec(self, board: TodoBoard) -> None:
        messages: list[str] = []
        sink_id = logger.add(messages.append, level="DEBUG", format="{message}")
        try:
            board.update_view(category_filter="Health", search_term="gym")
        finally:
            logger.remove(sink_id)
        assert any("'categoryFilter': 'Health'" in m and "'searchTerm': 'gym'" in m for m in messages)

    def test_update_view_rejects_unknown_values(self, board: TodoBoard) -> None:
        with pytest.raises(ValueError):
            board.update_view(category_filter="Chores")
        assert board.view_spec.category_filter is None

    def test_view_tracks_mutations(self, board: TodoBoard) -> None:
        first = board.view()
        assert board.view() is first
        board.toggle_completed(1)
        assert board.view().stats == Stats(total=3, active=1, completed=2)


class TestFromConfig:
    def test_uses_configured_storage(self, tmp_path: Path) -> None:
        state = tmp_path / ".todo_board"
        state.mkdir()
        (state / "config.yaml").write_text(
            "storage_file: data/board.yaml\nseed_on_empty: false\ndefault_sort: alphabetical\n",
            encoding="utf-8",
        )
        config, err = load_board_config(tmp_path)
        assert err is None

        board = TodoBoard.from_config(config).open()
        assert board.tasks == ()
        assert board.view_spec.sort_key == SortKey.ALPHABETICAL
        board.create("Persisted")
        assert (tmp_path / "data" / "board.yaml").exists()

        reopened = TodoBoard.from_config(config).open()
        assert [t.text for t in reopened.tasks] == ["Persisted"]


class TestOpenBoard:
    def test_defaults_without_config(self, tmp_path: Path) -> None:
        board = open_board(tmp_path)
        assert board.tasks == seed_tasks()
        board.toggle_completed(3)
        assert (tmp_path / ".todo_board" / "todos.json").exists()
        assert open_board(tmp_path).get(3).completed is True  # type: ignore[union-attr]

    def test_bad_config_still_opens(self, tmp_path: Path) -> None:
        state = tmp_path / ".todo_board"
        state.mkdir()
        (state / "config.yaml").write_text("seed_on_empty: [oops\n", encoding="utf-8")
        board = open_board(tmp_path)
        assert len(board.tasks) == 3
