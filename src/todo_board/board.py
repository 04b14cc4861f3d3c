"""Todo board session: the entry point a display layer talks to.

:class:`TodoBoard` wraps :class:`TaskStore` with the parts that are not pure
collection logic: loading saved state once before any mutation, saving after
every change, holding the current view spec, and running user input through
the validation boundary.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Any, Callable, Iterable, Optional

from loguru import logger

from .config import BoardConfig, load_board_config
from .logging_utils import configure_logging, format_stats, summarize_task
from .model import Category, Priority, Task, tasks_to_dicts
from .persistence import FileAdapter, PersistenceAdapter, tasks_from_dicts
from .store import CategoryLike, PriorityLike, TaskStore, seed_tasks
from .utils import IdSource
from .validation import DraftError, TaskDraft, parse_subtask_draft, parse_task_draft
from .view import Stats, View, ViewCache, ViewSpec, compute_stats


class TodoBoard:
    """Manage one user's task list for the lifetime of a session.

    Parameters
    ----------
    adapter:
        Where the collection is loaded from and saved to.  ``None`` keeps the
        board purely in memory.
    seed:
        Start from :func:`seed_tasks` when the adapter has nothing saved.
    view_spec:
        Initial filter/sort/search settings.
    """

    def __init__(
        self,
        adapter: Optional[PersistenceAdapter] = None,
        *,
        seed: bool = True,
        view_spec: Optional[ViewSpec] = None,
        id_source: Optional[IdSource] = None,
    ) -> None:
        self.adapter = adapter
        self.seed = seed
        self.store = TaskStore(id_source=id_source)
        self._view_spec = view_spec or ViewSpec()
        self._cache = ViewCache()
        self._opened = False

    @classmethod
    def from_config(cls, config: BoardConfig) -> "TodoBoard":
        return cls(
            FileAdapter(config.storage_file),
            seed=config.seed_on_empty,
            view_spec=ViewSpec(
                status_filter=config.default_status_filter,
                sort_key=config.default_sort,
            ),
        )

    # ------------------------------------------------------------------
    # Load / save
    # ------------------------------------------------------------------

    def _initial_tasks(self) -> tuple[Task, ...]:
        return seed_tasks() if self.seed else ()

    def _load_saved(self) -> Optional[list[Task]]:
        if self.adapter is None:
            return None
        try:
            raw = self.adapter.load()
        except Exception:
            logger.exception("Failed to load saved tasks; starting fresh")
            return None
        if raw is None:
            return None
        return tasks_from_dicts(raw)

    def open(self) -> "TodoBoard":
        """Load saved state (or the seed).  Runs once; later calls are no-ops."""
        if self._opened:
            return self
        saved = self._load_saved()
        if saved is not None:
            self.store.replace_all(saved)
            logger.info("Loaded saved tasks ({})", format_stats(compute_stats(saved)))
        else:
            self.store.replace_all(self._initial_tasks())
            logger.info("No saved tasks; starting with {} tasks", len(self.store))
        self._opened = True
        return self

    def _persist(self) -> None:
        if self.adapter is None:
            return
        try:
            self.adapter.save(tasks_to_dicts(self.store.snapshot))
        except Exception:
            logger.exception("Failed to save tasks; continuing with in-memory state")

    def _mutate(self, op: Callable[..., Any], *args: Any) -> Any:
        self.open()
        before = self.store.snapshot
        result = op(*args)
        if self.store.snapshot is not before:
            self._persist()
        return result

    def reset(self) -> None:
        """Throw away the current collection and start over from the seed."""
        self.open()
        self.store.replace_all(self._initial_tasks())
        self._persist()
        logger.info("Board reset to {} tasks", len(self.store))

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def tasks(self) -> tuple[Task, ...]:
        self.open()
        return self.store.snapshot

    def get(self, task_id: int) -> Optional[Task]:
        self.open()
        return self.store.get(task_id)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create(
        self,
        text: str,
        category: CategoryLike = Category.WORK,
        due_date: Optional[date] = None,
        priority: PriorityLike = Priority.MEDIUM,
        tags: Iterable[str] = (),
    ) -> int:
        task_id = self._mutate(self.store.create, text, category, due_date, priority, tags)
        logger.info("Added task {}", summarize_task(self.store.get(task_id)))
        return task_id

    def delete(self, task_id: int) -> bool:
        return self._mutate(self.store.delete, task_id)

    def toggle_completed(self, task_id: int) -> bool:
        return self._mutate(self.store.toggle_completed, task_id)

    def add_subtask(self, task_id: int, text: str) -> Optional[int]:
        return self._mutate(self.store.add_subtask, task_id, text)

    def toggle_subtask_completed(self, task_id: int, subtask_id: int) -> bool:
        return self._mutate(self.store.toggle_subtask_completed, task_id, subtask_id)

    def delete_subtask(self, task_id: int, subtask_id: int) -> bool:
        return self._mutate(self.store.delete_subtask, task_id, subtask_id)

    # ------------------------------------------------------------------
    # Validated input
    # ------------------------------------------------------------------

    def submit_task(self, draft: Optional[TaskDraft] = None, **fields: Any) -> Optional[int]:
        """Create a task from form input; returns ``None`` when the input is rejected."""
        if draft is None:
            try:
                draft = parse_task_draft(**fields)
            except DraftError as exc:
                logger.info("Rejected new task: {}", exc)
                return None
        return self.create(draft.text, draft.category, draft.due_date, draft.priority, draft.tags)

    def submit_subtask(self, task_id: int, text: Any) -> Optional[int]:
        try:
            draft = parse_subtask_draft(text)
        except DraftError as exc:
            logger.info("Rejected new subtask for task {}: {}", task_id, exc)
            return None
        return self.add_subtask(task_id, draft.text)

    # ------------------------------------------------------------------
    # View
    # ------------------------------------------------------------------

    @property
    def view_spec(self) -> ViewSpec:
        return self._view_spec

    def update_view(self, **changes: Any) -> ViewSpec:
        """Change one or more of ``status_filter``, ``category_filter``,
        ``search_term``, ``sort_key``.  Raises ``ValueError`` on unknown values."""
        self._view_spec = self._view_spec.updated(**changes)
        logger.debug("View changed: {}", self._view_spec.to_dict())
        return self._view_spec

    def view(self) -> View:
        return self._cache.get(self.tasks, self._view_spec)

    @property
    def stats(self) -> Stats:
        return compute_stats(self.tasks)


def open_board(project_dir: Path) -> TodoBoard:
    """Read `.todo_board/config.yaml`, configure logging, and open the board."""
    config, err = load_board_config(project_dir)
    configure_logging(config.log_level)
    if err:
        logger.warning("Ignoring board config: {}", err)
    return TodoBoard.from_config(config).open()
