"""Persistence adapters for the serialized task collection.

The engine never touches storage itself; it hands a list of task dicts to an
adapter and gets one back on startup.  Adapters are best-effort: the session
layer (:class:`todo_board.board.TodoBoard`) contains any error they raise.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, Optional, Protocol

from loguru import logger

from .constants import LOCK_SUFFIX, STORAGE_KEY, STORE_VERSION
from .io_utils import FileLock, _load_data_with_error, _save_data
from .model import Task

SerializedCollection = list[dict[str, Any]]


class PersistenceAdapter(Protocol):
    def load(self) -> Optional[SerializedCollection]:
        """Return the previously saved collection, or ``None`` if there is none."""
        ...

    def save(self, collection: SerializedCollection) -> None:
        ...


# ---------------------------------------------------------------------------
# Blob <-> tasks
# ---------------------------------------------------------------------------

def tasks_from_dicts(raw: Iterable[Any]) -> list[Task]:
    """Deserialize a saved collection, skipping entries that cannot be read.

    Task and subtask ids share one namespace.  A task whose id was already
    used is skipped whole; a subtask whose id clashes is dropped from its task.
    """
    tasks: list[Task] = []
    seen: set[int] = set()
    for i, item in enumerate(raw):
        if not isinstance(item, dict):
            logger.warning("Skipping saved task #{}: expected object, got {}", i, type(item).__name__)
            continue
        try:
            task = Task.from_dict(item)
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Skipping saved task #{}: {}", i, exc)
            continue
        if task.id in seen:
            logger.warning("Skipping saved task #{}: duplicate id {}", i, task.id)
            continue
        seen.add(task.id)
        subtasks = []
        for sub in task.subtasks:
            if sub.id in seen:
                logger.warning("Dropping subtask {} of task {}: duplicate id", sub.id, task.id)
                continue
            seen.add(sub.id)
            subtasks.append(sub)
        if len(subtasks) != len(task.subtasks):
            task = task.with_subtasks(tuple(subtasks))
        tasks.append(task)
    return tasks


def _unwrap(payload: Any) -> Optional[SerializedCollection]:
    """Accept ``{"version": .., "tasks": [...]}`` or a bare list."""
    if payload is None:
        return None
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict) and isinstance(payload.get("tasks"), list):
        return payload["tasks"]
    return None


# ---------------------------------------------------------------------------
# Adapters
# ---------------------------------------------------------------------------

class MemoryAdapter:
    """Key-value blob store kept in process memory."""

    def __init__(self, initial: Optional[SerializedCollection] = None, key: str = STORAGE_KEY) -> None:
        self.key = key
        self.blobs: dict[str, SerializedCollection] = {}
        self.save_count = 0
        if initial is not None:
            self.blobs[key] = list(initial)

    def load(self) -> Optional[SerializedCollection]:
        blob = self.blobs.get(self.key)
        return list(blob) if blob is not None else None

    def save(self, collection: SerializedCollection) -> None:
        self.blobs[self.key] = list(collection)
        self.save_count += 1


class FileAdapter:
    """Single-file store; ``.yaml``/``.yml`` paths are YAML, anything else JSON.

    Writes go to a temp file that replaces the target, under a lock file that
    sits next to it.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._lock = FileLock(self.path.with_name(self.path.name + LOCK_SUFFIX))

    def load(self) -> Optional[SerializedCollection]:
        with self._lock:
            payload, err = _load_data_with_error(self.path, None)
        if err:
            logger.warning("Could not read saved tasks: {}", err)
            return None
        collection = _unwrap(payload)
        if payload is not None and collection is None:
            logger.warning("Ignoring {}: unexpected payload shape {}", self.path.name, type(payload).__name__)
        return collection

    def save(self, collection: SerializedCollection) -> None:
        payload = {"version": STORE_VERSION, "tasks": list(collection)}
        with self._lock:
            _save_data(self.path, payload)
        logger.debug("Saved {} tasks to {}", len(collection), self.path)
