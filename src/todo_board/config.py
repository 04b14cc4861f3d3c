"""Load optional board configuration from `.todo_board/config.yaml`."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .constants import (
    CONFIG_FILE,
    DEFAULT_LOG_LEVEL,
    DEFAULT_SORT,
    DEFAULT_STATUS_FILTER,
    STATE_DIR_NAME,
    STORE_FILENAME,
)
from .io_utils import _load_data_with_error
from .view import SortKey, StatusFilter

VALID_LOG_LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class BoardConfig:
    storage_file: Path
    seed_on_empty: bool = True
    log_level: str = DEFAULT_LOG_LEVEL
    default_sort: SortKey = SortKey(DEFAULT_SORT)
    default_status_filter: StatusFilter = StatusFilter(DEFAULT_STATUS_FILTER)


def default_config(project_dir: Path) -> BoardConfig:
    return BoardConfig(storage_file=project_dir.resolve() / STATE_DIR_NAME / STORE_FILENAME)


def _get_storage_file(project_dir: Path, raw: Any, fallback: Path) -> Path:
    if not isinstance(raw, str) or not raw.strip():
        return fallback
    path = Path(raw).expanduser()
    return path if path.is_absolute() else project_dir / path


def _get_log_level(raw: Any) -> str:
    if isinstance(raw, str) and raw.upper() in VALID_LOG_LEVELS:
        return raw.upper()
    return DEFAULT_LOG_LEVEL


def _get_enum(enum_cls: Any, raw: Any, default: Any) -> Any:
    try:
        return enum_cls(raw) if raw is not None else default
    except ValueError:
        return default


def load_board_config(project_dir: Path) -> tuple[BoardConfig, str | None]:
    """Load the optional board config file.

    Args:
        project_dir: Directory that holds the `.todo_board/` state directory.

    Returns:
        A tuple of `(config, error_message)`. A missing file yields the defaults
        and no error; an unreadable file yields the defaults and the error.
        Individual invalid values fall back to their defaults.
    """
    project_dir = project_dir.resolve()
    defaults = default_config(project_dir)
    path = project_dir / STATE_DIR_NAME / CONFIG_FILE
    data, err = _load_data_with_error(path, {})
    if err:
        return defaults, err
    if data is None:
        data = {}
    if not isinstance(data, dict):
        return defaults, f"{path.name}: expected object, got {type(data).__name__}"

    seed = data.get("seed_on_empty")
    return (
        BoardConfig(
            storage_file=_get_storage_file(project_dir, data.get("storage_file"), defaults.storage_file),
            seed_on_empty=seed if isinstance(seed, bool) else defaults.seed_on_empty,
            log_level=_get_log_level(data.get("log_level")),
            default_sort=_get_enum(SortKey, data.get("default_sort"), defaults.default_sort),
            default_status_filter=_get_enum(
                StatusFilter, data.get("default_status_filter"), defaults.default_status_filter
            ),
        ),
        None,
    )
