from __future__ import annotations

import json
import os
from pathlib import Path
from typing import IO, Any, Optional

import yaml

from .constants import WINDOWS_LOCK_BYTES


try:
    import fcntl
except ImportError:  # Windows
    fcntl = None


def _lock_handle(handle: IO[str], nbytes: int) -> None:
    if fcntl is not None:
        fcntl.flock(handle, fcntl.LOCK_EX)
    elif os.name == "nt":
        import msvcrt

        # msvcrt locks a byte range, so the file must be at least that long.
        handle.seek(0)
        handle.truncate(nbytes)
        handle.flush()
        msvcrt.locking(handle.fileno(), msvcrt.LK_LOCK, nbytes)


def _unlock_handle(handle: IO[str], nbytes: int) -> None:
    if fcntl is not None:
        fcntl.flock(handle, fcntl.LOCK_UN)
    elif os.name == "nt":
        import msvcrt

        handle.seek(0)
        msvcrt.locking(handle.fileno(), msvcrt.LK_UNLCK, nbytes)


class FileLock:
    """Exclusive lock on a sidecar file, held for the duration of a ``with`` block.

    Re-entering the same instance while it is held is not supported.
    """

    def __init__(self, lock_path: Path, nbytes: int = WINDOWS_LOCK_BYTES) -> None:
        self.lock_path = Path(lock_path)
        self.nbytes = nbytes
        self._handle: Optional[IO[str]] = None

    @property
    def held(self) -> bool:
        return self._handle is not None

    def __enter__(self) -> "FileLock":
        self.lock_path.parent.mkdir(parents=True, exist_ok=True)
        handle = open(self.lock_path, "w")
        try:
            _lock_handle(handle, self.nbytes)
        except OSError:
            handle.close()
            raise
        self._handle = handle
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        handle, self._handle = self._handle, None
        if handle is None:
            return
        try:
            _unlock_handle(handle, self.nbytes)
        finally:
            handle.close()


def _is_yaml(path: Path) -> bool:
    return path.suffix in {".yaml", ".yml"}


def _atomic_write_json(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    with open(tmp_path, "w", encoding="utf-8") as handle:
        json.dump(data, handle, indent=2, ensure_ascii=False)
        handle.flush()
        os.fsync(handle.fileno())
    os.replace(tmp_path, path)


def _atomic_write_yaml(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    with open(tmp_path, "w", encoding="utf-8") as handle:
        yaml.safe_dump(
            data,
            handle,
            sort_keys=False,
            default_flow_style=False,
            allow_unicode=True,
        )
        handle.flush()
        os.fsync(handle.fileno())
    os.replace(tmp_path, path)


def _save_data(path: Path, data: Any) -> None:
    if _is_yaml(path):
        _atomic_write_yaml(path, data)
    else:
        _atomic_write_json(path, data)


def _load_data_with_error(path: Path, default: Any) -> tuple[Any, str | None]:
    """
    Load JSON/YAML and return (data, error_message).

    A missing file is not an error.  Parse/IO failures are reported so callers
    can fall back without overwriting what is on disk by accident.
    """
    if not path.exists():
        return default, None
    try:
        with open(path, "r", encoding="utf-8") as handle:
            if _is_yaml(path):
                data = yaml.safe_load(handle)
            else:
                data = json.load(handle)
        return data, None
    except OSError as exc:
        return default, f"{path.name}: {exc.__class__.__name__}: {exc}"
    except UnicodeDecodeError as exc:
        return default, f"{path.name}: UnicodeDecodeError: {exc}"
    except json.JSONDecodeError as exc:
        return default, f"{path.name}: JSONDecodeError: {exc}"
    except yaml.YAMLError as exc:
        return default, f"{path.name}: YAMLError: {exc}"
