"""Key-value storage for saved game snapshots.

The scorer treats a snapshot as an opaque string blob and needs only
get/set/remove. File-backed values are written atomically with owner-only
permissions (0o600) inside an owner-only directory (0o700).
"""

import contextlib
import os
import tempfile
from pathlib import Path
from typing import Protocol

import structlog

logger = structlog.get_logger()

# Owner-only directory permissions for snapshot storage.
_STORE_DIR_MODE = 0o700

# Owner-only file permissions for snapshot files.
_STORE_FILE_MODE = 0o600


class KeyValueStore(Protocol):
    """Protocol for persisting opaque string values by key."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryKeyValueStore:
    """Keeps values in a dict; nothing survives the process."""

    def __init__(self) -> None:
        self._values: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def remove(self, key: str) -> None:
        self._values.pop(key, None)


class LocalFileKeyValueStore:
    """Stores each key as a ``<key>.json`` file under a root directory."""

    def __init__(self, store_dir: str) -> None:
        self._store_dir = Path(store_dir).resolve()

    def _path_for(self, key: str) -> Path:
        target = (self._store_dir / f"{key}.json").resolve()
        if not target.is_relative_to(self._store_dir):
            raise ValueError(f"Path traversal rejected: '{key}' resolves outside store directory")
        return target

    def get(self, key: str) -> str | None:
        target = self._path_for(key)
        if not target.is_file():
            return None
        return target.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        """Write ``value`` under ``key``.

        Creates the directory lazily on first write, then writes via
        temp-file-then-rename so readers never see a partial value.
        """
        target = self._path_for(key)

        self._store_dir.mkdir(mode=_STORE_DIR_MODE, parents=True, exist_ok=True)
        self._store_dir.chmod(_STORE_DIR_MODE)

        fd, tmp_path = tempfile.mkstemp(dir=str(self._store_dir), suffix=".tmp", prefix=".snapshot_")
        fd_owned = True
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                fd_owned = False  # os.fdopen took ownership; it will close fd
                f.write(value)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_path, _STORE_FILE_MODE)  # noqa: PTH101
            Path(tmp_path).replace(target)
        except BaseException:
            if fd_owned:
                with contextlib.suppress(OSError):
                    os.close(fd)
            with contextlib.suppress(OSError):
                Path(tmp_path).unlink()
            raise
        logger.debug("stored value", key=key, path=str(target))

    def remove(self, key: str) -> None:
        target = self._path_for(key)
        target.unlink(missing_ok=True)
        logger.debug("removed value", key=key)
