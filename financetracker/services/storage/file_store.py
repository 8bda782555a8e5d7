"""
File-backed Session Storage

DESIGN DECISION: A single JSON file in the user's home directory is the
durable store because:
1. It survives restarts of the Streamlit surface
2. It needs no extra service
3. Permissions can restrict it to the current OS user (0600)

Writes go to a temporary file that is renamed over the real one, so a crash
mid-write never leaves a half-written session behind.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

from financetracker.notices import get_logger
from financetracker.services.storage.interface import (
    CorruptStorageError,
    SessionStorageInterface,
    StorageError,
)


SESSION_FILENAME = "session.json"


class FileSessionStorage(SessionStorageInterface):
    """JSON key-value file readable only by the current user."""

    def __init__(self, directory: Path):
        self._path = Path(directory) / SESSION_FILENAME
        self._logger = get_logger("financetracker.storage")

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise CorruptStorageError(f"Could not read {self._path}: {e}") from e
        if not isinstance(data, dict):
            raise CorruptStorageError(f"{self._path} does not hold a JSON object")
        return data

    def _write_all(self, data: dict[str, Any]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._path.parent, prefix=".session-", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(data, fh)
                os.chmod(tmp_name, 0o600)
                os.replace(tmp_name, self._path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            raise StorageError(f"Could not write {self._path}: {e}") from e

    def get(self, key: str) -> Optional[Any]:
        try:
            return self._read_all().get(key)
        except CorruptStorageError as e:
            self._logger.warning("session_storage_corrupt", error=str(e))
            return None

    def set_many(self, values: dict[str, Any]) -> None:
        try:
            data = self._read_all()
        except CorruptStorageError:
            data = {}
        data.update(values)
        self._write_all(data)

    def remove(self, *keys: str) -> None:
        try:
            data = self._read_all()
        except CorruptStorageError:
            data = {}
        for key in keys:
            data.pop(key, None)
        self._write_all(data)


class InMemorySessionStorage(SessionStorageInterface):
    """Storage that lives as long as the process. Used in tests."""

    def __init__(self, initial: Optional[dict[str, Any]] = None):
        self._data: dict[str, Any] = dict(initial or {})

    @property
    def data(self) -> dict[str, Any]:
        return dict(self._data)

    def get(self, key: str) -> Optional[Any]:
        return self._data.get(key)

    def set_many(self, values: dict[str, Any]) -> None:
        self._data.update(values)

    def remove(self, *keys: str) -> None:
        for key in keys:
            self._data.pop(key, None)
