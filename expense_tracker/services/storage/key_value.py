"""
Key-Value Settings Storage

DESIGN DECISION: Expenses live under a single fixed key of a local
key-value settings area, not in a file the user picks. The area is a
small JSON object on disk shared by the whole process, so other
preferences can sit next to the expense blob.

TRADEOFFS:
- Every save rewrites the whole settings file (fine for personal use)
- Writes go through a temp file and os.replace, so a crash mid-write
  leaves the previous file intact
- No locking across processes (single-process application)
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Iterable, Optional, Union

import structlog

from expense_tracker.models.expense import Expense
from expense_tracker.services.storage.codec import decode_expenses, encode_expenses
from expense_tracker.services.storage.interface import (
    CorruptDataError,
    ExpensePersistenceInterface,
    SettingsStoreInterface,
    StorageError,
)


DEFAULT_STORAGE_KEY = "SavedExpenses"

logger = structlog.get_logger(__name__)


class JsonFileSettingsStore(SettingsStoreInterface):
    """
    Settings area backed by one JSON object file.

    The file is read on every access; nothing is cached, so two stores
    pointed at the same path always agree.
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, str]:
        """Read the whole mapping. A missing file is an empty mapping."""
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            raise StorageError(f"Failed to read settings file {self._path}: {e}") from e

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise CorruptDataError(f"Settings file {self._path} is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise CorruptDataError(
                f"Settings file {self._path} does not contain a JSON object"
            )
        return data

    def _write_all(self, data: dict[str, str]) -> None:
        """Atomically replace the file with `data`."""
        tmp_path = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=self._path.parent,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp_file:
                tmp_path = tmp_file.name
                json.dump(data, tmp_file, ensure_ascii=False)
                tmp_file.flush()
                os.fsync(tmp_file.fileno())
            os.replace(tmp_path, self._path)
            tmp_path = None
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"Failed to write settings file {self._path}: {e}") from e
        finally:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)

    def get(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        if value is not None and not isinstance(value, str):
            raise CorruptDataError(f"Settings value for {key!r} is not a string")
        return value

    def set(self, key: str, value: str) -> None:
        try:
            data = self._read_all()
        except CorruptDataError as e:
            # Unreadable file: start over rather than block every future save
            logger.warning(
                "settings_file_reset",
                path=str(self._path),
                error=str(e),
            )
            data = {}
        data[key] = value
        self._write_all(data)

    def remove(self, key: str) -> None:
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)


class KeyValueExpensePersistence(ExpensePersistenceInterface):
    """
    Persists the expense collection as one encoded blob under a fixed key.
    """

    def __init__(
        self,
        settings_store: SettingsStoreInterface,
        key: str = DEFAULT_STORAGE_KEY,
    ):
        self._settings_store = settings_store
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    def load(self) -> list[Expense]:
        blob = self._settings_store.get(self._key)
        if blob is None:
            return []
        return decode_expenses(blob)

    def save(self, expenses: Iterable[Expense]) -> None:
        blob = encode_expenses(expenses)
        self._settings_store.set(self._key, blob)
