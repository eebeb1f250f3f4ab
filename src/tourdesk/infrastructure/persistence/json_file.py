"""Shared file handling for the JSON-backed repositories.

Each store is one JSON array on disk. Writes go to a temporary file that
is then renamed over the original, so a batch is either fully written or
not at all. Every path gets one process-wide lock; read-modify-write
sequences hold it for their whole duration.
"""

from __future__ import annotations

import json
import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from tourdesk.domain.exceptions import StoreError

_locks: dict[Path, threading.RLock] = {}
_locks_guard = threading.Lock()


def _lock_for(path: Path) -> threading.RLock:
    with _locks_guard:
        return _locks.setdefault(path, threading.RLock())


class JsonFile:

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path.resolve()
        self._lock = _lock_for(self._file_path)
        self._ensure_file()

    @property
    def path(self) -> Path:
        return self._file_path

    @contextmanager
    def locked(self) -> Iterator[None]:
        with self._lock:
            yield

    def load(self) -> list[dict]:
        try:
            with self._lock:
                return json.loads(self._file_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise StoreError(f"Could not read {self._file_path.name}: {exc}") from exc

    def persist(self, rows: list[dict]) -> None:
        tmp = self._file_path.with_suffix(self._file_path.suffix + ".tmp")
        try:
            with self._lock:
                tmp.write_text(json.dumps(rows, indent=2) + "\n", encoding="utf-8")
                os.replace(tmp, self._file_path)
        except OSError as exc:
            raise StoreError(f"Could not write {self._file_path.name}: {exc}") from exc

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            try:
                self._file_path.parent.mkdir(parents=True, exist_ok=True)
                self._file_path.write_text("[]", encoding="utf-8")
            except OSError as exc:
                raise StoreError(f"Could not create {self._file_path}: {exc}") from exc
