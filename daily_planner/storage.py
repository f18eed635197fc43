# daily_planner/storage.py

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .errors import StorageError
from .schema import Task

logger = logging.getLogger(__name__)

_RECORD_LIST = TypeAdapter(list[Any])


class TaskStorage(Protocol):
    """Load/save interface for the full task collection."""

    async def load(self) -> list[Task]: ...

    async def save(self, tasks: list[Task]) -> None: ...


def _dump(tasks: list[Task]) -> str:
    return json.dumps([t.model_dump() for t in tasks], indent=2, ensure_ascii=False)


class JsonFileStorage:
    """
    Durable store backed by a single pretty-printed JSON array on disk.

    - No cache: every load() re-reads the file.
    - A missing, unreadable or unparsable file (or one whose top level is
      not an array) loads as an empty list; invalid records are skipped.
    - save() replaces the file atomically (temp file + os.replace) and
      retries a failed write once before raising StorageError.
    """

    def __init__(self, path: str | Path, *, write_attempts: int = 2) -> None:
        self.path = Path(path)
        self.write_attempts = max(1, write_attempts)

    async def load(self) -> list[Task]:
        return await asyncio.to_thread(self._load_sync)

    async def save(self, tasks: list[Task]) -> None:
        payload = _dump(tasks)
        last_exc: OSError | None = None
        for attempt in range(1, self.write_attempts + 1):
            try:
                await asyncio.to_thread(self._write_sync, payload)
                return
            except OSError as exc:
                last_exc = exc
                logger.warning(
                    "Writing task store %s failed (attempt %d/%d): %s",
                    self.path,
                    attempt,
                    self.write_attempts,
                    exc,
                )
        raise StorageError("Failed to persist tasks") from last_exc

    def _load_sync(self) -> list[Task]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug("Task store %s does not exist yet", self.path)
            return []
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Task store %s is unreadable, using empty list: %s", self.path, exc)
            return []

        try:
            records = _RECORD_LIST.validate_json(raw)
        except PydanticValidationError as exc:
            logger.warning(
                "Task store %s is malformed, using empty list (%d error(s))",
                self.path,
                exc.error_count(),
            )
            return []

        tasks: list[Task] = []
        for index, record in enumerate(records):
            try:
                tasks.append(Task.model_validate(record))
            except PydanticValidationError as exc:
                logger.warning(
                    "Skipping invalid record #%d (id=%r) in task store %s: %d error(s)",
                    index,
                    record.get("id") if isinstance(record, dict) else None,
                    self.path,
                    exc.error_count(),
                )
        return tasks

    def _file_mode(self) -> int:
        # keep the mode of an existing store, otherwise honour the umask
        try:
            return self.path.stat().st_mode & 0o777
        except FileNotFoundError:
            umask = os.umask(0)
            os.umask(umask)
            return 0o666 & ~umask

    def _write_sync(self, payload: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        mode = self._file_mode()
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=str(self.path.parent)
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_name, mode)
            os.replace(tmp_name, self.path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise


class MemoryStorage:
    """In-process store holding copies of the saved collection."""

    def __init__(self, tasks: list[Task] | None = None) -> None:
        self._tasks: list[Task] = [t.model_copy() for t in tasks or []]
        self.save_count = 0

    async def load(self) -> list[Task]:
        return [t.model_copy() for t in self._tasks]

    async def save(self, tasks: list[Task]) -> None:
        self._tasks = [t.model_copy() for t in tasks]
        self.save_count += 1
