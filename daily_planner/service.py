# daily_planner/service.py

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from .errors import MalformedBodyError, NotFoundError, ValidationError
from .schema import Task, TaskCreate, TaskUpdate
from .storage import TaskStorage

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("date", "startTime", "description")


def new_task_id() -> str:
    return uuid.uuid4().hex


def _find(tasks: list[Task], task_id: str) -> int:
    for index, task in enumerate(tasks):
        if task.id == task_id:
            return index
    raise NotFoundError("Task not found")


class TaskService:
    """
    CRUD operations over the task collection.

    Each operation loads the whole collection from storage, applies one
    change and (for mutations) saves the whole collection back. Mutations
    hold a single lock across load and save so concurrent writers cannot
    overwrite each other's changes.
    """

    def __init__(self, storage: TaskStorage) -> None:
        self.storage = storage
        self._write_lock = asyncio.Lock()

    async def list_tasks(self) -> list[Task]:
        return await self.storage.load()

    async def create_task(self, data: dict[str, Any]) -> Task:
        try:
            incoming = TaskCreate.model_validate(data)
        except PydanticValidationError as exc:
            # null counts as absent
            missing = {
                err["loc"][0]
                for err in exc.errors()
                if err["loc"] and err["loc"][0] in REQUIRED_FIELDS
                and (err["type"] in ("missing", "value_error") or err.get("input", "") is None)
            }
            if missing:
                raise ValidationError("Missing required fields") from exc
            fields = ", ".join(sorted({str(err["loc"][0]) for err in exc.errors() if err["loc"]}))
            raise ValidationError(f"Invalid fields: {fields}") from exc

        async with self._write_lock:
            tasks = await self.storage.load()
            task = Task(
                id=new_task_id(),
                date=incoming.date,
                startTime=incoming.startTime,
                endTime=incoming.endTime or "",
                category=incoming.category or "",
                description=incoming.description,
                completed=False,
            )
            tasks.append(task)
            await self.storage.save(tasks)

        logger.info("Created task %s for %s %s", task.id, task.date, task.startTime)
        return task

    async def update_task(self, task_id: str, data: dict[str, Any]) -> Task:
        try:
            patch = TaskUpdate.model_validate(data)
        except PydanticValidationError as exc:
            raise MalformedBodyError("Invalid task fields") from exc

        # explicit nulls leave the field untouched
        changes = {k: v for k, v in patch.model_dump(exclude_unset=True).items() if v is not None}

        async with self._write_lock:
            tasks = await self.storage.load()
            index = _find(tasks, task_id)
            updated = tasks[index].model_copy(update={**changes, "id": task_id})
            tasks[index] = updated
            await self.storage.save(tasks)

        logger.info("Updated task %s (%s)", task_id, ", ".join(sorted(changes)) or "no changes")
        return updated

    async def delete_task(self, task_id: str) -> Task:
        async with self._write_lock:
            tasks = await self.storage.load()
            removed = tasks.pop(_find(tasks, task_id))
            await self.storage.save(tasks)

        logger.info("Deleted task %s", task_id)
        return removed
