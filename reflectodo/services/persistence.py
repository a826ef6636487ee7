"""Persistence backends for the task collection.

Two interchangeable deployments:
- LocalStorageBackend: the whole collection serialized as one JSON array under
  a fixed key, rewritten after every mutation and read once at startup.
- RemoteTableBackend: one row-level PocketBase operation per mutation, with
  the server's stored row read back on insert and update.

Both raise db_client.DatabaseError / db_client.RecordNotFoundError on failure
and never partially apply a change.
"""

import json
import logging
import uuid
from datetime import date, datetime
from typing import Any, Protocol

import aiosqlite
from pydantic import ValidationError

from reflectodo.core import db_client
from reflectodo.core.config import settings
from reflectodo.core.local_store import LocalStore
from reflectodo.domain.create_models import TaskDraft
from reflectodo.domain.task import Task


logger = logging.getLogger(__name__)


class TaskBackend(Protocol):
    """Storage side-channel used by the task store."""

    name: str

    async def load(self) -> list[Task]:
        """Return the persisted collection, newest first."""
        ...

    async def create(self, draft: TaskDraft, *, created_at: datetime) -> Task:
        """Persist a new incomplete task and return it as stored."""
        ...

    async def update(self, task_id: str, changes: dict[str, Any]) -> Task:
        """Merge ``changes`` into a task and return it as stored."""
        ...

    async def delete(self, task_id: str) -> None:
        """Remove a task."""
        ...

    async def list_completed(self) -> list[Task]:
        """Return completed tasks that carry a completion time, most recent first."""
        ...


def to_wire(data: dict[str, Any]) -> dict[str, Any]:
    """Convert dates and datetimes to ISO strings for storage."""
    wire: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, datetime | date):
            wire[key] = value.isoformat()
        else:
            wire[key] = value
    return wire


def _completed_newest_first(tasks: list[Task]) -> list[Task]:
    done = [task for task in tasks if task.completed and task.completed_at is not None]
    return sorted(done, key=lambda t: t.completed_at, reverse=True)  # type: ignore[arg-type, return-value]


class LocalStorageBackend:
    """Keeps the collection as a single JSON array in the local key-value store."""

    name = "local"

    def __init__(self, store: LocalStore | None = None, key: str | None = None) -> None:
        self._store = store or LocalStore()
        self._key = key or settings.local_store_key
        self._tasks: list[Task] = []

    async def load(self) -> list[Task]:
        try:
            raw = await self._store.get_item(self._key)
            records = json.loads(raw) if raw else []
            if not isinstance(records, list):
                msg = f"expected a JSON array under '{self._key}', got {type(records).__name__}"
                raise TypeError(msg)
            self._tasks = [Task.model_validate(record) for record in records]
        except (aiosqlite.Error, OSError, json.JSONDecodeError, TypeError, ValidationError) as e:
            logger.error(
                "Failed to load tasks from local store",
                extra={"key": self._key, "path": str(self._store.path), "error": str(e)},
            )
            self._tasks = []

        logger.info("Loaded tasks from local store", extra={"key": self._key, "count": len(self._tasks)})
        return list(self._tasks)

    async def _flush(self, tasks: list[Task]) -> None:
        payload = json.dumps([task.model_dump(mode="json") for task in tasks])
        try:
            await self._store.set_item(self._key, payload)
        except (aiosqlite.Error, OSError) as e:
            msg = f"Failed to write tasks to local store: {e}"
            raise db_client.DatabaseError(msg) from e
        self._tasks = tasks

    def _index_of(self, task_id: str) -> int:
        for idx, task in enumerate(self._tasks):
            if task.id == task_id:
                return idx
        msg = f"Record not found in local store: {task_id}"
        raise db_client.RecordNotFoundError(msg)

    async def create(self, draft: TaskDraft, *, created_at: datetime) -> Task:
        task = Task(id=uuid.uuid4().hex, created_at=created_at, **draft.model_dump())
        await self._flush([task, *self._tasks])
        return task

    async def update(self, task_id: str, changes: dict[str, Any]) -> Task:
        idx = self._index_of(task_id)
        updated = Task.model_validate({**self._tasks[idx].model_dump(), **changes})
        tasks = list(self._tasks)
        tasks[idx] = updated
        await self._flush(tasks)
        return updated

    async def delete(self, task_id: str) -> None:
        idx = self._index_of(task_id)
        await self._flush(self._tasks[:idx] + self._tasks[idx + 1 :])

    async def list_completed(self) -> list[Task]:
        return _completed_newest_first(self._tasks)


class RemoteTableBackend:
    """Issues one PocketBase row operation per mutation."""

    name = "remote"

    def __init__(self, collection: str | None = None) -> None:
        self._collection = collection or settings.tasks_collection

    def _rows_to_tasks(self, rows: list[dict[str, Any]]) -> list[Task]:
        tasks = []
        for row in rows:
            try:
                tasks.append(Task.model_validate(row))
            except ValidationError as e:
                logger.error("Skipping malformed task row %s: %s", row.get("id"), e)
        return tasks

    async def load(self) -> list[Task]:
        rows = await db_client.list_records(collection=self._collection, sort="-created_at")
        return self._rows_to_tasks(rows)

    async def create(self, draft: TaskDraft, *, created_at: datetime) -> Task:
        data = {
            **draft.model_dump(),
            "completed": False,
            "completed_at": None,
            "reflection": None,
            "created_at": created_at,
        }
        row = await db_client.create_record(collection=self._collection, data=to_wire(data))
        return Task.model_validate(row)

    async def update(self, task_id: str, changes: dict[str, Any]) -> Task:
        row = await db_client.update_record(collection=self._collection, record_id=task_id, data=to_wire(changes))
        return Task.model_validate(row)

    async def delete(self, task_id: str) -> None:
        await db_client.delete_record(collection=self._collection, record_id=task_id)

    async def list_completed(self) -> list[Task]:
        rows = await db_client.list_records(
            collection=self._collection,
            filter_query='completed = true && completed_at != ""',
            sort="-completed_at",
        )
        return self._rows_to_tasks(rows)


def build_backend() -> TaskBackend:
    """Create the backend selected by ``settings.storage_backend``."""
    if settings.storage_backend == "remote":
        return RemoteTableBackend()
    return LocalStorageBackend()
