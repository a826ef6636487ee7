"""Task store: the single owner of the in-memory task collection.

Every mutation follows the same sequence: issue the backend call, await it,
and only on success replace the snapshot and notify subscribers. A failed
call leaves the snapshot untouched and surfaces a dismissible error.
"""

import logging
from collections.abc import Callable
from typing import Any

from reflectodo.core import date_utils
from reflectodo.core.db_client import DatabaseError, RecordNotFoundError
from reflectodo.core.errors import ErrorResponse, TaskNotFoundError, classify_error_with_response
from reflectodo.core.logging import log_with_context, span
from reflectodo.domain.create_models import TaskDraft
from reflectodo.domain.task import Task
from reflectodo.domain.update_models import TaskPatch
from reflectodo.services.persistence import TaskBackend
from reflectodo.services.reflection_flow import ReflectionFlow


logger = logging.getLogger(__name__)

Subscriber = Callable[[tuple[Task, ...]], None]

_PERSISTENCE_ERRORS = (DatabaseError, RecordNotFoundError)


class TaskStore:
    """Owns the task collection and exposes the only operations that change it.

    Readers get immutable snapshots (``tasks``) or subscribe to receive a new
    snapshot after each successful change.
    """

    def __init__(self, backend: TaskBackend) -> None:
        self._backend = backend
        self._tasks: tuple[Task, ...] = ()
        self._subscribers: list[Subscriber] = []
        self.last_error: ErrorResponse | None = None
        self.reflection = ReflectionFlow(commit=self._commit_completion)

    @property
    def backend_name(self) -> str:
        return self._backend.name

    @property
    def tasks(self) -> tuple[Task, ...]:
        """Current snapshot of the collection (newest additions first)."""
        return self._tasks

    @property
    def active_count(self) -> int:
        """Number of tasks still to complete."""
        return sum(1 for task in self._tasks if not task.completed)

    def get(self, task_id: str) -> Task | None:
        return next((task for task in self._tasks if task.id == task_id), None)

    def _require(self, task_id: str) -> Task:
        task = self.get(task_id)
        if task is None:
            msg = f"Task not found: {task_id}"
            raise TaskNotFoundError(msg)
        return task

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback`` for snapshot updates; returns a function that unsubscribes it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def dismiss_error(self) -> None:
        self.last_error = None

    def _publish(self, tasks: tuple[Task, ...]) -> None:
        self._tasks = tasks
        for callback in list(self._subscribers):
            callback(tasks)

    def _fail(self, operation: str, error: Exception, **context: Any) -> None:
        log_with_context(
            logger,
            "error",
            f"task_store.{operation} failed",
            backend=self._backend.name,
            error=str(error),
            **context,
        )
        self.last_error = classify_error_with_response(error)

    def _replace(self, updated: Task) -> tuple[Task, ...]:
        return tuple(updated if task.id == updated.id else task for task in self._tasks)

    async def load(self) -> tuple[Task, ...]:
        """Read the collection from the backend once at startup."""
        with span("task_store.load"):
            try:
                tasks = await self._backend.load()
            except _PERSISTENCE_ERRORS as e:
                self._fail("load", e)
                tasks = []

            self._publish(tuple(tasks))
            logger.info("Loaded %d tasks from %s backend", len(tasks), self._backend.name)
            return self._tasks

    async def add(self, draft: TaskDraft) -> Task | None:
        """Persist a new task and put it at the front of the collection."""
        with span("task_store.add"):
            try:
                task = await self._backend.create(draft, created_at=date_utils.now())
            except _PERSISTENCE_ERRORS as e:
                self._fail("add", e, title=draft.title)
                return None

            self._publish((task, *self._tasks))
            log_with_context(logger, "info", "Task added", task_id=task.id, priority=task.priority)
            return task

    async def update(self, task_id: str, patch: TaskPatch) -> Task | None:
        """Merge an edit into a task.

        Raises:
            TaskNotFoundError: If ``task_id`` is not in the collection
        """
        with span("task_store.update"):
            current = self._require(task_id)
            changes = patch.changes()
            if not changes:
                return current

            try:
                updated = await self._backend.update(task_id, changes)
            except _PERSISTENCE_ERRORS as e:
                self._fail("update", e, task_id=task_id)
                return None

            self._publish(self._replace(updated))
            log_with_context(logger, "info", "Task updated", task_id=task_id, fields=sorted(changes))
            return updated

    async def delete(self, task_id: str) -> bool:
        """Remove a task; returns False when the id is unknown or the delete failed."""
        with span("task_store.delete"):
            if self.get(task_id) is None:
                logger.debug("Delete ignored, task %s not in collection", task_id)
                return False

            try:
                await self._backend.delete(task_id)
            except _PERSISTENCE_ERRORS as e:
                self._fail("delete", e, task_id=task_id)
                return False

            pending = self.reflection.pending
            if pending is not None and pending.id == task_id:
                self.reflection.reset()

            self._publish(tuple(task for task in self._tasks if task.id != task_id))
            log_with_context(logger, "info", "Task deleted", task_id=task_id)
            return True

    async def toggle_complete(self, task_id: str, completed: bool) -> Task | None:
        """Request a completion state change.

        Completing an incomplete task only opens the reflection flow; the task
        changes once the flow saves or skips. Uncompleting clears the
        completion time and reflection in a single write.

        Raises:
            TaskNotFoundError: If ``task_id`` is not in the collection
        """
        task = self._require(task_id)

        if completed:
            if not task.completed:
                self.reflection.begin(task)
            return task

        with span("task_store.uncomplete"):
            changes = {"completed": False, "completed_at": None, "reflection": None}
            try:
                updated = await self._backend.update(task_id, changes)
            except _PERSISTENCE_ERRORS as e:
                self._fail("toggle_complete", e, task_id=task_id)
                return None

            self._publish(self._replace(updated))
            log_with_context(logger, "info", "Task reopened", task_id=task_id)
            return updated

    async def _commit_completion(self, task_id: str, reflection: str | None) -> Task | None:
        self._require(task_id)
        changes = {"completed": True, "completed_at": date_utils.now(), "reflection": reflection}
        try:
            updated = await self._backend.update(task_id, changes)
        except _PERSISTENCE_ERRORS as e:
            self._fail("complete", e, task_id=task_id)
            return None

        self._publish(self._replace(updated))
        log_with_context(logger, "info", "Task completed", task_id=task_id, has_reflection=reflection is not None)
        return updated

    async def fetch_completed(self) -> list[Task]:
        """Completed tasks with a completion time, most recent first, straight from the backend."""
        with span("task_store.fetch_completed"):
            try:
                return await self._backend.list_completed()
            except _PERSISTENCE_ERRORS as e:
                self._fail("fetch_completed", e)
                return []
