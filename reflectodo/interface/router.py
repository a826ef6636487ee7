"""JSON endpoints for the task list, reflection prompt, dashboard, and timeline."""

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from reflectodo.core.config import settings
from reflectodo.core.errors import InvalidFlowStateError, TaskNotFoundError, classify_error_with_response
from reflectodo.domain.create_models import TaskDraft
from reflectodo.domain.task import Task
from reflectodo.domain.update_models import ReflectionRequest, TaskPatch, ToggleRequest
from reflectodo.models.service_models import SortMode, TaskFilter, TimeRange
from reflectodo.services import view_builder
from reflectodo.services.task_store import TaskStore


logger = logging.getLogger(__name__)

router = APIRouter(tags=["tasks"])


def get_store(request: Request) -> TaskStore:
    """Return the task store created at startup."""
    return request.app.state.store


def _not_found(error: TaskNotFoundError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=classify_error_with_response(error).model_dump(mode="json"),
    )


def _persistence_failed(store: TaskStore) -> HTTPException:
    """503 carrying the error the store just surfaced."""
    detail = store.last_error.model_dump(mode="json") if store.last_error else None
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail)


def _reflection_state(store: TaskStore) -> dict[str, Any]:
    pending = store.reflection.pending
    return {
        "state": store.reflection.state.value,
        "pending": pending.model_dump(mode="json") if pending else None,
    }


def _task_body(task: Task) -> dict[str, Any]:
    return task.model_dump(mode="json")


@router.get("/tasks")
async def list_tasks(
    task_filter: TaskFilter = Query(default=TaskFilter.ALL, alias="filter"),
    sort: SortMode = Query(default=SortMode.DATE),
    store: TaskStore = Depends(get_store),
) -> dict[str, Any]:
    """Filtered and sorted task list with the active count and any surfaced error."""
    view = view_builder.build_task_list(store.tasks, task_filter, sort)
    return {
        **view.model_dump(mode="json"),
        "error": store.last_error.model_dump(mode="json") if store.last_error else None,
    }


@router.post("/tasks", status_code=status.HTTP_201_CREATED)
async def add_task(draft: TaskDraft, store: TaskStore = Depends(get_store)) -> dict[str, Any]:
    """Add a task at the top of the list."""
    task = await store.add(draft)
    if task is None:
        raise _persistence_failed(store)
    return _task_body(task)


@router.patch("/tasks/{task_id}")
async def edit_task(task_id: str, patch: TaskPatch, store: TaskStore = Depends(get_store)) -> dict[str, Any]:
    """Apply a partial edit to a task."""
    try:
        task = await store.update(task_id, patch)
    except TaskNotFoundError as e:
        raise _not_found(e) from e
    if task is None:
        raise _persistence_failed(store)
    return _task_body(task)


@router.delete("/tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(task_id: str, store: TaskStore = Depends(get_store)) -> None:
    """Remove a task."""
    if store.get(task_id) is None:
        raise _not_found(TaskNotFoundError(f"Task not found: {task_id}"))
    if not await store.delete(task_id):
        raise _persistence_failed(store)


@router.post("/tasks/{task_id}/toggle")
async def toggle_task(task_id: str, body: ToggleRequest, store: TaskStore = Depends(get_store)) -> dict[str, Any]:
    """Change a task's completion state.

    Completing an incomplete task opens the reflection prompt instead of
    completing it; the response's ``reflection`` block says which happened.
    """
    try:
        task = await store.toggle_complete(task_id, body.completed)
    except TaskNotFoundError as e:
        raise _not_found(e) from e
    if task is None:
        raise _persistence_failed(store)
    return {"task": _task_body(task), "reflection": _reflection_state(store)}


@router.get("/reflection")
async def get_reflection(store: TaskStore = Depends(get_store)) -> dict[str, Any]:
    """Current reflection prompt state."""
    return _reflection_state(store)


async def _finish_reflection(store: TaskStore, reflection: str | None) -> dict[str, Any]:
    try:
        task = await store.reflection.save(reflection)
    except InvalidFlowStateError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=classify_error_with_response(e).model_dump(mode="json"),
        ) from e
    if task is None:
        raise _persistence_failed(store)
    return {"task": _task_body(task), "reflection": _reflection_state(store)}


@router.post("/reflection/save")
async def save_reflection(body: ReflectionRequest, store: TaskStore = Depends(get_store)) -> dict[str, Any]:
    """Complete the pending task with the given reflection (blank text records none)."""
    return await _finish_reflection(store, body.reflection)


@router.post("/reflection/skip")
async def skip_reflection(store: TaskStore = Depends(get_store)) -> dict[str, Any]:
    """Complete the pending task without a reflection."""
    return await _finish_reflection(store, None)


@router.post("/reflection/cancel")
async def cancel_reflection(store: TaskStore = Depends(get_store)) -> dict[str, Any]:
    """Dismiss the prompt; the pending task is still completed."""
    return await _finish_reflection(store, None)


@router.get("/dashboard")
async def dashboard(
    time_range: TimeRange | None = Query(default=None, alias="range"),
    store: TaskStore = Depends(get_store),
) -> dict[str, Any]:
    """Metrics, completion trend, and priority distribution for a time range."""
    selected = time_range or TimeRange(settings.default_time_range)
    return view_builder.build_dashboard(store.tasks, selected).model_dump(mode="json")


@router.get("/timeline")
async def timeline(store: TaskStore = Depends(get_store)) -> dict[str, Any]:
    """Completed tasks grouped by completion day, fetched fresh from the backend."""
    completed = await store.fetch_completed()
    groups = view_builder.group_timeline(completed)
    return {
        "groups": [group.model_dump(mode="json") for group in groups],
        "error": store.last_error.model_dump(mode="json") if store.last_error else None,
    }


@router.delete("/errors", status_code=status.HTTP_204_NO_CONTENT)
async def dismiss_error(store: TaskStore = Depends(get_store)) -> None:
    """Clear the surfaced error."""
    store.dismiss_error()
