"""Domain models and DTOs."""

from reflectodo.domain.create_models import TaskDraft
from reflectodo.domain.task import Priority, Task
from reflectodo.domain.update_models import ReflectionRequest, TaskPatch, ToggleRequest


__all__ = [
    "Priority",
    "ReflectionRequest",
    "Task",
    "TaskDraft",
    "TaskPatch",
    "ToggleRequest",
]
