"""Reflection flow: the short interaction that gates a task's completion.

Marking an incomplete task done does not complete it right away. The flow
moves to AWAITING_REFLECTION and waits for the user to save a reflection or
skip. Saving, skipping and cancelling all complete the task; they differ
only in whether reflection text is recorded.
"""

import logging
from collections.abc import Awaitable, Callable
from enum import StrEnum

from reflectodo.core.errors import InvalidFlowStateError
from reflectodo.core.logging import span
from reflectodo.domain.task import Task


logger = logging.getLogger(__name__)


class FlowState(StrEnum):
    """Reflection flow state."""

    IDLE = "idle"
    AWAITING_REFLECTION = "awaiting_reflection"


TRANSITIONS: dict[FlowState, set[FlowState]] = {
    FlowState.IDLE: {FlowState.AWAITING_REFLECTION},
    FlowState.AWAITING_REFLECTION: {FlowState.IDLE, FlowState.AWAITING_REFLECTION},
}

CommitCompletion = Callable[[str, str | None], Awaitable[Task | None]]


class ReflectionFlow:
    """Two-state machine holding at most one task awaiting a reflection.

    ``commit`` applies the completion to the store and returns the stored
    task, or None when persistence failed.
    """

    def __init__(self, commit: CommitCompletion) -> None:
        self._commit = commit
        self._state = FlowState.IDLE
        self._pending: Task | None = None

    @property
    def state(self) -> FlowState:
        return self._state

    @property
    def pending(self) -> Task | None:
        """Task waiting for its reflection, if any."""
        return self._pending

    def _transition(self, target: FlowState) -> None:
        if target not in TRANSITIONS[self._state]:
            msg = f"Cannot move reflection flow from {self._state} to {target}"
            raise InvalidFlowStateError(msg)
        self._state = target

    def begin(self, task: Task) -> None:
        """Start awaiting a reflection for ``task``, replacing any earlier pending task."""
        self._transition(FlowState.AWAITING_REFLECTION)
        self._pending = task
        logger.info("Awaiting reflection for task %s", task.id)

    async def save(self, text: str | None = None) -> Task | None:
        """Complete the pending task, recording ``text`` when it is not blank."""
        if self._state != FlowState.AWAITING_REFLECTION or self._pending is None:
            msg = "Cannot save a reflection: no task is awaiting one"
            raise InvalidFlowStateError(msg)

        reflection = text.strip() if text and text.strip() else None
        with span("reflection_flow.save"):
            task = await self._commit(self._pending.id, reflection)

        if task is None:
            # Stay open so the user can retry the save.
            logger.warning("Completion of task %s was not persisted", self._pending.id)
            return None

        self._transition(FlowState.IDLE)
        self._pending = None
        logger.info("Reflection flow completed task %s (reflection: %s)", task.id, reflection is not None)
        return task

    async def skip(self) -> Task | None:
        """Complete the pending task without a reflection."""
        return await self.save(None)

    async def cancel(self) -> Task | None:
        """Dismiss the prompt; the task is still completed, just without a reflection."""
        return await self.skip()

    def reset(self) -> None:
        """Forget the pending task without completing it (e.g. the task was deleted)."""
        self._state = FlowState.IDLE
        self._pending = None
