# src/taskdeck/tasks/task_repository.py

from __future__ import annotations

"""
Task repository.

Owns task identity, CRUD, status transitions and the in-memory view order.
Every mutation is a read-modify-write of the whole collection through the
store; the cached list is replaced only after the write succeeded.

Concurrency: operations are meant to run one at a time. Two overlapping
mutations may lose one change (last writer wins).
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import datetime

from ..core.ports import TaskCollectionStore
from .task_models import STATUS_PRIORITY, SortBy, Task, TaskStatus, create_task, transition

logger = logging.getLogger(__name__)

MSG_LOAD_FAILED = "Failed to load tasks"
MSG_ADD_FAILED = "Failed to add task"
MSG_UPDATE_FAILED = "Failed to update task"
MSG_DELETE_FAILED = "Failed to delete task"
MSG_NOT_FOUND = "Task not found"


@dataclass(frozen=True, slots=True)
class OpResult:
    """Outcome of a repository operation: the refreshed collection or an error."""

    ok: bool
    tasks: list[Task] = field(default_factory=list)
    error: str | None = None

    @classmethod
    def success(cls, tasks: list[Task]) -> OpResult:
        return cls(ok=True, tasks=list(tasks))

    @classmethod
    def failure(cls, message: str) -> OpResult:
        return cls(ok=False, error=message)

    def __bool__(self) -> bool:
        return self.ok


class TaskRepository:
    def __init__(self, store: TaskCollectionStore) -> None:
        self._store = store
        self._tasks: list[Task] = []
        self.loading: bool = False
        self.error: str | None = None

    # ---- queries ----

    def list(self) -> list[Task]:
        """Last loaded view (not re-synced with storage until reload())."""
        return list(self._tasks)

    def get(self, task_id: str) -> Task | None:
        for t in self._tasks:
            if t.id == task_id:
                return t
        return None

    # ---- identity ----

    def create(
        self,
        title: str,
        description: str = "",
        date_time: datetime | None = None,
        location: str = "",
    ) -> Task:
        return create_task(title=title, description=description, date_time=date_time, location=location)

    # ---- mutations ----

    async def _mutate(
        self,
        op_name: str,
        error_message: str,
        change: Callable[[list[Task]], list[Task]],
    ) -> OpResult:
        self.loading = True
        try:
            current = await self._store.read_all()
            updated = change(list(current))
            await self._store.write_all(updated)
        except Exception:
            logger.exception("Task %s failed", op_name)
            self.error = error_message
            return OpResult.failure(error_message)
        finally:
            self.loading = False

        self._tasks = list(updated)
        self.error = None
        logger.debug("Task %s ok total=%d", op_name, len(updated))
        return OpResult.success(updated)

    async def add(self, task: Task) -> OpResult:
        return await self._mutate("add", MSG_ADD_FAILED, lambda tasks: [*tasks, task])

    async def update(self, task: Task) -> OpResult:
        """
        Replace the stored record with the same id, verbatim.

        An unknown id leaves the collection unchanged and still succeeds.
        """

        def change(tasks: list[Task]) -> list[Task]:
            return [task if t.id == task.id else t for t in tasks]

        return await self._mutate("update", MSG_UPDATE_FAILED, change)

    async def remove(self, task_id: str) -> OpResult:
        """Delete by id; an unknown id is a successful no-op."""
        return await self._mutate(
            "remove",
            MSG_DELETE_FAILED,
            lambda tasks: [t for t in tasks if t.id != task_id],
        )

    async def change_status(self, task_id: str, new_status: TaskStatus) -> OpResult:
        task = self.get(task_id)
        if task is None:
            logger.info("change_status: task %s not found", task_id)
            self.error = MSG_NOT_FOUND
            return OpResult.failure(MSG_NOT_FOUND)
        status = transition(task.status, TaskStatus(new_status))
        return await self.update(replace(task, status=status))

    async def reload(self) -> OpResult:
        """The only operation that re-syncs the cached view with storage."""
        self.loading = True
        try:
            loaded = await self._store.read_all()
        except Exception:
            logger.exception("Task reload failed")
            self.error = MSG_LOAD_FAILED
            return OpResult.failure(MSG_LOAD_FAILED)
        finally:
            self.loading = False

        self._tasks = list(loaded)
        self.error = None
        logger.debug("Tasks reloaded total=%d", len(self._tasks))
        return OpResult.success(self._tasks)

    # ---- view order ----

    def sort(self, criterion: SortBy | str = SortBy.DATE) -> list[Task]:
        """
        Reorder the cached view. Nothing is written back.

        date:   newest created_at first
        status: in progress, to do, completed, cancelled
        Both are stable.
        """
        by = SortBy(criterion)
        if by is SortBy.DATE:
            ordered = sorted(self._tasks, key=lambda t: t.created_at, reverse=True)
        else:
            ordered = sorted(self._tasks, key=lambda t: STATUS_PRIORITY[t.status])
        self._tasks = ordered
        return list(ordered)
