# src/taskdeck/tasks/task_models.py

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any


class TaskStatus(StrEnum):
    """
    Task lifecycle status.

    Values are the literal strings written to storage.
    Any status may move to any other status (no workflow guards).
    """

    TODO = "To Do"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"

    @classmethod
    def from_record(cls, raw: str | None) -> TaskStatus:
        if not raw:
            return cls.TODO
        try:
            return cls(raw)
        except ValueError:
            return cls.TODO


class SortBy(StrEnum):
    DATE = "date"
    STATUS = "status"


# Lower sorts first.
STATUS_PRIORITY: dict[TaskStatus, int] = {
    TaskStatus.IN_PROGRESS: 1,
    TaskStatus.TODO: 2,
    TaskStatus.COMPLETED: 3,
    TaskStatus.CANCELLED: 4,
}


def transition(current: TaskStatus, new_status: TaskStatus) -> TaskStatus:
    """Status state machine: fully connected, a self-loop is a no-op."""
    return new_status


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_aware(ts: datetime) -> datetime:
    return ts if ts.tzinfo is not None else ts.astimezone()


def generate_task_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True, slots=True)
class Task:
    id: str
    title: str
    description: str = ""
    location: str = ""
    date_time: datetime = field(default_factory=utcnow)
    status: TaskStatus = TaskStatus.TODO
    created_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        # Naive timestamps are local time; stored values always carry an offset.
        object.__setattr__(self, "date_time", as_aware(self.date_time))
        object.__setattr__(self, "created_at", as_aware(self.created_at))


def create_task(
    title: str = "",
    description: str = "",
    date_time: datetime | None = None,
    location: str = "",
    status: TaskStatus = TaskStatus.TODO,
) -> Task:
    """
    Build a new Task with a fresh id and creation timestamp.

    date_time defaults to the creation time. Nothing is persisted here.
    """
    now = utcnow()
    return Task(
        id=generate_task_id(),
        title=title,
        description=description,
        location=location,
        date_time=date_time or now,
        status=status,
        created_at=now,
    )


# ---- wire format ----


def _ts_to_str(ts: datetime) -> str:
    return ts.isoformat()


def _str_to_ts(raw: Any) -> datetime:
    if not isinstance(raw, str) or not raw.strip():
        raise ValueError(f"bad timestamp: {raw!r}")
    s = raw.strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    return as_aware(datetime.fromisoformat(s))


def task_to_record(task: Task) -> dict[str, Any]:
    return {
        "id": task.id,
        "title": task.title,
        "description": task.description,
        "location": task.location,
        "dateTime": _ts_to_str(task.date_time),
        "status": task.status.value,
        "createdAt": _ts_to_str(task.created_at),
    }


def task_from_record(rec: Any) -> Task:
    """
    Decode one stored record.

    Raises ValueError for records that cannot be trusted (not an object,
    missing id, unparsable timestamps). Optional strings default to "".
    """
    if not isinstance(rec, dict):
        raise ValueError(f"task record must be an object, got {type(rec).__name__}")

    task_id = rec.get("id")
    if not isinstance(task_id, str) or not task_id:
        raise ValueError("task record has no id")

    created_at = _str_to_ts(rec.get("createdAt"))
    raw_dt = rec.get("dateTime")
    date_time = _str_to_ts(raw_dt) if raw_dt else created_at

    return Task(
        id=task_id,
        title=str(rec.get("title") or ""),
        description=str(rec.get("description") or ""),
        location=str(rec.get("location") or ""),
        date_time=date_time,
        status=TaskStatus.from_record(rec.get("status")),
        created_at=created_at,
    )
