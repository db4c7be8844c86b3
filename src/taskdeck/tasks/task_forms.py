# src/taskdeck/tasks/task_forms.py

"""Add/edit form handling: title validation and building full replacement records."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime

from .task_models import Task
from .task_repository import TaskRepository

TITLE_REQUIRED = "Title is required"


class FormError(ValueError):
    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = dict(errors)
        super().__init__("; ".join(f"{k}: {v}" for k, v in self.errors.items()))


def validate_task_form(title: str | None) -> dict[str, str]:
    errors: dict[str, str] = {}
    if not (title or "").strip():
        errors["title"] = TITLE_REQUIRED
    return errors


@dataclass(slots=True)
class TaskForm:
    title: str = ""
    description: str = ""
    location: str = ""
    date_time: datetime | None = None

    @classmethod
    def from_task(cls, task: Task) -> TaskForm:
        return cls(
            title=task.title,
            description=task.description,
            location=task.location,
            date_time=task.date_time,
        )

    def validate(self) -> None:
        errors = validate_task_form(self.title)
        if errors:
            raise FormError(errors)


def build_new_task(repo: TaskRepository, form: TaskForm) -> Task:
    form.validate()
    return repo.create(
        title=form.title,
        description=form.description,
        date_time=form.date_time,
        location=form.location,
    )


def apply_form(task: Task, form: TaskForm) -> Task:
    """Overlay form fields on an existing task; id, status and created_at are kept."""
    form.validate()
    return replace(
        task,
        title=form.title,
        description=form.description,
        location=form.location,
        date_time=form.date_time or task.date_time,
    )


def submit_message(mode: str, ok: bool) -> str:
    verb_done = "updated" if mode == "edit" else "created"
    verb = "update" if mode == "edit" else "create"
    if ok:
        return f"Task {verb_done} successfully!"
    return f"Failed to {verb} task. Please try again."
