# src/taskdeck/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..tasks.task_models import SortBy
from ..tasks.task_repository import TaskRepository
from .ports import TaskCollectionStore


@dataclass
class AppState:
    # Settings kept on the state so command handlers can read them.
    settings: object

    task_store: TaskCollectionStore
    tasks: TaskRepository

    sort_by: SortBy = SortBy.DATE
