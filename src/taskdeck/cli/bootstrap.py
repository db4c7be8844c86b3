# src/taskdeck/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the SQLite task store and the repository into AppState.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.state import AppState
from ..tasks.task_models import SortBy
from ..tasks.task_repository import TaskRepository
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    store = TaskStore(settings.tasks_db_path, key=getattr(settings, "storage_key", "@tasks"))
    state = AppState(
        settings=settings,
        task_store=store,
        tasks=TaskRepository(store),
        sort_by=SortBy(getattr(settings, "default_sort", "date")),
    )
    return state


async def load_initial_tasks(state: AppState) -> None:
    """Initial load + the configured view order (what the list screen does on mount)."""
    result = await state.tasks.reload()
    if not result.ok:
        logger.warning("Initial task load failed: %s", result.error)
        return
    state.tasks.sort(state.sort_by)
    logger.info("Loaded %d tasks (sort=%s)", len(result.tasks), state.sort_by.value)
