# src/taskdeck/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The repository depends on a Protocol instead of the concrete SQLite store.
This keeps storage swappable and lets tests inject in-memory or failing stores.
"""

from collections.abc import Sequence
from typing import Any, Protocol


class TaskCollectionStore(Protocol):
    """Whole-collection persistence: read everything, overwrite everything."""

    async def read_all(self) -> list[Any]: ...

    async def write_all(self, tasks: Sequence[Any]) -> None: ...
