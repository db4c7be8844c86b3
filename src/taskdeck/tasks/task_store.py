# src/taskdeck/tasks/task_store.py

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import sqlite3
import time
from collections.abc import Sequence
from pathlib import Path

from .task_models import Task, task_from_record, task_to_record

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "@tasks"


class StoreError(Exception):
    """I/O or (de)serialization fault in the persistence layer."""


class TaskStore:
    """
    SQLite key/value store holding the whole task collection as one JSON blob.

    The store never looks inside tasks beyond encoding/decoding them; order is
    the order they were written in.

    Thread-safety:
    - each method opens its own SQLite connection
    - async methods run the blocking part in a worker thread
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3", *, key: str = DEFAULT_STORAGE_KEY) -> None:
        if not key or not key.strip():
            raise ValueError("storage key is required")
        self._db_path = Path(db_path)
        self._key = key
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        try:
            total = self.count_keys()
        except Exception:
            total = -1
        logger.info("TaskStore ready db=%s key=%s keys=%s", self._db_path, self._key, total)

    @property
    def key(self) -> str:
        return self._key

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv_store (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    def _load_blob(self) -> str | None:
        try:
            conn = self._get_conn()
            try:
                cur = conn.execute("SELECT value FROM kv_store WHERE key = ?", (self._key,))
                row = cur.fetchone()
                return None if row is None else str(row["value"])
            finally:
                conn.close()
        except sqlite3.Error as exc:
            raise StoreError(f"failed to read key {self._key!r}") from exc

    def _store_blob(self, blob: str) -> None:
        try:
            conn = self._get_conn()
            try:
                # one statement, one transaction: readers see old or new blob, never a mix
                with conn:
                    conn.execute(
                        """
                        INSERT INTO kv_store(key, value, updated_at)
                        VALUES (?, ?, ?)
                        ON CONFLICT(key) DO UPDATE SET
                            value = excluded.value,
                            updated_at = excluded.updated_at
                        """,
                        (self._key, blob, time.time()),
                    )
            finally:
                conn.close()
        except sqlite3.Error as exc:
            raise StoreError(f"failed to write key {self._key!r}") from exc

    @staticmethod
    def _decode(blob: str) -> list[Task]:
        try:
            data = json.loads(blob)
            if not isinstance(data, list):
                raise ValueError(f"expected a list, got {type(data).__name__}")
            return [task_from_record(rec) for rec in data]
        except ValueError as exc:
            # json.JSONDecodeError is a ValueError
            raise StoreError("stored task collection is corrupted") from exc

    @staticmethod
    def _encode(tasks: Sequence[Task]) -> str:
        try:
            return json.dumps([task_to_record(t) for t in tasks], ensure_ascii=False)
        except (TypeError, ValueError, AttributeError) as exc:
            raise StoreError("failed to encode task collection") from exc

    # ---- sync API ----

    def count_keys(self) -> int:
        conn = self._get_conn()
        try:
            (n,) = conn.execute("SELECT COUNT(*) FROM kv_store").fetchone()
            return int(n)
        finally:
            conn.close()

    def load(self) -> list[Task]:
        """Strict read: [] if never written, StoreError on any fault."""
        blob = self._load_blob()
        if blob is None:
            return []
        return self._decode(blob)

    def save(self, tasks: Sequence[Task]) -> None:
        blob = self._encode(tasks)
        self._store_blob(blob)
        logger.debug("TaskStore saved %d tasks key=%s", len(tasks), self._key)

    # ---- async API (used by the repository) ----

    async def read_all(self) -> list[Task]:
        """
        Return the stored collection.

        A fault degrades to an empty list (logged), so a corrupted store reads
        as "no tasks". Callers cannot tell that apart from a real empty store.
        """
        try:
            return await asyncio.to_thread(self.load)
        except StoreError:
            logger.exception("TaskStore read failed; falling back to empty collection key=%s", self._key)
            return []

    async def write_all(self, tasks: Sequence[Task]) -> None:
        """Overwrite the whole collection. Raises StoreError on failure."""
        await asyncio.to_thread(self.save, list(tasks))
