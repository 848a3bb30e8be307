# src/tasklist/tasks/local_store.py

from __future__ import annotations

import contextlib
import json
import logging
import sqlite3
import time
from dataclasses import replace
from datetime import date, datetime
from pathlib import Path
from typing import Any

from ..core.errors import StoreError
from .task_models import DEFAULT_CATEGORY, Task, TaskId, parse_due_date, parse_timestamp

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = frozenset({"text", "completed", "category", "due_date"})


class LocalTaskStore:
    """
    Local-storage task store.

    Mirrors a browser localStorage slot: one named slot holds the JSON array
    of every task record. The slot lives in a tiny SQLite key/value table so
    writes are atomic.

    - list() reads the slot wholesale
    - every successful mutation rewrites the slot wholesale
    - ids are clock-derived (milliseconds), records are appended

    Thread-safety:
    - each method opens its own SQLite connection
    """

    newest_first = False

    def __init__(self, db_path: str | Path = "storage.sqlite3", *, slot: str = "todos") -> None:
        self._db_path = Path(db_path)
        self._slot = slot
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            self._ensure_schema()
        except sqlite3.Error as e:
            raise StoreError(f"cannot open local storage at {self._db_path}") from e
        logger.info("LocalTaskStore ready db=%s slot=%s", self._db_path, self._slot)

    async def close(self) -> None:
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
                CREATE TABLE IF NOT EXISTS slots (
                    name TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    def _read_slot(self) -> str | None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT value FROM slots WHERE name = ?", (self._slot,))
            row = cur.fetchone()
            return None if row is None else str(row["value"])
        finally:
            conn.close()

    def _write_slot(self, value: str) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO slots(name, value) VALUES (?, ?)
                ON CONFLICT(name) DO UPDATE SET value = excluded.value
                """,
                (self._slot, value),
            )
            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _task_to_record(task: Task) -> dict[str, Any]:
        return {
            "id": task.id,
            "text": task.text,
            "completed": task.completed,
            "category": task.category,
            "dueDate": task.due_date.isoformat() if task.due_date else None,
            "createdAt": task.created_at.isoformat(),
        }

    @staticmethod
    def _record_to_task(raw: dict[str, Any]) -> Task | None:
        text = raw.get("text")
        tid = raw.get("id")
        if not isinstance(text, str) or not text.strip() or tid is None:
            return None
        try:
            created_at = parse_timestamp(raw.get("createdAt") or tid)
        except ValueError:
            created_at = datetime.fromtimestamp(0).astimezone()
        try:
            due_date = parse_due_date(raw.get("dueDate"))
        except ValueError:
            due_date = None
        return Task(
            id=tid,
            text=text,
            completed=bool(raw.get("completed", False)),
            category=str(raw.get("category") or DEFAULT_CATEGORY),
            due_date=due_date,
            created_at=created_at,
        )

    def _load(self) -> list[Task]:
        try:
            raw = self._read_slot()
        except sqlite3.Error as e:
            raise StoreError("failed to read local storage") from e
        if raw is None:
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StoreError(f"slot {self._slot!r} holds malformed JSON") from e
        if not isinstance(data, list):
            raise StoreError(f"slot {self._slot!r} does not hold a list")

        out: list[Task] = []
        for item in data:
            task = self._record_to_task(item) if isinstance(item, dict) else None
            if task is None:
                logger.warning("Skipping malformed task record in slot %s: %r", self._slot, item)
                continue
            out.append(task)
        return out

    def _save(self, tasks: list[Task]) -> None:
        payload = json.dumps([self._task_to_record(t) for t in tasks], ensure_ascii=False)
        try:
            self._write_slot(payload)
        except sqlite3.Error as e:
            raise StoreError("failed to write local storage") from e
        logger.debug("Slot %s saved (%d tasks)", self._slot, len(tasks))

    @staticmethod
    def _next_id(tasks: list[Task]) -> int:
        tid = int(time.time() * 1000)
        taken = [t.id for t in tasks if isinstance(t.id, int)]
        if taken and tid <= max(taken):
            tid = max(taken) + 1
        return tid

    @staticmethod
    def _index_of(tasks: list[Task], task_id: TaskId) -> int:
        for i, t in enumerate(tasks):
            if t.id == task_id:
                return i
        raise StoreError(f"task {task_id!r} is not in local storage")

    # ---- public API ----

    async def list(self) -> list[Task]:
        return self._load()

    async def create(
        self,
        *,
        text: str,
        completed: bool,
        category: str,
        due_date: date | None,
    ) -> Task:
        tasks = self._load()
        task = Task(
            id=self._next_id(tasks),
            text=text,
            completed=completed,
            category=category,
            due_date=due_date,
            created_at=datetime.now().astimezone(),
        )
        tasks.append(task)
        self._save(tasks)
        logger.debug("Task created id=%s category=%s due=%s", task.id, task.category, task.due_date)
        return task

    async def update(self, task_id: TaskId, fields: dict[str, Any]) -> None:
        unknown = set(fields) - _UPDATABLE_FIELDS
        if unknown:
            raise StoreError(f"unsupported fields: {sorted(unknown)}")
        tasks = self._load()
        i = self._index_of(tasks, task_id)
        tasks[i] = replace(tasks[i], **fields)
        self._save(tasks)

    async def delete(self, task_id: TaskId) -> None:
        tasks = self._load()
        i = self._index_of(tasks, task_id)
        del tasks[i]
        self._save(tasks)
