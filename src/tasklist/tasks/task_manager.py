# src/tasklist/tasks/task_manager.py

from __future__ import annotations

"""
Task manager.

Owns the canonical in-memory task collection and keeps the store adapter
consistent with it:

- every mutation goes to the store first and touches memory only after
  the store call returned,
- mutations are serialized (one at a time) through an asyncio.Lock,
- derived views (categories, filtered list, stats, overdue) are computed
  on demand and never stored.

The adapter is injected at construction time; the manager does not know
whether it is local or remote.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, time
from typing import Any

from ..core.errors import ValidationError
from ..core.ports import TaskStoreAdapter
from .task_models import (
    ALL_CATEGORIES,
    EditSession,
    Task,
    TaskId,
    TaskStats,
    normalize_category,
    normalize_text,
    parse_due_date,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _local_now() -> datetime:
    return datetime.now().astimezone()


class TaskManager:
    def __init__(self, store: TaskStoreAdapter, *, clock: Clock | None = None) -> None:
        self._store = store
        self._clock = clock or _local_now
        self._tasks: list[Task] = []
        self._filter = ALL_CATEGORIES
        self._editing: EditSession | None = None
        self._lock = asyncio.Lock()

    # ---- read access ----

    @property
    def tasks(self) -> list[Task]:
        return list(self._tasks)

    @property
    def category_filter(self) -> str:
        return self._filter

    @property
    def editing(self) -> EditSession | None:
        return self._editing

    def get_task(self, task_id: TaskId) -> Task | None:
        for t in self._tasks:
            if t.id == task_id:
                return t
        return None

    def _index_of(self, task_id: TaskId) -> int | None:
        for i, t in enumerate(self._tasks):
            if t.id == task_id:
                return i
        return None

    # ---- lifecycle ----

    async def initialize(self) -> None:
        """Load the whole collection from the store, replacing in-memory state."""
        async with self._lock:
            tasks = await self._store.list()
            self._tasks = list(tasks)
            if self._editing is not None and self.get_task(self._editing.task_id) is None:
                self._editing = None
            logger.info("Loaded %d tasks", len(self._tasks))

    async def close(self) -> None:
        await self._store.close()

    # ---- mutations ----

    async def add_task(
        self,
        text: str,
        category: str | None = None,
        due_date: Any = None,
    ) -> Task | None:
        """
        Create a task. Returns the stored record, or None when the input was
        rejected (empty text, unparsable due date).

        Raises StoreError if persisting fails; memory is left untouched.
        """
        try:
            clean_text = normalize_text(text)
            due = parse_due_date(due_date)
        except ValidationError as e:
            logger.debug("add_task ignored: %s", e)
            return None

        async with self._lock:
            task = await self._store.create(
                text=clean_text,
                completed=False,
                category=normalize_category(category),
                due_date=due,
            )
            if self._store.newest_first:
                self._tasks.insert(0, task)
            else:
                self._tasks.append(task)
            logger.info("Task added id=%s category=%s", task.id, task.category)
            return task

    async def delete_task(self, task_id: TaskId) -> None:
        async with self._lock:
            i = self._index_of(task_id)
            if i is None:
                logger.debug("delete_task ignored: id=%s not present", task_id)
                return
            await self._store.delete(task_id)
            del self._tasks[i]
            if self._editing is not None and self._editing.task_id == task_id:
                self._editing = None
            logger.info("Task deleted id=%s", task_id)

    async def toggle_completed(self, task_id: TaskId) -> Task | None:
        async with self._lock:
            i = self._index_of(task_id)
            if i is None:
                logger.debug("toggle_completed ignored: id=%s not present", task_id)
                return None
            completed = not self._tasks[i].completed
            await self._store.update(task_id, {"completed": completed})
            task = replace(self._tasks[i], completed=completed)
            self._tasks[i] = task
            logger.info("Task id=%s completed=%s", task_id, completed)
            return task

    async def edit_text(self, task_id: TaskId, new_text: str) -> Task | None:
        try:
            clean_text = normalize_text(new_text)
        except ValidationError as e:
            logger.debug("edit_text ignored: %s", e)
            return None

        async with self._lock:
            i = self._index_of(task_id)
            if i is None:
                logger.debug("edit_text ignored: id=%s not present", task_id)
                return None
            await self._store.update(task_id, {"text": clean_text})
            task = replace(self._tasks[i], text=clean_text)
            self._tasks[i] = task
            logger.info("Task id=%s text edited", task_id)
            return task

    # ---- edit session (UI state, never persisted) ----

    def start_edit(self, task_id: TaskId) -> EditSession | None:
        """Open an edit session; any other open session is discarded unsaved."""
        task = self.get_task(task_id)
        if task is None:
            return None
        if self._editing is not None and self._editing.task_id != task_id:
            logger.debug("Discarding unsaved draft for id=%s", self._editing.task_id)
        self._editing = EditSession(task_id=task.id, draft=task.text)
        return self._editing

    def update_draft(self, text: str) -> None:
        if self._editing is not None:
            self._editing.draft = text

    async def save_edit(self) -> Task | None:
        """
        Commit the draft. Empty draft: no-op, session stays open.
        StoreError propagates and the session stays open as well.
        """
        session = self._editing
        if session is None or not session.draft.strip():
            return None
        task = await self.edit_text(session.task_id, session.draft)
        if self._editing is session:
            self._editing = None
        return task

    def cancel_edit(self) -> None:
        self._editing = None

    # ---- derived views ----

    def set_category_filter(self, category: str) -> None:
        self._filter = category

    def derived_categories(self) -> list[str]:
        # dict keeps first-appearance order
        seen = dict.fromkeys(t.category for t in self._tasks)
        return [ALL_CATEGORIES, *seen]

    def filtered_tasks(self) -> list[Task]:
        if self._filter == ALL_CATEGORIES:
            return list(self._tasks)
        return [t for t in self._tasks if t.category == self._filter]

    def stats(self) -> TaskStats:
        tasks = self.filtered_tasks()
        completed = sum(1 for t in tasks if t.completed)
        return TaskStats(total=len(tasks), active=len(tasks) - completed, completed=completed)

    def is_overdue(self, task: Task, now: datetime | None = None) -> bool:
        """
        Due before now and not due today.

        A task due today is never overdue, whatever the time of day.
        """
        if task.due_date is None:
            return False
        now = now or self._clock()
        due_start = datetime.combine(task.due_date, time.min, tzinfo=now.tzinfo)
        return due_start < now and task.due_date != now.date()
