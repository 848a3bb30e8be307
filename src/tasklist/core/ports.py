# src/tasklist/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The task manager depends on a Protocol instead of a concrete store.
This keeps local/remote persistence swappable and makes testing easier.
"""

from datetime import date
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from ..tasks.task_models import Task, TaskId


class TaskStoreAdapter(Protocol):
    """
    Durable task collection.

    Contract:
    - every method may suspend; callers always await
    - any failure raises StoreError (nothing is swallowed)
    - `fields` in update() uses in-memory names ("text", "completed");
      mapping to the durable representation is the adapter's job
    - newest_first tells the manager where a created record belongs:
      True -> front of the list, False -> appended
    """

    newest_first: bool

    async def list(self) -> list[Task]: ...

    async def create(
        self,
        *,
        text: str,
        completed: bool,
        category: str,
        due_date: date | None,
    ) -> Task: ...

    async def update(self, task_id: TaskId, fields: dict[str, Any]) -> None: ...

    async def delete(self, task_id: TaskId) -> None: ...

    async def close(self) -> None: ...
