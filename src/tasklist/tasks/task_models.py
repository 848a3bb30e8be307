# src/tasklist/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from ..core.errors import ValidationError

DEFAULT_CATEGORY = "General"
ALL_CATEGORIES = "all"

TaskId = int | str


@dataclass(frozen=True, slots=True)
class Task:
    """
    A single to-do record.

    Frozen: mutations produce a new Task via dataclasses.replace(), so a
    record handed to the front end never changes under its feet.
    """

    id: TaskId
    text: str
    completed: bool
    category: str
    due_date: date | None
    created_at: datetime


@dataclass(frozen=True, slots=True)
class TaskStats:
    total: int
    active: int
    completed: int


@dataclass(slots=True)
class EditSession:
    """Task currently being edited, with its uncommitted draft text."""

    task_id: TaskId
    draft: str


def normalize_text(value: str | None) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationError("text is required")
    return text


def normalize_category(value: str | None) -> str:
    category = (value or "").strip()
    return category or DEFAULT_CATEGORY


def parse_due_date(value: Any) -> date | None:
    """
    Accepts None / "" (no deadline), a date, a datetime (date part kept)
    or an ISO "YYYY-MM-DD" string.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        try:
            # Tolerate full ISO timestamps ("2024-06-15T00:00:00.000Z").
            return date.fromisoformat(s[:10])
        except ValueError as e:
            raise ValidationError(f"invalid due date: {value!r}") from e
    raise ValidationError(f"invalid due date: {value!r}")


def parse_timestamp(value: Any) -> datetime:
    """Best-effort ISO timestamp parsing for created_at fields."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(float(value) / 1000.0).astimezone()
        except (OverflowError, OSError) as e:
            raise ValueError(f"timestamp out of range: {value!r}") from e
    if isinstance(value, str) and value.strip():
        s = value.strip()
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        return datetime.fromisoformat(s)
    raise ValueError(f"invalid timestamp: {value!r}")
