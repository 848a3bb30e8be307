# src/tasklist/core/errors.py

from __future__ import annotations


class TaskError(Exception):
    """Base class for task manager errors."""


class ValidationError(TaskError, ValueError):
    """
    Rejected user input (empty text, unparsable due date).

    The manager handles it locally: the operation becomes a no-op.
    """


class StoreError(TaskError):
    """
    Any failure reported by a store adapter.

    Always propagates to the caller. In-memory state is never updated
    past a StoreError.
    """
