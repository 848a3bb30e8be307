# src/tasklist/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- picks the store adapter (local or remote) and wires it into a TaskManager,
- loads the initial collection.
"""

from __future__ import annotations

import logging

from ..config import STORE_BACKENDS, get_settings
from ..core.ports import TaskStoreAdapter
from ..core.state import AppState
from ..tasks.local_store import LocalTaskStore
from ..tasks.remote_store import RemoteTaskStore
from ..tasks.task_manager import TaskManager

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.local_db_path.parent.mkdir(parents=True, exist_ok=True)


def create_store(settings) -> TaskStoreAdapter:
    """
    Build the store adapter selected by settings.store_backend.

    An unknown backend name, or "remote" without a configured URL, is a
    configuration error, not a silent fallback to local storage.
    """
    backend = str(getattr(settings, "store_backend", "local")).lower()
    if backend not in STORE_BACKENDS:
        raise RuntimeError(
            f"Unknown store backend {backend!r}. Set TASKLIST_STORE_BACKEND to one of: "
            + ", ".join(STORE_BACKENDS)
        )
    if backend == "remote":
        url = getattr(settings, "remote_url", "") or ""
        if not url.strip():
            raise RuntimeError(
                "Remote store selected but no URL is set. Set TASKLIST_REMOTE_URL in your .env."
            )
        return RemoteTaskStore(
            url,
            table=settings.remote_table,
            api_key=settings.remote_api_key,
            timeout_seconds=settings.remote_timeout_seconds,
        )

    _ensure_local_dirs(settings)
    return LocalTaskStore(settings.local_db_path, slot=settings.storage_slot)


async def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings and load the collection.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    store = create_store(settings)
    manager = TaskManager(store)
    try:
        await manager.initialize()
    except Exception:
        await store.close()
        raise

    logger.info("Store backend=%s tasks=%d", settings.store_backend, len(manager.tasks))
    return AppState(settings=settings, manager=manager)
