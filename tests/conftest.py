# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from tasklist.core.state import AppState
from tasklist.tasks.local_store import LocalTaskStore
from tasklist.tasks.task_manager import TaskManager

from .fakes import FakeTaskStore


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and AppState.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="tasklist-test",
        log_level="DEBUG",
        data_dir=tmp_path,
        store_backend="local",
        local_db_path=tmp_path / "storage.sqlite3",
        storage_slot="todos",
        remote_url="",
        remote_table="todos",
        remote_api_key=None,
        remote_timeout_seconds=1.0,
    )


@pytest.fixture()
def fake_store() -> FakeTaskStore:
    return FakeTaskStore()


@pytest.fixture()
def manager(fake_store: FakeTaskStore) -> TaskManager:
    return TaskManager(fake_store)


@pytest.fixture()
def local_store(settings: SimpleNamespace) -> LocalTaskStore:
    return LocalTaskStore(settings.local_db_path, slot=settings.storage_slot)


@pytest.fixture()
def state(settings: SimpleNamespace, fake_store: FakeTaskStore) -> AppState:
    """
    AppState wired with the in-memory fake store.

    Command tests care about routing and rendering, not persistence.
    """
    return AppState(settings=settings, manager=TaskManager(fake_store))
