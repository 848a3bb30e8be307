# src/tasklist/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- No secrets required at import time.
- The store backend is chosen here, not inside the task manager.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

ENV_PREFIX = "TASKLIST"

STORE_BACKENDS = ("local", "remote")


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except Exception:
        return
    load_dotenv(override=False)


_load_dotenv_if_available()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path

    # ---- Store selection ----
    store_backend: str

    # ---- Local storage ----
    local_db_path: Path
    storage_slot: str

    # ---- Remote data service ----
    remote_url: str
    remote_table: str
    remote_api_key: Optional[str]
    remote_timeout_seconds: float

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "tasklist") or "tasklist"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/tasklist"))

        # Unknown values are kept as-is; bootstrap rejects them at startup.
        store_backend = _env(_k("STORE_BACKEND"), "local").strip().lower() or "local"

        local_db_path = _env_path(_k("LOCAL_DB_PATH"), data_dir / "storage.sqlite3")
        storage_slot = _env(_k("STORAGE_SLOT"), "todos").strip() or "todos"

        remote_url = (_env(_k("REMOTE_URL"), "") or "").strip().rstrip("/")
        remote_table = _env(_k("REMOTE_TABLE"), "todos").strip() or "todos"
        remote_api_key = _first_env(_k("REMOTE_API_KEY"), default=None)
        remote_timeout_seconds = _env_float(_k("REMOTE_TIMEOUT_SECONDS"), 10.0)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            store_backend=store_backend,
            local_db_path=local_db_path,
            storage_slot=storage_slot,
            remote_url=remote_url,
            remote_table=remote_table,
            remote_api_key=remote_api_key,
            remote_timeout_seconds=remote_timeout_seconds,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
