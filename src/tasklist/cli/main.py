# src/tasklist/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState (store + task manager), then runs the
console REPL until /exit, EOF or Ctrl+C.
"""

from __future__ import annotations

import asyncio
import logging

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..core.errors import StoreError
from ..core.state import AppState
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


async def _shutdown(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        await state.manager.close()
    except Exception:
        logger.debug("Store close failed.", exc_info=True)


async def _run(settings) -> int:
    try:
        state = await create_initial_state(settings=settings)
    except (StoreError, RuntimeError) as e:
        logger.error("Cannot start: %s", e)
        return 1

    try:
        await run_console_loop(state)
    finally:
        await _shutdown(state)
    return 0


def main() -> int:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    log_dir = getattr(settings, "data_dir", ".local/tasklist")
    setup_logging(log_dir=log_dir, console_level=console_level)

    logger.info("Starting %s (store=%s)...", settings.app_name, settings.store_backend)

    try:
        code = asyncio.run(_run(settings))
    except KeyboardInterrupt:
        code = 0
    logger.info("Bye.")
    return code


if __name__ == "__main__":
    raise SystemExit(main())
