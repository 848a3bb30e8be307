# src/tasklist/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "tasklist.log"

# Minimum console level per third-party logger prefix.
# httpx/httpcore emit one INFO line per request to the remote store.
_CONSOLE_FLOORS: dict[str, int] = {
    "py.warnings": logging.ERROR,
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
}


class _ConsoleNoiseFilter(logging.Filter):
    """Pass every tasklist record; hold other loggers to their console floor."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith("tasklist."):
            return True
        top = record.name.split(".", 1)[0]
        return record.levelno >= _CONSOLE_FLOORS.get(top, logging.WARNING)


def setup_logging(
    *,
    log_dir: str | Path = ".local/tasklist",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> None:
    """Filtered stderr output for the prompt, full DEBUG trail in `log_dir/tasklist.log`."""
    path = Path(log_dir)
    path.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.addFilter(_ConsoleNoiseFilter())

    trail = logging.FileHandler(path / LOG_FILE_NAME, encoding="utf-8")
    trail.setLevel(file_level)

    for handler in (console, trail):
        handler.setFormatter(fmt)
        root.addHandler(handler)

    logging.captureWarnings(True)
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)
