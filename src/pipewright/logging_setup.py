# src/pipewright/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the console readable while tools run:
    - allow all pipewright logs
    - suppress watchdog/aiohttp/asyncio chatter unless WARNING+
    - suppress Python warnings (captured as 'py.warnings') unless ERROR+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name

        if name.startswith("pipewright."):
            return True

        if name == "py.warnings":
            return record.levelno >= logging.ERROR

        # The observer thread reports every inotify event at DEBUG.
        if name.startswith(("watchdog", "aiohttp", "asyncio")):
            return record.levelno >= logging.WARNING

        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/pipewright",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> None:
    """
    Configure logging with:
    - Console handler: terse, filtered
    - File handler: everything, including tool command lines

    Call this ONCE, before the first task runs.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "pipewright.log"

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    for h in list(root.handlers):
        root.removeHandler(h)

    console_fmt = logging.Formatter(
        fmt="[%(asctime)s] %(message)s",
        datefmt="%H:%M:%S",
    )
    file_fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(console_level)
    ch.setFormatter(console_fmt)
    ch.addFilter(_ConsoleNoiseFilter())
    root.addHandler(ch)

    fh = logging.FileHandler(str(log_file), encoding="utf-8")
    fh.setLevel(file_level)
    fh.setFormatter(file_fmt)
    root.addHandler(fh)

    logging.captureWarnings(True)
