# src/pipewright/adapters/alert.py

from __future__ import annotations

import logging
import sys
from typing import TextIO

logger = logging.getLogger(__name__)

BELL = "\a"


class TerminalBell:
    """Audible alert: BEL on stderr."""

    def __init__(self, *, enabled: bool = True, stream: TextIO | None = None) -> None:
        self._enabled = enabled
        self._stream = stream

    def alert(self, reason: str) -> None:
        logger.debug("alert: %s", reason)
        if not self._enabled:
            return
        stream = self._stream or sys.stderr
        try:
            stream.write(BELL)
            stream.flush()
        except (OSError, ValueError):
            # Closed or detached stream; the failure itself has already been logged.
            logger.debug("Could not ring bell", exc_info=True)
