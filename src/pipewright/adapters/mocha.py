# src/pipewright/adapters/mocha.py

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from ..core.models import TestOutcome
from .process import node_tool, run_command

logger = logging.getLogger(__name__)


class MochaRunner:
    """
    Run mocha over an explicit, ordered file list.

    Files are passed in the given order; mocha loads them in that order, which
    is what lets the setup file install globals for the rest. Reporter output
    goes straight to the terminal.
    """

    def __init__(self, root: Path, *, reporter: str = "dot", prefix: Sequence[str] = ()) -> None:
        self._root = root
        self._reporter = reporter
        self._prefix = tuple(prefix)

    def wrapped(self, prefix: Sequence[str]) -> MochaRunner:
        """Same runner, launched through another command (e.g. a coverage wrapper)."""
        return MochaRunner(self._root, reporter=self._reporter, prefix=(*prefix, *self._prefix))

    def command(self, files: Sequence[Path], *, grep: str | None = None, globals_: Sequence[str] = ()) -> list[str]:
        # mocha only consults --globals when the leak check is on.
        argv = [*self._prefix, *node_tool("mocha", self._root), "--reporter", self._reporter, "--check-leaks"]
        if grep:
            argv += ["--grep", grep]
        if globals_:
            argv += ["--globals", ",".join(globals_)]
        argv += [str(f) for f in files]
        return argv

    async def run(
        self,
        files: Sequence[Path],
        *,
        grep: str | None = None,
        globals_: Sequence[str] = (),
    ) -> TestOutcome:
        if not files:
            logger.warning("No test files found")
            return TestOutcome(returncode=0)
        result = await run_command(self.command(files, grep=grep, globals_=globals_), cwd=self._root, capture=False)
        return TestOutcome(returncode=result.returncode)
