# src/pipewright/pipeline/node_tests.py

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from ..config import Settings
from ..core.fileset import FileSet, resolve
from ..core.models import TestOutcome
from ..core.ports import TestRunner
from ..errors import TestFailure

logger = logging.getLogger(__name__)


def node_test_files(settings: Settings) -> FileSet:
    """Setup file first (it installs shared globals), then unit, then integration tests."""
    patterns = [
        settings.node_setup_file,
        *settings.unit_test_patterns,
        *settings.integration_test_patterns,
    ]
    files = resolve(patterns, settings.project_root)
    if settings.node_setup_file.removeprefix("./") not in files.paths:
        logger.warning("Test setup file %s not found", settings.node_setup_file)
    return files


def load_known_globals(path: Path) -> list[str]:
    """Names from the `globals` object of the test globals file; [] if there is none."""
    if not path.is_file():
        return []
    data = json.loads(path.read_text("utf-8"))
    names = data.get("globals") if isinstance(data, dict) else None
    if not isinstance(names, dict):
        logger.warning("%s has no 'globals' object; ignoring", path)
        return []
    return list(names)


class NodeTests:
    def __init__(self, settings: Settings, runner: TestRunner) -> None:
        self._settings = settings
        self._runner = runner

    def enter_test_mode(self) -> None:
        os.environ[self._settings.test_env_var] = self._settings.test_env_value

    async def run(self, *, grep: str | None = None, runner: TestRunner | None = None) -> TestOutcome:
        """
        Run the headless suite. `runner` overrides the configured runner
        (coverage passes an instrumented one).
        """
        settings = self._settings
        self.enter_test_mode()

        files = node_test_files(settings)
        globals_ = load_known_globals(settings.mocha_globals_path)
        if grep:
            logger.info("Running %d test files (grep=%r)", len(files), grep)
        else:
            logger.info("Running %d test files", len(files))

        outcome = await (runner or self._runner).run(files.absolute(), grep=grep, globals_=globals_)
        if not outcome.passed:
            raise TestFailure(outcome)
        return outcome
