# src/pipewright/pipeline/lint.py

from __future__ import annotations

import logging
from collections.abc import Sequence

from ..config import Settings
from ..core.fileset import NEGATION, resolve
from ..core.ports import Alerter, Linter
from ..errors import LintViolation
from .grammar import generated_parser_path

logger = logging.getLogger(__name__)


def source_patterns(settings: Settings) -> list[str]:
    """Library source minus the generated parser (generated, not authored)."""
    parser = settings.relative(generated_parser_path(settings))
    return [*settings.src_patterns, f"{NEGATION}{parser}"]


def test_patterns(settings: Settings) -> list[str]:
    return list(settings.test_patterns)


def build_script_patterns(settings: Settings) -> list[str]:
    return list(settings.build_script_patterns)


class QualityGate:
    """
    Lint one file-set at a time and stop at the first file with errors.

    Warnings are reported but never fail the gate.
    """

    def __init__(self, settings: Settings, linter: Linter, alerter: Alerter) -> None:
        self._settings = settings
        self._linter = linter
        self._alerter = alerter

    async def check(self, label: str, patterns: Sequence[str]) -> int:
        files = resolve(patterns, self._settings.project_root)
        if not files:
            logger.info("lint %s: no files", label)
            return 0

        logger.debug("lint %s: %d files", label, len(files))
        reports = await self._linter.lint(files.absolute())

        for report in reports:
            for w in report.warnings:
                logger.warning("%s", w.render())
            errors = report.errors
            if errors:
                for v in errors:
                    logger.error("%s", v.render())
                self._alerter.alert(f"lint failed in {report.path}")
                raise LintViolation(errors)

        logger.info("lint %s: %d files clean", label, len(files))
        return len(files)

    async def check_sources(self) -> int:
        return await self.check("src", source_patterns(self._settings))

    async def check_tests(self) -> int:
        return await self.check("test", test_patterns(self._settings))

    async def check_build_scripts(self) -> int:
        return await self.check("build scripts", build_script_patterns(self._settings))
