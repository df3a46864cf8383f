# src/pipewright/pipeline/coverage.py

from __future__ import annotations

import logging

from ..config import Settings
from ..core.fileset import FileSet, resolve
from ..core.models import CoverageReport
from ..core.ports import CoverageInstrumentor, TestRunner
from ..errors import PipelineError, TestFailure
from .lint import source_patterns
from .node_tests import NodeTests

logger = logging.getLogger(__name__)


def coverage_sources(settings: Settings) -> FileSet:
    """Same scope as source lint: authored library code, never the generated parser."""
    return resolve(source_patterns(settings), settings.project_root)


class CoverageRun:
    """
    Instrument library sources, run the node suite, then always write reports.

    A failing suite still produces reports for what was collected; the
    TestFailure is re-raised afterwards.
    """

    def __init__(
        self,
        settings: Settings,
        tests: NodeTests,
        instrumentor: CoverageInstrumentor,
        base_runner: TestRunner,
    ) -> None:
        self._settings = settings
        self._tests = tests
        self._instrumentor = instrumentor
        self._base_runner = base_runner

    async def run(self, *, grep: str | None = None) -> CoverageReport:
        include = coverage_sources(self._settings)
        logger.info("Instrumenting %d source files", len(include))
        runner = self._instrumentor.instrument(self._base_runner, include=include.absolute())

        failure: TestFailure | None = None
        try:
            await self._tests.run(grep=grep, runner=runner)
        except TestFailure as e:
            failure = e
            logger.warning("Tests failed; writing coverage for what was collected")

        report = await self._instrumentor.collect()
        for line in report.summary_lines():
            logger.info("%s", line)
        try:
            await self._instrumentor.write_reports()
        except PipelineError as e:
            if failure is None:
                raise
            # The failing suite stays the reported outcome.
            logger.error("Writing coverage reports failed: %s", e)

        if failure is not None:
            raise failure
        return report
