# src/pipewright/adapters/nyc.py

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Protocol, cast

from ..core.models import CoverageReport, FileCoverage
from ..core.ports import TestRunner
from ..errors import ToolError
from .process import node_tool, run_command

logger = logging.getLogger(__name__)


class WrappableRunner(TestRunner, Protocol):
    def wrapped(self, prefix: Sequence[str]) -> TestRunner: ...


def _relative(path: str, root: Path) -> str:
    try:
        return Path(path).resolve().relative_to(root.resolve()).as_posix()
    except ValueError:
        return path


def parse_istanbul(payload: dict[str, Any], root: Path) -> list[FileCoverage]:
    """Counters from one istanbul coverage JSON object ({abs_path: {s, b, f, ...}})."""
    out: list[FileCoverage] = []
    for key, data in payload.items():
        if not isinstance(data, dict):
            continue
        out.append(
            FileCoverage(
                path=_relative(str(data.get("path") or key), root),
                statements={str(k): int(v) for k, v in (data.get("s") or {}).items()},
                branches={str(k): [int(h) for h in v] for k, v in (data.get("b") or {}).items()},
                functions={str(k): int(v) for k, v in (data.get("f") or {}).items()},
            )
        )
    return out


class NycInstrumentor:
    """
    Coverage through nyc: the test command runs under `nyc --silent`, which
    hooks require() for the included files; reports are produced afterwards
    from the raw data nyc leaves in its temp dir.
    """

    def __init__(
        self,
        root: Path,
        *,
        reporters: Sequence[str],
        report_dir: Path,
        temp_dir: str = ".nyc_output",
    ) -> None:
        self._root = root
        self._reporters = list(reporters)
        self._report_dir = report_dir
        self._temp_dir = temp_dir

    @property
    def temp_path(self) -> Path:
        return self._root / self._temp_dir

    def instrument(self, runner: TestRunner, *, include: Sequence[Path]) -> TestRunner:
        if not hasattr(runner, "wrapped"):
            raise TypeError(f"{type(runner).__name__} cannot be run under nyc")
        prefix = [*node_tool("nyc", self._root), "--silent", "--temp-dir", self._temp_dir]
        for path in include:
            prefix += ["--include", _relative(str(path), self._root)]
        return cast(WrappableRunner, runner).wrapped(prefix)

    async def collect(self) -> CoverageReport:
        report = CoverageReport()
        if not self.temp_path.is_dir():
            logger.warning("No coverage data in %s", self.temp_path)
            return report
        for raw in sorted(self.temp_path.glob("*.json")):
            try:
                payload = json.loads(raw.read_text("utf-8"))
            except json.JSONDecodeError:
                logger.warning("Skipping unreadable coverage file %s", raw)
                continue
            for cov in parse_istanbul(payload, self._root):
                report.add(cov)
        return report

    async def write_reports(self) -> None:
        argv = [
            *node_tool("nyc", self._root),
            "report",
            "--temp-dir",
            self._temp_dir,
            "--report-dir",
            str(self._report_dir),
        ]
        argv += [f"--reporter={r}" for r in self._reporters]
        result = await run_command(argv, cwd=self._root, capture=False)
        if result.returncode != 0:
            raise ToolError("nyc", result.returncode, "report generation failed")
        logger.info("Coverage reports written to %s", self._report_dir)
