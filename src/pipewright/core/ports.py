# src/pipewright/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the pipeline.

Every external tool (linter, bundler, grammar compiler, test runner, coverage
instrumentor, live-reload listener) is reached through a Protocol, so the
orchestration logic can be exercised with fakes and the tools swapped.
"""

from collections.abc import Awaitable, Callable, Sequence
from pathlib import Path
from typing import Protocol

from .models import Artifact, BuildTarget, CoverageReport, FileReport, TestOutcome

OnBuilt = Callable[[Artifact], Awaitable[None]]
OnBuildFailed = Callable[[str], Awaitable[None]]


class Linter(Protocol):
    async def lint(self, files: Sequence[Path]) -> list[FileReport]: ...


class GrammarCompiler(Protocol):
    async def compile(self, grammar_path: Path) -> str:
        """Return the generated parser module source. Raise CompileError on a bad grammar."""
        ...


class Bundler(Protocol):
    async def bundle(self, entries: Sequence[Path], target: BuildTarget, out_dir: Path) -> Artifact:
        """Compile `entries` into `out_dir/target.filename`. Raise CompileError on failure."""
        ...

    async def watch(
            self,
            entries: Sequence[Path],
            target: BuildTarget,
            out_dir: Path,
            on_built: OnBuilt,
            on_failed: OnBuildFailed,
    ) -> None:
        """Rebuild on every input change until cancelled, reporting each completed build."""
        ...


class Minifier(Protocol):
    async def minify(self, source: Artifact, target: BuildTarget, out_dir: Path) -> Artifact: ...


class TestRunner(Protocol):
    async def run(
            self,
            files: Sequence[Path],
            *,
            grep: str | None = None,
            globals_: Sequence[str] = (),
    ) -> TestOutcome: ...


class CoverageInstrumentor(Protocol):
    def instrument(self, runner: TestRunner, *, include: Sequence[Path]) -> TestRunner:
        """Return a runner whose module loads of `include` are instrumented."""
        ...

    async def collect(self) -> CoverageReport: ...

    async def write_reports(self) -> None: ...


class LiveReloadServer(Protocol):
    @property
    def started(self) -> bool: ...

    async def start(self) -> None: ...

    async def reload(self, path: str) -> int:
        """Push a reload event to connected clients; return how many were notified."""
        ...

    async def stop(self) -> None: ...


class Alerter(Protocol):
    def alert(self, reason: str) -> None: ...
