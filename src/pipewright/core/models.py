# src/pipewright/core/models.py

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path


class SourceMapMode(StrEnum):
    EXTERNAL = "external"  # {filename}.map beside the bundle
    INLINE = "inline"  # data: URL inside the bundle
    NONE = "none"


class Platform(StrEnum):
    NODE = "node"
    WEB = "web"


@dataclass(slots=True, frozen=True)
class LibrarySpec:
    """How a bundle exposes its exports (UMD: importable module + global variable)."""

    name: str
    target: str = "umd"


@dataclass(slots=True, frozen=True)
class BuildTarget:
    """
    One output variant of a bundling pipeline.

    Created per build invocation; never shared between invocations.
    """

    name: str
    filename: str
    source_map: SourceMapMode
    minify: bool = False
    library: LibrarySpec | None = None
    platform: Platform = Platform.NODE
    mode: str = "production"
    single_chunk: bool = False

    @property
    def map_filename(self) -> str | None:
        if self.source_map != SourceMapMode.EXTERNAL:
            return None
        return f"{self.filename}.map"


@dataclass(slots=True, frozen=True)
class Artifact:
    code: Path
    source_map: Path | None = None

    def files(self) -> list[Path]:
        return [p for p in (self.code, self.source_map) if p is not None]


@dataclass(slots=True, frozen=True)
class Violation:
    path: str
    line: int
    column: int
    severity: int  # eslint scale: 1 = warning, 2 = error
    message: str
    rule: str | None = None

    @property
    def is_error(self) -> bool:
        return self.severity >= 2

    def render(self) -> str:
        level = "error" if self.is_error else "warning"
        rule = f"  {self.rule}" if self.rule else ""
        return f"{self.path}:{self.line}:{self.column}  {level}  {self.message}{rule}"


@dataclass(slots=True, frozen=True)
class FileReport:
    path: str
    messages: tuple[Violation, ...] = ()

    @property
    def errors(self) -> list[Violation]:
        return [m for m in self.messages if m.is_error]

    @property
    def warnings(self) -> list[Violation]:
        return [m for m in self.messages if not m.is_error]


@dataclass(slots=True, frozen=True)
class TestOutcome:
    __test__ = False

    returncode: int

    @property
    def passed(self) -> bool:
        return self.returncode == 0


@dataclass(slots=True)
class FileCoverage:
    """Hit counters for one source file, keyed by the instrumentor's statement/branch/function ids."""

    path: str
    statements: dict[str, int] = field(default_factory=dict)
    branches: dict[str, list[int]] = field(default_factory=dict)
    functions: dict[str, int] = field(default_factory=dict)

    def merge(self, other: FileCoverage) -> None:
        for k, v in other.statements.items():
            self.statements[k] = self.statements.get(k, 0) + v
        for k, v in other.functions.items():
            self.functions[k] = self.functions.get(k, 0) + v
        for k, arms in other.branches.items():
            mine = self.branches.get(k)
            if mine is None:
                self.branches[k] = list(arms)
                continue
            if len(mine) < len(arms):
                mine.extend([0] * (len(arms) - len(mine)))
            for i, hits in enumerate(arms):
                mine[i] += hits

    @staticmethod
    def _pct(covered: int, total: int) -> float:
        return 100.0 if total == 0 else round(100.0 * covered / total, 2)

    @property
    def statement_pct(self) -> float:
        return self._pct(sum(1 for v in self.statements.values() if v > 0), len(self.statements))

    @property
    def branch_pct(self) -> float:
        arms = [h for hits in self.branches.values() for h in hits]
        return self._pct(sum(1 for h in arms if h > 0), len(arms))

    @property
    def function_pct(self) -> float:
        return self._pct(sum(1 for v in self.functions.values() if v > 0), len(self.functions))


@dataclass(slots=True)
class CoverageReport:
    files: dict[str, FileCoverage] = field(default_factory=dict)

    def add(self, cov: FileCoverage) -> None:
        existing = self.files.get(cov.path)
        if existing is None:
            self.files[cov.path] = cov
        else:
            existing.merge(cov)

    def totals(self) -> FileCoverage:
        total = FileCoverage(path="<all>")
        for path, cov in self.files.items():
            # Prefix ids with the path so counters from different files never collide.
            total.statements.update({f"{path}:{k}": v for k, v in cov.statements.items()})
            total.functions.update({f"{path}:{k}": v for k, v in cov.functions.items()})
            total.branches.update({f"{path}:{k}": list(v) for k, v in cov.branches.items()})
        return total

    def summary_lines(self) -> list[str]:
        lines = [f"{'File':<48} {'% Stmts':>8} {'% Branch':>9} {'% Funcs':>8}"]
        for path in sorted(self.files):
            c = self.files[path]
            lines.append(f"{path:<48} {c.statement_pct:>8.2f} {c.branch_pct:>9.2f} {c.function_pct:>8.2f}")
        t = self.totals()
        lines.append(f"{'All files':<48} {t.statement_pct:>8.2f} {t.branch_pct:>9.2f} {t.function_pct:>8.2f}")
        return lines
