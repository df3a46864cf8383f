# src/pipewright/errors.py

"""
Exception hierarchy.

Every failure a task can surface to the CLI derives from PipelineError, so the
entrypoint can map them to a non-zero exit status in one place.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .core.models import TestOutcome, Violation


class PipelineError(Exception):
    """Base class for orchestration failures."""


class TaskNotFound(PipelineError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Task not found: {name!r}")
        self.name = name


class DuplicateTask(PipelineError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Task already registered: {name!r}")
        self.name = name


class CyclicDependency(PipelineError):
    def __init__(self, path: Sequence[str]) -> None:
        super().__init__("Cyclic task dependency: " + " -> ".join(path))
        self.path = tuple(path)


class LintViolation(PipelineError):
    """Lint found at least one error; `first` is the one that stopped the gate."""

    def __init__(self, violations: Sequence[Violation]) -> None:
        self.violations = tuple(violations)
        first = self.violations[0] if self.violations else None
        self.first = first
        msg = f"Lint failed: {first.render()}" if first is not None else "Lint failed"
        super().__init__(msg)


class CompileError(PipelineError):
    """A compiler (grammar or bundler) rejected its input. `diagnostic` is verbatim tool output."""

    def __init__(self, tool: str, diagnostic: str) -> None:
        super().__init__(f"{tool} failed:\n{diagnostic}".rstrip())
        self.tool = tool
        self.diagnostic = diagnostic


class TestFailure(PipelineError):
    __test__ = False  # not a pytest test class

    def __init__(self, outcome: TestOutcome) -> None:
        super().__init__(f"Tests failed (exit status {outcome.returncode})")
        self.outcome = outcome


class ToolError(PipelineError):
    """An external tool failed for a reason other than a diagnostic about the input."""

    def __init__(self, tool: str, returncode: int | None, stderr: str = "") -> None:
        detail = f": {stderr.strip()}" if stderr.strip() else ""
        super().__init__(f"{tool} exited with status {returncode}{detail}")
        self.tool = tool
        self.returncode = returncode
        self.stderr = stderr
