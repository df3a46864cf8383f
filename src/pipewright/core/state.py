# src/pipewright/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..config import Settings
from .ports import (
    Alerter,
    Bundler,
    CoverageInstrumentor,
    GrammarCompiler,
    Linter,
    LiveReloadServer,
    Minifier,
    TestRunner,
)


@dataclass(slots=True)
class PipelineContext:
    """
    Everything a task needs: settings plus one implementation per port.

    Built once by the composition root (cli.bootstrap); tests build it from fakes.
    """

    settings: Settings

    linter: Linter
    grammar_compiler: GrammarCompiler
    bundler: Bundler
    minifier: Minifier
    test_runner: TestRunner
    coverage: CoverageInstrumentor
    livereload: LiveReloadServer
    alerter: Alerter

    # Filter expression for the node test runner (--grep).
    grep: str | None = None
