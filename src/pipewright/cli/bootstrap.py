# src/pipewright/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- wires the concrete tool adapters (eslint, jison, webpack, terser, mocha,
  nyc, aiohttp live reload, terminal bell) into a PipelineContext.
"""

from __future__ import annotations

import logging

from ..adapters.alert import TerminalBell
from ..adapters.eslint import EslintLinter
from ..adapters.jison import JisonCompiler
from ..adapters.livereload import AiohttpLiveReloadServer
from ..adapters.mocha import MochaRunner
from ..adapters.nyc import NycInstrumentor
from ..adapters.terser import TerserMinifier
from ..adapters.webpack import WebpackBundler
from ..config import Settings, get_settings
from ..core.state import PipelineContext

logger = logging.getLogger(__name__)


def create_context(*, settings: Settings | None = None, grep: str | None = None) -> PipelineContext:
    """
    Create a PipelineContext for the given settings.

    If settings is None, falls back to get_settings() (current directory).
    """
    if settings is None:
        settings = get_settings()

    root = settings.project_root
    logger.debug("Project root %s, main artifact %s", root, settings.main_file)

    return PipelineContext(
        settings=settings,
        linter=EslintLinter(root),
        grammar_compiler=JisonCompiler(root),
        bundler=WebpackBundler(root),
        minifier=TerserMinifier(root),
        test_runner=MochaRunner(root, reporter="dot"),
        coverage=NycInstrumentor(
            root,
            reporters=settings.coverage_reporters,
            report_dir=settings.coverage_dir,
        ),
        livereload=AiohttpLiveReloadServer(settings.livereload_host, settings.livereload_port),
        alerter=TerminalBell(enabled=settings.alerts_enabled),
        grep=grep,
    )
