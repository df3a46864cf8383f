# src/pipewright/cli/tasks.py

"""The fixed task set for the library's release/test workflow."""

from __future__ import annotations

from ..core.registry import TaskRegistry
from ..core.state import PipelineContext
from ..pipeline.browser import BrowserTestBundle
from ..pipeline.bundle import LibraryBuild
from ..pipeline.cleanup import clean_dist, clean_tmp
from ..pipeline.coverage import CoverageRun
from ..pipeline.grammar import generate_parser
from ..pipeline.lint import QualityGate
from ..pipeline.node_tests import NodeTests
from ..pipeline.watch import TaskTrigger, watch_and_run

LINT_TASKS = ("lint-src", "lint-test", "lint-gulpfile")


def build_registry(ctx: PipelineContext) -> TaskRegistry:
    settings = ctx.settings
    registry = TaskRegistry()

    gate = QualityGate(settings, ctx.linter, ctx.alerter)
    library = LibraryBuild(settings, ctx.bundler, ctx.minifier, ctx.alerter)
    node_tests = NodeTests(settings, ctx.test_runner)
    coverage = CoverageRun(settings, node_tests, ctx.coverage, ctx.test_runner)

    async def run_node_tests() -> None:
        await node_tests.run(grep=ctx.grep)

    async def run_coverage() -> None:
        await coverage.run(grep=ctx.grep)

    async def run_generate_parser() -> None:
        await generate_parser(settings, ctx.grammar_compiler, ctx.alerter)

    async def run_browser_tests() -> None:
        # Changes re-lint; the bundler's own watch mode takes care of rebuilding.
        relint = TaskTrigger(registry, "lint")
        browser = BrowserTestBundle(settings, ctx.bundler, ctx.livereload, ctx.alerter, relint)
        await browser.serve()

    async def run_watch() -> None:
        await watch_and_run(settings.project_root, settings.watch_patterns, registry, "test")

    # Remove the built files
    registry.register("clean", lambda: clean_dist(settings), description="Remove the output directory")
    # Remove our temporary files
    registry.register("clean-tmp", lambda: clean_tmp(settings), description="Remove the temp directory")

    registry.register("lint-src", gate.check_sources, description="Lint library source (minus the generated parser)")
    registry.register("lint-test", gate.check_tests, description="Lint test code")
    registry.register("lint-gulpfile", gate.check_build_scripts, description="Lint the build scripts")
    registry.register("lint", prerequisites=LINT_TASKS, description="Lint everything")

    registry.register("_build", library.build, description="Build both library variants (no lint)")
    registry.register("build", prerequisites=("lint", "clean", "_build"), description="Lint, clean and build")

    registry.register("test", run_node_tests, prerequisites=("lint",), description="Lint and run the node tests")
    registry.register("coverage", run_coverage, description="Run the node tests with coverage")
    registry.register(
        "test-browser",
        run_browser_tests,
        prerequisites=("lint", "clean-tmp"),
        description="Bundle the browser tests and live-reload them",
    )
    registry.register("watch", run_watch, description="Re-run 'test' on every change")
    registry.register("generate-parser", run_generate_parser, description="Compile the grammar into a parser module")
    registry.register("default", prerequisites=("test",), description="Alias of 'test'")

    return registry
