# tests/test_lint.py

from __future__ import annotations

import pytest

from pipewright.cli.tasks import build_registry
from pipewright.core.models import Violation
from pipewright.errors import LintViolation
from pipewright.pipeline.lint import QualityGate, source_patterns

from .fakes import FakeAlerter, FakeLinter

PARSER = "src/grammar-parser/grammar-parser.js"


def _error(path: str, line: int = 1, message: str = "Unexpected var") -> Violation:
    return Violation(path=path, line=line, column=1, severity=2, message=message, rule="no-var")


def test_source_patterns_exclude_generated_parser(settings) -> None:
    assert source_patterns(settings) == ["src/**/*.js", f"!{PARSER}"]


@pytest.mark.asyncio
async def test_generated_parser_never_reaches_the_linter(ctx, settings) -> None:
    registry = build_registry(ctx)
    ctx.linter.problems = {PARSER: [_error(PARSER)]}

    await registry.run("generate-parser")
    assert (settings.project_root / PARSER).is_file()

    await registry.run("lint-src")

    assert ctx.linter.calls == [["src/index.js", "src/util.js"]]
    assert ctx.alerter.alerts == []


@pytest.mark.asyncio
async def test_first_error_fails_fast_and_alerts(settings) -> None:
    linter = FakeLinter(
        settings.project_root,
        {
            "src/index.js": [_error("src/index.js", 3, "first")],
            "src/util.js": [_error("src/util.js", 7, "second")],
        },
    )
    alerter = FakeAlerter()
    gate = QualityGate(settings, linter, alerter)

    with pytest.raises(LintViolation) as excinfo:
        await gate.check_sources()

    assert excinfo.value.first.message == "first"
    assert [v.path for v in excinfo.value.violations] == ["src/index.js"]
    assert len(alerter.alerts) == 1


@pytest.mark.asyncio
async def test_lint_stops_before_the_next_file_set(ctx) -> None:
    registry = build_registry(ctx)
    ctx.linter.problems = {"src/util.js": [_error("src/util.js")]}

    with pytest.raises(LintViolation):
        await registry.run("lint")

    # lint-test and lint-gulpfile never ran.
    assert len(ctx.linter.calls) == 1


@pytest.mark.asyncio
async def test_warnings_do_not_fail(settings) -> None:
    warning = Violation(path="test/unit/index.js", line=1, column=1, severity=1, message="unused")
    linter = FakeLinter(settings.project_root, {"test/unit/index.js": [warning]})
    alerter = FakeAlerter()

    count = await QualityGate(settings, linter, alerter).check_tests()

    assert count == 5
    assert alerter.alerts == []


@pytest.mark.asyncio
async def test_lint_runs_all_three_sets_in_order(ctx) -> None:
    registry = build_registry(ctx)

    await registry.run("lint")

    assert ctx.linter.calls == [
        ["src/index.js", "src/util.js"],
        ["test/integration/flow.js", "test/setup/browser.js", "test/setup/node.js", "test/unit/index.js", "test/unit/nested/util.js"],
        ["gulpfile.babel.js"],
    ]


@pytest.mark.asyncio
async def test_empty_file_set_skips_the_linter(settings) -> None:
    linter = FakeLinter(settings.project_root)
    gate = QualityGate(settings, linter, FakeAlerter())

    assert await gate.check("nothing", ["no/such/*.js"]) == 0
    assert linter.calls == []
