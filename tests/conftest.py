# tests/conftest.py

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from pipewright.config import Settings
from pipewright.core.state import PipelineContext

from .fakes import (
    FakeAlerter,
    FakeBundler,
    FakeCoverage,
    FakeGrammarCompiler,
    FakeLinter,
    FakeLiveReload,
    FakeMinifier,
    FakeTestRunner,
)

PROJECT_FILES = {
    "src/index.js": "export {parse} from './grammar-parser/grammar-parser';\n",
    "src/util.js": "export const id = (x) => x;\n",
    "src/grammar-parser/grammar-parser.jison": "%%\nstart : 'a' ;\n",
    "test/setup/node.js": "global.expect = require('chai').expect;\n",
    "test/setup/browser.js": "window.expect = chai.expect;\n",
    "test/setup/.globals": json.dumps({"globals": {"expect": True, "sinon": True}}),
    "test/unit/index.js": "describe('index', () => {});\n",
    "test/unit/nested/util.js": "describe('util', () => {});\n",
    "test/integration/flow.js": "describe('flow', () => {});\n",
    "gulpfile.babel.js": "// legacy build script\n",
}


@pytest.fixture()
def project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A minimal library checkout on disk."""
    root = tmp_path / "project"
    manifest = {
        "name": "library",
        "main": "dist/library.js",
        "babelBoilerplateOptions": {"entryFileName": "src/index", "mainVarName": "Library"},
    }
    root.mkdir()
    (root / "package.json").write_text(json.dumps(manifest), "utf-8")
    for rel, text in PROJECT_FILES.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, "utf-8")

    # Tasks set the test-mode flag in the process env; keep it per test.
    monkeypatch.delenv("NODE_ENV", raising=False)
    for key in [k for k in os.environ if k.startswith("PIPEWRIGHT_")]:
        monkeypatch.delenv(key)
    return root


@pytest.fixture()
def settings(project: Path) -> Settings:
    return Settings.from_env(project)


@pytest.fixture()
def ctx(settings: Settings) -> PipelineContext:
    """PipelineContext wired with deterministic fakes."""
    return PipelineContext(
        settings=settings,
        linter=FakeLinter(settings.project_root),
        grammar_compiler=FakeGrammarCompiler(),
        bundler=FakeBundler(),
        minifier=FakeMinifier(),
        test_runner=FakeTestRunner(),
        coverage=FakeCoverage(),
        livereload=FakeLiveReload(),
        alerter=FakeAlerter(),
    )
