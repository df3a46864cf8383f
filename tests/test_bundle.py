# tests/test_bundle.py

from __future__ import annotations

import json

import pytest

from pipewright.core.models import Artifact, Platform, SourceMapMode
from pipewright.errors import CompileError, ToolError
from pipewright.pipeline.bundle import STAGING_PREFIX, LibraryBuild, library_targets

from .fakes import FakeAlerter, FakeBundler, FakeMinifier


def _staging_dirs(settings) -> list[str]:
    return [p.name for p in settings.project_root.iterdir() if p.name.startswith(STAGING_PREFIX)]


def test_library_targets(settings) -> None:
    full, minified = library_targets(settings)

    assert (full.filename, full.map_filename) == ("library.js", "library.js.map")
    assert (minified.filename, minified.map_filename) == ("library.min.js", "library.min.js.map")
    assert not full.minify and minified.minify
    for target in (full, minified):
        assert target.source_map is SourceMapMode.EXTERNAL
        assert target.platform is Platform.NODE
        assert target.library is not None
        assert target.library.name == "Library"
        assert target.library.target == "umd"


@pytest.mark.asyncio
async def test_build_produces_four_files(settings) -> None:
    bundler = FakeBundler()
    minifier = FakeMinifier()
    build = LibraryBuild(settings, bundler, minifier, FakeAlerter())

    written = await build.build()

    dist = settings.dist_dir
    assert sorted(p.name for p in dist.iterdir()) == [
        "library.js",
        "library.js.map",
        "library.min.js",
        "library.min.js.map",
    ]
    assert sorted(p.name for p in written) == sorted(p.name for p in dist.iterdir())

    entries, _, _ = bundler.bundle_calls[0]
    assert entries == [settings.entry_file]
    # The minified map is chained from the full map, so it names the original source.
    chained = json.loads((dist / "library.min.js.map").read_text("utf-8"))
    assert chained["sources"] == [str(settings.entry_file)]
    assert _staging_dirs(settings) == []


@pytest.mark.asyncio
async def test_bundler_failure_leaves_dist_untouched(settings) -> None:
    alerter = FakeAlerter()
    build = LibraryBuild(settings, FakeBundler(error="SyntaxError: Unexpected token (3:4)"), FakeMinifier(), alerter)

    with pytest.raises(CompileError) as excinfo:
        await build.build()

    assert "Unexpected token" in excinfo.value.diagnostic
    assert not settings.dist_dir.exists()
    assert alerter.alerts == ["build failed"]
    assert _staging_dirs(settings) == []


@pytest.mark.asyncio
async def test_minifier_failure_publishes_nothing(settings) -> None:
    dist = settings.dist_dir
    dist.mkdir()
    (dist / "library.js").write_text("// old\n", "utf-8")

    with pytest.raises(CompileError):
        await LibraryBuild(settings, FakeBundler(), FakeMinifier(error="bad input"), FakeAlerter()).build()

    # The new full bundle is not published without its minified sibling.
    assert [p.name for p in dist.iterdir()] == ["library.js"]
    assert (dist / "library.js").read_text("utf-8") == "// old\n"


@pytest.mark.asyncio
async def test_missing_entry_is_a_compile_error(settings) -> None:
    settings.entry_file.unlink()
    bundler = FakeBundler()

    with pytest.raises(CompileError) as excinfo:
        await LibraryBuild(settings, bundler, FakeMinifier(), FakeAlerter()).build()

    assert "src/index.js" in excinfo.value.diagnostic
    assert bundler.bundle_calls == []


@pytest.mark.asyncio
async def test_missing_output_alerts(settings) -> None:
    class SilentMinifier(FakeMinifier):
        async def minify(self, source, target, out_dir):
            # Reports success without writing anything.
            return Artifact(code=out_dir / target.filename, source_map=out_dir / f"{target.filename}.map")

    alerter = FakeAlerter()

    with pytest.raises(ToolError):
        await LibraryBuild(settings, FakeBundler(), SilentMinifier(), alerter).build()

    assert alerter.alerts == ["build failed"]
    assert not settings.dist_dir.exists()
    assert _staging_dirs(settings) == []


@pytest.mark.asyncio
async def test_missing_tool_alerts(settings) -> None:
    class MissingWebpack(FakeBundler):
        async def bundle(self, entries, target, out_dir):
            raise ToolError("npx", None, "executable not found")

    alerter = FakeAlerter()

    with pytest.raises(ToolError):
        await LibraryBuild(settings, MissingWebpack(), FakeMinifier(), alerter).build()

    assert alerter.alerts == ["build failed"]
