# tests/test_fileset.py

from __future__ import annotations

from pathlib import Path

import pytest

from pipewright.core import fileset
from pipewright.core.fileset import matches, resolve


def _touch(root: Path, *paths: str) -> None:
    for rel in paths:
        p = root / rel
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text("", "utf-8")


def test_negated_pattern_removes_matches(tmp_path: Path) -> None:
    _touch(tmp_path, "a/one.js", "a/skip/two.js", "a/deep/skip/three.js", "a/notes.txt")

    files = resolve(["a/**/*.js", "!a/skip/*.js"], tmp_path)

    assert "a/skip/two.js" not in files.paths
    # Only the exact negated shape is removed.
    assert files.paths == ("a/deep/skip/three.js", "a/one.js")


def test_first_seen_order_across_patterns(tmp_path: Path) -> None:
    _touch(tmp_path, "a/x.js", "b/y.js", "b/z.js")

    files = resolve(["b/*.js", "a/*.js", "b/y.js"], tmp_path)

    assert files.paths == ("b/y.js", "b/z.js", "a/x.js")


def test_globstar_matches_zero_directories(tmp_path: Path) -> None:
    _touch(tmp_path, "src/index.js", "src/lib/deep/mod.js")

    files = resolve("src/**/*.js", tmp_path)

    assert files.paths == ("src/index.js", "src/lib/deep/mod.js")


def test_later_positive_pattern_can_add_back(tmp_path: Path) -> None:
    _touch(tmp_path, "src/a.js", "src/gen.js")

    files = resolve(["src/*.js", "!src/gen.js", "src/gen.js"], tmp_path)

    assert files.paths == ("src/a.js", "src/gen.js")


def test_literal_and_missing_paths(tmp_path: Path) -> None:
    _touch(tmp_path, "test/setup/node.js")
    (tmp_path / "test" / "dir.js").mkdir()

    files = resolve(["test/setup/node.js", "missing.js", "test/*.js"], tmp_path)

    # Directories never count as files.
    assert files.paths == ("test/setup/node.js",)
    assert files.absolute() == [tmp_path / "test/setup/node.js"]


def test_resolution_is_not_cached(tmp_path: Path) -> None:
    _touch(tmp_path, "src/a.js")
    assert len(resolve("src/*.js", tmp_path)) == 1

    _touch(tmp_path, "src/b.js")
    assert len(resolve("src/*.js", tmp_path)) == 2


def test_matches_single_path() -> None:
    patterns = ["src/**/*", "test/**/*", "package.json", "**/.eslintrc", "!src/gen/*"]

    assert matches("src/index.js", patterns)
    assert matches("test/unit/a.js", patterns)
    assert matches("package.json", patterns)
    assert matches(".eslintrc", patterns)
    assert matches("src/lib/.eslintrc", patterns)
    assert not matches("src/gen/parser.js", patterns)
    assert not matches("dist/library.js", patterns)


def test_root_level_pattern_does_not_descend(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _touch(tmp_path, "webpack.config.js", "node_modules/pkg/lib/x.config.js", "src/a.js", "src/lib/b.js")
    visited: list[str] = []
    real_walk = fileset.os.walk

    def recording_walk(top, *args, **kwargs):
        for dirpath, dirnames, filenames in real_walk(top, *args, **kwargs):
            visited.append(Path(dirpath).relative_to(tmp_path).as_posix())
            yield dirpath, dirnames, filenames

    monkeypatch.setattr(fileset.os, "walk", recording_walk)

    assert resolve("*.config.js", tmp_path).paths == ("webpack.config.js",)
    assert visited == ["."]

    visited.clear()
    assert resolve("src/*.js", tmp_path).paths == ("src/a.js",)
    assert visited == ["src"]

    # `**` still reaches every depth.
    assert resolve("src/**/*.js", tmp_path).paths == ("src/a.js", "src/lib/b.js")
