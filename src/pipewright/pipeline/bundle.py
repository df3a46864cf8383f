# src/pipewright/pipeline/bundle.py

"""
Dual-target library bundling.

One entry module becomes:
- {name}.js + {name}.js.map          (full UMD bundle)
- {name}.min.js + {name}.min.js.map  (minified from the full bundle, its map
                                      chained from the full map)

Everything is produced in a private staging directory; the output directory
is touched only after every variant succeeded, so a failed build leaves the
previous artifacts (or their absence) as they were.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from pathlib import Path

from ..config import Settings
from ..core.models import Artifact, BuildTarget, LibrarySpec, Platform, SourceMapMode
from ..core.ports import Alerter, Bundler, Minifier
from ..errors import CompileError, ToolError

logger = logging.getLogger(__name__)

STAGING_PREFIX = ".pipewright-staging-"


def library_targets(settings: Settings) -> tuple[BuildTarget, BuildTarget]:
    name = settings.export_file_name
    library = LibrarySpec(name=settings.export_name, target="umd")
    full = BuildTarget(
        name="full",
        filename=f"{name}.js",
        source_map=SourceMapMode.EXTERNAL,
        minify=False,
        library=library,
        platform=Platform.NODE,
        mode="production",
    )
    minified = BuildTarget(
        name="minified",
        filename=f"{name}.min.js",
        source_map=SourceMapMode.EXTERNAL,
        minify=True,
        library=library,
        platform=Platform.NODE,
        mode="production",
    )
    return full, minified


def _expect_files(tool: str, artifact: Artifact) -> None:
    missing = [p for p in artifact.files() if not p.is_file()]
    if missing:
        raise ToolError(tool, 0, "expected output missing: " + ", ".join(str(p) for p in missing))


def _publish(artifacts: list[Artifact], dest: Path) -> list[Path]:
    dest.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for artifact in artifacts:
        for src in artifact.files():
            target = dest / src.name
            os.replace(src, target)
            written.append(target)
    return written


class LibraryBuild:
    def __init__(self, settings: Settings, bundler: Bundler, minifier: Minifier, alerter: Alerter) -> None:
        self._settings = settings
        self._bundler = bundler
        self._minifier = minifier
        self._alerter = alerter

    async def build(self) -> list[Path]:
        settings = self._settings
        entry = settings.entry_file
        full_target, min_target = library_targets(settings)

        staging = Path(tempfile.mkdtemp(prefix=STAGING_PREFIX, dir=settings.project_root))
        try:
            try:
                if not entry.is_file():
                    raise CompileError("bundler", f"Entry module not found: {settings.relative(entry)}")

                full = await self._bundler.bundle([entry], full_target, staging)
                _expect_files("bundler", full)
                logger.info("Bundled %s -> %s", settings.relative(entry), full.code.name)

                minified = await self._minifier.minify(full, min_target, staging)
                _expect_files("minifier", minified)
                logger.info("Minified %s -> %s", full.code.name, minified.code.name)
            except (CompileError, ToolError) as e:
                logger.error("%s", e)
                self._alerter.alert("build failed")
                raise

            written = _publish([full, minified], settings.dist_dir)
        finally:
            shutil.rmtree(staging, ignore_errors=True)

        for path in written:
            logger.info("  %s", settings.relative(path))
        return written
