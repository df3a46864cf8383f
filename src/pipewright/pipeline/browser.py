# src/pipewright/pipeline/browser.py

"""
Browser test bundle + live-reload watch session.

All test files plus the browser setup file are bundled as one chunk, driven
by an explicit entry list (every test file is an entry so its side effects
run even though nothing imports it). The bundler's own watch mode rebuilds
the chunk; each completed build is reported to a WatchSession:

    first successful build  -> start the live-reload listener and the
                               file-set watcher (which re-lints on change)
    later successful builds -> push one reload for the rebuilt bundle
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from ..config import Settings
from ..core.fileset import resolve
from ..core.models import Artifact, BuildTarget, Platform, SourceMapMode
from ..core.ports import Alerter, Bundler, LiveReloadServer
from .watch import FileSetWatcher

logger = logging.getLogger(__name__)


def browser_entries(settings: Settings) -> list[Path]:
    patterns = [
        settings.browser_setup_file,
        *settings.unit_test_patterns,
        *settings.integration_test_patterns,
    ]
    return resolve(patterns, settings.project_root).absolute()


def browser_target(settings: Settings) -> BuildTarget:
    return BuildTarget(
        name="spec",
        filename=settings.browser_bundle_name,
        source_map=SourceMapMode.INLINE,
        minify=False,
        library=None,
        platform=Platform.WEB,
        mode="development",
        single_chunk=True,
    )


@dataclass(slots=True)
class WatchSession:
    """
    State of one long-running browser watch.

    `on_build_complete` is the only writer of `first_build`; it always runs on
    the bundler's completion callback, so no locking is needed.
    """

    livereload: LiveReloadServer
    start_watching: Callable[[], None]
    alerter: Alerter
    relative: Callable[[Path], str] = field(default=lambda p: p.as_posix())

    first_build: bool = True
    builds: int = 0
    reloads: int = 0

    async def on_build_complete(self, artifact: Artifact) -> None:
        self.builds += 1
        if self.first_build:
            await self.livereload.start()
            self.start_watching()
            self.first_build = False
            logger.info("First build ready: %s", self.relative(artifact.code))
            return

        path = self.relative(artifact.code)
        notified = await self.livereload.reload(path)
        self.reloads += 1
        logger.info("Rebuilt %s, reloaded %d client(s)", path, notified)

    async def on_build_failed(self, diagnostic: str) -> None:
        logger.error("%s", diagnostic.rstrip())
        self.alerter.alert("browser bundle failed")


class BrowserTestBundle:
    def __init__(
        self,
        settings: Settings,
        bundler: Bundler,
        livereload: LiveReloadServer,
        alerter: Alerter,
        on_source_change: Callable[[str], None],
    ) -> None:
        self._settings = settings
        self._bundler = bundler
        self._livereload = livereload
        self._alerter = alerter
        self._on_source_change = on_source_change

    def new_session(self, watcher: FileSetWatcher) -> WatchSession:
        return WatchSession(
            livereload=self._livereload,
            start_watching=watcher.start,
            alerter=self._alerter,
            relative=self._settings.relative,
        )

    async def serve(self) -> None:
        """Bundle, watch and live-reload until cancelled."""
        settings = self._settings
        entries = browser_entries(settings)
        logger.info("Bundling %d browser test entries into %s", len(entries), settings.relative(settings.browser_bundle_path))

        watcher = FileSetWatcher(settings.project_root, settings.watch_patterns, self._on_source_change)
        session = self.new_session(watcher)
        settings.tmp_dir.mkdir(parents=True, exist_ok=True)
        try:
            await self._bundler.watch(
                entries,
                browser_target(settings),
                settings.tmp_dir,
                session.on_build_complete,
                session.on_build_failed,
            )
        finally:
            watcher.stop()
            await self._livereload.stop()
