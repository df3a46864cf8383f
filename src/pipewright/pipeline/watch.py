# src/pipewright/pipeline/watch.py

"""
File-set watching.

The watchdog observer runs in its own thread; qualifying events are handed to
the asyncio loop with call_soon_threadsafe, and everything after that (task
triggering, bookkeeping) happens on the loop thread only.
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable, Sequence
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from ..core.fileset import matches
from ..core.registry import TaskRegistry
from ..errors import PipelineError

logger = logging.getLogger(__name__)

_RELEVANT_EVENTS = {"created", "modified", "deleted", "moved"}


class _FileSetHandler(FileSystemEventHandler):
    def __init__(self, root: Path, patterns: Sequence[str], notify: Callable[[str], None]) -> None:
        super().__init__()
        self._root = root
        self._patterns = list(patterns)
        self._notify = notify

    def _relative(self, raw: str | bytes) -> str | None:
        path = os.fsdecode(raw)
        try:
            return Path(path).resolve().relative_to(self._root).as_posix()
        except ValueError:
            return None

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type not in _RELEVANT_EVENTS:
            return
        candidates = [event.src_path, getattr(event, "dest_path", "")]
        for raw in candidates:
            if not raw:
                continue
            rel = self._relative(raw)
            if rel is not None and matches(rel, self._patterns):
                self._notify(rel)
                return


class FileSetWatcher:
    """Watch `root` recursively and call `on_change(relative_path)` on the loop thread."""

    def __init__(self, root: Path, patterns: Sequence[str], on_change: Callable[[str], None]) -> None:
        self._root = root.resolve()
        self._patterns = list(patterns)
        self._on_change = on_change
        self._observer: Observer | None = None

    @property
    def running(self) -> bool:
        return self._observer is not None

    def start(self) -> None:
        if self._observer is not None:
            return
        loop = asyncio.get_running_loop()

        def notify(rel: str) -> None:
            loop.call_soon_threadsafe(self._on_change, rel)

        observer = Observer()
        observer.schedule(_FileSetHandler(self._root, self._patterns, notify), str(self._root), recursive=True)
        observer.daemon = True
        observer.start()
        self._observer = observer
        logger.info("Watching %s", ", ".join(self._patterns))

    def stop(self) -> None:
        observer, self._observer = self._observer, None
        if observer is None:
            return
        observer.stop()
        observer.join(timeout=5.0)


class TaskTrigger:
    """
    Re-run a registry task on file changes.

    At most one run is active; changes arriving during a run are collected and
    cause exactly one follow-up run. Failures are logged and never stop the
    watcher.
    """

    def __init__(self, registry: TaskRegistry, task_name: str, *, debounce_seconds: float = 0.1) -> None:
        self._registry = registry
        self._task_name = task_name
        self._debounce = max(0.0, float(debounce_seconds))
        self._changed: set[str] = set()
        self._runner: asyncio.Task[None] | None = None
        self.runs = 0

    def __call__(self, path: str) -> None:
        self._changed.add(path)
        if self._runner is None or self._runner.done():
            self._runner = asyncio.create_task(self._drain())

    async def idle(self) -> None:
        """Wait until no run is active or pending."""
        while self._runner is not None and not self._runner.done():
            await asyncio.shield(self._runner)

    async def _drain(self) -> None:
        while self._changed:
            await asyncio.sleep(self._debounce)
            changed = sorted(self._changed)
            self._changed.clear()
            logger.info("Changed: %s -> '%s'", ", ".join(changed), self._task_name)

            self.runs += 1
            try:
                await self._registry.run(self._task_name)
            except PipelineError as e:
                logger.error("'%s' failed: %s", self._task_name, e)
            except Exception:
                logger.exception("'%s' crashed", self._task_name)


async def watch_and_run(
    root: Path,
    patterns: Sequence[str],
    registry: TaskRegistry,
    task_name: str,
    *,
    stop: asyncio.Event | None = None,
) -> None:
    """Re-run `task_name` on every change until `stop` is set (or forever)."""
    trigger = TaskTrigger(registry, task_name)
    watcher = FileSetWatcher(root, patterns, trigger)
    watcher.start()
    try:
        await (stop or asyncio.Event()).wait()
    finally:
        watcher.stop()
