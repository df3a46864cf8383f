# src/pipewright/core/registry.py

from __future__ import annotations

import inspect
import logging
import time
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass

from ..errors import CyclicDependency, DuplicateTask, TaskNotFound

TaskAction = Callable[[], Awaitable[None] | None]

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class Task:
    name: str
    action: TaskAction | None
    prerequisites: tuple[str, ...] = ()
    description: str = ""


class TaskRegistry:
    """
    Named tasks with declared prerequisites.

    run(name) executes the prerequisite closure depth-first in declaration
    order, then the task itself. Within one run every task executes at most
    once, however many paths reach it.
    """

    def __init__(self) -> None:
        self._tasks: dict[str, Task] = {}

    def register(
        self,
        name: str,
        action: TaskAction | None = None,
        prerequisites: Sequence[str] = (),
        description: str = "",
    ) -> Task:
        if name in self._tasks:
            raise DuplicateTask(name)
        task = Task(name=name, action=action, prerequisites=tuple(prerequisites), description=description)
        self._tasks[name] = task
        return task

    def get(self, name: str) -> Task:
        task = self._tasks.get(name)
        if task is None:
            raise TaskNotFound(name)
        return task

    def __contains__(self, name: object) -> bool:
        return name in self._tasks

    def names(self) -> list[str]:
        return list(self._tasks)

    def describe(self) -> str:
        lines = ["Available tasks:"]
        width = max((len(n) for n in self._tasks), default=0)
        for task in self._tasks.values():
            deps = f" [{', '.join(task.prerequisites)}]" if task.prerequisites else ""
            lines.append(f"  {task.name:<{width}}  {task.description}{deps}")
        return "\n".join(lines)

    def plan(self, name: str) -> list[Task]:
        """
        Ordered execution list for `name`.

        Validates the whole closure first: unknown names and cycles are
        reported before any action could run.
        """
        order: list[Task] = []
        done: set[str] = set()
        visiting: list[str] = []

        def visit(current: str) -> None:
            if current in done:
                return
            if current in visiting:
                cycle = visiting[visiting.index(current):] + [current]
                raise CyclicDependency(cycle)
            task = self.get(current)
            visiting.append(current)
            for dep in task.prerequisites:
                visit(dep)
            visiting.pop()
            done.add(current)
            order.append(task)

        visit(name)
        return order

    async def run(self, name: str) -> None:
        plan = self.plan(name)
        logger.debug("Plan for %s: %s", name, " -> ".join(t.name for t in plan))

        for task in plan:
            if task.action is None:
                continue
            logger.info("Starting '%s'...", task.name)
            started = time.monotonic()
            try:
                result = task.action()
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.error(
                    "'%s' errored after %.2f s", task.name, time.monotonic() - started
                )
                raise
            logger.info("Finished '%s' after %.2f s", task.name, time.monotonic() - started)
