# src/pipewright/adapters/process.py

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import shlex
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from ..errors import ToolError

logger = logging.getLogger(__name__)

_BIN_SUFFIXES = (".cmd", ".exe", "") if os.name == "nt" else ("",)


@dataclass(slots=True, frozen=True)
class CommandResult:
    argv: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""


def node_tool(name: str, root: Path) -> list[str]:
    """
    Command prefix for a Node CLI tool.

    Prefer the project's node_modules/.bin; otherwise let npx find it without
    installing anything.
    """
    bin_dir = root / "node_modules" / ".bin"
    for suffix in _BIN_SUFFIXES:
        candidate = bin_dir / f"{name}{suffix}"
        if candidate.exists():
            return [str(candidate)]
    return ["npx", "--no-install", name]


def tool_env(extra: Mapping[str, str] | None = None) -> dict[str, str]:
    env = dict(os.environ)
    env.setdefault("FORCE_COLOR", "0")
    if extra:
        env.update(extra)
    return env


async def _kill(proc: asyncio.subprocess.Process) -> None:
    with contextlib.suppress(ProcessLookupError):
        proc.kill()
    await proc.wait()


async def run_command(
    argv: Sequence[str],
    *,
    cwd: Path,
    env: Mapping[str, str] | None = None,
    capture: bool = True,
) -> CommandResult:
    """
    Run a command to completion.

    capture=False lets the tool write straight to the terminal (test reporters).
    Cancellation kills the child.
    """
    argv = tuple(str(a) for a in argv)
    logger.debug("$ %s", shlex.join(argv))
    pipe = asyncio.subprocess.PIPE if capture else None
    try:
        proc = await asyncio.create_subprocess_exec(*argv, cwd=str(cwd), env=dict(env or tool_env()), stdout=pipe, stderr=pipe)
    except FileNotFoundError as e:
        raise ToolError(argv[0], None, f"executable not found ({e})") from e

    try:
        out, err = await proc.communicate()
    except asyncio.CancelledError:
        await _kill(proc)
        raise

    result = CommandResult(
        argv=argv,
        returncode=proc.returncode if proc.returncode is not None else -1,
        stdout=(out or b"").decode("utf-8", errors="replace"),
        stderr=(err or b"").decode("utf-8", errors="replace"),
    )
    logger.debug("%s exited with %s", Path(argv[0]).name, result.returncode)
    return result


async def stream_command(
    argv: Sequence[str],
    *,
    cwd: Path,
    on_line: Callable[[str], Awaitable[None]],
    env: Mapping[str, str] | None = None,
) -> int:
    """Run a long-lived command, feeding each stdout line to `on_line`; stderr passes through."""
    argv = tuple(str(a) for a in argv)
    logger.debug("$ %s", shlex.join(argv))
    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            cwd=str(cwd),
            env=dict(env or tool_env()),
            stdout=asyncio.subprocess.PIPE,
            stderr=None,
        )
    except FileNotFoundError as e:
        raise ToolError(argv[0], None, f"executable not found ({e})") from e

    assert proc.stdout is not None
    try:
        while True:
            raw = await proc.stdout.readline()
            if not raw:
                break
            await on_line(raw.decode("utf-8", errors="replace").rstrip("\r\n"))
        return await proc.wait()
    except BaseException:
        await _kill(proc)
        raise
