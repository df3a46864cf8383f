# src/pipewright/adapters/eslint.py

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from ..core.models import FileReport, Violation
from ..errors import ToolError
from .process import node_tool, run_command

logger = logging.getLogger(__name__)


def parse_eslint_json(payload: Any, root: Path) -> list[FileReport]:
    """Turn `eslint --format json` output into FileReports (paths relative to root, input order kept)."""
    if isinstance(payload, dict):
        payload = [payload]
    reports: list[FileReport] = []
    for entry in payload or []:
        raw_path = str(entry.get("filePath") or "")
        try:
            path = Path(raw_path).resolve().relative_to(root.resolve()).as_posix()
        except ValueError:
            path = raw_path
        messages = tuple(
            Violation(
                path=path,
                line=int(m.get("line") or 1),
                column=int(m.get("column") or 1),
                severity=int(m.get("severity", 2)),
                message=str(m.get("message", "")),
                rule=m.get("ruleId"),
            )
            for m in entry.get("messages", [])
        )
        reports.append(FileReport(path=path, messages=messages))
    return reports


class EslintLinter:
    """
    eslint exit codes: 0 clean, 1 lint errors (JSON still on stdout), 2 fatal
    (bad config, crash).
    """

    def __init__(self, root: Path) -> None:
        self._root = root

    async def lint(self, files: Sequence[Path]) -> list[FileReport]:
        if not files:
            return []
        argv = [*node_tool("eslint", self._root), "--format", "json", "--no-error-on-unmatched-pattern", *map(str, files)]
        result = await run_command(argv, cwd=self._root)
        if result.returncode not in (0, 1):
            raise ToolError("eslint", result.returncode, result.stderr or result.stdout)
        try:
            payload = json.loads(result.stdout or "[]")
        except json.JSONDecodeError as e:
            raise ToolError("eslint", result.returncode, f"unparseable output: {e}") from e
        return parse_eslint_json(payload, self._root)
