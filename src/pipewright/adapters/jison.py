# src/pipewright/adapters/jison.py

from __future__ import annotations

import tempfile
from pathlib import Path

from ..errors import CompileError
from .process import node_tool, run_command


class JisonCompiler:
    """Compile a .jison grammar into a self-contained module of the given type."""

    def __init__(self, root: Path, *, module_type: str = "commonjs") -> None:
        self._root = root
        self._module_type = module_type

    async def compile(self, grammar_path: Path) -> str:
        if not grammar_path.is_file():
            raise CompileError("jison", f"Grammar not found: {grammar_path}")

        # jison writes its output non-atomically; keep it away from the source tree.
        with tempfile.TemporaryDirectory(prefix="pipewright-jison-") as tmp:
            out = Path(tmp) / f"{grammar_path.stem}.js"
            argv = [
                *node_tool("jison", self._root),
                str(grammar_path),
                "-m",
                self._module_type,
                "-o",
                str(out),
            ]
            result = await run_command(argv, cwd=self._root)
            if result.returncode != 0 or not out.is_file():
                raise CompileError("jison", result.stderr or result.stdout)
            return out.read_text("utf-8")
