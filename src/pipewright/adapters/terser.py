# src/pipewright/adapters/terser.py

from __future__ import annotations

from pathlib import Path

from ..core.models import Artifact, BuildTarget
from ..errors import CompileError
from .process import node_tool, run_command


def source_map_option(source: Artifact, target: BuildTarget) -> str | None:
    """
    terser --source-map value.

    The full bundle's map is loaded as input (`content=`) so the minified map
    points back to the original sources, not to the intermediate bundle.
    """
    map_name = target.map_filename
    if map_name is None:
        return None
    parts = []
    if source.source_map is not None:
        parts.append(f"content='{source.source_map.as_posix()}'")
    parts.append(f"url='{map_name}'")
    parts.append(f"filename='{target.filename}'")
    return ",".join(parts)


class TerserMinifier:
    def __init__(self, root: Path) -> None:
        self._root = root

    async def minify(self, source: Artifact, target: BuildTarget, out_dir: Path) -> Artifact:
        out = out_dir / target.filename
        argv = [*node_tool("terser", self._root), str(source.code), "--compress", "--mangle"]
        map_opt = source_map_option(source, target)
        if map_opt is not None:
            argv += ["--source-map", map_opt]
        argv += ["--output", str(out)]

        result = await run_command(argv, cwd=self._root)
        if result.returncode != 0:
            raise CompileError("terser", result.stderr or result.stdout)

        map_name = target.map_filename
        return Artifact(code=out, source_map=out_dir / map_name if map_name else None)
