# src/pipewright/adapters/webpack.py

"""
webpack adapter.

Each invocation renders its own config file (plugins and loader regexes
cannot be passed on the command line) and runs the webpack CLI against it.
A tiny `done` hook prints a marker line per compilation, which is how watch
mode reports completed builds back to Python.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from ..core.models import Artifact, BuildTarget, Platform, SourceMapMode
from ..core.ports import OnBuildFailed, OnBuilt
from ..errors import CompileError, ToolError
from .process import node_tool, run_command, stream_command

logger = logging.getLogger(__name__)

DONE_MARKER = "@@pipewright:done "

_DEVTOOL = {
    SourceMapMode.EXTERNAL: "source-map",
    SourceMapMode.INLINE: "inline-source-map",
    SourceMapMode.NONE: False,
}

_CONFIG_TEMPLATE = """\
// Generated by pipewright for target '{name}'. Do not edit.
const webpack = require('webpack');

const options = {options};

options.module = {{
  rules: [
    {{test: /\\.js$/, exclude: /node_modules/, use: {{loader: 'babel-loader'}}}},
  ],
}};

options.plugins = [];
{chunk_plugin}
options.plugins.push({{
  apply(compiler) {{
    compiler.hooks.done.tap('pipewright', (stats) => {{
      const info = stats.toJson({{all: false, errors: true}});
      const messages = (info.errors || []).map((e) => (typeof e === 'string' ? e : e.message));
      console.log({marker} + JSON.stringify({{errors: stats.hasErrors(), messages}}));
    }});
  }},
}});

module.exports = options;
"""


def webpack_options(root: Path, entries: Sequence[Path], target: BuildTarget, out_dir: Path) -> dict[str, Any]:
    output: dict[str, Any] = {"path": str(out_dir), "filename": target.filename}
    if target.library is not None:
        output["library"] = {"name": target.library.name, "type": target.library.target}
        # UMD must find the global object in node, browsers and workers alike.
        output["globalObject"] = "this"

    return {
        "mode": target.mode,
        "context": str(root),
        "entry": [str(e) for e in entries],
        "output": output,
        "devtool": _DEVTOOL[target.source_map],
        "target": "node" if target.platform == Platform.NODE else "web",
        # Minification is a separate variant; the full bundle stays readable.
        "optimization": {"minimize": bool(target.minify)},
    }


def render_config(root: Path, entries: Sequence[Path], target: BuildTarget, out_dir: Path) -> str:
    options = webpack_options(root, entries, target, out_dir)
    chunk_plugin = (
        "options.plugins.push(new webpack.optimize.LimitChunkCountPlugin({maxChunks: 1}));"
        if target.single_chunk
        else ""
    )
    return _CONFIG_TEMPLATE.format(
        name=target.name,
        options=json.dumps(options, indent=2),
        chunk_plugin=chunk_plugin,
        marker=json.dumps(DONE_MARKER),
    )


def parse_done_marker(line: str) -> tuple[bool, list[str]] | None:
    """(ok, error messages) for a marker line, None for ordinary output."""
    if not line.startswith(DONE_MARKER):
        return None
    data = json.loads(line[len(DONE_MARKER):])
    messages = [str(m) for m in data.get("messages") or []]
    return (not data.get("errors"), messages)


class WebpackBundler:
    def __init__(self, root: Path) -> None:
        self._root = root

    def _artifact(self, target: BuildTarget, out_dir: Path) -> Artifact:
        map_name = target.map_filename
        return Artifact(code=out_dir / target.filename, source_map=out_dir / map_name if map_name else None)

    def _write_config(self, entries: Sequence[Path], target: BuildTarget, out_dir: Path) -> Path:
        out_dir.mkdir(parents=True, exist_ok=True)
        config = out_dir / f".webpack.{target.name}.config.cjs"
        config.write_text(render_config(self._root, entries, target, out_dir), "utf-8")
        return config

    async def bundle(self, entries: Sequence[Path], target: BuildTarget, out_dir: Path) -> Artifact:
        config = self._write_config(entries, target, out_dir)
        try:
            argv = [*node_tool("webpack", self._root), "--config", str(config)]
            result = await run_command(argv, cwd=self._root)
        finally:
            config.unlink(missing_ok=True)

        lines = result.stdout.splitlines()
        for line in lines:
            done = parse_done_marker(line)
            if done is not None and not done[0]:
                raise CompileError("webpack", "\n".join(done[1]) or result.stdout)
        if result.returncode != 0:
            diagnostic = "\n".join(ln for ln in lines if not ln.startswith(DONE_MARKER))
            raise CompileError("webpack", (diagnostic + "\n" + result.stderr).strip())
        return self._artifact(target, out_dir)

    async def watch(
        self,
        entries: Sequence[Path],
        target: BuildTarget,
        out_dir: Path,
        on_built: OnBuilt,
        on_failed: OnBuildFailed,
    ) -> None:
        config = self._write_config(entries, target, out_dir)
        artifact = self._artifact(target, out_dir)

        async def on_line(line: str) -> None:
            done = parse_done_marker(line)
            if done is None:
                if line.strip():
                    logger.debug("webpack: %s", line)
                return
            ok, messages = done
            if ok:
                await on_built(artifact)
            else:
                await on_failed("\n".join(messages) or "webpack compilation failed")

        try:
            argv = [*node_tool("webpack", self._root), "--config", str(config), "--watch"]
            code = await stream_command(argv, cwd=self._root, on_line=on_line)
        finally:
            config.unlink(missing_ok=True)
        raise ToolError("webpack", code, "watch mode exited")
