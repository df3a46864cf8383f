# src/pipewright/pipeline/grammar.py

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from ..config import Settings
from ..core.ports import Alerter, GrammarCompiler
from ..errors import CompileError

logger = logging.getLogger(__name__)


def generated_parser_path(settings: Settings) -> Path:
    """Where the compiled parser lives: beside the grammar, same stem, `.js`."""
    return settings.grammar_path.with_suffix(".js")


def atomic_write_text(path: Path, text: str) -> None:
    """Write via a temp file in the same directory, then os.replace."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(text)
        os.replace(tmp, path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


async def generate_parser(settings: Settings, compiler: GrammarCompiler, alerter: Alerter) -> Path:
    grammar = settings.grammar_path
    out = generated_parser_path(settings)
    logger.info("Compiling grammar %s", settings.relative(grammar))

    try:
        source = await compiler.compile(grammar)
    except CompileError as e:
        logger.error("%s", e.diagnostic.rstrip() or str(e))
        alerter.alert("grammar compile failed")
        raise

    atomic_write_text(out, source)
    logger.info("Wrote parser %s", settings.relative(out))
    return out
