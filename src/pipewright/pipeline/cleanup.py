# src/pipewright/pipeline/cleanup.py

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from ..config import Settings
from ..errors import PipelineError

logger = logging.getLogger(__name__)


def remove_tree(path: Path) -> bool:
    """Delete `path` recursively. Returns False if there was nothing to delete."""
    if not path.exists() and not path.is_symlink():
        logger.debug("Nothing to clean at %s", path)
        return False
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()
    logger.info("Deleted %s", path)
    return True


def _guard(settings: Settings, path: Path) -> Path:
    root = settings.project_root.resolve()
    target = path.resolve()
    if target == root or root not in target.parents:
        raise PipelineError(f"Refusing to delete {path}: not a subdirectory of {root}")
    return path


def clean_dist(settings: Settings) -> bool:
    return remove_tree(_guard(settings, settings.dist_dir))


def clean_tmp(settings: Settings) -> bool:
    return remove_tree(_guard(settings, settings.tmp_dir))
