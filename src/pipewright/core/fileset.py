# src/pipewright/core/fileset.py

"""
File-set resolution.

Patterns are resolved against a root on every call (no caching), so the
result always reflects the file system at call time. Patterns starting with
"!" remove matching paths from what has been accumulated so far.
"""

from __future__ import annotations

import functools
import os
import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

NEGATION = "!"


@dataclass(slots=True, frozen=True)
class FileSet:
    root: Path
    paths: tuple[str, ...]  # project-relative, POSIX separators

    def __iter__(self) -> Iterator[str]:
        return iter(self.paths)

    def __len__(self) -> int:
        return len(self.paths)

    def __bool__(self) -> bool:
        return bool(self.paths)

    def absolute(self) -> list[Path]:
        return [self.root / p for p in self.paths]


def _translate_segment(seg: str) -> str:
    out: list[str] = []
    i = 0
    while i < len(seg):
        c = seg[i]
        if c == "*":
            out.append("[^/]*")
        elif c == "?":
            out.append("[^/]")
        elif c == "[":
            j = seg.find("]", i + 1)
            if j == -1:
                out.append(re.escape(c))
            else:
                body = seg[i + 1 : j]
                if body.startswith("!"):
                    body = "^" + body[1:]
                out.append(f"[{body}]")
                i = j
        else:
            out.append(re.escape(c))
        i += 1
    return "".join(out)


@functools.lru_cache(maxsize=256)
def compile_pattern(pattern: str) -> re.Pattern[str]:
    """
    Translate a glob into a regex over POSIX relative paths.

    `**` as a whole segment matches zero or more directories.
    """
    pattern = pattern.removeprefix("./")
    parts = pattern.split("/")
    regex = ""
    for idx, seg in enumerate(parts):
        last = idx == len(parts) - 1
        if seg == "**":
            regex += ".*" if last else "(?:[^/]+/)*"
            continue
        regex += _translate_segment(seg)
        if not last:
            regex += "/"
    return re.compile(f"^{regex}$")


def _split(pattern: str) -> tuple[bool, str]:
    if pattern.startswith(NEGATION):
        return True, pattern[len(NEGATION):]
    return False, pattern


def _walk(root: Path, max_depth: int | None = None) -> list[str]:
    """Relative file paths under root; `max_depth` limits how many directories deep to descend."""
    found: list[str] = []
    for dirpath, dirnames, filenames in os.walk(root):
        rel_dir = Path(dirpath).relative_to(root).as_posix()
        depth = 0 if rel_dir == "." else rel_dir.count("/") + 1
        if max_depth is not None and depth >= max_depth:
            dirnames.clear()
        else:
            dirnames.sort()
        for name in sorted(filenames):
            found.append(name if rel_dir == "." else f"{rel_dir}/{name}")
    return found


def _walk_depth(pattern: str, prefix: str) -> int | None:
    """Directories below the static prefix a pattern can reach; None when `**` makes it unbounded."""
    parts = pattern.removeprefix("./").split("/")
    if "**" in parts:
        return None
    used = len(prefix.split("/")) if prefix else 0
    return len(parts) - used - 1


def _static_prefix(pattern: str) -> str:
    """Leading directory part without glob characters, used to narrow the walk."""
    parts = pattern.removeprefix("./").split("/")
    prefix: list[str] = []
    for seg in parts[:-1]:
        if any(ch in seg for ch in "*?["):
            break
        prefix.append(seg)
    return "/".join(prefix)


def resolve(patterns: str | Iterable[str], root: str | Path) -> FileSet:
    """
    Expand glob patterns into an ordered list of files.

    Matches of one positive pattern are sorted; across patterns the first-seen
    order is kept. A negated pattern removes every path accumulated so far that
    matches it; later positive patterns may add paths back.
    """
    root = Path(root)
    if isinstance(patterns, str):
        patterns = [patterns]

    ordered: dict[str, None] = {}
    for raw in patterns:
        negated, pattern = _split(raw)
        rx = compile_pattern(pattern)
        if negated:
            for path in [p for p in ordered if rx.match(p)]:
                del ordered[path]
            continue

        if not any(ch in pattern for ch in "*?["):
            literal = pattern.removeprefix("./")
            if (root / literal).is_file():
                ordered.setdefault(literal, None)
            continue

        prefix = _static_prefix(pattern)
        base = root / prefix if prefix else root
        if not base.is_dir():
            continue
        hits = []
        for rel in _walk(base, _walk_depth(pattern, prefix)):
            full = f"{prefix}/{rel}" if prefix else rel
            if rx.match(full):
                hits.append(full)
        for full in sorted(hits):
            ordered.setdefault(full, None)

    return FileSet(root=root, paths=tuple(ordered))


def matches(path: str, patterns: str | Iterable[str]) -> bool:
    """Apply the same include/negate semantics as `resolve` to a single relative path."""
    if isinstance(patterns, str):
        patterns = [patterns]
    path = path.removeprefix("./")
    included = False
    for raw in patterns:
        negated, pattern = _split(raw)
        if compile_pattern(pattern).match(path):
            included = not negated
    return included
