"""
File selection and copying for sitepipe tasks.

Selection follows the usual asset-pipeline rules: each include glob has a
static base directory (everything before the first wildcard segment) and
matched files keep their path relative to that base when copied.
"""

from __future__ import annotations

import re
import shutil
from functools import lru_cache
from pathlib import Path, PurePosixPath
from typing import Iterable

_GLOB_CHARS = re.compile(r"[*?\[]")


# =============================================================================
# Glob Matching
# =============================================================================


@lru_cache(maxsize=256)
def _compile_glob(pattern: str) -> re.Pattern[str]:
    """Translate a slash-separated glob into a regex.

    ``**/`` matches zero or more directories, ``*`` and ``?`` never cross
    a ``/``.
    """
    out = []
    i = 0
    n = len(pattern)
    while i < n:
        if pattern.startswith("**/", i):
            out.append("(?:.*/)?")
            i += 3
        elif pattern.startswith("**", i):
            out.append(".*")
            i += 2
        elif pattern[i] == "*":
            out.append("[^/]*")
            i += 1
        elif pattern[i] == "?":
            out.append("[^/]")
            i += 1
        elif pattern[i] == "[":
            end = pattern.find("]", i + 1)
            if end == -1:
                out.append(re.escape("["))
                i += 1
            else:
                body = pattern[i + 1:end]
                if body.startswith("!"):
                    body = "^" + body[1:]
                out.append(f"[{body}]")
                i = end + 1
        else:
            out.append(re.escape(pattern[i]))
            i += 1
    return re.compile("".join(out) + r"\Z")


def match_glob(rel_path: str, pattern: str) -> bool:
    """True if a POSIX relative path matches a glob pattern."""
    return _compile_glob(pattern).match(rel_path) is not None


def match_any(rel_path: str, patterns: Iterable[str]) -> bool:
    return any(match_glob(rel_path, p) for p in patterns)


def glob_base(pattern: str) -> str:
    """Return the static directory prefix of a glob ("" for the root)."""
    parts = PurePosixPath(pattern).parts
    base: list[str] = []
    for part in parts[:-1]:
        if _GLOB_CHARS.search(part):
            break
        base.append(part)
    return "/".join(base)


# =============================================================================
# Selection
# =============================================================================


def select_files(
    root: Path,
    includes: Iterable[str],
    excludes: Iterable[str] = (),
) -> list[tuple[Path, PurePosixPath]]:
    """Select files under ``root`` matching any include and no exclude.

    Returns sorted ``(source, relative_to_base)`` pairs. A file matched by
    several includes is returned once, for the first include that matched.
    """
    excludes = list(excludes)
    selected: dict[Path, PurePosixPath] = {}

    for pattern in includes:
        base = root.joinpath(*PurePosixPath(glob_base(pattern)).parts)
        for path in sorted(root.glob(pattern)):
            if not path.is_file() or path in selected:
                continue
            rel = path.relative_to(root).as_posix()
            if match_any(rel, excludes):
                continue
            selected[path] = PurePosixPath(path.relative_to(base).as_posix())

    return sorted(selected.items(), key=lambda item: str(item[1]))


# =============================================================================
# Copying / Removal
# =============================================================================


def copy_selection(
    selection: Iterable[tuple[Path, PurePosixPath]],
    dest_dir: Path,
) -> list[Path]:
    """Copy selected files into ``dest_dir``, preserving relative paths.

    OSError propagates: a failed copy aborts the caller.
    """
    written = []
    for source, rel in selection:
        target = dest_dir.joinpath(*rel.parts)
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, target)
        written.append(target)
    return written


def remove_tree(path: Path) -> bool:
    """Remove a directory tree. Returns True if something was removed."""
    if not path.exists():
        return False
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()
    return True


def write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def min_name(path: Path) -> Path:
    """``style.css`` -> ``style.min.css``."""
    return path.with_name(f"{path.stem}.min{path.suffix}")
