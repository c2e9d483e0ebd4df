from __future__ import annotations

import fnmatch
from pathlib import Path
from typing import Iterable, List, Optional

# Directories that never hold user credentials but are large enough to slow a sweep down
DEFAULT_SKIP_DIRS = {
    ".git",
    ".hg",
    ".svn",
    "__pycache__",
    "node_modules",
    "winsxs",
    "$recycle.bin",
}

DEFAULT_IGNORE_FILE = ".argosignore"


def read_ignore_file(path: Path) -> List[str]:
    out: List[str] = []
    try:
        for line in path.read_text(encoding="utf-8", errors="ignore").splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            out.append(line)
    except OSError:
        return []
    return out


def _pattern_matches(rel_str: str, is_dir: bool, pattern: str) -> bool:
    """
    Minimal gitignore-like matching against a relative posix path string.

    Semantics:
      - Leading '/' anchors to the scan root.
      - Trailing '/' indicates a directory pattern.
      - A pattern without '/' matches the final segment at any depth.
      - Matching is case-insensitive (Windows volumes).
    """
    anchored = pattern.startswith("/")
    dir_only = pattern.endswith("/")
    pat_core = pattern.strip("/").lower()
    target = rel_str.lower()

    if dir_only and not is_dir:
        return False
    if anchored:
        return fnmatch.fnmatchcase(target, pat_core)
    if "/" not in pat_core:
        return fnmatch.fnmatchcase(target.rsplit("/", 1)[-1], pat_core)
    return fnmatch.fnmatchcase(target, pat_core) or fnmatch.fnmatchcase(target, f"*/{pat_core}")


def load_ignore_patterns(root: Path, extra: Optional[Iterable[str]] = None) -> List[str]:
    """
    Ordered ignore patterns: `.argosignore` at the scan root, then `extra`.
    Negations ('!pattern') are preserved; later entries take precedence.
    """
    patterns: List[str] = []
    ignore_file = root / DEFAULT_IGNORE_FILE
    if ignore_file.is_file():
        patterns.extend(read_ignore_file(ignore_file))
    if extra:
        patterns.extend(p.strip() for p in extra if p and p.strip())
    return patterns


def is_ignored(rel_str: str, is_dir: bool, ignores: List[str]) -> bool:
    """
    Decide whether a root-relative posix path is excluded.

    Rules (in order):
      1) Directories named in DEFAULT_SKIP_DIRS are excluded.
      2) Ordered ignore patterns apply; '!pattern' re-includes, later lines win.
      3) Default: include.
    """
    if is_dir and rel_str.rsplit("/", 1)[-1].lower() in DEFAULT_SKIP_DIRS:
        return True

    decision: Optional[bool] = None
    for pat in ignores:
        if not pat or pat.startswith("#"):
            continue
        negated = pat.startswith("!")
        raw = pat[1:] if negated else pat
        if _pattern_matches(rel_str, is_dir, raw):
            decision = not negated
    return bool(decision)


__all__ = ["DEFAULT_SKIP_DIRS", "is_ignored", "load_ignore_patterns", "read_ignore_file"]
