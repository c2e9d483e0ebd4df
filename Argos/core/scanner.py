"""
Filesystem traversal for the CLI and library callers.

The engine only consumes FileDescriptor values; this module owns directory
walking, ignore rules, symlink avoidance and permission errors.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, Iterable, Iterator, List, Optional

from Argos.catalog import Catalog
from Argos.core.cancel import CancellationToken
from Argos.core.config import EngineConfig
from Argos.core.descriptor import FileDescriptor
from Argos.core.engine import DetectionEngine
from Argos.core.result import Finding, ScanResult
from Argos.utils.path_filters import is_ignored, load_ignore_patterns

logger = logging.getLogger(__name__)

ErrorHandler = Callable[[str], None]


def iter_descriptors(
    root: str | Path,
    recursive: bool = True,
    ignore_patterns: Optional[Iterable[str]] = None,
    on_error: Optional[ErrorHandler] = None,
) -> Iterator[FileDescriptor]:
    """
    Lazily yield a descriptor for every regular file under `root`.

    Symlinks are never followed (no cycles). Unreadable directories and files
    that vanish or cannot be stat'ed are reported through `on_error` and skipped.
    A file path for `root` yields just that file.

    Example:
        >>> for d in iter_descriptors("C:/Users"):
        ...     print(d.path, d.size)
    """
    root = Path(root)
    report = on_error or (lambda msg: logger.warning("%s", msg))

    if root.is_file():
        try:
            yield FileDescriptor.from_path(root)
        except OSError as e:
            report(f"Cannot access {root}: {e}")
        return

    ignores = load_ignore_patterns(root, ignore_patterns)

    def walk_error(err: OSError) -> None:
        report(f"Cannot read directory {err.filename}: {err.strerror}")

    for dirpath, dirnames, filenames in os.walk(root, onerror=walk_error, followlinks=False):
        rel_dir = Path(dirpath).relative_to(root).as_posix()
        rel_prefix = "" if rel_dir == "." else rel_dir + "/"

        if recursive:
            # Sorted, pruned in place for deterministic traversal
            dirnames[:] = sorted(
                d for d in dirnames
                if not is_ignored(rel_prefix + d, True, ignores)
                and not os.path.islink(os.path.join(dirpath, d))
            )
        else:
            dirnames[:] = []

        for name in sorted(filenames):
            if is_ignored(rel_prefix + name, False, ignores):
                continue
            full = os.path.join(dirpath, name)
            if os.path.islink(full):
                continue
            try:
                if not os.path.isfile(full):
                    continue
                yield FileDescriptor.from_path(full)
            except OSError as e:
                report(f"Cannot access {full}: {e}")


def scan_path(
    path: str | Path,
    config: Optional[EngineConfig] = None,
    catalog: Optional[Catalog] = None,
    recursive: bool = True,
    ignore_patterns: Optional[Iterable[str]] = None,
    token: Optional[CancellationToken] = None,
    sink: Optional[Callable[[Finding], None]] = None,
) -> ScanResult:
    """
    Scan a file or directory for sensitive files.

    Args:
        path: File or directory to scan
        config: Engine options (defaults to EngineConfig())
        catalog: Rule catalog (defaults to the built-in catalog)
        recursive: If True, scan subdirectories
        ignore_patterns: Additional gitignore-style patterns to exclude
        token: Cancellation token shared with the caller
        sink: Called once per ranked finding

    Returns:
        ScanResult containing ranked findings

    Example:
        >>> result = scan_path("D:/evidence/C", EngineConfig(location_root="D:/evidence/C"))
        >>> for finding in result.findings:
        ...     print(finding)
    """
    target = Path(path)
    if not target.exists():
        return ScanResult(errors=[f"Path not found: {path}"])

    errors: List[str] = []
    engine = DetectionEngine(catalog=catalog, config=config, token=token)
    result = engine.scan(
        iter_descriptors(target, recursive=recursive, ignore_patterns=ignore_patterns, on_error=errors.append),
        sink=sink,
    )
    result.errors.extend(errors)
    return result


__all__ = ["iter_descriptors", "scan_path"]
