from __future__ import annotations

import re
from fnmatch import fnmatchcase
from functools import lru_cache
from typing import List, Optional, Sequence, Tuple

from Argos.catalog import Catalog
from Argos.core.config import EngineConfig
from Argos.core.descriptor import FileDescriptor
from Argos.core.result import DetectorKind, PartialFinding
from Argos.detectors.base import BaseDetector

_DRIVE_RE = re.compile(r"^[a-z]:$")
_SEP_RE = re.compile(r"[\\/]+")


def _split(path: str) -> List[str]:
    return [s.lower() for s in _SEP_RE.split(path) if s]


def path_segments(path: str, root: Optional[Sequence[str]] = None) -> Optional[Tuple[str, ...]]:
    """
    Split a path into lowercase segments relative to the volume root.

    Drive letters, `\\\\?\\` prefixes and UNC server/share pairs are removed.
    With `root` (already split), the path must live under it and the root
    segments are removed instead. Returns None if the path is outside `root`.

    Examples:
        >>> path_segments(r"C:\\Users\\Bob\\NTUSER.DAT")
        ('users', 'bob', 'ntuser.dat')
    """
    if root:
        segs = _split(path)
        if len(segs) <= len(root) or segs[:len(root)] != list(root):
            return None
        return tuple(segs[len(root):])

    unc = path.startswith(("\\\\", "//"))
    segs = _split(path)
    if segs and segs[0] in ("?", "."):
        segs = segs[1:]
        unc = bool(segs) and segs[0] == "unc"
        if unc:
            segs = segs[1:]
    if unc and not (segs and _DRIVE_RE.match(segs[0])):
        segs = segs[2:]
    elif segs and _DRIVE_RE.match(segs[0]):
        segs = segs[1:]
    return tuple(segs)


def match_segments(segments: Tuple[str, ...], pattern: Tuple[str, ...]) -> bool:
    """Anchored segment-wise glob match; `**` spans zero or more segments."""

    @lru_cache(maxsize=None)
    def go(i: int, j: int) -> bool:
        if j == len(pattern):
            return i == len(segments)
        if pattern[j] == "**":
            return any(go(k, j + 1) for k in range(i, len(segments) + 1))
        if i == len(segments):
            return False
        return fnmatchcase(segments[i], pattern[j]) and go(i + 1, j + 1)

    return go(0, 0)


class LocationDetector(BaseDetector):
    '''
    Matches paths against known application locations. Purely structural:
    it never touches the filesystem.
    '''
    kind = DetectorKind.LOCATION

    def __init__(self, catalog: Catalog, config: EngineConfig) -> None:
        super().__init__(catalog, config)
        self._root = tuple(_split(config.location_root)) if config.location_root else None

    def resolve(self, path: str) -> List[PartialFinding]:
        if not isinstance(path, str) or not path:
            return []
        segments = path_segments(path, self._root)
        if not segments:
            return []
        findings: List[PartialFinding] = []
        for rule in self.catalog.locations:
            if match_segments(segments, rule.segments):
                findings.append(
                    PartialFinding(
                        kind=self.kind,
                        label=rule.label,
                        category=rule.category,
                        weight=rule.weight,
                        evidence=rule.glob,
                    )
                )
        return findings

    def analyze(self, descriptor: FileDescriptor) -> List[PartialFinding]:
        return self.resolve(descriptor.path)
