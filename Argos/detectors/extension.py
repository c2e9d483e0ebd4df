from __future__ import annotations

from typing import Any, List, Optional

from Argos.core.descriptor import FileDescriptor
from Argos.core.result import DetectorKind, PartialFinding
from Argos.detectors.base import BaseDetector


def normalize_extension(path: Any) -> Optional[str]:
    """
    Return the lowercase extension of the last path segment, without the dot.

    Dotfiles (".env") and names ending in a dot have no extension. Anything
    that is not a usable path string returns None.

    Examples:
        >>> normalize_extension(r"C:\\Users\\bob\\passwords.KDBX")
        'kdbx'
        >>> normalize_extension("/home/bob/.env") is None
        True
    """
    if not isinstance(path, str) or not path:
        return None
    name = path.replace("\\", "/").rstrip("/").rsplit("/", 1)[-1]
    stem, dot, ext = name.rpartition(".")
    if not dot or not stem or not ext:
        return None
    ext = ext.strip().lower()
    return ext or None


class ExtensionDetector(BaseDetector):
    '''
    Maps a path's extension to a sensitivity category. No I/O.
    '''
    kind = DetectorKind.EXTENSION

    def classify(self, path: Any) -> Optional[PartialFinding]:
        ext = normalize_extension(path)
        if ext is None:
            return None
        rule = self.catalog.extension_index.get(ext)
        if rule is None:
            return None
        return PartialFinding(
            kind=self.kind,
            label=rule.label,
            category=rule.category,
            weight=rule.weight,
            binary=rule.binary,
            evidence=f".{ext}",
        )

    def analyze(self, descriptor: FileDescriptor) -> List[PartialFinding]:
        match = self.classify(descriptor.path)
        return [match] if match else []
