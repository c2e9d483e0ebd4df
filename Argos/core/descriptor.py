from __future__ import annotations

import io
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Callable


@dataclass(frozen=True)
class FileDescriptor:
    """
    One file handed to the engine by the traversal layer.

    Attributes:
        path: Absolute path of the file (Windows or POSIX style)
        size: Size in bytes
        modified: Last-modified time as a POSIX timestamp
        opener: Zero-argument callable returning a new binary stream

    Every call to `open()` returns an independent stream positioned at the
    start of the file, so detectors never share a read cursor.
    """
    path: str
    size: int
    modified: float
    opener: Callable[[], BinaryIO] = field(repr=False, compare=False)

    def open(self) -> BinaryIO:
        return self.opener()

    @classmethod
    def from_path(cls, path: str | Path) -> "FileDescriptor":
        """Describe a file on the local filesystem (stats it once)."""
        p = Path(path).absolute()
        st = p.stat()
        return cls(
            path=str(p),
            size=st.st_size,
            modified=st.st_mtime,
            opener=lambda: open(p, "rb"),
        )

    @classmethod
    def from_bytes(cls, path: str, data: bytes, modified: float = 0.0) -> "FileDescriptor":
        """Describe an in-memory file, e.g. one extracted from an image."""
        return cls(
            path=path,
            size=len(data),
            modified=modified,
            opener=lambda: io.BytesIO(data),
        )

    @property
    def dedup_key(self) -> str:
        """
        Normalized identity of the path.

        Case is folded only where the host OS folds it (Windows), so
        `Vault.kdbx` and `vault.kdbx` stay distinct on POSIX filesystems.
        """
        return os.path.normcase(os.path.normpath(self.path))


__all__ = ["FileDescriptor"]
