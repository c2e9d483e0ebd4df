"""
Argos utilities package.

Provides bounded file reading and path filtering utilities.
"""
from __future__ import annotations

from Argos.utils.file_utils import BoundedTextLines, detect_bom, looks_binary, read_header
from Argos.utils.path_filters import (
    DEFAULT_SKIP_DIRS,
    is_ignored,
    load_ignore_patterns,
)

__all__ = [
    "BoundedTextLines",
    "DEFAULT_SKIP_DIRS",
    "detect_bom",
    "is_ignored",
    "load_ignore_patterns",
    "looks_binary",
    "read_header",
]
