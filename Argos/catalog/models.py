"""
Rule types for the detection catalog.

All rules are frozen dataclasses that validate themselves on construction and
raise `MalformedCatalogError` on bad input, so a broken rule table fails at
startup rather than silently weakening a scan.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from re import Pattern
from typing import Optional, Tuple

from Argos.core.errors import MalformedCatalogError

WILDCARD = "??"

# Placeholders a location glob may start with, expanded to root-relative segments.
PROFILE_ROOTS = {
    "{USERPROFILE}": ("users", "*"),
    "{APPDATA}": ("users", "*", "appdata", "roaming"),
    "{LOCALAPPDATA}": ("users", "*", "appdata", "local"),
    "{PROGRAMDATA}": ("programdata",),
    "{SYSTEMROOT}": ("windows",),
}

_PLACEHOLDER_RE = re.compile(r"\{[A-Z]+\}")


def _check_weight(weight: int, label: str) -> None:
    if isinstance(weight, bool) or not isinstance(weight, int) or not 0 <= weight <= 100:
        raise MalformedCatalogError(f"weight must be an integer 0-100, got {weight!r}", label)


def _check_label(label: str) -> None:
    if not isinstance(label, str) or not label.strip():
        raise MalformedCatalogError("rule label must be a non-empty string")


def parse_hex_pattern(text: str, label: str = "") -> Tuple[Optional[int], ...]:
    """
    Parse catalog hex notation into a byte pattern.

    Bytes are space separated hex pairs; `??` is a wildcard.

    Examples:
        >>> parse_hex_pattern("0A ?? 6F")
        (10, None, 111)
    """
    out = []
    for tok in text.split():
        if tok == WILDCARD:
            out.append(None)
            continue
        if len(tok) != 2:
            raise MalformedCatalogError(f"bad hex byte {tok!r}", label)
        try:
            out.append(int(tok, 16))
        except ValueError:
            raise MalformedCatalogError(f"bad hex byte {tok!r}", label) from None
    return tuple(out)


@dataclass(frozen=True)
class SignatureRule:
    """
    A magic-number rule.

    The pattern may sit anywhere from offset 0 to `max_offset` inclusive.
    """
    label: str
    pattern: Tuple[Optional[int], ...]
    weight: int
    category: str
    max_offset: int = 0
    binary: bool = True
    container: bool = False

    def __post_init__(self) -> None:
        _check_label(self.label)
        _check_weight(self.weight, self.label)
        if len(self.pattern) < 1:
            raise MalformedCatalogError("pattern must contain at least one byte", self.label)
        if all(b is None for b in self.pattern):
            raise MalformedCatalogError("pattern must contain at least one literal byte", self.label)
        for b in self.pattern:
            if b is not None and (isinstance(b, bool) or not isinstance(b, int) or not 0 <= b <= 255):
                raise MalformedCatalogError(f"byte value out of range: {b!r}", self.label)
        if isinstance(self.max_offset, bool) or not isinstance(self.max_offset, int) or self.max_offset < 0:
            raise MalformedCatalogError("max_offset must be an integer >= 0", self.label)

    @classmethod
    def from_hex(cls, label: str, hex_pattern: str, weight: int, category: str, **kwargs) -> "SignatureRule":
        return cls(label=label, pattern=parse_hex_pattern(hex_pattern, label),
                   weight=weight, category=category, **kwargs)

    @classmethod
    def from_text(cls, label: str, text: str, weight: int, category: str, **kwargs) -> "SignatureRule":
        return cls(label=label, pattern=tuple(text.encode("ascii")),
                   weight=weight, category=category, **kwargs)

    @property
    def length(self) -> int:
        return len(self.pattern)

    def match_at(self, data: bytes, offset: int) -> bool:
        if offset + len(self.pattern) > len(data):
            return False
        for i, b in enumerate(self.pattern):
            if b is not None and data[offset + i] != b:
                return False
        return True


@dataclass(frozen=True)
class ExtensionRule:
    """Extension -> category mapping. `extension` is stored normalized."""
    extension: str
    weight: int
    category: str
    binary: bool = True

    def __post_init__(self) -> None:
        if not isinstance(self.extension, str):
            raise MalformedCatalogError("extension must be a string")
        norm = self.extension.strip().lower().lstrip(".")
        if not norm or any(c in norm for c in "\\/. "):
            raise MalformedCatalogError(f"invalid extension {self.extension!r}")
        object.__setattr__(self, "extension", norm)
        _check_weight(self.weight, norm)

    @property
    def label(self) -> str:
        return f"EXT_{self.extension.upper()}"


def _check_brackets(segment: str, label: str) -> None:
    depth = 0
    for c in segment:
        if c == "[":
            if depth:
                raise MalformedCatalogError(f"nested '[' in glob segment {segment!r}", label)
            depth = 1
        elif c == "]" and depth:
            depth = 0
    if depth:
        raise MalformedCatalogError(f"unbalanced '[' in glob segment {segment!r}", label)


def split_glob(glob: str, label: str = "") -> Tuple[str, ...]:
    """
    Split an anchored location glob into lowercase segments, expanding a
    leading profile-root placeholder.
    """
    if not isinstance(glob, str) or not glob.strip():
        raise MalformedCatalogError("glob must be a non-empty string", label)
    parts = [p for p in re.split(r"[\\/]+", glob.strip()) if p]
    if not parts:
        raise MalformedCatalogError(f"glob {glob!r} has no segments", label)

    segments = []
    for i, part in enumerate(parts):
        placeholders = _PLACEHOLDER_RE.findall(part)
        if placeholders:
            if i != 0 or part != placeholders[0] or part not in PROFILE_ROOTS:
                raise MalformedCatalogError(f"unknown or misplaced placeholder in {glob!r}", label)
            segments.extend(PROFILE_ROOTS[part])
            continue
        if "{" in part or "}" in part:
            raise MalformedCatalogError(f"unknown placeholder in {glob!r}", label)
        if "**" in part and part != "**":
            raise MalformedCatalogError(f"'**' must be a whole segment in {glob!r}", label)
        _check_brackets(part, label)
        segments.append(part.lower())

    if segments[0] == "**":
        raise MalformedCatalogError(f"glob {glob!r} is not anchored", label)
    return tuple(segments)


@dataclass(frozen=True)
class LocationRule:
    """A known application path where sensitive data lives."""
    glob: str
    application: str
    weight: int
    category: str = "application-data"
    segments: Tuple[str, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        _check_label(self.application)
        _check_weight(self.weight, self.application)
        object.__setattr__(self, "segments", split_glob(self.glob, self.application))

    @property
    def label(self) -> str:
        return self.application


class PatternKind(Enum):
    STRUCTURAL = "structural"
    ENTROPY = "entropy"


@dataclass(frozen=True)
class SecretPattern:
    """
    A content rule.

    Structural patterns carry a compiled regex. Entropy patterns carry a token
    character class; `threshold=None` defers to the engine's configured
    entropy threshold.
    """
    label: str
    weight: int
    kind: PatternKind = PatternKind.STRUCTURAL
    regex: Optional[Pattern] = None
    threshold: Optional[float] = None
    charset: Optional[Pattern] = None
    min_length: int = 20
    category: str = "secret"

    def __post_init__(self) -> None:
        _check_label(self.label)
        _check_weight(self.weight, self.label)
        if self.kind is PatternKind.STRUCTURAL and self.regex is None:
            raise MalformedCatalogError("structural pattern needs a regex", self.label)
        if self.kind is PatternKind.ENTROPY:
            if self.charset is None:
                raise MalformedCatalogError("entropy pattern needs a charset", self.label)
            if self.threshold is not None and not 0.0 <= self.threshold <= 8.0:
                raise MalformedCatalogError("threshold must be between 0 and 8", self.label)
            if self.min_length < 1:
                raise MalformedCatalogError("min_length must be >= 1", self.label)


__all__ = [
    "PROFILE_ROOTS",
    "ExtensionRule",
    "LocationRule",
    "PatternKind",
    "SecretPattern",
    "SignatureRule",
    "parse_hex_pattern",
    "split_glob",
]
