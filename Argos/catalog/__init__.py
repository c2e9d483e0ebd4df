"""
Argos rule catalog.

A `Catalog` bundles the four rule tables. It is built once before a scan,
validated eagerly, and shared read-only by every worker.
"""
from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from Argos.catalog.extensions import EXTENSION_RULES
from Argos.catalog.locations import LOCATION_RULES
from Argos.catalog.models import (
    ExtensionRule,
    LocationRule,
    PatternKind,
    SecretPattern,
    SignatureRule,
)
from Argos.catalog.patterns import SECRET_PATTERNS
from Argos.catalog.signatures import SIGNATURE_RULES
from Argos.core.errors import MalformedCatalogError


def _unique(labels: Iterable[str], what: str) -> None:
    seen = set()
    for label in labels:
        if label in seen:
            raise MalformedCatalogError(f"duplicate {what}", label)
        seen.add(label)


@dataclass(frozen=True)
class Catalog:
    """Immutable collection of detection rules."""
    signatures: Tuple[SignatureRule, ...] = ()
    extensions: Tuple[ExtensionRule, ...] = ()
    locations: Tuple[LocationRule, ...] = ()
    patterns: Tuple[SecretPattern, ...] = ()
    extension_index: Mapping[str, ExtensionRule] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        for name, kind in (
            ("signatures", SignatureRule),
            ("extensions", ExtensionRule),
            ("locations", LocationRule),
            ("patterns", SecretPattern),
        ):
            rules = tuple(getattr(self, name))
            for rule in rules:
                if not isinstance(rule, kind):
                    raise MalformedCatalogError(f"{name} entry is not a {kind.__name__}: {rule!r}")
            object.__setattr__(self, name, rules)

        _unique((r.label for r in self.signatures), "signature label")
        _unique((r.extension for r in self.extensions), "extension")
        _unique((r.glob.lower() for r in self.locations), "location glob")
        _unique((p.label for p in self.patterns), "pattern label")

        index = {r.extension: r for r in self.extensions}
        object.__setattr__(self, "extension_index", MappingProxyType(index))

    def signature_window(self, cap: Optional[int] = None) -> int:
        """
        Bytes needed to evaluate every signature rule.

        `cap` limits each rule's max offset, as `max_signature_offset_bytes` does.
        """
        if not self.signatures:
            return 0
        offsets = (r.max_offset if cap is None else min(r.max_offset, cap) for r in self.signatures)
        return max(offsets) + max(r.length for r in self.signatures)

    def merged(self, other: "Catalog") -> "Catalog":
        """Rules from `other` replace same-keyed rules in this catalog."""
        def merge(mine, theirs, key):
            replaced = {key(r) for r in theirs}
            return tuple(r for r in mine if key(r) not in replaced) + tuple(theirs)

        return Catalog(
            signatures=merge(self.signatures, other.signatures, lambda r: r.label),
            extensions=merge(self.extensions, other.extensions, lambda r: r.extension),
            locations=merge(self.locations, other.locations, lambda r: r.glob.lower()),
            patterns=merge(self.patterns, other.patterns, lambda r: r.label),
        )

    def __len__(self) -> int:
        return len(self.signatures) + len(self.extensions) + len(self.locations) + len(self.patterns)


@lru_cache(maxsize=1)
def default_catalog() -> Catalog:
    """The built-in catalog. Constructed once per process."""
    return Catalog(
        signatures=SIGNATURE_RULES,
        extensions=EXTENSION_RULES,
        locations=LOCATION_RULES,
        patterns=SECRET_PATTERNS,
    )


def _compile(expr: Any, label: str, flags: int = 0) -> re.Pattern:
    if not isinstance(expr, str) or not expr:
        raise MalformedCatalogError("regex must be a non-empty string", label)
    try:
        return re.compile(expr, flags)
    except re.error as e:
        raise MalformedCatalogError(f"invalid regex {expr!r}: {e}", label) from e


def _signature_from_dict(d: Dict[str, Any]) -> SignatureRule:
    label = d.get("label", "")
    opts = {k: d[k] for k in ("max_offset", "binary", "container") if k in d}
    if "hex" in d:
        return SignatureRule.from_hex(label, d["hex"], d.get("weight"), d.get("category", "unknown"), **opts)
    if "text" in d:
        try:
            return SignatureRule.from_text(label, d["text"], d.get("weight"), d.get("category", "unknown"), **opts)
        except UnicodeEncodeError as e:
            raise MalformedCatalogError("text signatures must be ASCII", label) from e
    raise MalformedCatalogError("signature needs 'hex' or 'text'", label)


def _pattern_from_dict(d: Dict[str, Any]) -> SecretPattern:
    label = d.get("label", "")
    flags = re.IGNORECASE if d.get("ignore_case") else 0
    kind = d.get("kind", "structural")
    if kind == PatternKind.STRUCTURAL.value:
        return SecretPattern(label, d.get("weight"), regex=_compile(d.get("regex"), label, flags),
                             category=d.get("category", "secret"))
    if kind == PatternKind.ENTROPY.value:
        return SecretPattern(
            label, d.get("weight"),
            kind=PatternKind.ENTROPY,
            charset=_compile(d.get("charset"), label),
            threshold=d.get("threshold"),
            min_length=d.get("min_length", 20),
            category=d.get("category", "secret"),
        )
    raise MalformedCatalogError(f"unknown pattern kind {kind!r}", label)


def catalog_from_dict(data: Dict[str, Any]) -> Catalog:
    """Build a catalog from the JSON rule-pack structure."""
    if not isinstance(data, dict):
        raise MalformedCatalogError("rule pack must be a JSON object")
    unknown = set(data) - {"signatures", "extensions", "locations", "patterns"}
    if unknown:
        raise MalformedCatalogError(f"unknown rule pack section(s): {', '.join(sorted(unknown))}")
    try:
        return Catalog(
            signatures=tuple(_signature_from_dict(d) for d in data.get("signatures", [])),
            extensions=tuple(
                ExtensionRule(d["extension"], d["weight"], d.get("category", "unknown"), d.get("binary", True))
                for d in data.get("extensions", [])
            ),
            locations=tuple(
                LocationRule(d["glob"], d["application"], d["weight"], d.get("category", "application-data"))
                for d in data.get("locations", [])
            ),
            patterns=tuple(_pattern_from_dict(d) for d in data.get("patterns", [])),
        )
    except (KeyError, TypeError, AttributeError) as e:
        raise MalformedCatalogError(f"malformed rule entry: {e}") from e


def load_catalog(path: str | Path, base: Optional[Catalog] = None) -> Catalog:
    """
    Load a JSON rule pack and merge it over `base` (the built-in catalog by
    default). Pass `base=Catalog()` to use the pack on its own.
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise MalformedCatalogError(f"cannot read rule pack {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise MalformedCatalogError(f"invalid JSON in rule pack {path}: {e}") from e
    pack = catalog_from_dict(data)
    return (default_catalog() if base is None else base).merged(pack)


__all__ = [
    "Catalog",
    "ExtensionRule",
    "LocationRule",
    "PatternKind",
    "SecretPattern",
    "SignatureRule",
    "catalog_from_dict",
    "default_catalog",
    "load_catalog",
]
