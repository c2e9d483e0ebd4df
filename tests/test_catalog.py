"""Tests for rule validation and catalog loading."""
from __future__ import annotations

import dataclasses
import json
from pathlib import Path

import pytest

from Argos.catalog import Catalog, catalog_from_dict, default_catalog, load_catalog
from Argos.catalog.models import (
    ExtensionRule,
    LocationRule,
    PatternKind,
    SecretPattern,
    SignatureRule,
    parse_hex_pattern,
    split_glob,
)
from Argos.core.errors import MalformedCatalogError


def test_parse_hex_pattern_with_wildcards() -> None:
    """Test hex notation parsing with wildcards."""
    assert parse_hex_pattern("0A ?? 6F") == (0x0A, None, 0x6F)


@pytest.mark.parametrize("text", ["0G", "123", "0A ? 6F"])
def test_parse_hex_pattern_rejects_garbage(text: str) -> None:
    """Test malformed hex bytes are rejected."""
    with pytest.raises(MalformedCatalogError):
        parse_hex_pattern(text)


def test_signature_rule_invariants() -> None:
    """Test empty, all-wildcard, negative-offset and bad-weight rules are rejected."""
    with pytest.raises(MalformedCatalogError):
        SignatureRule("EMPTY", (), 10, "x")
    with pytest.raises(MalformedCatalogError):
        SignatureRule("WILD", (None, None), 10, "x")
    with pytest.raises(MalformedCatalogError):
        SignatureRule("NEG", (1,), 10, "x", max_offset=-1)
    with pytest.raises(MalformedCatalogError):
        SignatureRule("HEAVY", (1,), 101, "x")
    with pytest.raises(MalformedCatalogError):
        SignatureRule("BIG", (256,), 10, "x")


def test_signature_rule_match_at() -> None:
    """Test wildcard bytes match anything."""
    rule = SignatureRule.from_hex("T", "DE ?? EF", 50, "x")
    assert rule.match_at(b"\x00\xde\x12\xef", 1)
    assert not rule.match_at(b"\x00\xde\x12\xee", 1)
    assert not rule.match_at(b"\xde\x12", 0)


def test_extension_rule_normalizes() -> None:
    """Test extensions are lowercased and stripped of the leading dot."""
    rule = ExtensionRule(".KDBX", 80, "password-database")
    assert rule.extension == "kdbx"
    assert rule.label == "EXT_KDBX"


@pytest.mark.parametrize("ext", ["", ".", "tar.gz", "a/b"])
def test_extension_rule_rejects_invalid(ext: str) -> None:
    """Test invalid extension strings are rejected."""
    with pytest.raises(MalformedCatalogError):
        ExtensionRule(ext, 10, "x")


def test_split_glob_expands_placeholders() -> None:
    """Test profile-root placeholders expand to anchored segments."""
    assert split_glob(r"{APPDATA}\FileZilla\sitemanager.xml") == (
        "users", "*", "appdata", "roaming", "filezilla", "sitemanager.xml",
    )
    assert split_glob("Windows/System32/config/SAM") == ("windows", "system32", "config", "sam")


@pytest.mark.parametrize(
    "glob",
    ["", r"**\secrets.txt", r"{NOPE}\x", r"Users\{APPDATA}\x", r"Users\a**b", r"Users\[abc"],
)
def test_split_glob_rejects_malformed(glob: str) -> None:
    """Test unanchored or malformed globs fail fast."""
    with pytest.raises(MalformedCatalogError):
        LocationRule(glob, "App", 50)


def test_secret_pattern_requires_regex_or_charset() -> None:
    """Test content rules must carry what their kind needs."""
    with pytest.raises(MalformedCatalogError):
        SecretPattern("NO_REGEX", 50)
    with pytest.raises(MalformedCatalogError):
        SecretPattern("NO_CHARSET", 50, kind=PatternKind.ENTROPY)


def test_catalog_rejects_duplicates() -> None:
    """Test duplicate extensions are a catalog error."""
    with pytest.raises(MalformedCatalogError):
        Catalog(extensions=(ExtensionRule("kdbx", 80, "a"), ExtensionRule(".KDBX", 70, "b")))


def test_catalog_is_immutable() -> None:
    """Test catalogs cannot be mutated after construction."""
    catalog = default_catalog()
    with pytest.raises(dataclasses.FrozenInstanceError):
        catalog.signatures = ()  # type: ignore[misc]
    with pytest.raises(TypeError):
        catalog.extension_index["evil"] = ExtensionRule("evil", 1, "x")  # type: ignore[index]


def test_default_catalog_is_complete_and_cached() -> None:
    """Test the built-in catalog loads every table once."""
    catalog = default_catalog()
    assert catalog is default_catalog()
    assert catalog.signatures and catalog.extensions and catalog.locations and catalog.patterns
    assert "kdbx" in catalog.extension_index
    assert catalog.signature_window() >= 8
    assert catalog.signature_window(cap=0) == max(r.length for r in catalog.signatures)


def test_load_catalog_merges_over_defaults(tmp_path: Path) -> None:
    """Test a JSON rule pack adds and overrides rules."""
    pack = {
        "extensions": [{"extension": "kdbx", "weight": 50, "category": "vault"}],
        "signatures": [{"label": "CORP_VAULT", "hex": "43 56 ?? 01", "weight": 70, "category": "vault"}],
        "locations": [{"glob": r"{USERPROFILE}\corp\*.vault", "application": "Corp Vault", "weight": 60}],
        "patterns": [{"label": "CORP_TOKEN", "regex": r"\bcorp_[a-z0-9]{16}\b", "weight": 80}],
    }
    path = tmp_path / "rules.json"
    path.write_text(json.dumps(pack), encoding="utf-8")

    catalog = load_catalog(path)

    assert catalog.extension_index["kdbx"].weight == 50
    assert any(r.label == "CORP_VAULT" for r in catalog.signatures)
    assert any(r.application == "Corp Vault" for r in catalog.locations)
    assert any(p.label == "CORP_TOKEN" for p in catalog.patterns)
    assert len(catalog.signatures) == len(default_catalog().signatures) + 1


def test_load_catalog_standalone(tmp_path: Path) -> None:
    """Test a rule pack can replace the built-in catalog entirely."""
    path = tmp_path / "rules.json"
    path.write_text(json.dumps({"extensions": [{"extension": "x", "weight": 1}]}), encoding="utf-8")

    catalog = load_catalog(path, base=Catalog())

    assert len(catalog) == 1


@pytest.mark.parametrize(
    "pack",
    [
        {"patterns": [{"label": "BAD", "regex": "([a-z", "weight": 50}]},
        {"signatures": [{"label": "NOPAT", "weight": 50}]},
        {"extensions": [{"extension": "kdbx"}]},
        {"bogus": []},
        [],
    ],
)
def test_catalog_from_dict_rejects_malformed(pack) -> None:
    """Test malformed rule packs raise MalformedCatalogError."""
    with pytest.raises(MalformedCatalogError):
        catalog_from_dict(pack)


def test_load_catalog_invalid_json(tmp_path: Path) -> None:
    """Test unreadable rule packs are fatal."""
    path = tmp_path / "rules.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(MalformedCatalogError):
        load_catalog(path)
    with pytest.raises(MalformedCatalogError):
        load_catalog(tmp_path / "missing.json")
