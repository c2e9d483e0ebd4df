"""Tests for fusing partial findings into a confidence score."""
from __future__ import annotations

import random

import pytest

from Argos.core.fusion import combine, fuse, select_contributors
from Argos.core.result import DetectorKind, PartialFinding, Severity


def ext(weight: int = 80, category: str = "password-database") -> PartialFinding:
    return PartialFinding(DetectorKind.EXTENSION, "EXT_KDBX", category, weight, binary=True)


def sig(label: str, weight: int, category: str = "password-database",
        specificity: int = 8, offset: int = 0) -> PartialFinding:
    return PartialFinding(
        DetectorKind.SIGNATURE, label, category, weight,
        offset=offset, specificity=specificity, binary=True,
    )


def content(label: str, weight: int, line: int = 1) -> PartialFinding:
    return PartialFinding(DetectorKind.CONTENT, label, "secret", weight, line=line)


def test_no_partials_no_finding() -> None:
    """Test a file with no partial findings is dropped."""
    assert fuse("a.txt", []) is None


def test_single_extension_confidence_equals_weight() -> None:
    """Test one contributor yields exactly its weight."""
    finding = fuse(r"C:\Users\bob\Documents\passwords.kdbx", [ext(80)])
    assert finding is not None
    assert finding.confidence == 80.0
    assert finding.category == "password-database"
    assert finding.severity is Severity.HIGH


def test_redundant_extension_and_signature_are_discounted() -> None:
    """Test agreeing extension and signature count less than independent evidence."""
    finding = fuse("passwords.kdbx", [ext(80), sig("KEEPASS_KDBX", 85)])
    assert finding.confidence == pytest.approx(91.0)

    independent = fuse("passwords.kdbx", [ext(80, category="other"), sig("KEEPASS_KDBX", 85)])
    assert independent.confidence == pytest.approx(97.0)


def test_independent_signals_corroborate() -> None:
    """Test extension and content combine as a probabilistic OR."""
    finding = fuse(r"C:\app\prod.env", [ext(40, "config"), content("STRIPE_SECRET_KEY", 90)])
    assert finding.confidence == pytest.approx(94.0)
    assert finding.category == "secret"


def test_most_specific_signature_wins() -> None:
    """Test only the longest matching signature contributes."""
    finding = fuse("x.bin", [sig("GENERIC", 10, "archive", 2), sig("SPECIFIC", 60, "archive", 4)])
    assert [p.label for p in finding.partials] == ["SPECIFIC"]
    assert finding.confidence == 60.0


def test_equal_specificity_prefers_earlier_offset() -> None:
    """Test ties on pattern length go to the smaller offset."""
    chosen = select_contributors([sig("LATE", 50, specificity=4, offset=8),
                                  sig("EARLY", 40, specificity=4, offset=0)])
    assert [p.label for p in chosen] == ["EARLY"]


def test_duplicate_content_matches_collapse() -> None:
    """Test repeated matches of one pattern count once."""
    finding = fuse("notes.txt", [content("JWT", 60, line=7), content("JWT", 60, line=3)])
    assert finding.confidence == 60.0
    assert [p.line for p in finding.partials] == [3]


def test_partials_in_detector_order() -> None:
    """Test contributors are reported extension, signature, location, content."""
    loc = PartialFinding(DetectorKind.LOCATION, "Dropbox synced vault", "password-database", 40)
    finding = fuse("db.kdbx", [content("JWT", 60), loc, sig("KEEPASS_KDBX", 85), ext(80)])
    assert finding.detectors == [
        DetectorKind.EXTENSION, DetectorKind.SIGNATURE, DetectorKind.LOCATION, DetectorKind.CONTENT,
    ]


def test_min_confidence_drops_weak_files() -> None:
    """Test files below the reporting threshold are dropped."""
    assert fuse("dump.dmp", [ext(35, "memory-dump")], min_confidence=40) is None
    assert fuse("dump.dmp", [ext(35, "memory-dump")], min_confidence=35) is not None


def test_zero_weight_is_not_reported() -> None:
    """Test contributors that add no confidence produce no finding."""
    assert fuse("a.bin", [sig("ZERO", 0)]) is None


def test_confidence_bounds() -> None:
    """Test fused confidence stays within [0, 100] and never exceeds the OR of weights."""
    rng = random.Random(42)
    for _ in range(200):
        weights = [rng.randint(0, 100) for _ in range(rng.randint(1, 6))]
        score = combine(weights)
        assert 0.0 <= score <= 100.0
        assert score >= max(weights) - 0.01
    assert combine([100, 100]) == 100.0


def test_finding_to_dict_carries_evidence() -> None:
    """Test the serialized finding lists contributing evidence."""
    finding = fuse("passwords.kdbx", [ext(80), sig("KEEPASS_KDBX", 85)])
    data = finding.to_dict()
    assert data["path"] == "passwords.kdbx"
    assert data["severity"] == "critical"
    assert [e["detector"] for e in data["evidence"]] == ["extension", "signature"]
    assert data["evidence"][1]["offset"] == 0
