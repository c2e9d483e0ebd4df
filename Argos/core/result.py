from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class DetectorKind(Enum):
    """Which detector produced a partial finding. Order is the report order."""
    EXTENSION = "extension"
    SIGNATURE = "signature"
    LOCATION = "location"
    CONTENT = "content"

    @property
    def rank(self) -> int:
        return _KIND_ORDER[self]


_KIND_ORDER = {kind: i for i, kind in enumerate(DetectorKind)}


class Severity(Enum):
    """Severity bucket derived from a finding's confidence."""
    CRITICAL = 'critical'
    HIGH = "high"
    MEDIUM = 'medium'
    LOW = 'low'

    @classmethod
    def from_confidence(cls, confidence: float) -> "Severity":
        if confidence >= 90:
            return cls.CRITICAL
        if confidence >= 70:
            return cls.HIGH
        if confidence >= 40:
            return cls.MEDIUM
        return cls.LOW


@dataclass(frozen=True)
class PartialFinding:
    """
    Output of one detector for one file.

    Attributes:
        kind: Detector that fired
        label: Matched rule label (e.g. "KEEPASS_KDBX", "STRIPE_SECRET_KEY")
        category: Sensitivity category of the rule
        weight: Rule weight, 0-100
        offset: Byte offset of a signature match
        line: Line number of a content match (1-based)
        specificity: Pattern length for signature matches, 0 otherwise
        binary: True if the rule identifies a binary format
        evidence: Masked excerpt or matched path, never a raw secret
    """
    kind: DetectorKind
    label: str
    category: str
    weight: int
    offset: Optional[int] = None
    line: Optional[int] = None
    specificity: int = 0
    binary: bool = False
    evidence: Optional[str] = None

    @property
    def sort_key(self) -> Tuple[int, int, int, str]:
        return (
            self.kind.rank,
            self.line if self.line is not None else 0,
            self.offset if self.offset is not None else 0,
            self.label,
        )

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "detector": self.kind.value,
            "label": self.label,
            "category": self.category,
            "weight": self.weight,
        }
        if self.offset is not None:
            d["offset"] = self.offset
        if self.line is not None:
            d["line"] = self.line
        if self.evidence is not None:
            d["evidence"] = self.evidence
        return d


@dataclass(frozen=True)
class Finding:
    """
    Fused result for one file.

    Attributes:
        path: Path of the file
        confidence: Aggregate confidence, 0-100
        category: Category of the strongest contributing partial finding
        partials: Contributing partial findings in detector order
    """
    path: str
    confidence: float
    category: str
    partials: Tuple[PartialFinding, ...]

    @property
    def severity(self) -> Severity:
        return Severity.from_confidence(self.confidence)

    @property
    def detectors(self) -> List[DetectorKind]:
        """Distinct detector kinds that contributed, in report order."""
        seen: List[DetectorKind] = []
        for p in self.partials:
            if p.kind not in seen:
                seen.append(p.kind)
        return seen

    def to_dict(self) -> Dict[str, Any]:
        """Convert finding to dictionary representation"""
        return {
            "path": self.path,
            "confidence": self.confidence,
            "severity": self.severity.value,
            "category": self.category,
            "evidence": [p.to_dict() for p in self.partials],
        }

    def __str__(self) -> str:
        kinds = ", ".join(k.value for k in self.detectors)
        return (
            f"[{self.severity.value.upper()}] {self.category} "
            f"{self.path} ({self.confidence:.1f}%, via {kinds})"
        )


@dataclass
class ScanResult:
    """
    Represents the complete result of a scan operation.

    Attributes:
        findings: Ranked findings (confidence descending, then path)
        scanned_files: Number of files analyzed
        skipped: (path, reason) pairs for files or detectors skipped on I/O errors
        errors: Errors that are not tied to a single file
        cancelled: True if the scan stopped early on cancellation
        duration_ms: Scan duration in milliseconds
    """
    findings: List[Finding] = field(default_factory=list)
    scanned_files: int = 0
    skipped: List[Tuple[str, str]] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    cancelled: bool = False
    duration_ms: float = 0.0

    @property
    def found_sensitive(self) -> bool:
        """Returns True if any findings were reported"""
        return len(self.findings) > 0

    def count(self, severity: Severity) -> int:
        return sum(1 for f in self.findings if f.severity == severity)

    def to_dict(self) -> Dict[str, Any]:
        """Convert scan result to a dictionary"""
        return {
            "findings": [f.to_dict() for f in self.findings],
            "scanned_files": self.scanned_files,
            "skipped": [{"path": p, "reason": r} for p, r in self.skipped],
            "errors": self.errors,
            "cancelled": self.cancelled,
            "duration_ms": self.duration_ms,
            "summary": {
                "total_findings": len(self.findings),
                **{s.value: self.count(s) for s in Severity},
            },
        }

    def __str__(self) -> str:
        """Human readable summary"""
        return (
            f"Scan complete: {len(self.findings)} findings in "
            f"{self.scanned_files} files ({len(self.skipped)} skipped) "
            f"[{self.duration_ms:.2f}ms]"
        )


__all__ = ["DetectorKind", "PartialFinding", "Finding", "ScanResult", "Severity"]
