"""
Fusion of partial findings into one per-file verdict.

Confidence is a probabilistic OR of the contributing weights, so independent
signals corroborate each other while the score saturates below 100. Before
combining, redundant signals are collapsed so one underlying fact is not
counted twice.
"""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

from Argos.core.result import DetectorKind, Finding, PartialFinding

# Applied to the weaker of an extension and signature finding that agree on category
REDUNDANCY_DISCOUNT = 0.5


def _specificity_key(p: PartialFinding) -> Tuple[int, int, str]:
    # Longest pattern first, then earliest offset, then label for stability
    return (-p.specificity, p.offset if p.offset is not None else 0, p.label)


def select_contributors(partials: Iterable[PartialFinding]) -> List[PartialFinding]:
    """
    Reduce raw partial findings to the set that contributes to confidence.

    - Only the most specific signature match is kept.
    - Repeated matches of the same rule collapse to the first occurrence.
    """
    ordered = sorted(partials, key=lambda p: p.sort_key)

    signatures = [p for p in ordered if p.kind is DetectorKind.SIGNATURE]
    best_signature = min(signatures, key=_specificity_key) if signatures else None

    seen = set()
    out: List[PartialFinding] = []
    for p in ordered:
        if p.kind is DetectorKind.SIGNATURE and p is not best_signature:
            continue
        key = (p.kind, p.label)
        if key in seen:
            continue
        seen.add(key)
        out.append(p)
    return out


def effective_weights(contributors: List[PartialFinding]) -> Dict[int, float]:
    """Map contributor index to the weight used in the combination."""
    weights = {i: float(p.weight) for i, p in enumerate(contributors)}
    ext = next((i for i, p in enumerate(contributors) if p.kind is DetectorKind.EXTENSION), None)
    sig = next((i for i, p in enumerate(contributors) if p.kind is DetectorKind.SIGNATURE), None)
    if ext is not None and sig is not None and contributors[ext].category == contributors[sig].category:
        weaker = ext if contributors[ext].weight < contributors[sig].weight else sig
        weights[weaker] *= REDUNDANCY_DISCOUNT
    return weights


def combine(weights: Iterable[float]) -> float:
    """
    Probabilistic OR of 0-100 weights, scaled back to 0-100.

    Examples:
        >>> combine([80])
        80.0
        >>> combine([50, 50])
        75.0
        >>> combine([])
        0.0
    """
    miss = 1.0
    for w in weights:
        w = min(max(w, 0.0), 100.0)
        miss *= 1.0 - w / 100.0
    score = (1.0 - miss) * 100.0
    return round(min(max(score, 0.0), 100.0), 2)


def fuse(path: str, partials: Iterable[PartialFinding], min_confidence: float = 0) -> Optional[Finding]:
    """
    Fuse one file's partial findings.

    Returns:
        Finding or None when there is nothing to report or the confidence is
        below `min_confidence`.
    """
    contributors = select_contributors(partials)
    if not contributors:
        return None

    weights = effective_weights(contributors)
    confidence = combine(weights.values())
    if confidence <= 0 or confidence < min_confidence:
        return None

    # Highest weight wins; ties go to the earlier detector kind
    top = max(range(len(contributors)), key=lambda i: (contributors[i].weight, -i))
    return Finding(
        path=path,
        confidence=confidence,
        category=contributors[top].category,
        partials=tuple(contributors),
    )


__all__ = ["REDUNDANCY_DISCOUNT", "combine", "fuse", "select_contributors"]
