from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from Argos.catalog import Catalog
from Argos.catalog.models import SignatureRule
from Argos.core.config import EngineConfig
from Argos.core.descriptor import FileDescriptor
from Argos.core.result import DetectorKind, PartialFinding
from Argos.detectors.base import BaseDetector
from Argos.utils.file_utils import read_header

logger = logging.getLogger(__name__)


def _anchor(rule: SignatureRule) -> Tuple[int, bytes]:
    """Longest run of literal bytes in the pattern, as (position, bytes)."""
    best_pos, best = 0, b""
    pos, run = 0, bytearray()
    for i, b in enumerate(rule.pattern + (None,)):
        if b is None:
            if len(run) > len(best):
                best_pos, best = pos, bytes(run)
            run = bytearray()
            pos = i + 1
        else:
            run.append(b)
    return best_pos, best


class SignatureDetector(BaseDetector):
    '''
    Matches a bounded header window against the magic-number rules.

    Every matching rule is reported with the smallest offset it matched at;
    choosing between overlapping matches is left to fusion.
    '''
    kind = DetectorKind.SIGNATURE

    def __init__(self, catalog: Catalog, config: EngineConfig) -> None:
        super().__init__(catalog, config)
        cap = config.max_signature_offset_bytes
        # (rule, effective max offset, anchor position, anchor bytes)
        self._rules = []
        for rule in catalog.signatures:
            limit = rule.max_offset if cap is None else min(rule.max_offset, cap)
            pos, anchor = _anchor(rule)
            self._rules.append((rule, limit, pos, anchor))
        self.window = catalog.signature_window(cap)
        self._containers = {rule.label for rule in catalog.signatures if rule.container}

    def match(self, header: bytes) -> List[PartialFinding]:
        """Match already-read header bytes against every rule."""
        findings: List[PartialFinding] = []
        for rule, limit, pos, anchor in self._rules:
            offset = self._find(rule, header, limit, pos, anchor)
            if offset is None:
                continue
            evidence = f"magic at byte {offset}"
            if rule.container:
                evidence += " (container, not expanded)"
            findings.append(
                PartialFinding(
                    kind=self.kind,
                    label=rule.label,
                    category=rule.category,
                    weight=rule.weight,
                    offset=offset,
                    specificity=rule.length,
                    binary=rule.binary,
                    evidence=evidence,
                )
            )
        return findings

    @staticmethod
    def _find(rule: SignatureRule, header: bytes, limit: int, pos: int, anchor: bytes) -> Optional[int]:
        last = min(limit, len(header) - rule.length)
        start = 0
        while start <= last:
            # Jump straight to the next place the literal anchor occurs
            hit = header.find(anchor, start + pos, last + pos + len(anchor))
            if hit < 0:
                return None
            offset = hit - pos
            if rule.match_at(header, offset):
                return offset
            start = offset + 1
        return None

    def analyze(self, descriptor: FileDescriptor) -> List[PartialFinding]:
        if self.window == 0:
            return []
        with descriptor.open() as stream:
            header = read_header(stream, self.window)
        logger.debug("Read %d header bytes from %s", len(header), descriptor.path)
        findings = self.match(header)
        for partial in findings:
            if partial.label in self._containers:
                logger.debug("%s is a %s container; members are not extracted", descriptor.path, partial.label)
        return findings
