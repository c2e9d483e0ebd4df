"""
Secret pattern matching over text content.

Two kinds of rule run on every line:
- structural patterns: fixed-shape regexes for known credential formats
- entropy patterns: tokens of a secret-like character class whose
  sliding-window Shannon entropy crosses a threshold

Binary files are never scanned, and the byte budget bounds the time spent
on any single file.
"""
from __future__ import annotations

import logging
from contextlib import closing
from typing import Iterator, List, Optional, Set, Tuple

from Argos.catalog import Catalog
from Argos.catalog.models import PatternKind, SecretPattern
from Argos.core.cancel import CancellationToken
from Argos.core.config import EngineConfig
from Argos.core.descriptor import FileDescriptor
from Argos.core.result import DetectorKind, PartialFinding
from Argos.detectors.base import BaseDetector
from Argos.detectors.entropy_detector import looks_like_secret, shannon_entropy, sliding_windows
from Argos.utils.file_utils import BoundedTextLines, detect_bom, looks_binary, read_header

logger = logging.getLogger(__name__)

MAX_MATCHES_PER_FILE = 256
BINARY_PROBE_BYTES = 1024
# Longer lines are scanned in overlapping segments of this size
MAX_LINE_CHARS = 16 * 1024
LINE_OVERLAP = 1024


def line_segments(line: str) -> Iterator[Tuple[int, str]]:
    """
    Yield (start, segment) pairs covering the whole line.

    Consecutive segments share LINE_OVERLAP characters, so a match shorter
    than the overlap that straddles a boundary is whole in one of them.
    """
    if len(line) <= MAX_LINE_CHARS:
        yield 0, line
        return
    step = MAX_LINE_CHARS - LINE_OVERLAP
    for start in range(0, len(line), step):
        yield start, line[start:start + MAX_LINE_CHARS]
        if start + MAX_LINE_CHARS >= len(line):
            break


def mask(value: str) -> str:
    """Mask helper that keeps the first/last two characters."""
    if len(value) <= 4:
        return "*" * len(value)
    return value[:2] + "*" * (len(value) - 4) + value[-2:]


class ContentDetector(BaseDetector):
    '''
    Scans text files for structural secret patterns and high-entropy tokens.
    '''
    kind = DetectorKind.CONTENT

    def __init__(
        self,
        catalog: Catalog,
        config: EngineConfig,
        token: Optional[CancellationToken] = None,
    ) -> None:
        super().__init__(catalog, config)
        self.token = token or CancellationToken()
        self.structural = [p for p in catalog.patterns if p.kind is PatternKind.STRUCTURAL]
        self.entropic = [p for p in catalog.patterns if p.kind is PatternKind.ENTROPY]
        self.window = config.entropy_window_size
        self.step = max(1, self.window // 4)

    def _threshold(self, pattern: SecretPattern) -> float:
        return self.config.entropy_threshold if pattern.threshold is None else pattern.threshold

    def scan_line(self, line: str, lineno: int) -> List[PartialFinding]:
        """
        Evaluate one line against every pattern.

        Returns:
            List[PartialFinding]: One partial finding per structural match and
            at most one per entropy-qualifying token.
        """
        findings: List[PartialFinding] = []
        if not line.strip():
            return findings

        # Matches inside an overlap are seen twice; keep the first
        seen: Set[Tuple[str, int]] = set()
        for start, segment in line_segments(line):
            if start:
                self.token.raise_if_cancelled()
            for pattern, pos, text in self._scan_segment(segment):
                key = (pattern.label, start + pos)
                if key not in seen:
                    seen.add(key)
                    findings.append(self._partial(pattern, lineno, text))
        return findings

    def _scan_segment(self, segment: str) -> Iterator[Tuple[SecretPattern, int, str]]:
        # Phase 1: structural patterns (high precision)
        for pattern in self.structural:
            for match in pattern.regex.finditer(segment):
                yield pattern, match.start(), match.group(0)

        # Phase 2: entropy-triggered patterns (high recall)
        for pattern in self.entropic:
            threshold = self._threshold(pattern)
            for match in pattern.charset.finditer(segment):
                token = match.group(0)
                if len(token) < pattern.min_length:
                    continue
                window = self._entropic_window(token, threshold, min(pattern.min_length, self.window))
                if window is not None:
                    yield pattern, match.start(), window

    def _entropic_window(self, token: str, threshold: float, min_length: int) -> Optional[str]:
        for _, window in sliding_windows(token, self.window, self.step):
            if shannon_entropy(window) > threshold and looks_like_secret(window, threshold, min_length):
                return window
        return None

    def _partial(self, pattern: SecretPattern, lineno: int, text: str) -> PartialFinding:
        return PartialFinding(
            kind=self.kind,
            label=pattern.label,
            category=pattern.category,
            weight=pattern.weight,
            line=lineno,
            evidence=mask(text[:64]),
        )

    def lines(self, descriptor: FileDescriptor) -> Optional[BoundedTextLines]:
        """
        Return the bounded line sequence for a text file, or None for binary content.
        """
        with descriptor.open() as stream:
            sample = read_header(stream, BINARY_PROBE_BYTES)
        encoding = detect_bom(sample)
        if encoding is None:
            if looks_binary(sample):
                return None
            encoding = "utf-8"
        return BoundedTextLines(descriptor.open, self.config.max_content_scan_bytes, encoding=encoding)

    def analyze(self, descriptor: FileDescriptor) -> List[PartialFinding]:
        lines = self.lines(descriptor)
        if lines is None:
            logger.debug("Skipping content scan of binary file %s", descriptor.path)
            return []

        findings: List[PartialFinding] = []
        try:
            with closing(iter(lines)) as it:
                for lineno, line in it:
                    self.token.raise_if_cancelled()
                    findings.extend(self.scan_line(line, lineno))
                    if len(findings) >= MAX_MATCHES_PER_FILE:
                        logger.debug("Match cap reached for %s", descriptor.path)
                        del findings[MAX_MATCHES_PER_FILE:]
                        break
        except UnicodeDecodeError as e:
            # Not text after all; a partial scan of undecodable data is noise
            logger.debug("Undecodable content in %s: %s", descriptor.path, e)
            return []
        return findings
