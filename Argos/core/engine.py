"""
Detection engine: runs the four detectors over a stream of files on a
bounded thread pool and fuses each file's partial findings into at most one
ranked Finding.
"""
from __future__ import annotations

import logging
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, Iterator, List, Optional, Set, Tuple

from Argos.catalog import Catalog, default_catalog
from Argos.core.cancel import CancellationToken
from Argos.core.config import EngineConfig
from Argos.core.descriptor import FileDescriptor
from Argos.core.errors import ScanCancelled
from Argos.core.fusion import fuse
from Argos.core.result import DetectorKind, Finding, PartialFinding, ScanResult
from Argos.detectors.content import ContentDetector
from Argos.detectors.extension import ExtensionDetector
from Argos.detectors.location import LocationDetector
from Argos.detectors.signature import SignatureDetector

logger = logging.getLogger(__name__)


class FileState(Enum):
    """Lifecycle of one file inside the engine."""
    PENDING = "pending"
    DISPATCHED = "dispatched"
    COLLECTING = "collecting"
    FUSED = "fused"
    EMITTED = "emitted"
    DROPPED = "dropped"


@dataclass
class FileReport:
    """Outcome of analyzing one file, handed from a worker to the collector."""
    path: str
    state: FileState = FileState.PENDING
    finding: Optional[Finding] = None
    skipped: List[Tuple[str, str]] = field(default_factory=list)


def rank_key(finding: Finding) -> Tuple[float, str]:
    return (-finding.confidence, finding.path)


class DetectionEngine:
    '''
    Orchestrates the detectors and fuses their results.

    The catalog and config are read-only after construction and shared by
    all worker threads; the only cross-thread state is the cancellation token.
    '''

    def __init__(
        self,
        catalog: Optional[Catalog] = None,
        config: Optional[EngineConfig] = None,
        token: Optional[CancellationToken] = None,
    ) -> None:
        self.catalog = catalog if catalog is not None else default_catalog()
        self.config = config or EngineConfig()
        self.token = token or CancellationToken()

        self.extension = ExtensionDetector(self.catalog, self.config)
        self.signature = SignatureDetector(self.catalog, self.config)
        self.location = LocationDetector(self.catalog, self.config)
        self.content = ContentDetector(self.catalog, self.config, token=self.token)

    def cancel(self) -> None:
        """Stop dispatching new files; in-flight files finish or abort promptly."""
        self.token.cancel()

    def _dispatch(self, kind: DetectorKind, descriptor: FileDescriptor) -> List[PartialFinding]:
        if kind is DetectorKind.EXTENSION:
            return self.extension.analyze(descriptor)
        if kind is DetectorKind.SIGNATURE:
            return self.signature.analyze(descriptor)
        if kind is DetectorKind.LOCATION:
            return self.location.analyze(descriptor)
        if kind is DetectorKind.CONTENT:
            return self.content.analyze(descriptor)
        raise ValueError(f"Unknown detector kind: {kind!r}")

    def _run_detector(
        self,
        kind: DetectorKind,
        descriptor: FileDescriptor,
        report: FileReport,
    ) -> List[PartialFinding]:
        """Run one detector inside its own error boundary."""
        started = time.perf_counter()
        try:
            partials = self._dispatch(kind, descriptor)
        except ScanCancelled:
            raise
        except OSError as e:
            logger.warning("I/O error in %s detector for %s: %s", kind.value, descriptor.path, e)
            report.skipped.append((descriptor.path, f"{kind.value}: {e}"))
            return []
        except Exception as e:
            logger.exception("%s detector failed on %s", kind.value, descriptor.path)
            report.skipped.append((descriptor.path, f"{kind.value}: {type(e).__name__}: {e}"))
            return []
        logger.debug(
            "%s detector: %d partial(s) for %s in %.1fms",
            kind.value, len(partials), descriptor.path, (time.perf_counter() - started) * 1000,
        )
        return partials

    def _set_state(self, report: FileReport, state: FileState) -> None:
        report.state = state
        logger.debug("%s -> %s", report.path, state.value)

    def analyze(self, descriptor: FileDescriptor) -> FileReport:
        """
        Analyze a single file synchronously.

        Content scanning is skipped when the extension or signature marks the
        file as a binary format.

        Raises:
            ScanCancelled: if the engine was cancelled before or during analysis
        """
        report = FileReport(path=descriptor.path)
        self.token.raise_if_cancelled()
        self._set_state(report, FileState.DISPATCHED)

        partials: List[PartialFinding] = []
        for kind in (DetectorKind.EXTENSION, DetectorKind.SIGNATURE, DetectorKind.LOCATION):
            partials.extend(self._run_detector(kind, descriptor, report))

        self._set_state(report, FileState.COLLECTING)
        binary = any(
            p.binary for p in partials
            if p.kind in (DetectorKind.EXTENSION, DetectorKind.SIGNATURE)
        )
        if binary:
            logger.debug("Skipping content scan of %s (binary format)", descriptor.path)
        else:
            partials.extend(self._run_detector(DetectorKind.CONTENT, descriptor, report))

        report.finding = fuse(descriptor.path, partials, self.config.min_report_confidence)
        self._set_state(report, FileState.FUSED if report.finding else FileState.DROPPED)
        return report

    def _collect(self, done: Iterable[Future], result: ScanResult, reports: List[FileReport]) -> None:
        for fut in done:
            if fut.cancelled():
                continue
            try:
                report = fut.result()
            except ScanCancelled:
                continue
            result.scanned_files += 1
            result.skipped.extend(report.skipped)
            reports.append(report)

    def scan(
        self,
        descriptors: Iterable[FileDescriptor],
        sink: Optional[Callable[[Finding], None]] = None,
    ) -> ScanResult:
        """
        Scan a stream of files.

        At most `2 * worker_count` files are in flight at once, so the input
        may be an arbitrarily long lazy iterator. Duplicate paths are analyzed
        once. Findings are ranked by confidence (descending) then path, and
        each is passed to `sink` exactly once.

        Returns:
            ScanResult with ranked findings and the I/O skip summary.
        """
        start = time.time()
        result = ScanResult()
        reports: List[FileReport] = []
        seen: Set[str] = set()
        max_in_flight = self.config.worker_count * 2

        with ThreadPoolExecutor(max_workers=self.config.worker_count, thread_name_prefix="argos") as pool:
            in_flight: Set[Future] = set()
            try:
                for descriptor in descriptors:
                    if self.token.cancelled:
                        break
                    key = descriptor.dedup_key
                    if key in seen:
                        logger.debug("Duplicate path ignored: %s", descriptor.path)
                        continue
                    seen.add(key)
                    in_flight.add(pool.submit(self.analyze, descriptor))
                    if len(in_flight) >= max_in_flight:
                        done, in_flight = wait(in_flight, return_when=FIRST_COMPLETED)
                        self._collect(done, result, reports)
            except KeyboardInterrupt:
                logger.warning("Interrupted; cancelling scan")
                self.token.cancel()

            if self.token.cancelled:
                for fut in in_flight:
                    fut.cancel()
            done, _ = wait(in_flight)
            self._collect(done, result, reports)

        fused = sorted((r for r in reports if r.finding is not None), key=lambda r: rank_key(r.finding))
        for report in fused:
            if sink is not None:
                sink(report.finding)
            self._set_state(report, FileState.EMITTED)
            result.findings.append(report.finding)
        result.cancelled = self.token.cancelled
        result.duration_ms = (time.time() - start) * 1000
        logger.info("%s", result)
        return result

    def iter_findings(self, descriptors: Iterable[FileDescriptor]) -> Iterator[Finding]:
        """Ranked findings for `descriptors`, yielded once each."""
        yield from self.scan(descriptors).findings


__all__ = ["DetectionEngine", "FileReport", "FileState"]
