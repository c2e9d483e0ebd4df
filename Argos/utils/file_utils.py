"""
Bounded file reading helpers used by the detectors.

- Header reads never go past the requested window
- Binary sniffing from a small sample
- Lazy, restartable line iteration capped at a byte budget
- Strict decoding so undecodable files can be skipped instead of scanned as noise
"""

from __future__ import annotations

import codecs
from typing import BinaryIO, Callable, Iterator, Optional, Tuple

CHUNK_SIZE = 64 * 1024

_BOMS = (
    (codecs.BOM_UTF32_LE, "utf-32"),
    (codecs.BOM_UTF32_BE, "utf-32"),
    (codecs.BOM_UTF8, "utf-8-sig"),
    (codecs.BOM_UTF16_LE, "utf-16"),
    (codecs.BOM_UTF16_BE, "utf-16"),
)


def read_header(stream: BinaryIO, num_bytes: int) -> bytes:
    """
    Read at most `num_bytes` from the current position of `stream`.

    Short and empty files return whatever is available; truncation is not an error.
    """
    buf = bytearray()
    while len(buf) < num_bytes:
        chunk = stream.read(num_bytes - len(buf))
        if not chunk:
            break
        buf += chunk
    return bytes(buf)


def detect_bom(sample: bytes) -> Optional[str]:
    """Return the codec named by a leading byte-order mark, if any."""
    for bom, encoding in _BOMS:
        if sample.startswith(bom):
            return encoding
    return None


def looks_binary(sample: bytes) -> bool:
    """
    Heuristic check for binary content.
    Args:
        sample (bytes): A sample of the file content.

    Returns:
        bool: True if the sample contains a NUL byte or more than 30% non-text bytes.
    """
    if not sample:
        return False

    if b"\x00" in sample:
        return True

    nontext = 0
    for byte in sample:
        if byte in b"\t\n\r\f\b":
            continue

        # Bytes >= 0x80 are allowed: they are UTF-8 continuation/lead bytes
        if byte < 32 or byte == 127:
            nontext += 1

    return nontext / len(sample) > 0.3


class BoundedTextLines:
    """
    Finite, restartable sequence of (line_number, line) pairs.

    Each iteration reopens the stream through `opener` and reads at most
    `max_bytes` bytes. Line endings (`\\n`, `\\r\\n`) are stripped. Decoding is
    incremental, so a multi-byte character split at the byte cap is dropped
    rather than reported as an error; an invalid sequence inside the budget
    raises `UnicodeDecodeError`.
    """

    def __init__(
        self,
        opener: Callable[[], BinaryIO],
        max_bytes: int,
        encoding: str = "utf-8",
        chunk_size: int = CHUNK_SIZE,
    ) -> None:
        self._opener = opener
        self.max_bytes = max_bytes
        self.encoding = encoding
        self.chunk_size = chunk_size

    def __iter__(self) -> Iterator[Tuple[int, str]]:
        decoder = codecs.getincrementaldecoder(self.encoding)(errors="strict")
        remaining = self.max_bytes
        pending = ""
        lineno = 0
        hit_cap = False

        with self._opener() as f:
            while True:
                if remaining <= 0:
                    hit_cap = True
                    break
                chunk = f.read(min(self.chunk_size, remaining))
                if not chunk:
                    break
                remaining -= len(chunk)
                pending += decoder.decode(chunk)
                *complete, pending = pending.split("\n")
                for line in complete:
                    lineno += 1
                    yield lineno, line.rstrip("\r")

        pending += decoder.decode(b"", final=not hit_cap)
        if pending:
            yield lineno + 1, pending.rstrip("\r")


__all__ = ["BoundedTextLines", "detect_bom", "looks_binary", "read_header"]
