"""
Engine configuration.

Every option has a default so `EngineConfig()` is a usable configuration.
Overrides can come from keyword arguments, a dict, or a JSON file.
"""
from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

from Argos.core.errors import ConfigError

DEFAULT_ENTROPY_WINDOW = 128
DEFAULT_ENTROPY_THRESHOLD = 4.0
DEFAULT_MIN_CONFIDENCE = 20
DEFAULT_MAX_CONTENT_BYTES = 1024 * 1024


def _default_workers() -> int:
    return os.cpu_count() or 4


@dataclass(frozen=True)
class EngineConfig:
    """Options consumed by the detection engine."""

    max_signature_offset_bytes: Optional[int] = None  # None = per-catalog
    entropy_window_size: int = DEFAULT_ENTROPY_WINDOW
    entropy_threshold: float = DEFAULT_ENTROPY_THRESHOLD
    min_report_confidence: int = DEFAULT_MIN_CONFIDENCE
    worker_count: int = field(default_factory=_default_workers)
    max_content_scan_bytes: int = DEFAULT_MAX_CONTENT_BYTES
    location_root: Optional[str] = None

    def __post_init__(self) -> None:
        if self.max_signature_offset_bytes is not None and self.max_signature_offset_bytes < 0:
            raise ConfigError("max_signature_offset_bytes must be >= 0")
        if self.entropy_window_size < 8:
            raise ConfigError("entropy_window_size must be >= 8")
        if not 0.0 <= self.entropy_threshold <= 8.0:
            raise ConfigError("entropy_threshold must be between 0 and 8")
        if not 0 <= self.min_report_confidence <= 100:
            raise ConfigError("min_report_confidence must be between 0 and 100")
        if self.worker_count < 1:
            raise ConfigError("worker_count must be >= 1")
        if self.max_content_scan_bytes < 1:
            raise ConfigError("max_content_scan_bytes must be >= 1")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EngineConfig":
        """Build a config from a mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown config option(s): {', '.join(unknown)}")
        try:
            return cls(**data)
        except TypeError as e:
            raise ConfigError(str(e)) from e

    @classmethod
    def from_json(cls, path: str | Path) -> "EngineConfig":
        """Load a config from a JSON object file."""
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError as e:
            raise ConfigError(f"Config file not found: {path}") from e
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a JSON object")
        return cls.from_dict(data)

    def merged(self, **overrides: Any) -> "EngineConfig":
        """Return a copy with the non-None overrides applied."""
        data = asdict(self)
        data.update({k: v for k, v in overrides.items() if v is not None})
        return self.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


__all__ = ["EngineConfig"]
