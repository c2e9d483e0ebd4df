"""Tests for engine configuration."""
from __future__ import annotations

import json
from pathlib import Path

import pytest

from Argos.core.config import EngineConfig
from Argos.core.errors import ConfigError


def test_defaults() -> None:
    """Test the default configuration."""
    config = EngineConfig()
    assert config.entropy_window_size == 128
    assert config.entropy_threshold == 4.0
    assert config.min_report_confidence == 20
    assert config.max_content_scan_bytes == 1024 * 1024
    assert config.max_signature_offset_bytes is None
    assert config.worker_count >= 1


@pytest.mark.parametrize(
    "overrides",
    [
        {"entropy_window_size": 4},
        {"entropy_threshold": 8.5},
        {"entropy_threshold": -1.0},
        {"min_report_confidence": 101},
        {"worker_count": 0},
        {"max_content_scan_bytes": 0},
        {"max_signature_offset_bytes": -1},
    ],
)
def test_invalid_values(overrides: dict) -> None:
    """Test out-of-range options raise ConfigError."""
    with pytest.raises(ConfigError):
        EngineConfig(**overrides)


def test_from_dict_rejects_unknown_keys() -> None:
    """Test typos in config keys are caught."""
    with pytest.raises(ConfigError, match="entropy_treshold"):
        EngineConfig.from_dict({"entropy_treshold": 3.0})


def test_merged_ignores_none() -> None:
    """Test merged applies only the overrides that were given."""
    config = EngineConfig(worker_count=3).merged(worker_count=None, entropy_threshold=3.5)
    assert config.worker_count == 3
    assert config.entropy_threshold == 3.5


def test_from_json(tmp_path: Path) -> None:
    """Test loading a config file."""
    path = tmp_path / "argos.json"
    path.write_text(json.dumps({"min_report_confidence": 60, "worker_count": 2}), encoding="utf-8")
    config = EngineConfig.from_json(path)
    assert config.min_report_confidence == 60
    assert config.to_dict()["worker_count"] == 2


@pytest.mark.parametrize("content", ["{broken", "[1, 2]"])
def test_from_json_invalid(tmp_path: Path, content: str) -> None:
    """Test malformed config files raise ConfigError."""
    path = tmp_path / "argos.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigError):
        EngineConfig.from_json(path)


def test_from_json_missing(tmp_path: Path) -> None:
    """Test a missing config file raises ConfigError."""
    with pytest.raises(ConfigError):
        EngineConfig.from_json(tmp_path / "missing.json")
