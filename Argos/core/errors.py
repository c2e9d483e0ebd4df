from __future__ import annotations


class ArgosError(Exception):
    """Base class for all Argos errors."""


class MalformedCatalogError(ArgosError):
    """A rule table entry is invalid. Raised before any file is scanned."""

    def __init__(self, message: str, rule: str | None = None) -> None:
        self.rule = rule
        if rule:
            message = f"{rule}: {message}"
        super().__init__(message)


class ConfigError(ArgosError):
    """Invalid engine configuration."""


class ScanCancelled(ArgosError):
    """Raised inside a worker when the scan's cancellation token is set."""


__all__ = ["ArgosError", "MalformedCatalogError", "ConfigError", "ScanCancelled"]
