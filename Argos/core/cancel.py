from __future__ import annotations

import threading

from Argos.core.errors import ScanCancelled


class CancellationToken:
    """
    Cooperative cancellation flag shared by the engine and its workers.

    Workers call `raise_if_cancelled()` at dispatch boundaries and inside
    long loops; the engine stops dispatching as soon as it is set.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise ScanCancelled()


__all__ = ["CancellationToken"]
