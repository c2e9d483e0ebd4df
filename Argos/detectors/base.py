from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar, List

from Argos.catalog import Catalog
from Argos.core.config import EngineConfig
from Argos.core.descriptor import FileDescriptor
from Argos.core.result import DetectorKind, PartialFinding


class BaseDetector(ABC):
    '''
    Abstract base class for the four detectors.

    Subclasses set `kind` and implement `analyze`. Detectors hold only
    read-only references to the catalog and config, so one instance is
    shared by every worker thread.
    '''
    kind: ClassVar[DetectorKind]

    def __init__(self, catalog: Catalog, config: EngineConfig) -> None:
        self.catalog = catalog
        self.config = config
        self.name = self.__class__.__name__

    @abstractmethod
    def analyze(self, descriptor: FileDescriptor) -> List[PartialFinding]:
        """
        Analyze one file and return its partial findings.

        Parameters
        ----------
        descriptor:
            The file to analyze. Detectors that read content must open
            their own stream via `descriptor.open()`.

        Returns
        -------
        List[PartialFinding]:
            Zero or more partial findings, all of this detector's kind.

        Raises
        ------
        OSError:
            On read failures; the engine treats these as a soft skip for
            this detector only.
        """
        raise NotImplementedError()

    def __repr__(self) -> str:
        return f"{self.name}(kind={self.kind.value})"
