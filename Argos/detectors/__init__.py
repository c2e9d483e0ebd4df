"""
Argos detectors package.

One detector per signal: extension, magic-number signature, known
location, and content (structural patterns plus entropy).
"""
from __future__ import annotations

from Argos.detectors.base import BaseDetector
from Argos.detectors.content import ContentDetector
from Argos.detectors.entropy_detector import looks_like_secret, shannon_entropy
from Argos.detectors.extension import ExtensionDetector
from Argos.detectors.location import LocationDetector
from Argos.detectors.signature import SignatureDetector

__all__ = [
    "BaseDetector",
    "ContentDetector",
    "ExtensionDetector",
    "LocationDetector",
    "SignatureDetector",
    "looks_like_secret",
    "shannon_entropy",
]
