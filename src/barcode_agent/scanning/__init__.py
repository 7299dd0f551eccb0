"""
Scanning Module
===============

Turns decode hits into at most one accepted scan per physical item.

Components:
    - Candidate / select: Numeric-first candidate selection
    - ScanDebouncer: READY/LOCKED single-flight latch
    - BarcodeDetector: Protocol for decode backends
    - MockDetector: Deterministic detector for testing
    - PyzbarDetector: OpenCV + zbar detector (production)
"""

from barcode_agent.scanning.candidates import (
    Candidate,
    is_numeric_value,
    select,
    to_candidates,
)
from barcode_agent.scanning.debouncer import ScanDebouncer
from barcode_agent.scanning.detector import BarcodeDetector, MockDetector

# Pyzbar detector imported separately: pyzbar needs the zbar shared library
try:
    from barcode_agent.scanning.pyzbar_detector import PyzbarDetector
    _PYZBAR_AVAILABLE = True
except ImportError:
    _PYZBAR_AVAILABLE = False
    PyzbarDetector = None  # type: ignore

__all__ = [
    "Candidate",
    "is_numeric_value",
    "select",
    "to_candidates",
    "ScanDebouncer",
    "BarcodeDetector",
    "MockDetector",
    "PyzbarDetector",
    "_PYZBAR_AVAILABLE",
]
