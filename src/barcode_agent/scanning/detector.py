"""
Barcode Detector
================

Black-box decode primitive abstraction.

This module provides the BarcodeDetector protocol and the MockDetector
implementation. The pyzbar-backed production detector lives in
`pyzbar_detector.py` so that the zbar shared library stays optional.

Design Rules:
    - Takes a Frame, returns raw candidate strings in detector order
    - Synchronous: the pipeline runs it on its analysis executor
    - May raise; the pipeline treats any failure as "no candidates"
"""

import logging
from typing import List, Optional, Protocol, Sequence

from barcode_agent.stream.frame import Frame


logger = logging.getLogger(__name__)


class BarcodeDetector(Protocol):
    """
    Protocol for decode backends.

    Implemented by:
        - MockDetector (testing, demos)
        - PyzbarDetector (production)
    """

    def detect(self, frame: Frame) -> List[str]:
        """
        Decode every supported symbol visible in a frame.

        Args:
            frame: Admitted frame (still open)

        Returns:
            Raw decoded values, possibly empty
        """
        ...


class MockDetector:
    """
    Deterministic detector that reports the same values for every frame
    that carries image data.

    Attributes:
        values: Raw values returned per frame
        calls: Number of detect() invocations
    """

    def __init__(self, values: Optional[Sequence[str]] = None) -> None:
        self.values: List[str] = list(values or [])
        self.calls: int = 0

        logger.info(f"MockDetector initialized: values={self.values}")

    def detect(self, frame: Frame) -> List[str]:
        self.calls += 1
        return list(self.values)
