"""
Pyzbar Detector
===============

Production decode primitive using OpenCV + pyzbar.

This detector:
    - Decodes the frame's base64 JPEG to an upright grayscale image
    - Scans only linear retail symbologies (EAN-13, EAN-8, UPC-A, UPC-E,
      Code 128); QR and other 2D payloads are never reported

Design Rules:
    - Fail fast on misconfiguration (missing zbar library)
    - Image decode errors propagate; the pipeline logs and drops them
"""

import logging
from typing import List, Optional, Sequence

from pyzbar.pyzbar import ZBarSymbol, decode

from barcode_agent.stream.frame import Frame
from barcode_agent.stream.image_decoder import decode_frame_grayscale


logger = logging.getLogger(__name__)


RETAIL_SYMBOLOGIES = (
    ZBarSymbol.EAN13,
    ZBarSymbol.EAN8,
    ZBarSymbol.UPCA,
    ZBarSymbol.UPCE,
    ZBarSymbol.CODE128,
)


class PyzbarDetector:
    """
    Barcode detector backed by the zbar library.

    Attributes:
        symbols: zbar symbologies to scan for
        frames_scanned: Frames passed to zbar
    """

    def __init__(self, symbols: Optional[Sequence[ZBarSymbol]] = None) -> None:
        self.symbols = list(symbols or RETAIL_SYMBOLOGIES)
        self.frames_scanned: int = 0

        logger.info(
            f"PyzbarDetector initialized: "
            f"symbols={[s.name for s in self.symbols]}"
        )

    def detect(self, frame: Frame) -> List[str]:
        gray = decode_frame_grayscale(frame)
        self.frames_scanned += 1

        results = decode(gray, symbols=self.symbols)
        values = [r.data.decode("utf-8", errors="replace") for r in results]

        if values:
            logger.debug(f"Frame {frame.frame_id}: decoded {values}")
        return values
