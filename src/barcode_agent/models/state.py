"""
Scan State
==========

Discrete states of the scan debouncer.

Transitions:
    READY → LOCKED:  a selected barcode is accepted for lookup
    LOCKED → READY:  explicit reset only (user action)

There is no timeout-based reset and no terminal state.
"""

from enum import Enum


class ScanState(str, Enum):
    """
    Scan latch state.

    Attributes:
        READY: Frames may trigger a lookup
        LOCKED: A scan was accepted; no frame may trigger another lookup
    """

    READY = "READY"
    LOCKED = "LOCKED"
