"""
Result Sink
===========

Receiver of the plain-text status strings produced by the pipeline.

Shapes:
    "{barcode}"                  immediately when a scan is accepted
    "{barcode}\\n{resolution}"   once the lookup completes
    (cleared)                    on reset
"""

import threading
import time
from typing import Optional, Protocol


READY_TEXT = "Ready to scan..."


class ResultSink(Protocol):
    """Protocol for anything that displays scan results."""

    def show(self, text: str) -> None:
        ...

    def clear(self) -> None:
        ...


class DisplayState:
    """
    In-process result sink polled by the HTTP service.

    Attributes:
        text: Current result text, None when cleared
        updated_at: UNIX time of the last change
        version: Incremented on every change
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.text: Optional[str] = None
        self.updated_at: float = time.time()
        self.version: int = 0

    def show(self, text: str) -> None:
        with self._lock:
            self.text = text
            self.updated_at = time.time()
            self.version += 1

    def clear(self) -> None:
        with self._lock:
            self.text = None
            self.updated_at = time.time()
            self.version += 1

    @property
    def display_text(self) -> str:
        """What a user sees: the result, or the idle prompt."""
        return self.text if self.text else READY_TEXT

    def snapshot(self) -> dict:
        with self._lock:
            return {
                "text": self.text,
                "display": self.text if self.text else READY_TEXT,
                "updated_at": self.updated_at,
                "version": self.version,
            }
