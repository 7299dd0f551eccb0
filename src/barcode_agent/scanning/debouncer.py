"""
Scan Debouncer
==============

Two-state latch guaranteeing one accepted scan triggers at most one lookup.

State Machine:
    READY  --try_lock()-->  LOCKED     (only the transitioning caller wins)
    LOCKED --reset()----->  READY      (explicit user action only)

The latch is owned by the pipeline object, never module-global. Every
reset opens a new scanning session; lookups dispatched in an earlier
session can be recognised by their session number.
"""

import logging
import threading
from typing import Optional

from barcode_agent.models.state import ScanState


logger = logging.getLogger(__name__)


class ScanDebouncer:
    """
    Single-flight gate for catalog lookups.

    Thread-safe: `try_lock` is atomic even if frames are analysed
    off the event loop thread.

    Example:
        debouncer = ScanDebouncer()
        if debouncer.try_lock("5000112637922"):
            dispatch_lookup(...)
        ...
        debouncer.reset()
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._state = ScanState.READY
        self._session: int = 0
        self._barcode: Optional[str] = None

    @property
    def state(self) -> ScanState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is ScanState.READY

    @property
    def session(self) -> int:
        """Number of completed resets; identifies the current scanning session."""
        return self._session

    @property
    def barcode(self) -> Optional[str]:
        """Barcode that locked the current session, if any."""
        return self._barcode

    def try_lock(self, barcode: str) -> bool:
        """
        Attempt the READY → LOCKED transition.

        Returns:
            True only for the caller that performed the transition.
        """
        with self._lock:
            if self._state is not ScanState.READY:
                return False
            self._state = ScanState.LOCKED
            self._barcode = barcode

        logger.info(f"Scan accepted: {barcode} (session {self._session})")
        return True

    def reset(self) -> bool:
        """
        Return to READY.

        Returns:
            True if the latch was LOCKED, False if it was already READY.
        """
        with self._lock:
            if self._state is ScanState.READY:
                return False
            self._state = ScanState.READY
            self._barcode = None
            self._session += 1
            session = self._session

        logger.info(f"Scanner reset, session {session} ready")
        return True
