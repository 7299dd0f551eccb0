"""
Frame Gate
==========

Admission control for the single in-flight decode slot.

A frame is admitted only if:
    1. it carries image data,
    2. the scan debouncer is READY, and
    3. no other frame is currently being decoded.

Rejected frames are closed on the spot. Admitted frames are closed by
`release()` once decoding has finished, whatever its result.
"""

import logging
from typing import TYPE_CHECKING, Optional

from barcode_agent.stream.frame import Frame

if TYPE_CHECKING:
    from barcode_agent.scanning.debouncer import ScanDebouncer


logger = logging.getLogger(__name__)


class FrameGate:
    """
    Drop-under-load gate in front of the decoder.

    Attributes:
        admitted: Frames handed to decoding
        rejected_empty: Frames without image data
        rejected_locked: Frames arriving while a scan is latched
        rejected_busy: Frames arriving while another frame is decoding
    """

    def __init__(self, debouncer: "ScanDebouncer") -> None:
        self._debouncer = debouncer
        self._in_flight: Optional[Frame] = None

        self.admitted: int = 0
        self.rejected_empty: int = 0
        self.rejected_locked: int = 0
        self.rejected_busy: int = 0

    @property
    def busy(self) -> bool:
        return self._in_flight is not None

    def admit(self, frame: Frame) -> bool:
        """
        Decide whether a frame goes to decoding.

        Args:
            frame: Incoming frame; ownership passes to the gate

        Returns:
            True if the frame now occupies the decode slot.
        """
        if not frame.has_image:
            self.rejected_empty += 1
            frame.close()
            return False

        if not self._debouncer.is_ready:
            self.rejected_locked += 1
            frame.close()
            return False

        if self._in_flight is not None:
            self.rejected_busy += 1
            frame.close()
            return False

        self._in_flight = frame
        self.admitted += 1
        return True

    def release(self, frame: Frame) -> None:
        """Close an admitted frame and free the decode slot."""
        if self._in_flight is frame:
            self._in_flight = None
        else:
            logger.warning(f"Released frame {frame.frame_id} that was not in flight")
        frame.close()

    def metrics(self) -> dict:
        return {
            "admitted": self.admitted,
            "rejected_empty": self.rejected_empty,
            "rejected_locked": self.rejected_locked,
            "rejected_busy": self.rejected_busy,
        }
