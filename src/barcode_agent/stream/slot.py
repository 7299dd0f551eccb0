"""
Latest Frame Slot
=================

Keep-only-latest hand-off between the frame source and the analysis lane.

This module provides the LatestFrameSlot class, which sits between the
WebSocket consumer and the scan pipeline.

Design Rules:
    - Holds at most ONE pending frame (no queue)
    - A newer frame displaces the pending one, which is closed immediately
    - Async-safe for a single producer and a single consumer
    - Does NOT process or modify frames
"""

import asyncio
import logging
from typing import Optional

from barcode_agent.stream.frame import Frame


logger = logging.getLogger(__name__)


class LatestFrameSlot:
    """
    Single-slot mailbox for frames.

    The decoder never sees stale frames: while the analysis lane is busy,
    every new arrival replaces the one still waiting.

    Example:
        slot = LatestFrameSlot()

        # Producer
        slot.put(frame)

        # Consumer
        frame = await slot.get(timeout=1.0)
    """

    def __init__(self) -> None:
        self._pending: Optional[Frame] = None
        self._available = asyncio.Event()
        self._dropped_count: int = 0
        self._total_put: int = 0

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    @property
    def dropped_count(self) -> int:
        """Number of frames displaced before they were picked up."""
        return self._dropped_count

    @property
    def total_put(self) -> int:
        return self._total_put

    def put(self, frame: Frame) -> bool:
        """
        Offer a frame, displacing any pending one.

        Args:
            frame: Frame to hand to the analysis lane

        Returns:
            True if the slot was empty, False if a pending frame was dropped.
        """
        self._total_put += 1
        displaced = self._pending
        self._pending = frame
        self._available.set()

        if displaced is not None:
            self._dropped_count += 1
            displaced.close()
            logger.debug(
                f"Dropped frame {displaced.frame_id} for {frame.frame_id}. "
                f"Total dropped: {self._dropped_count}"
            )
            return False
        return True

    async def get(self, timeout: Optional[float] = None) -> Optional[Frame]:
        """
        Take the pending frame, waiting for one if the slot is empty.

        Args:
            timeout: Maximum seconds to wait. None = wait forever.

        Returns:
            The latest frame, or None if timeout occurred.
        """
        if self._pending is None:
            try:
                if timeout is not None:
                    await asyncio.wait_for(self._available.wait(), timeout=timeout)
                else:
                    await self._available.wait()
            except asyncio.TimeoutError:
                return None
        return self.get_nowait()

    def get_nowait(self) -> Optional[Frame]:
        """Take the pending frame without waiting."""
        frame = self._pending
        self._pending = None
        self._available.clear()
        return frame

    def clear(self) -> int:
        """
        Drop and close the pending frame, if any.

        Returns:
            Number of frames cleared (0 or 1).
        """
        frame = self.get_nowait()
        if frame is None:
            return 0
        frame.close()
        return 1

    def metrics(self) -> dict:
        return {
            "pending": self.has_pending,
            "dropped_count": self._dropped_count,
            "total_put": self._total_put,
        }
