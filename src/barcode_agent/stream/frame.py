"""
Frame Data Model
=================

Internal frame representation for the scan pipeline.

Design Rules:
    - This is the ONLY frame format passed to downstream stages
    - Does NOT decode image data
    - Released (closed) exactly once, whatever path it takes
"""

from dataclasses import dataclass, field
from typing import Callable, Optional


@dataclass(slots=True, eq=False)
class Frame:
    """
    Frame owned transiently by the pipeline.

    The upstream frame pool is bounded, so every frame must be closed
    exactly once. `close()` is idempotent and fires `on_close` at most once.

    Attributes:
        frame_id: Monotonically increasing frame counter from source
        timestamp: UNIX timestamp when frame was captured
        image_b64: Base64-encoded JPEG frame data (NOT decoded)
        rotation_degrees: Clockwise rotation needed to make the image upright
        on_close: Optional release hook back to the frame source
    """

    frame_id: int
    timestamp: float
    image_b64: str
    rotation_degrees: int = 0
    on_close: Optional[Callable[["Frame"], None]] = field(default=None, repr=False)
    _closed: bool = field(default=False, init=False, repr=False)

    @property
    def has_image(self) -> bool:
        """Whether the frame carries image data worth decoding."""
        return bool(self.image_b64)

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Release the frame. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        if self.on_close is not None:
            self.on_close(self)

    def __enter__(self) -> "Frame":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def __repr__(self) -> str:
        """Compact repr that doesn't dump the full image."""
        return (
            f"Frame(frame_id={self.frame_id}, "
            f"timestamp={self.timestamp:.3f}, "
            f"rotation={self.rotation_degrees}, "
            f"closed={self._closed})"
        )
