"""
Frame Consumer
===============

Frame source intake over WebSocket.

Every message is validated as a FrameMessage and offered to the
LatestFrameSlot; while the pipeline is busy the slot keeps only the newest
frame, so this loop never waits on decoding.

Connection lifecycle:
    connect → receive until the socket ends → back off → connect ...

The backoff applies after every session, clean close included, and is cut
short by stop(). There is no attempt cap.

Design Rules:
    - Does NOT decode image data
    - Invalid messages are counted and skipped, never fatal
"""

import asyncio
import logging
from typing import Any, Optional, Union

import websockets
from pydantic import ValidationError
from websockets.exceptions import ConnectionClosed, ConnectionClosedError, WebSocketException

from barcode_agent.models.input import FrameMessage
from barcode_agent.stream.frame import Frame
from barcode_agent.stream.slot import LatestFrameSlot


logger = logging.getLogger(__name__)


# Upper bound for one frame message (base64 JPEG)
MAX_MESSAGE_BYTES = 10 * 1024 * 1024


class FrameConsumerMetrics:
    """Metrics for FrameConsumer observability."""

    __slots__ = (
        "frames_received",
        "reconnect_count",
        "last_frame_id",
        "last_timestamp",
        "validation_warnings",
        "parse_errors",
    )

    def __init__(self) -> None:
        self.frames_received: int = 0
        self.reconnect_count: int = 0
        self.last_frame_id: int = -1
        self.last_timestamp: float = 0.0
        self.validation_warnings: int = 0
        self.parse_errors: int = 0

    def to_dict(self) -> dict:
        """Export metrics as dict."""
        return {
            "frames_received": self.frames_received,
            "reconnect_count": self.reconnect_count,
            "last_frame_id": self.last_frame_id,
            "last_timestamp": self.last_timestamp,
            "validation_warnings": self.validation_warnings,
            "parse_errors": self.parse_errors,
        }


class FrameConsumer:
    """
    WebSocket consumer for camera frames.

    Attributes:
        url: WebSocket URL to connect to
        slot: LatestFrameSlot to hand frames to
        connected: Whether currently connected
        metrics: Operational metrics

    Example:
        slot = LatestFrameSlot()
        consumer = FrameConsumer(url="ws://localhost:8000/ws/frames", slot=slot)

        task = asyncio.create_task(consumer.run())

        # Later, stop gracefully
        await consumer.stop()
        await task
    """

    def __init__(
        self,
        url: str,
        slot: LatestFrameSlot,
        reconnect_backoff_ms: int = 500,
    ) -> None:
        """
        Initialize frame consumer.

        Args:
            url: WebSocket URL of the frame source
            slot: LatestFrameSlot to push validated frames into
            reconnect_backoff_ms: Pause between connection sessions
        """
        self.url = url
        self.slot = slot
        self.reconnect_backoff_ms = reconnect_backoff_ms

        self._websocket: Optional[Any] = None
        self._connected: bool = False
        self._stopped = asyncio.Event()

        self.metrics = FrameConsumerMetrics()

    @property
    def connected(self) -> bool:
        """Whether currently connected to the frame source."""
        return self._connected

    async def run(self) -> None:
        """Consume frames until stop() is called."""
        self._stopped.clear()
        logger.info(f"FrameConsumer starting, frame source {self.url}")

        while not self._stopped.is_set():
            try:
                await self._receive_session()
            except (OSError, WebSocketException, asyncio.TimeoutError) as e:
                logger.error(f"Frame source unreachable: {e}")

            if self._stopped.is_set() or await self._backoff():
                break

        logger.info("FrameConsumer stopped")

    async def stop(self) -> None:
        """End the run loop and close the open connection, if any."""
        logger.info("FrameConsumer stopping...")
        self._stopped.set()

        ws = self._websocket
        if ws is not None:
            try:
                await ws.close()
            except ConnectionClosed:
                pass

    async def _backoff(self) -> bool:
        """Wait before reconnecting. Returns True if stop() ended the wait."""
        self.metrics.reconnect_count += 1
        delay = self.reconnect_backoff_ms / 1000.0
        logger.info(
            f"Reconnecting in {delay:.1f}s (attempt {self.metrics.reconnect_count})"
        )
        try:
            await asyncio.wait_for(self._stopped.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return False
        return True

    async def _receive_session(self) -> None:
        """One connection: feed the slot until the socket ends."""
        async with websockets.connect(self.url, max_size=MAX_MESSAGE_BYTES) as ws:
            self._websocket = ws
            self._connected = True
            logger.info(f"Connected to frame source: {self.url}")
            try:
                async for message in ws:
                    frame = self.parse_message(message)
                    if frame is not None:
                        self.slot.put(frame)
            except ConnectionClosedError as e:
                logger.warning(f"Frame source dropped the connection: {e}")
            finally:
                self._connected = False
                self._websocket = None

    def parse_message(self, raw: Union[str, bytes]) -> Optional[Frame]:
        """
        Parse and validate a raw WebSocket message.

        Ordering anomalies are logged but frames are not rejected for them.

        Args:
            raw: Raw JSON message from the WebSocket

        Returns:
            Validated Frame, or None on parse error
        """
        try:
            message = FrameMessage.model_validate_json(raw)
        except ValidationError as e:
            self.metrics.parse_errors += 1
            logger.error(f"Invalid frame message: {e.error_count()} error(s)")
            return None

        if self.metrics.last_frame_id >= 0 and message.frame_id <= self.metrics.last_frame_id:
            self.metrics.validation_warnings += 1
            logger.warning(
                f"Frame ID went backwards: got {message.frame_id}, "
                f"previous was {self.metrics.last_frame_id}"
            )

        self.metrics.frames_received += 1
        self.metrics.last_frame_id = message.frame_id
        self.metrics.last_timestamp = message.timestamp

        return Frame(
            frame_id=message.frame_id,
            timestamp=message.timestamp,
            image_b64=message.image,
            rotation_degrees=message.rotation,
        )
