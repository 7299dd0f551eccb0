"""
Stream Module
=============

Frame ingestion and admission components.

This module provides the intake layer for BarcodeLookupAgent:
    - Frame: Typed frame data model, closed exactly once
    - LatestFrameSlot: Keep-only-latest hand-off (no queue)
    - FrameGate: Single in-flight decode slot with drop-under-load admission
    - FrameConsumer: WebSocket client with validation and reconnection

Example:
    from barcode_agent.stream import FrameConsumer, LatestFrameSlot

    slot = LatestFrameSlot()
    consumer = FrameConsumer(url="ws://localhost:8000/ws/frames", slot=slot)

    task = asyncio.create_task(consumer.run())

    while True:
        frame = await slot.get()
        await pipeline.process_frame(frame)
"""

from barcode_agent.stream.frame import Frame
from barcode_agent.stream.slot import LatestFrameSlot
from barcode_agent.stream.gate import FrameGate
from barcode_agent.stream.consumer import FrameConsumer, FrameConsumerMetrics


__all__ = [
    "Frame",
    "LatestFrameSlot",
    "FrameGate",
    "FrameConsumer",
    "FrameConsumerMetrics",
]
