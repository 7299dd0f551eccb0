"""
Input Message Schema
====================

This module defines the Pydantic model for frame messages received from the
frame source WebSocket.

Input Contract (from the frame source):
    {
        "frame_id": 1234,
        "timestamp": 1707321234.567,
        "rotation": 90,
        "image": "<base64 JPEG>"
    }

Guarantees (from the frame source):
    - frame_id is monotonically increasing
    - rotation is the clockwise rotation needed to display the image upright

Example:
    from barcode_agent.models.input import FrameMessage

    raw = await websocket.recv()
    message = FrameMessage.model_validate_json(raw)
"""

from pydantic import BaseModel, Field, field_validator


class FrameMessage(BaseModel):
    """
    Schema for frame messages received from the frame source.

    Attributes:
        frame_id: Monotonically increasing frame counter
        timestamp: UNIX timestamp when frame was captured
        rotation: Orientation hint in degrees (0, 90, 180, 270)
        image: Base64-encoded JPEG frame data
    """

    frame_id: int = Field(
        ...,
        ge=0,
        description="Monotonically increasing frame counter from source",
    )

    timestamp: float = Field(
        ...,
        gt=0,
        description="UNIX timestamp in seconds when frame was captured",
    )

    rotation: int = Field(
        default=0,
        description="Clockwise rotation in degrees needed to make the image upright",
    )

    image: str = Field(
        default="",
        description="Base64-encoded JPEG frame data",
    )

    @field_validator("rotation")
    @classmethod
    def _rotation_is_right_angle(cls, value: int) -> int:
        if value % 90 != 0:
            raise ValueError(f"rotation must be a multiple of 90, got {value}")
        return value % 360

    model_config = {
        "json_schema_extra": {
            "example": {
                "frame_id": 1234,
                "timestamp": 1707321234.567,
                "rotation": 90,
                "image": "/9j/4AAQSkZJRg...",
            }
        }
    }
