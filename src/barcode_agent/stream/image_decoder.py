"""
Image Decoder
=============

Decodes base64 JPEG frames into upright grayscale OpenCV matrices.

Design Rules:
    - This is the ONLY place in the codebase that decodes images
    - Validates shape and dtype
    - Fails fast on corrupt frames
    - Applies the frame's rotation hint so symbols are scanned upright
"""

import base64
import binascii
import logging

import cv2
import numpy as np

from barcode_agent.stream.frame import Frame


logger = logging.getLogger(__name__)


class ImageDecodeError(Exception):
    """Raised when image decoding fails."""
    pass


_ROTATIONS = {
    90: cv2.ROTATE_90_CLOCKWISE,
    180: cv2.ROTATE_180,
    270: cv2.ROTATE_90_COUNTERCLOCKWISE,
}


def decode_frame_grayscale(frame: Frame) -> np.ndarray:
    """
    Decode base64 JPEG frame to an upright grayscale numpy array.

    Args:
        frame: Frame with base64-encoded JPEG image

    Returns:
        Grayscale image as np.ndarray (H, W), dtype=uint8

    Raises:
        ImageDecodeError: If decoding fails or image is invalid
    """
    try:
        image_bytes = base64.b64decode(frame.image_b64, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageDecodeError(
            f"Base64 decode failed for frame {frame.frame_id}: {e}"
        ) from e

    nparr = np.frombuffer(image_bytes, np.uint8)
    if nparr.size == 0:
        raise ImageDecodeError(f"Empty image payload for frame {frame.frame_id}")

    bgr = cv2.imdecode(nparr, cv2.IMREAD_COLOR)
    if bgr is None:
        raise ImageDecodeError(
            f"Failed to decode frame {frame.frame_id}: cv2.imdecode returned None"
        )

    if len(bgr.shape) != 3 or bgr.shape[2] != 3:
        raise ImageDecodeError(
            f"Invalid image shape for frame {frame.frame_id}: {bgr.shape}"
        )

    gray = cv2.cvtColor(bgr, cv2.COLOR_BGR2GRAY)

    if gray.dtype != np.uint8:
        raise ImageDecodeError(
            f"Invalid dtype for frame {frame.frame_id}: {gray.dtype}"
        )

    rotate_code = _ROTATIONS.get(frame.rotation_degrees % 360)
    if rotate_code is not None:
        gray = cv2.rotate(gray, rotate_code)

    return gray
