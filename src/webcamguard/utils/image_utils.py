# -*- coding: utf-8 -*-
"""Image encoding helpers for captured webcam frames."""

from __future__ import annotations

import base64

import cv2
import numpy as np

from webcamguard.constants import JPEG_QUALITY


JPEG_SIGNATURE = b"\xff\xd8\xff"


def encode_jpeg(frame: np.ndarray, quality: int = JPEG_QUALITY) -> bytes:
    """Encode a BGR frame as JPEG bytes."""
    ok, buffer = cv2.imencode(".jpg", frame, [int(cv2.IMWRITE_JPEG_QUALITY), int(quality)])
    if not ok:
        raise ValueError("OpenCV could not encode frame as JPEG")
    return buffer.tobytes()


def decode_jpeg(data: bytes) -> np.ndarray | None:
    """Decode JPEG bytes back into a BGR frame."""
    if not data:
        return None
    array = np.frombuffer(data, dtype=np.uint8)
    return cv2.imdecode(array, cv2.IMREAD_COLOR)


def is_jpeg_bytes(data: bytes) -> bool:
    """Return True if bytes look like a JPEG file."""
    return data.startswith(JPEG_SIGNATURE)


def to_data_url(data: bytes, mime: str = "image/jpeg") -> str:
    """Wrap image bytes in a base64 data URL."""
    b64 = base64.b64encode(data).decode("ascii")
    return f"data:{mime};base64,{b64}"
