# -*- coding: utf-8 -*-
"""Draw detection regions over a video frame."""

from __future__ import annotations

from typing import Iterable

import cv2
import numpy as np

from webcamguard.models.analysis_result import DetectionArea


# BGR
REGION_COLOR = (0, 0, 255)
LABEL_TEXT_COLOR = (255, 255, 255)


def _label_for(area: DetectionArea) -> str:
    parts = [area.label] if area.label else []
    if area.confidence is not None:
        parts.append(f"{area.confidence * 100:.0f}%")
    return " ".join(parts)


def draw(image: np.ndarray, regions: Iterable[DetectionArea], width: int, height: int) -> np.ndarray:
    """Return a copy of `image` resized to width x height with regions outlined.

    Pure: the input array is never modified.
    """
    if image.shape[1] != width or image.shape[0] != height:
        canvas = cv2.resize(image, (width, height), interpolation=cv2.INTER_LINEAR)
    else:
        canvas = image.copy()

    thickness = max(2, int(round(min(width, height) / 240)))
    for area in regions:
        x1, y1, x2, y2 = area.to_pixels(width, height)
        if x2 <= x1 or y2 <= y1:
            continue
        cv2.rectangle(canvas, (x1, y1), (x2, y2), REGION_COLOR, thickness)

        label = _label_for(area)
        if not label:
            continue
        (tw, th), baseline = cv2.getTextSize(label, cv2.FONT_HERSHEY_DUPLEX, 0.5, 1)
        ty = y1 - 6 if y1 - th - 8 >= 0 else y2 + th + 6
        cv2.rectangle(canvas, (x1, ty - th - 4), (x1 + tw + 8, ty + baseline), REGION_COLOR, -1)
        cv2.putText(canvas, label, (x1 + 4, ty), cv2.FONT_HERSHEY_DUPLEX, 0.5, LABEL_TEXT_COLOR, 1, cv2.LINE_AA)
    return canvas
