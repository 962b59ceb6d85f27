# -*- coding: utf-8 -*-
"""Analysis result data model returned by the detection service."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from webcamguard.errors import ServiceError


@dataclass(frozen=True)
class DetectionArea:
    """One region the service flagged, in pixels or in fractions of the frame."""

    x: float
    y: float
    width: float
    height: float
    confidence: float | None = None
    label: str = ""

    @property
    def is_relative(self) -> bool:
        return all(0.0 <= value <= 1.0 for value in (self.x, self.y, self.width, self.height))

    def to_pixels(self, frame_width: int, frame_height: int) -> tuple[int, int, int, int]:
        """Return (x1, y1, x2, y2) clamped to the frame."""
        if self.is_relative:
            x = self.x * frame_width
            y = self.y * frame_height
            w = self.width * frame_width
            h = self.height * frame_height
        else:
            x, y, w, h = self.x, self.y, self.width, self.height
        x1 = max(0, min(frame_width - 1, int(round(x))))
        y1 = max(0, min(frame_height - 1, int(round(y))))
        x2 = max(0, min(frame_width - 1, int(round(x + w))))
        y2 = max(0, min(frame_height - 1, int(round(y + h))))
        return x1, y1, x2, y2

    @classmethod
    def from_payload(cls, raw: dict[str, Any]) -> "DetectionArea":
        # Some backends send bbox-style corners instead of x/y/width/height
        if "x1" in raw and "x2" in raw:
            x = float(raw["x1"])
            y = float(raw["y1"])
            width = float(raw["x2"]) - x
            height = float(raw["y2"]) - y
        else:
            x = float(raw.get("x", 0.0))
            y = float(raw.get("y", 0.0))
            width = float(raw.get("width", raw.get("w", 0.0)))
            height = float(raw.get("height", raw.get("h", 0.0)))
        confidence = raw.get("confidence", raw.get("score"))
        return cls(
            x=x,
            y=y,
            width=width,
            height=height,
            confidence=float(confidence) if confidence is not None else None,
            label=str(raw.get("label", raw.get("type", ""))),
        )


@dataclass(frozen=True)
class AnalysisResult:
    """Structured result of one webcam frame analysis."""

    session_id: str
    score: float
    is_synthetic: bool
    areas: tuple[DetectionArea, ...] = field(default_factory=tuple)
    frames_analyzed: int = 0
    processing_time: float = 0.0

    @property
    def processing_time_ms(self) -> float:
        return self.processing_time * 1000.0

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "AnalysisResult":
        """Build a result from the service JSON, raising ServiceError if unusable."""
        session_id = payload.get("session_id")
        if not isinstance(session_id, str) or not session_id:
            raise ServiceError("Analysis response has no session_id")
        try:
            score = float(payload["score"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ServiceError("Analysis response has no numeric score") from exc
        if not 0.0 <= score <= 1.0:
            raise ServiceError(f"Analysis score out of range: {score}")

        raw_areas = payload.get("areas") or []
        if not isinstance(raw_areas, list):
            raise ServiceError("Analysis response field 'areas' must be a list")
        try:
            areas = tuple(DetectionArea.from_payload(item) for item in raw_areas if isinstance(item, dict))
            frames_analyzed = max(0, int(payload.get("frames_analyzed", 0)))
            processing_time = max(0.0, float(payload.get("processing_time", 0.0)))
        except (TypeError, ValueError) as exc:
            raise ServiceError(f"Malformed analysis response: {exc}") from exc

        return cls(
            session_id=session_id,
            score=score,
            is_synthetic=bool(payload.get("is_synthetic", False)),
            areas=areas,
            frames_analyzed=frames_analyzed,
            processing_time=processing_time,
        )
