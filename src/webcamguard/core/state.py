# -*- coding: utf-8 -*-
"""Monitor state snapshot and the transitions that produce new snapshots.

Every function here is pure: it takes a `MonitorState` and returns a new one.
The polling controller owns the current snapshot and the GUI only reads it.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field, replace

from webcamguard.constants import (
    DEFAULT_SENSITIVITY,
    DETECTION_LOG_SIZE,
    HIGH_RISK_THRESHOLD,
    MEDIUM_RISK_THRESHOLD,
    SENSITIVITY_MAX,
    SENSITIVITY_MIN,
)
from webcamguard.core.frame_history import FrameHistory
from webcamguard.models.analysis_result import AnalysisResult


@dataclass(frozen=True)
class Settings:
    """User-tunable detection settings."""

    sensitivity: int = DEFAULT_SENSITIVITY
    show_overlay: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "sensitivity", clamp_sensitivity(self.sensitivity))


@dataclass(frozen=True)
class DetectionRecord:
    """One entry of the per-session detection log."""

    timestamp: float
    session_id: str
    score: float
    is_synthetic: bool
    frames_analyzed: int


@dataclass(frozen=True)
class MonitorState:
    analyzing: bool = False
    streaming: bool = False
    stream_error: str = ""
    in_flight: bool = False
    session_id: str | None = None
    last_result: AnalysisResult | None = None
    frame_history: FrameHistory = field(default_factory=FrameHistory)
    settings: Settings = field(default_factory=Settings)
    detection_log: tuple[DetectionRecord, ...] = field(default_factory=tuple)
    run: int = 0

    @property
    def can_start(self) -> bool:
        return self.streaming and not self.stream_error

    @property
    def should_poll(self) -> bool:
        return self.analyzing and self.streaming

    @property
    def frames_analyzed(self) -> int:
        return self.last_result.frames_analyzed if self.last_result else 0


def clamp_sensitivity(value: int) -> int:
    return max(SENSITIVITY_MIN, min(SENSITIVITY_MAX, int(value)))


def risk_level(score: float) -> str:
    """Map a synthetic score to the Low/Medium/High band shown in the UI."""
    if score > HIGH_RISK_THRESHOLD:
        return "High"
    if score > MEDIUM_RISK_THRESHOLD:
        return "Medium"
    return "Low"


def start_analysis(state: MonitorState) -> MonitorState:
    """Enter analyzing mode; no-op when the stream is not live or errored."""
    if state.analyzing or not state.can_start:
        return state
    # A restarted run gets a fresh server session
    return replace(state, analyzing=True, session_id=None, run=state.run + 1)


def stop_analysis(state: MonitorState) -> MonitorState:
    """Leave analyzing mode, keeping the last result and the frame history."""
    if not state.analyzing:
        return state
    return replace(state, analyzing=False)


def set_stream_status(state: MonitorState, streaming: bool, error: str = "") -> MonitorState:
    if state.streaming == streaming and state.stream_error == error:
        return state
    return replace(state, streaming=streaming, stream_error=error)


def begin_request(state: MonitorState) -> MonitorState:
    return replace(state, in_flight=True)


def apply_success(
    state: MonitorState,
    result: AnalysisResult,
    frame: bytes,
    *,
    run: int | None = None,
    log_size: int = DETECTION_LOG_SIZE,
    now: float | None = None,
) -> MonitorState:
    """Adopt the returned session, replace the result and record the frame.

    `run` is the analyzing run the call was dispatched in. A result from an
    earlier run is still shown, but its session is not carried into the
    current one.
    """
    session_id = result.session_id if run is None or run == state.run else state.session_id
    record = DetectionRecord(
        timestamp=time.time() if now is None else now,
        session_id=result.session_id,
        score=result.score,
        is_synthetic=result.is_synthetic,
        frames_analyzed=result.frames_analyzed,
    )
    return replace(
        state,
        in_flight=False,
        session_id=session_id,
        last_result=result,
        frame_history=state.frame_history.push(frame),
        detection_log=(record, *state.detection_log)[:log_size],
    )


def apply_failure(state: MonitorState) -> MonitorState:
    """Release the in-flight slot; session and last result stay as they were."""
    return replace(state, in_flight=False)


def set_sensitivity(state: MonitorState, value: int) -> MonitorState:
    return replace(state, settings=replace(state.settings, sensitivity=clamp_sensitivity(value)))


def set_show_overlay(state: MonitorState, enabled: bool) -> MonitorState:
    return replace(state, settings=replace(state.settings, show_overlay=bool(enabled)))
