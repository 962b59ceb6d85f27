# -*- coding: utf-8 -*-
"""Capture -> analyze -> apply polling loop with a single in-flight slot."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Protocol

from webcamguard.core import state as transitions
from webcamguard.core.state import MonitorState, Settings
from webcamguard.errors import WebcamError
from webcamguard.models.analysis_result import AnalysisResult
from webcamguard.models.notification import Notification
from webcamguard.pipeline.frame_store import save_latest_frame

logger = logging.getLogger(__name__)


class FrameSource(Protocol):
    def start(self) -> None: ...

    def stop(self) -> None: ...

    def capture_frame(self) -> bytes | None: ...

    def is_streaming(self) -> bool: ...

    def get_last_error(self) -> str: ...


class Analyzer(Protocol):
    def analyze(self, frame: bytes, session_id: str | None, sensitivity: int) -> AnalysisResult: ...


AnalyzeCall = Callable[[], AnalysisResult]
SuccessCallback = Callable[[AnalysisResult], None]
FailureCallback = Callable[[Exception], None]
Dispatcher = Callable[[AnalyzeCall, SuccessCallback, FailureCallback], None]
StateCallback = Callable[[MonitorState], None]
NotificationCallback = Callable[[Notification], None]
PollingCallback = Callable[[bool], None]


class TickOutcome(Enum):
    IDLE = "idle"
    BUSY = "busy"
    NO_FRAME = "no_frame"
    DISPATCHED = "dispatched"


@dataclass(frozen=True)
class AnalysisJob:
    """Arguments of one analysis call, fixed at dispatch time."""

    frame: bytes
    session_id: str | None
    sensitivity: int
    run: int = 0


def run_inline(call: AnalyzeCall, on_success: SuccessCallback, on_failure: FailureCallback) -> None:
    """Run the analysis call on the caller's thread."""
    try:
        result = call()
    except Exception as exc:
        on_failure(exc)
        return
    on_success(result)


class PollingController:
    """Drive periodic analysis while analyzing mode is on and the stream is live.

    The controller does not own a timer. Whoever schedules `tick()` listens to
    `polling_changed` and starts or cancels its timer accordingly. At most one
    analysis call is outstanding; ticks that arrive while it is pending are
    dropped, not queued.
    """

    def __init__(
        self,
        source: FrameSource,
        client: Analyzer,
        settings: Settings | None = None,
        dispatcher: Dispatcher | None = None,
    ) -> None:
        self.source = source
        self.client = client
        self.dispatcher: Dispatcher = dispatcher or run_inline
        self._state = MonitorState(settings=settings or Settings())
        self._dispatch_count = 0

        self.state_changed: StateCallback | None = None
        self.notification_posted: NotificationCallback | None = None
        self.polling_changed: PollingCallback | None = None

    # -- state plumbing -----------------------------------------------------

    @property
    def state(self) -> MonitorState:
        return self._state

    @property
    def dispatch_count(self) -> int:
        return self._dispatch_count

    def _set_state(self, new_state: MonitorState) -> None:
        if new_state is self._state:
            return
        was_polling = self._state.should_poll
        self._state = new_state
        if self.state_changed is not None:
            self.state_changed(new_state)
        if new_state.should_poll != was_polling and self.polling_changed is not None:
            self.polling_changed(new_state.should_poll)

    def _notify(self, title: str, description: str = "", variant: str = "default") -> None:
        notification = Notification(title=title, description=description, variant=variant)
        if notification.is_error:
            logger.warning("%s: %s", title, description)
        else:
            logger.info("%s: %s", title, description)
        if self.notification_posted is not None:
            self.notification_posted(notification)

    # -- lifecycle ----------------------------------------------------------

    def open(self) -> bool:
        """Acquire the webcam. Returns False and notifies when it is unavailable."""
        return self._open_source(
            failure_text="Could not access webcam. Please ensure you have granted permission.",
        )

    def retry_webcam(self) -> bool:
        ok = self._open_source(
            failure_text="Still unable to access webcam. Please check your camera settings.",
        )
        if ok:
            self._notify("Webcam Connected", "Successfully connected to webcam.")
        return ok

    def _open_source(self, failure_text: str) -> bool:
        try:
            self.source.start()
        except WebcamError as exc:
            logger.error("Webcam start failed: %s", exc)
            self._set_state(transitions.set_stream_status(self._state, False, str(exc) or type(exc).__name__))
            self._notify("Webcam Error", failure_text, "destructive")
            return False
        self.refresh_stream()
        return True

    def refresh_stream(self) -> None:
        """Pull the live/error status from the webcam into the state."""
        error = self.source.get_last_error()
        streaming = self.source.is_streaming() and not error
        self._set_state(transitions.set_stream_status(self._state, streaming, error))

    def close(self) -> None:
        """Stop analysis, cancel scheduling and release the webcam."""
        self.stop(quiet=True)
        try:
            self.source.stop()
        finally:
            self._set_state(transitions.set_stream_status(self._state, False, ""))
        logger.info("Polling controller closed")

    def __enter__(self) -> "PollingController":
        self.open()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # -- user operations ----------------------------------------------------

    def start(self) -> bool:
        if self._state.analyzing:
            return True
        if not self._state.can_start:
            logger.debug("start() ignored: stream not live (error=%r)", self._state.stream_error)
            return False
        self._set_state(transitions.start_analysis(self._state))
        self._notify("Analysis Started", "Analyzing webcam feed for deepfakes...")
        return True

    def stop(self, quiet: bool = False) -> None:
        if not self._state.analyzing:
            return
        self._set_state(transitions.stop_analysis(self._state))
        if not quiet:
            self._notify("Analysis Stopped", f"Analyzed {self._state.frames_analyzed} frames")

    def toggle(self) -> bool:
        if self._state.analyzing:
            self.stop()
            return False
        return self.start()

    def set_sensitivity(self, value: int) -> None:
        self._set_state(transitions.set_sensitivity(self._state, value))

    def set_show_overlay(self, enabled: bool) -> None:
        self._set_state(transitions.set_show_overlay(self._state, enabled))

    def apply_settings(self) -> None:
        """Acknowledge the current settings; the loop already reads them live."""
        self._notify("Settings Applied", f"Detection sensitivity set to {self._state.settings.sensitivity}%")

    def save_latest_frame(self, directory: str | Path, prefix: str) -> Path | None:
        return save_latest_frame(self._state.frame_history, directory, prefix)

    # -- polling ------------------------------------------------------------

    def tick(self) -> TickOutcome:
        """Run one polling step."""
        if not self._state.should_poll:
            return TickOutcome.IDLE
        if self._state.in_flight:
            logger.debug("Tick dropped: analysis request still in flight")
            return TickOutcome.BUSY

        frame = self.source.capture_frame()
        if not frame:
            logger.debug("Tick skipped: no frame available yet")
            return TickOutcome.NO_FRAME

        job = AnalysisJob(
            frame=frame,
            session_id=self._state.session_id,
            sensitivity=self._state.settings.sensitivity,
            run=self._state.run,
        )
        self._set_state(transitions.begin_request(self._state))
        self._dispatch_count += 1
        logger.debug(
            "Dispatching analysis #%d (session=%s, sensitivity=%d, %d bytes)",
            self._dispatch_count, job.session_id, job.sensitivity, len(job.frame),
        )

        def _call() -> AnalysisResult:
            return self.client.analyze(job.frame, job.session_id, job.sensitivity)

        try:
            self.dispatcher(
                _call,
                lambda result: self._on_success(job, result),
                self._on_failure,
            )
        except Exception as exc:
            logger.exception("Analysis dispatcher failed before the call started")
            self._on_failure(exc)
        return TickOutcome.DISPATCHED

    def _on_success(self, job: AnalysisJob, result: AnalysisResult) -> None:
        previous = self._state.session_id
        if job.run != self._state.run:
            logger.info("Late result from analyzing run %d applied without its session", job.run)
        elif previous is not None and previous != result.session_id:
            logger.info("Analysis session rotated by server: %s -> %s", previous, result.session_id)
        logger.debug(
            "Analysis finished: score=%.3f synthetic=%s frames=%d in %.0f ms",
            result.score, result.is_synthetic, result.frames_analyzed, result.processing_time_ms,
        )
        self._set_state(transitions.apply_success(self._state, result, job.frame, run=job.run))

    def _on_failure(self, exc: Exception) -> None:
        logger.warning("Analysis call failed: %s", exc)
        self._set_state(transitions.apply_failure(self._state))
        self._notify("Analysis Error", "Failed to analyze webcam frame. Please try again.", "destructive")
