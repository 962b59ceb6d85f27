# -*- coding: utf-8 -*-
"""Qt binding of the polling controller: timers, worker threads and signals."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from PyQt6.QtCore import QObject, QThread, QTimer, pyqtSignal, pyqtSlot

from webcamguard.constants import BACKEND_STATUS_INTERVAL_MS, POLL_INTERVAL_MS
from webcamguard.core.poller import (
    AnalyzeCall,
    FailureCallback,
    PollingController,
    SuccessCallback,
)
from webcamguard.core.state import MonitorState, Settings
from webcamguard.gui.workers import AnalysisWorker, HealthWorker
from webcamguard.integrations.analysis_client import AnalysisClient
from webcamguard.pipeline.webcam_source import WebcamSource

logger = logging.getLogger(__name__)


class MonitorController(QObject):
    """
    Owns the poll timer and runs each analysis call on a QThread.
    Results come back through queued signals, so every state change
    happens on the GUI thread.
    """
    state_changed = pyqtSignal(object)
    notification_posted = pyqtSignal(object)
    backend_status_changed = pyqtSignal(bool)

    def __init__(
        self,
        settings: dict[str, Any],
        source: WebcamSource | None = None,
        client: AnalysisClient | None = None,
        threaded: bool = True,
    ) -> None:
        super().__init__()
        self.settings = settings
        webcam = settings.get("webcam", {})
        detection = settings.get("detection", {})
        self.source = source or WebcamSource(
            camera_index=int(webcam.get("camera_index", 0)),
            resolution=str(webcam.get("resolution", "720p")),
            custom_url=str(webcam.get("custom_url", "")),
        )
        self.client = client or AnalysisClient.from_config(settings)
        self.poller = PollingController(
            self.source,
            self.client,
            settings=Settings(
                sensitivity=int(detection.get("sensitivity", 75)),
                show_overlay=bool(detection.get("show_overlay", True)),
            ),
            dispatcher=self._dispatch_threaded if threaded else None,
        )
        self.poller.state_changed = self.state_changed.emit
        self.poller.notification_posted = self.notification_posted.emit
        self.poller.polling_changed = self._on_polling_changed

        self._pending: tuple[SuccessCallback, FailureCallback] | None = None
        # Worker objects are kept referenced until their thread finishes
        self._active_threads: list[tuple[QThread, QObject]] = []

        self.poll_timer = QTimer(self)
        self.poll_timer.setInterval(int(detection.get("poll_interval_ms", POLL_INTERVAL_MS)))
        self.poll_timer.timeout.connect(self.poller.tick)

        # The webcam reports status from its own thread; sample it here
        self.stream_timer = QTimer(self)
        self.stream_timer.setInterval(250)
        self.stream_timer.timeout.connect(self.poller.refresh_stream)

        self.health_timer = QTimer(self)
        self.health_timer.setInterval(BACKEND_STATUS_INTERVAL_MS)
        self.health_timer.timeout.connect(self.check_backend)

    @property
    def state(self) -> MonitorState:
        return self.poller.state

    def open(self) -> bool:
        ok = self.poller.open()
        self.stream_timer.start()
        self.health_timer.start()
        self.check_backend()
        return ok

    def close(self) -> None:
        self.poll_timer.stop()
        self.stream_timer.stop()
        self.health_timer.stop()
        self.poller.close()
        self._cleanup_threads()
        # A worker blocked in urlopen returns within the client timeout
        wait_ms = int(float(getattr(self.client, "timeout", 10.0)) * 1000) + 1000
        for thread, _worker in self._active_threads:
            thread.quit()
            if not thread.wait(wait_ms):
                logger.warning("Worker thread did not finish within %d ms", wait_ms)
        self._active_threads.clear()
        self._pending = None

    def retry_webcam(self) -> bool:
        return self.poller.retry_webcam()

    def toggle_analysis(self) -> None:
        self.poller.toggle()

    def set_sensitivity(self, value: int) -> None:
        self.poller.set_sensitivity(value)

    def set_show_overlay(self, enabled: bool) -> None:
        self.poller.set_show_overlay(enabled)

    def apply_settings(self) -> None:
        self.poller.apply_settings()

    def save_latest_frame(self) -> Path | None:
        download = self.settings.get("download", {})
        return self.poller.save_latest_frame(
            Path(str(download.get("save_dir", "captures"))),
            str(download.get("filename_prefix", "frame")),
        )

    def check_backend(self) -> None:
        self._cleanup_threads()
        thread = QThread(self)
        worker = HealthWorker(self.client.check_health)
        worker.moveToThread(thread)
        thread.started.connect(worker.run)
        worker.finished.connect(self.backend_status_changed.emit)
        worker.finished.connect(thread.quit)
        thread.finished.connect(worker.deleteLater)
        thread.finished.connect(thread.deleteLater)
        self._active_threads.append((thread, worker))
        thread.start()

    def _on_polling_changed(self, polling: bool) -> None:
        if polling:
            logger.info("Polling every %d ms", self.poll_timer.interval())
            self.poll_timer.start()
        else:
            self.poll_timer.stop()
            logger.info("Polling stopped")

    def _cleanup_threads(self) -> None:
        """Forget threads that have finished."""
        alive = []
        for thread, worker in self._active_threads:
            try:
                running = thread.isRunning()
            except RuntimeError:
                # C++ object already deleted via deleteLater
                running = False
            if running:
                alive.append((thread, worker))
        self._active_threads = alive

    def _dispatch_threaded(self, call: AnalyzeCall, on_success: SuccessCallback, on_failure: FailureCallback) -> None:
        self._cleanup_threads()
        self._pending = (on_success, on_failure)

        thread = QThread(self)
        worker = AnalysisWorker(call)
        worker.moveToThread(thread)

        thread.started.connect(worker.run)
        worker.finished.connect(self._on_worker_finished)
        worker.error.connect(self._on_worker_failed)

        worker.finished.connect(thread.quit)
        worker.error.connect(thread.quit)
        thread.finished.connect(worker.deleteLater)
        thread.finished.connect(thread.deleteLater)

        self._active_threads.append((thread, worker))
        thread.start()

    @pyqtSlot(object)
    def _on_worker_finished(self, result: object) -> None:
        pending, self._pending = self._pending, None
        if pending is not None:
            pending[0](result)  # type: ignore[arg-type]

    @pyqtSlot(object)
    def _on_worker_failed(self, exc: object) -> None:
        pending, self._pending = self._pending, None
        if pending is not None:
            pending[1](exc if isinstance(exc, Exception) else RuntimeError(str(exc)))

