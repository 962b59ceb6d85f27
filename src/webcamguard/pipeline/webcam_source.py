# -*- coding: utf-8 -*-
"""Live webcam source backed by an OpenCV capture thread."""

from __future__ import annotations

import logging
import os
import sys
import threading
import time
from typing import Any

import cv2
import numpy as np

from webcamguard.constants import DEFAULT_FRAME_HEIGHT, DEFAULT_FRAME_WIDTH
from webcamguard.errors import DeviceError, PermissionDenied
from webcamguard.utils.image_utils import encode_jpeg

logger = logging.getLogger(__name__)

RESOLUTION_PRESETS: dict[str, tuple[int, int]] = {
    "480p": (640, 480),
    "720p": (DEFAULT_FRAME_WIDTH, DEFAULT_FRAME_HEIGHT),
    "1080p": (1920, 1080),
}

NO_FRAME_ERROR = "No frame received from camera."

_CAMERA_INIT_LOCK = threading.RLock()


def _open_camera(camera_source: int | str) -> Any:
    """Open an OpenCV VideoCapture, using DShow on Windows for local indices."""
    if isinstance(camera_source, str) and camera_source.startswith(("udp://", "rtsp://", "http")):
        logger.debug("Opening custom camera stream: %s", camera_source)
        cap = cv2.VideoCapture(camera_source, cv2.CAP_FFMPEG)
        if cap is not None and cap.isOpened():
            return cap
        logger.debug("CAP_FFMPEG failed for stream, trying default backend for: %s", camera_source)
        return cv2.VideoCapture(camera_source)

    acquired = _CAMERA_INIT_LOCK.acquire(timeout=5.0)
    if not acquired:
        logger.error("Timeout retrieving global camera lock for source %s", camera_source)
        return None
    try:
        source_idx = int(camera_source)
        if sys.platform == "win32":
            return cv2.VideoCapture(source_idx, cv2.CAP_DSHOW)
        return cv2.VideoCapture(source_idx)
    finally:
        _CAMERA_INIT_LOCK.release()


def _device_permission_denied(camera_index: int) -> bool:
    """True when a Linux video node exists but is not readable by this user."""
    if not sys.platform.startswith("linux"):
        return False
    node = f"/dev/video{camera_index}"
    return os.path.exists(node) and not os.access(node, os.R_OK | os.W_OK)


def _resolution_size(resolution: str) -> tuple[int, int]:
    raw = str(resolution).strip().lower()
    if raw in RESOLUTION_PRESETS:
        return RESOLUTION_PRESETS[raw]
    if "x" in raw:
        left, right = raw.split("x", 1)
        try:
            return (max(1, int(left)), max(1, int(right)))
        except ValueError:
            pass
    return (DEFAULT_FRAME_WIDTH, DEFAULT_FRAME_HEIGHT)


class WebcamSource:
    """Continuously reads the camera on a background thread and keeps the latest frame."""

    def __init__(self, camera_index: int = 0, resolution: str = "720p", custom_url: str = "") -> None:
        self.camera_index = int(camera_index)
        self.resolution = str(resolution or "720p")
        self.custom_url = str(custom_url or "").strip()
        self._capture: Any = None
        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()
        self._lock = threading.Lock()
        self._last_frame: np.ndarray | None = None
        self._last_error = ""
        self._running = False

    @property
    def source(self) -> int | str:
        return self.custom_url if self.custom_url else self.camera_index

    def start(self) -> None:
        """Open the camera and start the reader thread.

        Raises PermissionDenied when the OS refuses access and DeviceError
        when the camera cannot be opened at all.
        """
        self.stop()
        source = self.source
        logger.info("WebcamSource.start: source=%s, resolution=%s", source, self.resolution)

        if isinstance(source, int) and _device_permission_denied(source):
            self._set_error(f"Permission denied for camera {source}")
            raise PermissionDenied(f"Permission denied for camera {source}")

        capture = _open_camera(source)
        if capture is None or not capture.isOpened():
            if capture is not None:
                capture.release()
            message = f"Camera source {source} could not be opened."
            self._set_error(message)
            raise DeviceError(message)

        width, height = _resolution_size(self.resolution)
        try:
            capture.set(cv2.CAP_PROP_FRAME_WIDTH, width)
            capture.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
        except cv2.error as exc:
            logger.warning("Failed to set camera resolution %sx%s: %s", width, height, exc)

        with self._lock:
            self._last_frame = None
            self._last_error = ""
            self._capture = capture
            self._running = True
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._loop,
            args=(capture, self._stop_event),
            name="webcamguard-capture",
            daemon=True,
        )
        self._thread.start()

    def stop(self) -> None:
        self._stop_event.set()
        thread = self._thread
        self._thread = None
        if thread is not None and thread.is_alive():
            thread.join(timeout=1.5)
        with self._lock:
            capture, self._capture = self._capture, None
            self._running = False
        if capture is not None:
            logger.debug("Releasing cv2 capture for source %s", self.source)
            capture.release()

    def is_running(self) -> bool:
        return bool(self._running)

    def is_streaming(self) -> bool:
        with self._lock:
            return self._running and self._last_frame is not None and not self._last_error

    def get_last_error(self) -> str:
        with self._lock:
            return str(self._last_error)

    def get_last_frame(self) -> np.ndarray | None:
        with self._lock:
            return None if self._last_frame is None else self._last_frame.copy()

    def capture_frame(self) -> bytes | None:
        """Return the latest frame as JPEG bytes, or None before the first frame."""
        frame = self.get_last_frame()
        if frame is None:
            return None
        try:
            return encode_jpeg(frame)
        except (ValueError, cv2.error) as exc:
            logger.warning("Frame encoding failed: %s", exc)
            return None

    def _set_error(self, message: str) -> None:
        with self._lock:
            self._last_error = message

    def _loop(self, capture: Any, stop_event: threading.Event) -> None:
        """Read frames until stopped; a superseded reader never touches shared state."""
        logger.info("WebcamSource reader started for source=%s", self.source)
        misses = 0
        while not stop_event.is_set():
            try:
                ok, frame = capture.read()
            except cv2.error as exc:  # pragma: no cover - hardware/runtime path
                logger.exception("Camera read failed")
                with self._lock:
                    if self._capture is capture:
                        self._last_error = str(exc)
                break
            if ok and frame is not None:
                misses = 0
                with self._lock:
                    if self._capture is not capture:
                        break
                    self._last_frame = frame
                    self._last_error = ""
                time.sleep(0.01)
                continue
            misses += 1
            # Tolerate dropped reads while the driver warms up
            if misses >= 30:
                with self._lock:
                    if self._capture is not capture:
                        break
                    if self._last_error != NO_FRAME_ERROR:
                        logger.warning("No frame received from camera source %s", self.source)
                    self._last_error = NO_FRAME_ERROR
            time.sleep(0.03)
        logger.info("WebcamSource reader exiting for source=%s", self.source)
        with self._lock:
            if self._capture is capture:
                self._running = False
