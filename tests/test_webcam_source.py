# -*- coding: utf-8 -*-
"""Tests for the OpenCV-backed webcam source."""

from __future__ import annotations

import threading
import time

import numpy as np
import pytest

from webcamguard.errors import DeviceError, PermissionDenied
from webcamguard.pipeline import webcam_source as webcam_mod
from webcamguard.pipeline.webcam_source import WebcamSource
from webcamguard.utils.image_utils import decode_jpeg, is_jpeg_bytes


class _FakeCapture:
    def __init__(self, opened: bool = True, deliver: bool = True) -> None:
        self.opened = opened
        self.deliver = deliver
        self.released = False
        self.props: dict[int, float] = {}

    def isOpened(self) -> bool:
        return self.opened

    def set(self, prop: int, value: float) -> bool:
        self.props[prop] = value
        return True

    def read(self):
        if not self.deliver:
            return False, None
        return True, np.full((48, 64, 3), 90, dtype=np.uint8)

    def release(self) -> None:
        self.released = True


def _wait_for(predicate, timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


@pytest.fixture
def no_permission_check(monkeypatch) -> None:
    monkeypatch.setattr(webcam_mod, "_device_permission_denied", lambda index: False)


def test_start_streams_and_captures_jpeg(monkeypatch, no_permission_check) -> None:
    capture = _FakeCapture()
    monkeypatch.setattr(webcam_mod, "_open_camera", lambda source: capture)
    source = WebcamSource(camera_index=0, resolution="480p")
    try:
        source.start()
        assert _wait_for(source.is_streaming)
        frame = source.capture_frame()
    finally:
        source.stop()

    assert frame is not None and is_jpeg_bytes(frame)
    assert decode_jpeg(frame).shape == (48, 64, 3)
    assert capture.released is True
    assert source.is_running() is False


def test_capture_frame_is_none_before_first_frame(monkeypatch, no_permission_check) -> None:
    monkeypatch.setattr(webcam_mod, "_open_camera", lambda source: _FakeCapture(deliver=False))
    source = WebcamSource()
    try:
        source.start()
        assert source.capture_frame() is None
        assert source.is_streaming() is False
    finally:
        source.stop()


def test_unopenable_camera_raises_device_error(monkeypatch, no_permission_check) -> None:
    capture = _FakeCapture(opened=False)
    monkeypatch.setattr(webcam_mod, "_open_camera", lambda source: capture)
    source = WebcamSource(camera_index=3)

    with pytest.raises(DeviceError):
        source.start()

    assert capture.released is True
    assert "could not be opened" in source.get_last_error()


def test_denied_device_raises_permission_denied(monkeypatch) -> None:
    monkeypatch.setattr(webcam_mod, "_device_permission_denied", lambda index: True)
    opened = []
    monkeypatch.setattr(webcam_mod, "_open_camera", lambda source: opened.append(source))

    with pytest.raises(PermissionDenied):
        WebcamSource(camera_index=0).start()
    assert opened == []


def test_custom_url_takes_precedence(monkeypatch, no_permission_check) -> None:
    seen = []

    def _open(source):
        seen.append(source)
        return _FakeCapture()

    monkeypatch.setattr(webcam_mod, "_open_camera", _open)
    source = WebcamSource(camera_index=1, custom_url="rtsp://cam.local/stream")
    try:
        source.start()
    finally:
        source.stop()
    assert seen == ["rtsp://cam.local/stream"]


def test_resolution_parser() -> None:
    assert webcam_mod._resolution_size("1080p") == (1920, 1080)
    assert webcam_mod._resolution_size("1600x900") == (1600, 900)
    assert webcam_mod._resolution_size("bogus") == (1280, 720)


def test_default_preset_uses_default_frame_size() -> None:
    from webcamguard.constants import DEFAULT_FRAME_HEIGHT, DEFAULT_FRAME_WIDTH

    assert webcam_mod.RESOLUTION_PRESETS["720p"] == (DEFAULT_FRAME_WIDTH, DEFAULT_FRAME_HEIGHT)
    assert webcam_mod._resolution_size("bogus") == (DEFAULT_FRAME_WIDTH, DEFAULT_FRAME_HEIGHT)


class _HangingCapture(_FakeCapture):
    """A capture whose read blocks until released, like a stuck driver."""

    def __init__(self) -> None:
        super().__init__()
        self.unblock = threading.Event()
        self.reading = threading.Event()

    def read(self):
        self.reading.set()
        self.unblock.wait(5.0)
        return super().read()


def test_stale_reader_does_not_mark_restarted_stream_dead(monkeypatch, no_permission_check) -> None:
    hanging = _HangingCapture()
    fresh = _FakeCapture()
    captures = [hanging, fresh]
    monkeypatch.setattr(webcam_mod, "_open_camera", lambda source: captures.pop(0))
    source = WebcamSource()
    try:
        source.start()
        assert hanging.reading.wait(2.0)
        old_thread = source._thread

        source.start()
        assert _wait_for(source.is_streaming)

        hanging.unblock.set()
        old_thread.join(timeout=2.0)
        assert old_thread.is_alive() is False

        assert source.is_running() is True
        assert source.is_streaming() is True
    finally:
        hanging.unblock.set()
        source.stop()
