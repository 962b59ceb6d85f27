# -*- coding: utf-8 -*-
"""Shared pytest fixtures and fakes."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any, Callable

import pytest


SRC_DIR = Path(__file__).resolve().parents[1] / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))


def result_payload(**overrides: Any) -> dict[str, Any]:
    payload = {
        "session_id": "abc",
        "score": 0.85,
        "is_synthetic": True,
        "areas": [],
        "frames_analyzed": 1,
        "processing_time": 0.12,
    }
    payload.update(overrides)
    return payload


class FakeSource:
    """Webcam stand-in that hands out numbered frames."""

    def __init__(self, streaming: bool = True, start_error: Exception | None = None) -> None:
        self.streaming = streaming
        self.start_error = start_error
        self.error = ""
        self.started = 0
        self.stopped = 0
        self.captured = 0
        self.frames_available = True

    def start(self) -> None:
        self.started += 1
        if self.start_error is not None:
            raise self.start_error

    def stop(self) -> None:
        self.stopped += 1
        self.streaming = False

    def capture_frame(self) -> bytes | None:
        if not self.frames_available:
            return None
        self.captured += 1
        return f"frame-{self.captured}".encode("ascii")

    def is_streaming(self) -> bool:
        return self.streaming

    def get_last_error(self) -> str:
        return self.error

    def get_last_frame(self) -> Any:
        return None


class FakeClient:
    """Analysis client stand-in recording every call."""

    def __init__(self, responses: list[Any] | None = None) -> None:
        self.responses = list(responses or [])
        self.calls: list[tuple[bytes, str | None, int]] = []
        self.healthy = True

    def analyze(self, frame: bytes, session_id: str | None, sensitivity: int) -> Any:
        from webcamguard.models.analysis_result import AnalysisResult

        self.calls.append((frame, session_id, sensitivity))
        response = self.responses.pop(0) if self.responses else result_payload()
        if isinstance(response, Exception):
            raise response
        return AnalysisResult.from_payload(response)

    def check_health(self, timeout: float = 2.0) -> bool:
        return self.healthy


class PendingDispatcher:
    """Holds analysis calls until the test completes them, like a slow network."""

    def __init__(self) -> None:
        self.pending: list[tuple[Callable[[], Any], Callable[[Any], None], Callable[[Exception], None]]] = []
        self.max_outstanding = 0

    def __call__(self, call, on_success, on_failure) -> None:
        self.pending.append((call, on_success, on_failure))
        self.max_outstanding = max(self.max_outstanding, len(self.pending))

    def complete(self) -> None:
        call, on_success, on_failure = self.pending.pop(0)
        try:
            result = call()
        except Exception as exc:
            on_failure(exc)
            return
        on_success(result)


@pytest.fixture
def default_config() -> dict:
    from webcamguard.config import get_default_config

    return get_default_config()


@pytest.fixture
def fake_source() -> FakeSource:
    return FakeSource()


@pytest.fixture
def fake_client() -> FakeClient:
    return FakeClient()


@pytest.fixture
def pending_dispatcher() -> PendingDispatcher:
    return PendingDispatcher()


@pytest.fixture
def jpeg_frame() -> bytes:
    import numpy as np

    from webcamguard.utils.image_utils import encode_jpeg

    frame = np.zeros((48, 64, 3), dtype=np.uint8)
    frame[:, :32] = (0, 128, 255)
    return encode_jpeg(frame)


@pytest.fixture(scope="session")
def qt_app():
    pytest.importorskip("PyQt6")
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    from PyQt6.QtWidgets import QApplication

    app = QApplication.instance() or QApplication([])
    yield app
