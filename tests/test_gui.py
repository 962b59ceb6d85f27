# -*- coding: utf-8 -*-
"""Tests for the Qt controller and main window wiring."""

from __future__ import annotations

import pytest

pytest.importorskip("PyQt6")

from conftest import FakeClient, FakeSource, result_payload

from webcamguard.core.frame_history import FrameHistory
from webcamguard.gui.controller import MonitorController
from webcamguard.gui.frames_widget import FramesWidget
from webcamguard.gui.help_system import HelpSystem
from webcamguard.gui.main_window import MainWindow


def _window(default_config: dict, source: FakeSource, client: FakeClient) -> MainWindow:
    controller = MonitorController(default_config, source=source, client=client, threaded=False)
    window = MainWindow(default_config, controller=controller)
    # Open the poller directly so no health-check thread is spawned
    controller.poller.open()
    return window


def test_help_system_tooltip_lookup_and_fallback() -> None:
    assert HelpSystem.get_tooltip("controls", "toggle_button").startswith("Start or stop")
    assert HelpSystem.get_tooltip("missing", "missing") == "No help available."
    assert "Start Analysis" in HelpSystem.usage_guide_html()


def test_help_dialog_title(qt_app) -> None:
    dialog = HelpSystem.build_help_dialog()
    assert dialog.windowTitle() == "How to Use Webcam Detection"
    dialog.close()


def test_poll_timer_follows_analysis_toggle(qt_app, default_config) -> None:
    window = _window(default_config, FakeSource(), FakeClient())
    timer = window.controller.poll_timer

    assert timer.isActive() is False
    window.controller.toggle_analysis()
    assert timer.isActive() is True
    assert timer.interval() == 1000
    assert window.controls_widget.toggle_button.text() == "Stop Analysis"

    window.controller.toggle_analysis()
    assert timer.isActive() is False
    assert window.controls_widget.toggle_button.text() == "Start Analysis"
    window.close()


def test_completed_tick_updates_results_and_history(qt_app, default_config) -> None:
    client = FakeClient([result_payload(score=0.85, is_synthetic=True, session_id="abc")])
    window = _window(default_config, FakeSource(), client)
    window.controller.toggle_analysis()

    window.controller.poller.tick()

    results = window.results_widget
    assert results.stack.currentIndex() == 1
    assert results.verdict_label.text() == "Synthetic Detected"
    assert results.risk_label.text() == "High"
    assert results.session_label.text() == "abc"
    assert window.history_widget.table.rowCount() == 1
    assert window.controls_widget.save_button.isEnabled() is True
    window.close()


def test_toggle_disabled_while_stream_offline(qt_app, default_config) -> None:
    window = _window(default_config, FakeSource(streaming=False), FakeClient())

    assert window.controls_widget.toggle_button.isEnabled() is False
    assert window.controls_widget.save_button.isEnabled() is False
    assert window.video_widget.stream_badge.text() == "Offline"
    window.close()


def test_sensitivity_slider_reaches_next_call(qt_app, default_config) -> None:
    client = FakeClient()
    window = _window(default_config, FakeSource(), client)
    window.controller.toggle_analysis()

    window.settings_widget.sensitivity_slider.setValue(30)
    window.controller.poller.tick()

    assert client.calls[-1][2] == 30
    window.close()


def test_webcam_error_shows_retry_page(qt_app, default_config) -> None:
    from webcamguard.errors import PermissionDenied

    source = FakeSource(start_error=PermissionDenied("denied"))
    window = _window(default_config, source, FakeClient())

    assert window.video_widget.stack.currentIndex() == 1
    source.start_error = None
    window.video_widget.retry_button.click()
    assert window.video_widget.stack.currentIndex() == 0
    window.close()


def test_close_releases_webcam(qt_app, default_config) -> None:
    source = FakeSource()
    window = _window(default_config, source, FakeClient())
    window.show()
    window.controller.toggle_analysis()

    window.close()

    assert source.stopped == 1
    assert window.controller.poll_timer.isActive() is False


def test_frames_widget_shows_one_thumb_per_frame(qt_app, jpeg_frame) -> None:
    widget = FramesWidget()
    history = FrameHistory().push(jpeg_frame).push(jpeg_frame)

    widget.set_frames(history)

    visible = [label for label in widget.thumb_labels if not label.isHidden()]
    assert len(visible) == 2
    assert widget.placeholder_label.isHidden() is True


def _wait_until_idle(controller: MonitorController, timeout_ms: int = 5000) -> None:
    from PyQt6.QtCore import QEventLoop, QTimer

    loop = QEventLoop()

    def _check(state) -> None:
        if not state.in_flight:
            loop.quit()

    controller.state_changed.connect(_check)
    QTimer.singleShot(timeout_ms, loop.quit)
    if controller.state.in_flight:
        loop.exec()
    controller.state_changed.disconnect(_check)


def test_threaded_dispatch_applies_result_on_gui_thread(qt_app, default_config) -> None:
    from webcamguard.core.poller import TickOutcome

    client = FakeClient([result_payload(session_id="threaded", score=0.4)])
    controller = MonitorController(default_config, source=FakeSource(), client=client, threaded=True)
    controller.poller.open()
    controller.toggle_analysis()

    assert controller.poller.tick() is TickOutcome.DISPATCHED
    assert controller.poller.tick() is TickOutcome.BUSY
    _wait_until_idle(controller)

    assert controller.state.in_flight is False
    assert controller.state.session_id == "threaded"
    assert controller.state.last_result.score == 0.4
    assert len(client.calls) == 1
    controller.close()


def test_threaded_dispatch_failure_releases_slot(qt_app, default_config) -> None:
    from webcamguard.core.poller import TickOutcome
    from webcamguard.errors import NetworkError

    client = FakeClient([NetworkError("offline")])
    controller = MonitorController(default_config, source=FakeSource(), client=client, threaded=True)
    notes = []
    controller.notification_posted.connect(notes.append)
    controller.poller.open()
    controller.toggle_analysis()

    assert controller.poller.tick() is TickOutcome.DISPATCHED
    assert controller.poller.tick() is TickOutcome.BUSY
    _wait_until_idle(controller)

    assert controller.state.in_flight is False
    assert controller.state.last_result is None
    assert notes[-1].title == "Analysis Error"
    assert controller.poller.tick() is TickOutcome.DISPATCHED
    _wait_until_idle(controller)
    controller.close()


def test_close_waits_for_slow_analysis_call(qt_app, default_config) -> None:
    import threading

    release = threading.Event()

    class _SlowClient(FakeClient):
        timeout = 5.0

        def analyze(self, frame, session_id, sensitivity):
            release.wait(5.0)
            return super().analyze(frame, session_id, sensitivity)

    controller = MonitorController(default_config, source=FakeSource(), client=_SlowClient(), threaded=True)
    controller.poller.open()
    controller.toggle_analysis()
    controller.poller.tick()
    threads = [thread for thread, _worker in controller._active_threads]
    timer = threading.Timer(2.5, release.set)
    timer.start()

    controller.close()

    timer.join()
    assert threads
    assert all(not thread.isRunning() for thread in threads)


def test_invalid_settings_file_is_not_overwritten_on_close(qt_app, tmp_path) -> None:
    import json

    from webcamguard.main import load_startup_settings

    path = tmp_path / "settings.json"
    original = {"api": {"base_url": "http://myhost:9000"}, "detection": {"sensitivity": 500}}
    path.write_text(json.dumps(original), encoding="utf-8")

    settings, persist_path, error_text = load_startup_settings(path)
    assert persist_path is None
    assert "sensitivity" in error_text
    assert settings["api"]["base_url"] == "http://localhost:8000"

    controller = MonitorController(settings, source=FakeSource(), client=FakeClient(), threaded=False)
    window = MainWindow(settings, controller=controller, settings_path=persist_path)
    window.show()
    window.close()

    assert json.loads(path.read_text(encoding="utf-8")) == original


def test_valid_settings_are_saved_back_on_close(qt_app, tmp_path) -> None:
    import json

    from webcamguard.main import load_startup_settings

    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"api": {"base_url": "http://myhost:9000"}}), encoding="utf-8")

    settings, persist_path, _ = load_startup_settings(path)
    controller = MonitorController(settings, source=FakeSource(), client=FakeClient(), threaded=False)
    window = MainWindow(settings, controller=controller, settings_path=persist_path)
    window.show()
    controller.set_sensitivity(30)
    window.close()

    stored = json.loads(path.read_text(encoding="utf-8"))
    assert stored["api"]["base_url"] == "http://myhost:9000"
    assert stored["detection"]["sensitivity"] == 30
