# -*- coding: utf-8 -*-
"""Tests for the headless typer commands."""

from __future__ import annotations

from pathlib import Path

from typer.testing import CliRunner

from conftest import FakeClient, FakeSource, result_payload

from webcamguard.cli import monitor_cli
from webcamguard.core.poller import PollingController
from webcamguard.core.state import Settings
from webcamguard.errors import DeviceError

runner = CliRunner()


def _patch_controller(monkeypatch, source: FakeSource, client: FakeClient) -> list:
    built = []

    def _build(config, sensitivity):
        controller = PollingController(source, client, settings=Settings(sensitivity=sensitivity or 75))
        built.append(controller)
        return controller

    monkeypatch.setattr(monitor_cli, "_build_controller", _build)
    return built


def test_run_prints_each_result(monkeypatch, tmp_path: Path) -> None:
    client = FakeClient([result_payload(score=0.85), result_payload(score=0.2, is_synthetic=False)])
    source = FakeSource()
    _patch_controller(monkeypatch, source, client)

    result = runner.invoke(
        monitor_cli.app,
        ["run", "--ticks", "2", "--interval-ms", "0", "--sensitivity", "40", "--config", str(tmp_path / "s.json")],
    )

    assert result.exit_code == 0, result.output
    assert "score=0.850 risk=High synthetic=True" in result.output
    assert "score=0.200 risk=Low synthetic=False" in result.output
    assert "Total: 2 ticks, 2 dispatched, 0 skipped" in result.output
    assert [call[2] for call in client.calls] == [40, 40]
    assert source.stopped == 1


def test_run_saves_latest_frame(monkeypatch, tmp_path: Path) -> None:
    _patch_controller(monkeypatch, FakeSource(), FakeClient())
    save_dir = tmp_path / "captures"

    result = runner.invoke(
        monitor_cli.app,
        ["run", "--ticks", "1", "--interval-ms", "0", "--save-dir", str(save_dir), "--config", str(tmp_path / "s.json")],
    )

    assert result.exit_code == 0, result.output
    saved = list(save_dir.glob("satya-ai-detection-*.jpg"))
    assert len(saved) == 1
    assert saved[0].read_bytes() == b"frame-1"


def test_run_exits_when_webcam_unavailable(monkeypatch, tmp_path: Path) -> None:
    source = FakeSource(streaming=False, start_error=DeviceError("Camera source 0 could not be opened."))
    client = FakeClient()
    _patch_controller(monkeypatch, source, client)

    result = runner.invoke(
        monitor_cli.app,
        ["run", "--ticks", "1", "--stream-timeout", "0", "--config", str(tmp_path / "s.json")],
    )

    assert result.exit_code == 1
    assert client.calls == []


def test_health_reports_backend_state(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setattr(monitor_cli.AnalysisClient, "check_health", lambda self, timeout=2.0: True)
    result = runner.invoke(monitor_cli.app, ["health", "--config", str(tmp_path / "s.json")])
    assert result.exit_code == 0
    assert "Backend online" in result.output

    monkeypatch.setattr(monitor_cli.AnalysisClient, "check_health", lambda self, timeout=2.0: False)
    result = runner.invoke(monitor_cli.app, ["health", "--config", str(tmp_path / "s.json")])
    assert result.exit_code == 1


def test_invalid_config_exits_with_message(monkeypatch, tmp_path: Path) -> None:
    built = _patch_controller(monkeypatch, FakeSource(), FakeClient())
    config_path = tmp_path / "settings.json"
    config_path.write_text('{"detection": {"sensitivity": 500}}', encoding="utf-8")

    for args in (["run", "--ticks", "1"], ["health"]):
        result = runner.invoke(monitor_cli.app, [*args, "--config", str(config_path)])
        assert result.exit_code == 2
        assert "Invalid settings" in result.output
        assert not isinstance(result.exception, ValueError)

    assert built == []
