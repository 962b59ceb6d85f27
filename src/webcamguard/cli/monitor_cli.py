# -*- coding: utf-8 -*-
"""Headless commands: run the polling loop without a window, probe the backend."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any

import typer

from webcamguard.config import ConfigError, load_config
from webcamguard.constants import DEFAULT_SETTINGS_FILE
from webcamguard.core.poller import PollingController, TickOutcome
from webcamguard.core.state import MonitorState, Settings, risk_level
from webcamguard.integrations.analysis_client import AnalysisClient
from webcamguard.models.notification import Notification
from webcamguard.pipeline.webcam_source import WebcamSource

app = typer.Typer(help="Live webcam deepfake detection without the GUI")
logger = logging.getLogger(__name__)


def _build_controller(config: dict[str, Any], sensitivity: int | None) -> PollingController:
    webcam = config.get("webcam", {})
    detection = config.get("detection", {})
    source = WebcamSource(
        camera_index=int(webcam.get("camera_index", 0)),
        resolution=str(webcam.get("resolution", "720p")),
        custom_url=str(webcam.get("custom_url", "")),
    )
    client = AnalysisClient.from_config(config)
    settings = Settings(
        sensitivity=sensitivity if sensitivity is not None else int(detection.get("sensitivity", 75)),
        show_overlay=False,
    )
    return PollingController(source, client, settings=settings)


def _load_config_or_exit(config_path: Path) -> dict[str, Any]:
    try:
        return load_config(config_path)
    except ConfigError as exc:
        typer.echo(f"Invalid settings in {config_path}: {exc}", err=True)
        raise typer.Exit(2) from exc


def _echo_notification(notification: Notification) -> None:
    line = f"[{notification.title}] {notification.description}".rstrip()
    typer.echo(line, err=notification.is_error)


def _wait_for_stream(controller: PollingController, timeout: float) -> bool:
    deadline = time.monotonic() + timeout
    while True:
        controller.refresh_stream()
        if controller.state.can_start or time.monotonic() >= deadline:
            return controller.state.can_start
        time.sleep(0.1)


@app.command()
def run(
    ticks: int = typer.Option(10, min=1, help="Number of poll ticks to run"),
    config_path: Path = typer.Option(Path(DEFAULT_SETTINGS_FILE), "--config", help="Settings JSON path"),
    sensitivity: int = typer.Option(None, min=1, max=100, help="Override detection sensitivity"),
    interval_ms: int = typer.Option(None, min=0, help="Override poll interval in milliseconds"),
    save_dir: Path = typer.Option(None, help="Save the newest analyzed frame into this folder"),
    stream_timeout: float = typer.Option(5.0, help="Seconds to wait for the first webcam frame"),
    verbose: bool = typer.Option(False, help="Verbose output"),
) -> None:
    """Poll the webcam and print one line per completed analysis."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG)

    config = _load_config_or_exit(config_path)
    interval = interval_ms if interval_ms is not None else int(config["detection"]["poll_interval_ms"])
    controller = _build_controller(config, sensitivity)
    controller.notification_posted = _echo_notification

    printed: list[Any] = [None]

    def _on_state(state: MonitorState) -> None:
        result = state.last_result
        if result is None or result is printed[0]:
            return
        printed[0] = result
        typer.echo(
            f"score={result.score:.3f} risk={risk_level(result.score)} "
            f"synthetic={result.is_synthetic} areas={len(result.areas)} "
            f"frames={result.frames_analyzed} time={result.processing_time_ms:.0f}ms "
            f"session={result.session_id}"
        )

    controller.state_changed = _on_state

    with controller:
        if not _wait_for_stream(controller, stream_timeout):
            typer.echo("Webcam stream is not live; nothing to analyze.", err=True)
            raise typer.Exit(1)
        controller.start()
        skipped = 0
        for _ in range(ticks):
            if controller.tick() is not TickOutcome.DISPATCHED:
                skipped += 1
            time.sleep(interval / 1000.0)
        controller.stop()

        if save_dir is not None:
            saved = controller.save_latest_frame(save_dir, str(config["download"]["filename_prefix"]))
            if saved is not None:
                typer.echo(f"Saved frame to: {saved}")

    typer.echo(f"\nTotal: {ticks} ticks, {controller.dispatch_count} dispatched, {skipped} skipped")


@app.command()
def health(
    config_path: Path = typer.Option(Path(DEFAULT_SETTINGS_FILE), "--config", help="Settings JSON path"),
) -> None:
    """Check whether the analysis service is reachable."""
    config = _load_config_or_exit(config_path)
    client = AnalysisClient.from_config(config)
    if client.check_health():
        typer.echo(f"Backend online: {client.base_url}")
        return
    typer.echo(f"Backend offline: {client.base_url}", err=True)
    raise typer.Exit(1)


if __name__ == "__main__":
    app()
