# -*- coding: utf-8 -*-
"""Main window: live feed, controls, results and review tabs."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from PyQt6.QtCore import QTimer
from PyQt6.QtGui import QAction, QCloseEvent, QKeySequence, QShortcut
from PyQt6.QtWidgets import (
    QFrame,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QTabWidget,
    QTextBrowser,
    QVBoxLayout,
    QWidget,
)

from webcamguard.config import ConfigError, save_config
from webcamguard.constants import APP_NAME, APP_VERSION
from webcamguard.core.state import MonitorState
from webcamguard.gui.controller import MonitorController
from webcamguard.gui.controls_widget import ControlsWidget
from webcamguard.gui.frames_widget import FramesWidget
from webcamguard.gui.help_system import HelpSystem
from webcamguard.gui.history_widget import HistoryWidget
from webcamguard.gui.results_widget import ResultsWidget
from webcamguard.gui.settings_widget import SettingsWidget
from webcamguard.gui.video_widget import VideoWidget
from webcamguard.models.notification import Notification

logger = logging.getLogger(__name__)

NOTIFICATION_TIMEOUT_MS = 5000


class MainWindow(QMainWindow):
    """Live deepfake detection window."""

    def __init__(
        self,
        settings: dict[str, Any],
        controller: MonitorController | None = None,
        settings_path: Path | None = None,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.settings = settings
        self.settings_path = settings_path
        self.controller = controller or MonitorController(settings)

        self.setWindowTitle(f"{APP_NAME} v{APP_VERSION} - Live Deepfake Detection")
        self.resize(1320, 860)

        self._build_actions()
        self._build_ui()
        self._apply_styles()
        self._connect_controller()

        self._frame_timer = QTimer(self)
        self._frame_timer.setInterval(33)
        self._frame_timer.timeout.connect(self._refresh_video)

        self.render_state(self.controller.state)

    def _build_actions(self) -> None:
        self.help_action = QAction("Usage Guide", self)
        self.help_action.triggered.connect(lambda: HelpSystem.build_help_dialog(self).exec())
        self.menuBar().addAction(self.help_action)
        QShortcut(QKeySequence("Space"), self, activated=self.controller.toggle_analysis)
        QShortcut(QKeySequence("Ctrl+S"), self, activated=self.save_frame)

    def _build_ui(self) -> None:
        state = self.controller.state
        self.video_widget = VideoWidget()
        self.video_widget.setToolTip(HelpSystem.get_tooltip("main_window", "video_widget"))
        self.controls_widget = ControlsWidget()
        self.results_widget = ResultsWidget()
        self.results_widget.setToolTip(HelpSystem.get_tooltip("main_window", "results_widget"))
        self.settings_widget = SettingsWidget(state.settings.sensitivity)
        self.frames_widget = FramesWidget()
        self.history_widget = HistoryWidget()

        guide = QTextBrowser()
        guide.setHtml(HelpSystem.usage_guide_html())

        self.tab_widget = QTabWidget()
        self.tab_widget.addTab(self.frames_widget, "Captured Frames")
        self.tab_widget.addTab(self.history_widget, "Detection History")
        self.tab_widget.addTab(guide, "Usage Guide")

        left = QVBoxLayout()
        left.addWidget(self.video_widget, 1)
        left.addWidget(self.controls_widget)

        right = QVBoxLayout()
        right.addWidget(self._card(self.results_widget))
        right.addWidget(self._card(self.settings_widget))
        right.addStretch(1)

        top = QHBoxLayout()
        top.addLayout(left, 2)
        top.addLayout(right, 1)

        central = QWidget()
        layout = QVBoxLayout(central)
        layout.setContentsMargins(14, 14, 14, 14)
        layout.setSpacing(12)
        layout.addLayout(top, 3)
        layout.addWidget(self.tab_widget, 2)
        self.setCentralWidget(central)

        self.backend_label = QLabel("Backend: checking...")
        self.backend_label.setToolTip(HelpSystem.get_tooltip("main_window", "backend_label"))
        self.statusBar().addPermanentWidget(self.backend_label)

    def _card(self, widget: QWidget) -> QFrame:
        frame = QFrame()
        frame.setObjectName("card")
        layout = QVBoxLayout(frame)
        layout.addWidget(widget)
        return frame

    def _apply_styles(self) -> None:
        self.setStyleSheet(
            """
            QMainWindow, QWidget { background: #0f172a; color: #e2e8f0; }
            QFrame#card { border: 1px solid #1e293b; border-radius: 8px; }
            QLabel#sectionTitle { font-size: 15px; font-weight: 600; color: #ffffff; }
            QLabel#mutedText { color: #94a3b8; }
            QLabel#warningText { color: #f87171; }
            QLabel#badge { background: #020617; border-radius: 6px; padding: 3px 8px; }
            QLabel#videoSurface { background: #000000; }
            QPushButton#primaryButton { background: #0891b2; border-radius: 6px; padding: 6px 14px; }
            QPushButton#dangerButton { background: #dc2626; border-radius: 6px; padding: 6px 14px; }
            QPushButton#secondaryButton { border: 1px solid #334155; border-radius: 6px; padding: 6px 14px; }
            QPushButton:disabled { color: #64748b; }
            """
        )

    def _connect_controller(self) -> None:
        self.controller.state_changed.connect(self.render_state)
        self.controller.notification_posted.connect(self.show_notification)
        self.controller.backend_status_changed.connect(self._on_backend_status)
        self.controls_widget.toggle_requested.connect(self.controller.toggle_analysis)
        self.controls_widget.save_requested.connect(self.save_frame)
        self.controls_widget.overlay_toggled.connect(self.controller.set_show_overlay)
        self.settings_widget.sensitivity_changed.connect(self.controller.set_sensitivity)
        self.settings_widget.apply_requested.connect(self.controller.apply_settings)
        self.video_widget.retry_requested.connect(self.controller.retry_webcam)

    def start(self) -> None:
        """Open the webcam and begin painting the feed."""
        self.controller.open()
        self._frame_timer.start()

    def render_state(self, state: MonitorState) -> None:
        self.video_widget.set_state(state)
        self.controls_widget.set_state(state)
        self.results_widget.set_state(state)
        self.frames_widget.set_frames(state.frame_history)
        self.history_widget.set_records(state.detection_log)

    def show_notification(self, notification: Notification) -> None:
        text = notification.title
        if notification.description:
            text = f"{notification.title}: {notification.description}"
        self.statusBar().setStyleSheet("color: #f87171;" if notification.is_error else "")
        self.statusBar().showMessage(text, NOTIFICATION_TIMEOUT_MS)

    def save_frame(self) -> None:
        path = self.controller.save_latest_frame()
        if path is not None:
            self.statusBar().setStyleSheet("")
            self.statusBar().showMessage(f"Frame saved to {path}", NOTIFICATION_TIMEOUT_MS)

    def _refresh_video(self) -> None:
        self.video_widget.show_frame(self.controller.source.get_last_frame())

    def _on_backend_status(self, online: bool) -> None:
        self.backend_label.setText("Backend: online" if online else "Backend: offline")

    def _persist_detection_settings(self) -> None:
        state_settings = self.controller.state.settings
        detection = self.settings.setdefault("detection", {})
        detection["sensitivity"] = state_settings.sensitivity
        detection["show_overlay"] = state_settings.show_overlay
        if self.settings_path is None:
            return
        try:
            save_config(self.settings, self.settings_path)
        except (ConfigError, OSError) as exc:
            logger.error("Could not save settings to %s: %s", self.settings_path, exc)

    def closeEvent(self, event: QCloseEvent) -> None:
        self._frame_timer.stop()
        self.controller.close()
        self._persist_detection_settings()
        super().closeEvent(event)
