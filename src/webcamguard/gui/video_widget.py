# -*- coding: utf-8 -*-
"""Live webcam view with detection overlay and status badges."""

from __future__ import annotations

import numpy as np
from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtGui import QImage, QPixmap
from PyQt6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QPushButton,
    QSizePolicy,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from webcamguard.core.state import MonitorState, risk_level
from webcamguard.gui.help_system import HelpSystem
from webcamguard.pipeline import overlay


def bgr_to_qimage(frame: np.ndarray) -> QImage:
    """Convert an OpenCV BGR frame into a detached QImage."""
    height, width = frame.shape[:2]
    rgb = np.ascontiguousarray(frame[:, :, ::-1])
    image = QImage(rgb.data, width, height, 3 * width, QImage.Format.Format_RGB888)
    # copy() detaches from the numpy buffer
    return image.copy()


class VideoWidget(QWidget):
    """Shows the feed, or an access-error panel with a retry button."""

    retry_requested = pyqtSignal()

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._state = MonitorState()

        self.frame_label = QLabel("Waiting for webcam...")
        self.frame_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.frame_label.setMinimumSize(480, 270)
        self.frame_label.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
        self.frame_label.setObjectName("videoSurface")

        self.stream_badge = QLabel("Offline")
        self.mode_badge = QLabel("Webcam Ready")
        self.risk_badge = QLabel("")
        for badge in (self.stream_badge, self.mode_badge, self.risk_badge):
            badge.setObjectName("badge")
        self.risk_badge.hide()

        badges = QHBoxLayout()
        badges.addWidget(self.mode_badge)
        badges.addWidget(self.risk_badge)
        badges.addStretch(1)
        badges.addWidget(self.stream_badge)

        live_page = QWidget()
        live_layout = QVBoxLayout(live_page)
        live_layout.setContentsMargins(0, 0, 0, 0)
        live_layout.addLayout(badges)
        live_layout.addWidget(self.frame_label, 1)

        self.error_label = QLabel(
            "Webcam Access Error\nUnable to access your webcam. Please ensure camera permissions "
            "are granted to this application."
        )
        self.error_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.error_label.setWordWrap(True)
        self.retry_button = QPushButton("Retry Connection")
        self.retry_button.setObjectName("primaryButton")
        self.retry_button.setToolTip(HelpSystem.get_tooltip("main_window", "retry_button"))
        self.retry_button.clicked.connect(self.retry_requested.emit)

        error_page = QWidget()
        error_layout = QVBoxLayout(error_page)
        error_layout.addStretch(1)
        error_layout.addWidget(self.error_label)
        error_layout.addWidget(self.retry_button, 0, Qt.AlignmentFlag.AlignCenter)
        error_layout.addStretch(1)

        self.stack = QStackedWidget()
        self.stack.addWidget(live_page)
        self.stack.addWidget(error_page)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self.stack)

    def set_state(self, state: MonitorState) -> None:
        self._state = state
        self.stack.setCurrentIndex(1 if state.stream_error else 0)
        self.stream_badge.setText("Live" if state.streaming else "Offline")
        self.mode_badge.setText("Analyzing Feed" if state.analyzing else "Webcam Ready")
        result = state.last_result
        if result is not None and state.analyzing:
            self.risk_badge.setText(f"{risk_level(result.score)} ({result.score * 100:.0f}%)")
            self.risk_badge.show()
        else:
            self.risk_badge.hide()

    def show_frame(self, frame: np.ndarray | None) -> None:
        """Render the latest raw frame with the overlay from the current state."""
        if frame is None:
            return
        height, width = frame.shape[:2]
        result = self._state.last_result
        if result is not None and self._state.settings.show_overlay and result.areas:
            frame = overlay.draw(frame, result.areas, width, height)
        pixmap = QPixmap.fromImage(bgr_to_qimage(frame))
        self.frame_label.setPixmap(
            pixmap.scaled(
                self.frame_label.size(),
                Qt.AspectRatioMode.KeepAspectRatio,
                Qt.TransformationMode.SmoothTransformation,
            )
        )
