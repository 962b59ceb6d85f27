# -*- coding: utf-8 -*-
"""Thumbnails of the recently captured frames."""

from __future__ import annotations

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QPixmap
from PyQt6.QtWidgets import QGridLayout, QLabel, QVBoxLayout, QWidget

from webcamguard.constants import FRAME_HISTORY_SIZE
from webcamguard.core.frame_history import FrameHistory

THUMB_WIDTH = 200


class FramesWidget(QWidget):
    """Grid of the newest frames, labelled Frame 1 (newest) to Frame 5."""

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._frames: tuple[bytes, ...] = ()
        self.placeholder_label = QLabel(
            "No Frames Captured\nStart the analysis to begin capturing frames from your webcam."
        )
        self.placeholder_label.setObjectName("mutedText")
        self.placeholder_label.setAlignment(Qt.AlignmentFlag.AlignCenter)

        self.grid = QGridLayout()
        self.grid.setSpacing(8)
        self.thumb_labels: list[QLabel] = []
        for index in range(FRAME_HISTORY_SIZE):
            label = QLabel()
            label.setFixedWidth(THUMB_WIDTH)
            label.setAlignment(Qt.AlignmentFlag.AlignCenter)
            label.setToolTip(f"Frame {index + 1}")
            label.hide()
            self.grid.addWidget(label, index // 3, index % 3)
            self.thumb_labels.append(label)

        layout = QVBoxLayout(self)
        layout.addWidget(self.placeholder_label)
        layout.addLayout(self.grid)
        layout.addStretch(1)

    def set_frames(self, history: FrameHistory) -> None:
        frames = tuple(history)
        if frames == self._frames:
            return
        self._frames = frames
        self.placeholder_label.setVisible(not frames)
        for index, label in enumerate(self.thumb_labels):
            if index >= len(frames):
                label.clear()
                label.hide()
                continue
            pixmap = QPixmap()
            pixmap.loadFromData(frames[index], "JPG")
            label.setPixmap(pixmap.scaledToWidth(THUMB_WIDTH, Qt.TransformationMode.SmoothTransformation))
            label.show()
