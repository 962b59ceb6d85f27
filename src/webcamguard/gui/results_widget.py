# -*- coding: utf-8 -*-
"""Side panel with the most recent detection result."""

from __future__ import annotations

from PyQt6.QtWidgets import QFormLayout, QLabel, QProgressBar, QStackedWidget, QVBoxLayout, QWidget

from webcamguard.core.state import MonitorState, risk_level

RISK_COLORS = {"High": "#ef4444", "Medium": "#eab308", "Low": "#22c55e"}


class ResultsWidget(QWidget):
    """Show verdict, score, frame count and timing of the last completed call."""

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.title_label = QLabel("Live Detection Results")
        self.title_label.setObjectName("sectionTitle")

        self.placeholder_label = QLabel(
            "No Analysis Data\nStart the analysis to see real-time deepfake detection results."
        )
        self.placeholder_label.setObjectName("mutedText")
        self.placeholder_label.setWordWrap(True)

        self.verdict_label = QLabel("")
        self.verdict_label.setObjectName("verdictBadge")
        self.score_bar = QProgressBar()
        self.score_bar.setRange(0, 100)
        self.score_label = QLabel("")
        self.risk_label = QLabel("")
        self.frames_label = QLabel("0")
        self.time_label = QLabel("0 ms")
        self.session_label = QLabel("-")
        self.session_label.setObjectName("mutedText")
        self.warning_label = QLabel(
            "Synthetic Content Detected\nThe analysis indicates this may be a deepfake or synthetic "
            "content. Verify with additional methods if important."
        )
        self.warning_label.setObjectName("warningText")
        self.warning_label.setWordWrap(True)

        details = QWidget()
        form = QFormLayout(details)
        form.setContentsMargins(0, 0, 0, 0)
        form.addRow("Verdict", self.verdict_label)
        form.addRow("Synthetic score", self.score_label)
        form.addRow(self.score_bar)
        form.addRow("Risk", self.risk_label)
        form.addRow("Frames analyzed", self.frames_label)
        form.addRow("Processing time", self.time_label)
        form.addRow("Session", self.session_label)
        form.addRow(self.warning_label)

        self.stack = QStackedWidget()
        self.stack.addWidget(self.placeholder_label)
        self.stack.addWidget(details)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(6)
        layout.addWidget(self.title_label)
        layout.addWidget(self.stack)

    def set_state(self, state: MonitorState) -> None:
        result = state.last_result
        if result is None:
            self.stack.setCurrentIndex(0)
            return
        self.stack.setCurrentIndex(1)
        level = risk_level(result.score)
        percent = int(round(result.score * 100))
        self.verdict_label.setText("Synthetic Detected" if result.is_synthetic else "Authentic")
        self.score_label.setText(f"{percent}%")
        self.score_bar.setValue(percent)
        self.score_bar.setStyleSheet(f"QProgressBar::chunk {{ background-color: {RISK_COLORS[level]}; }}")
        self.risk_label.setText(level)
        self.frames_label.setText(str(result.frames_analyzed))
        self.time_label.setText(f"{result.processing_time_ms:.0f} ms")
        self.session_label.setText(state.session_id or "-")
        self.warning_label.setVisible(result.is_synthetic)
