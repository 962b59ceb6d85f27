# -*- coding: utf-8 -*-
"""Start/stop, save-frame and overlay controls."""

from __future__ import annotations

from PyQt6.QtCore import pyqtSignal
from PyQt6.QtWidgets import QCheckBox, QHBoxLayout, QPushButton, QWidget

from webcamguard.core.state import MonitorState
from webcamguard.gui.help_system import HelpSystem


class ControlsWidget(QWidget):
    """Buttons for the analysis loop and frame download."""

    toggle_requested = pyqtSignal()
    save_requested = pyqtSignal()
    overlay_toggled = pyqtSignal(bool)

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(8)

        self.toggle_button = QPushButton("Start Analysis")
        self.toggle_button.setObjectName("primaryButton")
        self.toggle_button.clicked.connect(self.toggle_requested.emit)
        self.save_button = QPushButton("Save Frame")
        self.save_button.setObjectName("secondaryButton")
        self.save_button.clicked.connect(self.save_requested.emit)
        self.overlay_checkbox = QCheckBox("Show Detection Overlay")
        self.overlay_checkbox.setChecked(True)
        self.overlay_checkbox.toggled.connect(self.overlay_toggled.emit)

        for name in ("toggle_button", "save_button", "overlay_checkbox"):
            getattr(self, name).setToolTip(HelpSystem.get_tooltip("controls", name))

        layout.addWidget(self.toggle_button)
        layout.addWidget(self.save_button)
        layout.addStretch(1)
        layout.addWidget(self.overlay_checkbox)

    def set_state(self, state: MonitorState) -> None:
        """Reflect analyzing/streaming state in the controls."""
        self.toggle_button.setText("Stop Analysis" if state.analyzing else "Start Analysis")
        self.toggle_button.setObjectName("dangerButton" if state.analyzing else "primaryButton")
        self.toggle_button.setEnabled(state.analyzing or state.can_start)
        self.toggle_button.style().unpolish(self.toggle_button)
        self.toggle_button.style().polish(self.toggle_button)
        self.save_button.setEnabled(bool(state.frame_history))
        if self.overlay_checkbox.isChecked() != state.settings.show_overlay:
            self.overlay_checkbox.blockSignals(True)
            self.overlay_checkbox.setChecked(state.settings.show_overlay)
            self.overlay_checkbox.blockSignals(False)
