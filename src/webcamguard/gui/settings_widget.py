# -*- coding: utf-8 -*-
"""Detection settings panel."""

from __future__ import annotations

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import QHBoxLayout, QLabel, QPushButton, QSlider, QVBoxLayout, QWidget

from webcamguard.constants import SENSITIVITY_MAX, SENSITIVITY_MIN
from webcamguard.gui.help_system import HelpSystem


class SettingsWidget(QWidget):
    """Sensitivity slider with an Apply acknowledgement button."""

    sensitivity_changed = pyqtSignal(int)
    apply_requested = pyqtSignal()

    def __init__(self, sensitivity: int, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.title_label = QLabel("Detection Settings")
        self.title_label.setObjectName("sectionTitle")

        self.sensitivity_slider = QSlider(Qt.Orientation.Horizontal)
        self.sensitivity_slider.setRange(SENSITIVITY_MIN, SENSITIVITY_MAX)
        self.sensitivity_slider.setValue(sensitivity)
        self.sensitivity_slider.setToolTip(HelpSystem.get_tooltip("settings", "sensitivity_slider"))
        self.value_label = QLabel(f"{sensitivity}%")
        self.sensitivity_slider.valueChanged.connect(self._on_value_changed)

        self.apply_button = QPushButton("Apply Settings")
        self.apply_button.setObjectName("primaryButton")
        self.apply_button.setToolTip(HelpSystem.get_tooltip("settings", "apply_button"))
        self.apply_button.clicked.connect(self.apply_requested.emit)

        hint = QLabel(
            "Higher sensitivity may increase false positives. Lower values are more lenient, "
            "while higher values enforce stricter detection."
        )
        hint.setObjectName("mutedText")
        hint.setWordWrap(True)

        row = QHBoxLayout()
        row.addWidget(QLabel("Detection Sensitivity"))
        row.addStretch(1)
        row.addWidget(self.value_label)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(6)
        layout.addWidget(self.title_label)
        layout.addLayout(row)
        layout.addWidget(self.sensitivity_slider)
        layout.addWidget(self.apply_button)
        layout.addWidget(hint)

    def _on_value_changed(self, value: int) -> None:
        self.value_label.setText(f"{value}%")
        self.sensitivity_changed.emit(value)
