# -*- coding: utf-8 -*-
"""Centralized tooltip and usage-guide texts for the GUI."""

from __future__ import annotations

from PyQt6.QtWidgets import QDialog, QDialogButtonBox, QLabel, QVBoxLayout, QWidget


class HelpSystem:
    """Small centralized registry for tooltips and the usage guide."""

    _TOOLTIPS: dict[str, dict[str, str]] = {
        "controls": {
            "toggle_button": "Start or stop sending webcam frames for deepfake analysis once per second.",
            "save_button": "Save the most recently analyzed frame as a JPEG file.",
            "overlay_checkbox": "Draw the regions reported by the detector on top of the video.",
        },
        "settings": {
            "sensitivity_slider": (
                "Detection sensitivity forwarded to the analysis service. "
                "Higher sensitivity may increase false positives."
            ),
            "apply_button": "Confirm the current detection settings.",
        },
        "main_window": {
            "video_widget": "Live webcam feed with the detection overlay.",
            "results_widget": "Result of the most recent completed analysis.",
            "backend_label": "Reachability of the analysis service, refreshed every 30 seconds.",
            "retry_button": "Try to open the webcam again.",
        },
    }

    USAGE_STEPS: list[tuple[str, str]] = [
        (
            "1. Connect Webcam",
            "Grant camera permissions when prompted. The webcam feed appears in the main viewing area.",
        ),
        (
            "2. Start Analysis",
            'Click "Start Analysis" to begin detecting synthetic content in your webcam feed.',
        ),
        (
            "3. Review Results",
            "Real-time detection results appear in the panel to the right. Adjust sensitivity as needed.",
        ),
    ]

    USAGE_NOTE = (
        "This detection technology analyzes visual artifacts and patterns that may indicate "
        "synthetic or manipulated content. For the most accurate results, ensure good lighting "
        "conditions and minimal background movement. The detection is still in beta and may not "
        "catch all types of synthetic content."
    )

    @classmethod
    def get_tooltip(cls, section: str, key: str) -> str:
        return cls._TOOLTIPS.get(section, {}).get(key, "No help available.")

    @classmethod
    def usage_guide_html(cls) -> str:
        parts = [f"<h3>{title}</h3><p>{text}</p>" for title, text in cls.USAGE_STEPS]
        parts.append(f"<p><b>Note:</b> {cls.USAGE_NOTE}</p>")
        return "".join(parts)

    @classmethod
    def build_help_dialog(cls, parent: QWidget | None = None) -> QDialog:
        dialog = QDialog(parent)
        dialog.setWindowTitle("How to Use Webcam Detection")
        layout = QVBoxLayout(dialog)
        body = QLabel(cls.usage_guide_html())
        body.setWordWrap(True)
        layout.addWidget(body)
        buttons = QDialogButtonBox(QDialogButtonBox.StandardButton.Close)
        buttons.rejected.connect(dialog.reject)
        layout.addWidget(buttons)
        return dialog
