# -*- coding: utf-8 -*-
"""Table of detections recorded during this run."""

from __future__ import annotations

from datetime import datetime

from PyQt6.QtWidgets import QHeaderView, QTableWidget, QTableWidgetItem, QVBoxLayout, QWidget

from webcamguard.core.state import DetectionRecord, risk_level


class HistoryWidget(QWidget):
    """Newest-first detection log."""

    COLUMNS = ("Time", "Score", "Risk", "Verdict", "Frames", "Session")

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._records: tuple[DetectionRecord, ...] = ()
        self.table = QTableWidget(0, len(self.COLUMNS))
        self.table.setHorizontalHeaderLabels(list(self.COLUMNS))
        self.table.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeMode.Stretch)
        self.table.verticalHeader().setVisible(False)
        self.table.setEditTriggers(QTableWidget.EditTrigger.NoEditTriggers)

        layout = QVBoxLayout(self)
        layout.addWidget(self.table)

    def set_records(self, records: tuple[DetectionRecord, ...]) -> None:
        if records == self._records:
            return
        self._records = records
        self.table.setRowCount(len(records))
        for row, record in enumerate(records):
            values = (
                datetime.fromtimestamp(record.timestamp).strftime("%H:%M:%S"),
                f"{record.score * 100:.0f}%",
                risk_level(record.score),
                "Synthetic" if record.is_synthetic else "Authentic",
                str(record.frames_analyzed),
                record.session_id,
            )
            for column, value in enumerate(values):
                self.table.setItem(row, column, QTableWidgetItem(value))
