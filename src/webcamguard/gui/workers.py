# -*- coding: utf-8 -*-
"""Worker classes for asynchronous background calls."""

from __future__ import annotations

import logging
from typing import Any, Callable

from PyQt6.QtCore import QObject, pyqtSignal

logger = logging.getLogger(__name__)


class AnalysisWorker(QObject):
    """Runs one analysis call off the GUI thread."""
    finished = pyqtSignal(object)
    error = pyqtSignal(object)

    def __init__(self, call: Callable[[], Any]) -> None:
        super().__init__()
        self.call = call

    def run(self) -> None:
        try:
            result = self.call()
        except Exception as exc:
            logger.exception("AnalysisWorker: analysis call failed")
            self.error.emit(exc)
            return
        self.finished.emit(result)


class HealthWorker(QObject):
    """Probes the analysis backend without blocking the window."""
    finished = pyqtSignal(bool)

    def __init__(self, probe: Callable[[], bool]) -> None:
        super().__init__()
        self.probe = probe

    def run(self) -> None:
        try:
            online = bool(self.probe())
        except Exception:
            logger.exception("HealthWorker: backend probe crashed")
            online = False
        self.finished.emit(online)
