# -*- coding: utf-8 -*-
"""Application entry point."""

from __future__ import annotations

import logging
import sys
import traceback
from pathlib import Path
from typing import Any

from PyQt6.QtCore import QTimer
from PyQt6.QtWidgets import QApplication, QMessageBox

from webcamguard.config import ConfigError, get_default_config, load_config
from webcamguard.constants import APP_NAME, DEFAULT_SETTINGS_FILE
from webcamguard.gui.main_window import MainWindow
from webcamguard.utils.logger import setup_session_logging


def global_exception_handler(exc_type, exc_value, exc_traceback):
    """Log fatal errors and keep a copy in logs/LAST_CRASH.log."""
    error_msg = "".join(traceback.format_exception(exc_type, exc_value, exc_traceback))
    logging.getLogger().critical("FATAL CRASH:\n%s", error_msg)

    crash_path = Path.cwd() / "logs" / "LAST_CRASH.log"
    crash_path.parent.mkdir(parents=True, exist_ok=True)
    crash_path.write_text(error_msg, encoding="utf-8")

    if QApplication.instance():
        QMessageBox.critical(None, "Application Crash", f"A fatal error occurred.\nDetails saved to: {crash_path}")

    sys.__excepthook__(exc_type, exc_value, exc_traceback)


def load_startup_settings(settings_path: Path) -> tuple[dict[str, Any], Path | None, str]:
    """Load settings for the window.

    Returns the settings, the path to save them back to, and an error text.
    When the file is invalid the defaults are used and the save path is None,
    so closing the window leaves the user's file untouched.
    """
    try:
        return load_config(settings_path), settings_path, ""
    except (ConfigError, ValueError) as exc:
        logging.getLogger(__name__).error("Invalid settings in %s: %s", settings_path, exc)
        return get_default_config(), None, str(exc)


def main() -> int:
    """Start the GUI application."""
    sys.excepthook = global_exception_handler
    session_log_path = setup_session_logging(Path.cwd(), APP_NAME)
    logger = logging.getLogger(__name__)
    app = QApplication(sys.argv)
    if session_log_path is not None:
        logger.info("Session log file: %s", session_log_path)

    settings_path = Path(sys.argv[1]) if len(sys.argv) > 1 else Path(DEFAULT_SETTINGS_FILE)
    settings, persist_path, load_error = load_startup_settings(settings_path)
    if load_error:
        QMessageBox.warning(
            None,
            APP_NAME,
            f"Invalid settings in {settings_path}:\n{load_error}\n\nUsing defaults. The file will not be overwritten.",
        )
    logger.info("Analysis backend: %s", settings["api"]["base_url"])

    window = MainWindow(settings=settings, settings_path=persist_path)
    window.show()
    # Open the camera once the window is mapped
    QTimer.singleShot(100, window.start)

    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
