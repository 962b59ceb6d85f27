# -*- coding: utf-8 -*-
"""Application constants."""

APP_NAME = "webcam-guard"
APP_VERSION = "0.1.0"

DEFAULT_SETTINGS_FILE = "settings.json"

POLL_INTERVAL_MS = 1000
BACKEND_STATUS_INTERVAL_MS = 30_000
FRAME_HISTORY_SIZE = 5
DETECTION_LOG_SIZE = 50

SENSITIVITY_MIN = 1
SENSITIVITY_MAX = 100
DEFAULT_SENSITIVITY = 75

# Score bands for badges and bars
HIGH_RISK_THRESHOLD = 0.7
MEDIUM_RISK_THRESHOLD = 0.3

DEFAULT_FRAME_WIDTH = 1280
DEFAULT_FRAME_HEIGHT = 720
JPEG_QUALITY = 85

DEFAULT_FILENAME_PREFIX = "satya-ai-detection"
