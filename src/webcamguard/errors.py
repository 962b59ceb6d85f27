# -*- coding: utf-8 -*-
"""Exception types shared across the application."""

from __future__ import annotations


class ConfigError(ValueError):
    """Raised when settings are invalid."""


class WebcamError(RuntimeError):
    """Base class for webcam acquisition failures."""


class PermissionDenied(WebcamError):
    """Camera access was refused by the OS or driver."""


class DeviceError(WebcamError):
    """Camera could not be opened or stopped delivering frames."""


class AnalysisFailure(RuntimeError):
    """Base class for failed analysis calls."""


class NetworkError(AnalysisFailure):
    """The analysis service could not be reached."""


class ServiceError(AnalysisFailure):
    """The analysis service answered with an error or an unusable body."""

    def __init__(self, message: str, status: int = 0) -> None:
        super().__init__(message)
        self.status = status
