# -*- coding: utf-8 -*-
"""HTTP client for the remote synthetic-media analysis service."""

from __future__ import annotations

import json
import logging
import socket
from typing import Any
from urllib import error, request

from webcamguard.errors import NetworkError, ServiceError
from webcamguard.models.analysis_result import AnalysisResult
from webcamguard.utils.image_utils import to_data_url

logger = logging.getLogger(__name__)

WEBCAM_ANALYZE_PATH = "/api/analyze/webcam"
HEALTH_PATH = "/health"


class AnalysisClient:
    """Thin wrapper around the webcam analysis endpoint."""

    def __init__(self, base_url: str, api_key: str = "", timeout: float = 10.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key if api_key != "USE_ENV_FILE" else ""
        self.timeout = float(timeout)

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "AnalysisClient":
        api = config.get("api", {})
        return cls(
            base_url=str(api.get("base_url", "")),
            api_key=str(api.get("api_key", "")),
            timeout=float(api.get("timeout_seconds", 10.0)),
        )

    def analyze(self, frame: bytes, session_id: str | None, sensitivity: int) -> AnalysisResult:
        """Send one JPEG frame and return the parsed result.

        Raises NetworkError when the service cannot be reached and
        ServiceError when it answers with an error or an unusable body.
        """
        payload: dict[str, Any] = {
            "image_data": to_data_url(frame),
            "sensitivity": int(sensitivity),
        }
        if session_id:
            payload["session_id"] = session_id

        status, body = self._request_json("POST", WEBCAM_ANALYZE_PATH, data=payload, timeout=self.timeout)
        if not 200 <= status < 300:
            detail = ""
            if isinstance(body, dict):
                detail = str(body.get("detail") or body.get("error") or "")
            raise ServiceError(f"Analysis service error {status}: {detail}".rstrip(": "), status=status)
        if not isinstance(body, dict):
            raise ServiceError("Analysis service returned a non-JSON body", status=status)
        return AnalysisResult.from_payload(body)

    def check_health(self, timeout: float = 2.0) -> bool:
        """Return True when the service health endpoint answers 200."""
        try:
            status, _ = self._request_json("GET", HEALTH_PATH, timeout=timeout)
        except NetworkError as exc:
            logger.debug("Health check failed: %s", exc)
            return False
        return status == 200

    def _request_json(
        self,
        method: str,
        path: str,
        *,
        timeout: float,
        data: dict[str, Any] | None = None,
    ) -> tuple[int, dict[str, Any] | None]:
        body = None
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        if data is not None:
            body = json.dumps(data).encode("utf-8")
        req = request.Request(f"{self.base_url}{path}", headers=headers, data=body, method=method)
        try:
            with request.urlopen(req, timeout=timeout) as response:
                status = int(getattr(response, "status", 200))
                raw_body = response.read().decode("utf-8", errors="ignore")
        except error.HTTPError as exc:
            raw_body = exc.read().decode("utf-8", errors="ignore")
            try:
                payload = json.loads(raw_body) if raw_body else {}
            except json.JSONDecodeError:
                payload = {}
            return int(exc.code), payload if isinstance(payload, dict) else {}
        except (error.URLError, socket.timeout, TimeoutError, ConnectionError) as exc:
            reason = getattr(exc, "reason", exc)
            raise NetworkError(f"Analysis service unreachable at {self.base_url}: {reason}") from exc

        try:
            payload = json.loads(raw_body) if raw_body else None
        except json.JSONDecodeError:
            logger.warning("Non-JSON response from %s: %s", path, raw_body[:200])
            return status, None
        return status, payload if isinstance(payload, dict) else None
