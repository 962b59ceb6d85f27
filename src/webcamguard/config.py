# -*- coding: utf-8 -*-
"""Settings persistence and validation."""

from __future__ import annotations

import json
from copy import deepcopy
from pathlib import Path
from typing import Any

from webcamguard.constants import (
    DEFAULT_FILENAME_PREFIX,
    DEFAULT_SENSITIVITY,
    DEFAULT_SETTINGS_FILE,
    POLL_INTERVAL_MS,
    SENSITIVITY_MAX,
    SENSITIVITY_MIN,
)
from webcamguard.errors import ConfigError


DEFAULT_CONFIG: dict[str, Any] = {
    "api": {
        "base_url": "http://localhost:8000",
        "api_key": "USE_ENV_FILE",
        "timeout_seconds": 10.0,
    },
    "webcam": {"camera_index": 0, "resolution": "720p", "custom_url": ""},
    "detection": {
        "sensitivity": DEFAULT_SENSITIVITY,
        "show_overlay": True,
        "poll_interval_ms": POLL_INTERVAL_MS,
    },
    "download": {"save_dir": "captures", "filename_prefix": DEFAULT_FILENAME_PREFIX},
}

__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG",
    "get_default_config",
    "load_config",
    "save_config",
    "validate_config",
]


def get_default_config() -> dict[str, Any]:
    """Return a deep copy of the default config."""
    return deepcopy(DEFAULT_CONFIG)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _load_env_file(env_path: Path) -> dict[str, str]:
    """Load a simple .env file (KEY=VALUE)."""
    values: dict[str, str] = {}
    if not env_path.exists():
        return values

    for raw_line in env_path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip()
        if not key:
            continue
        if (value.startswith('"') and value.endswith('"')) or (
            value.startswith("'") and value.endswith("'")
        ):
            value = value[1:-1]
        values[key] = value
    return values


def _apply_env_overrides(config: dict[str, Any], env_values: dict[str, str]) -> dict[str, Any]:
    """Apply .env overrides for the analysis endpoint and key."""
    merged = deepcopy(config)
    api_url = env_values.get("WEBCAM_GUARD_API_URL", "").strip()
    api_key = env_values.get("WEBCAM_GUARD_API_KEY", "").strip()

    if api_url:
        merged.setdefault("api", {})
        merged["api"]["base_url"] = api_url
    if api_key:
        merged.setdefault("api", {})
        merged["api"]["api_key"] = api_key
    return merged


def validate_config(config: dict[str, Any]) -> None:
    """Validate the fields the polling loop and webcam rely on."""
    base_url = config.get("api", {}).get("base_url")
    if not isinstance(base_url, str) or not base_url.startswith(("http://", "https://")):
        raise ConfigError("api.base_url must be an http(s) URL")

    timeout = config.get("api", {}).get("timeout_seconds")
    if not isinstance(timeout, (float, int)) or not (0 < float(timeout) <= 120):
        raise ConfigError("api.timeout_seconds must be in range (0, 120]")

    camera_index = config.get("webcam", {}).get("camera_index")
    if not isinstance(camera_index, int) or camera_index < 0:
        raise ConfigError("webcam.camera_index must be a non-negative int")

    sensitivity = config.get("detection", {}).get("sensitivity")
    if not isinstance(sensitivity, int) or not (SENSITIVITY_MIN <= sensitivity <= SENSITIVITY_MAX):
        raise ConfigError(
            f"detection.sensitivity must be an int in range {SENSITIVITY_MIN}..{SENSITIVITY_MAX}"
        )

    interval = config.get("detection", {}).get("poll_interval_ms")
    if not isinstance(interval, int) or not (100 <= interval <= 60_000):
        raise ConfigError("detection.poll_interval_ms must be an int in range 100..60000")

    if not isinstance(config.get("detection", {}).get("show_overlay"), bool):
        raise ConfigError("detection.show_overlay must be a bool")


def _read_settings_file(config_path: Path) -> dict[str, Any]:
    try:
        with config_path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"{config_path} is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a JSON object in {config_path}")
    return data


def load_config(path: str | Path | None = None) -> dict[str, Any]:
    """Load config from JSON and merge into defaults."""
    config_path = Path(path or DEFAULT_SETTINGS_FILE)
    env_values = _load_env_file(config_path.parent / ".env")
    if not config_path.exists():
        return _apply_env_overrides(get_default_config(), env_values)

    loaded = _read_settings_file(config_path)
    merged = _deep_merge(get_default_config(), loaded)
    merged = _apply_env_overrides(merged, env_values)
    validate_config(merged)
    return merged


def _strip_api_key(config: dict[str, Any]) -> dict[str, Any]:
    """Replace a real API key with the .env placeholder before saving."""
    config_copy = deepcopy(config)
    api = config_copy.get("api", {})
    current_value = api.get("api_key")
    # Anything longer than a placeholder is treated as a real secret
    if current_value and len(str(current_value)) > 20:
        api["api_key"] = "USE_ENV_FILE"
    return config_copy


def save_config(config: dict[str, Any], path: str | Path | None = None) -> Path:
    """Validate and save config as JSON, but without a real API key.

    The key belongs in the `.env` file next to settings.json.
    """
    validate_config(config)
    config_path = Path(path or DEFAULT_SETTINGS_FILE)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with config_path.open("w", encoding="utf-8") as handle:
        json.dump(_strip_api_key(config), handle, indent=2, ensure_ascii=True)
        handle.write("\n")
    return config_path
