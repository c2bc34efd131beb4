# -*- coding: utf-8 -*-
"""Settings persistence and validation."""

from __future__ import annotations

import os
from copy import deepcopy
from pathlib import Path
from typing import Any

from visualmatch.constants import (
    BROWSER_ENGINES,
    DEFAULT_SETTINGS_FILE,
    DEFAULT_THRESHOLD,
    DEFAULT_VIEWPORT,
    NAVIGATION_TIMEOUT_MS,
    SCROLL_SETTLE_MS,
)
from visualmatch.utils.file_utils import read_json_file, write_json_file


DEFAULT_CONFIG: dict[str, Any] = {
    "viewport": deepcopy(DEFAULT_VIEWPORT),
    "browser": {
        "engine": "chromium",
        "headless": True,
        "timeout_ms": NAVIGATION_TIMEOUT_MS,
        "settle_ms": SCROLL_SETTLE_MS,
    },
    "comparison": {"threshold": DEFAULT_THRESHOLD, "include_anti_aliasing": False},
    "scroll_search": {
        "start_y": 0,
        "end_y": 2000,
        "step": 50,
        "output_dir": "./temp",
        "prefix": "scroll-test",
    },
    "monitor": {"interval_seconds": 15, "max_iterations": 100, "output_dir": "./output"},
}

ENV_PREFIX = "VISUALMATCH_"


class ConfigError(ValueError):
    """Raised when settings are invalid."""


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
    """Apply VISUALMATCH_* overrides; the process environment wins over .env."""
    merged = deepcopy(config)
    values = {key: value for key, value in env_values.items() if key.startswith(ENV_PREFIX)}
    values.update({key: value for key, value in os.environ.items() if key.startswith(ENV_PREFIX)})

    try:
        if values.get("VISUALMATCH_HEADLESS", "").strip():
            merged["browser"]["headless"] = values["VISUALMATCH_HEADLESS"].strip().lower() in {"1", "true", "yes", "on"}
        if values.get("VISUALMATCH_BROWSER", "").strip():
            merged["browser"]["engine"] = values["VISUALMATCH_BROWSER"].strip().lower()
        if values.get("VISUALMATCH_VIEWPORT_WIDTH", "").strip():
            merged["viewport"]["width"] = int(values["VISUALMATCH_VIEWPORT_WIDTH"])
        if values.get("VISUALMATCH_VIEWPORT_HEIGHT", "").strip():
            merged["viewport"]["height"] = int(values["VISUALMATCH_VIEWPORT_HEIGHT"])
        if values.get("VISUALMATCH_THRESHOLD", "").strip():
            merged["comparison"]["threshold"] = float(values["VISUALMATCH_THRESHOLD"])
    except ValueError as exc:
        raise ConfigError(f"Invalid environment override: {exc}") from exc
    return merged


def _positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def validate_config(config: dict[str, Any]) -> None:
    """Validate the fields the matcher relies on."""
    viewport = config.get("viewport", {})
    if not (_positive_int(viewport.get("width")) and _positive_int(viewport.get("height"))):
        raise ConfigError("viewport.width and viewport.height must be positive ints")

    browser = config.get("browser", {})
    if browser.get("engine") not in BROWSER_ENGINES:
        raise ConfigError(f"browser.engine must be one of {', '.join(BROWSER_ENGINES)}")
    if not _positive_int(browser.get("timeout_ms")):
        raise ConfigError("browser.timeout_ms must be a positive int")
    settle_ms = browser.get("settle_ms")
    if not isinstance(settle_ms, int) or settle_ms < 0:
        raise ConfigError("browser.settle_ms must be an int >= 0")

    threshold = config.get("comparison", {}).get("threshold")
    if not isinstance(threshold, (float, int)) or not (0 <= float(threshold) <= 1):
        raise ConfigError("comparison.threshold must be in range 0..1")

    search = config.get("scroll_search", {})
    if not _positive_int(search.get("step")):
        raise ConfigError("scroll_search.step must be a positive int")
    if not isinstance(search.get("start_y"), int) or not isinstance(search.get("end_y"), int):
        raise ConfigError("scroll_search.start_y and scroll_search.end_y must be ints")

    monitor = config.get("monitor", {})
    interval = monitor.get("interval_seconds")
    if not isinstance(interval, (float, int)) or float(interval) <= 0:
        raise ConfigError("monitor.interval_seconds must be > 0")
    if not _positive_int(monitor.get("max_iterations")):
        raise ConfigError("monitor.max_iterations must be a positive int")


def load_config(path: str | Path | None = None) -> dict[str, Any]:
    """Load config from JSON and merge into defaults."""
    config_path = Path(path or DEFAULT_SETTINGS_FILE)
    env_values = _load_env_file(config_path.parent / ".env")
    if not config_path.exists():
        merged = _apply_env_overrides(get_default_config(), env_values)
    else:
        loaded = read_json_file(config_path)
        merged = _apply_env_overrides(_deep_merge(get_default_config(), loaded), env_values)
    validate_config(merged)
    return merged


def save_config(config: dict[str, Any], path: str | Path | None = None) -> Path:
    """Validate and save config as JSON."""
    validate_config(config)
    config_path = Path(path or DEFAULT_SETTINGS_FILE)
    write_json_file(config_path, config)
    return config_path
