# -*- coding: utf-8 -*-
"""Logging setup for command line sessions."""

from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def setup_session_logging(base_dir: str | Path, app_name: str, level: int = logging.INFO) -> Path | None:
    """Configure root logging with a stream handler and a per-run log file.

    Set ``VISUALMATCH_DEBUG=1`` to force DEBUG level. Calling this twice in one
    process returns the log file of the first call.
    """
    root = logging.getLogger()
    if getattr(root, "_visualmatch_logging_configured", False):
        return getattr(root, "_visualmatch_session_log", None)

    if _env_bool("VISUALMATCH_DEBUG"):
        level = logging.DEBUG
    root.setLevel(level)

    formatter = logging.Formatter(
        "%(asctime)s [%(threadName)s] %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )

    if not any(isinstance(handler, logging.StreamHandler) for handler in root.handlers):
        stream_handler = logging.StreamHandler()
        stream_handler.setLevel(level)
        stream_handler.setFormatter(formatter)
        root.addHandler(stream_handler)

    logs_dir = Path(base_dir) / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    safe_app_name = app_name.lower().replace(" ", "-")
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")

    session_log_path: Path | None = logs_dir / f"{safe_app_name}-{timestamp}.log"
    try:
        file_handler = logging.FileHandler(session_log_path, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
        root.info("Session log file established: %s", session_log_path)
    except OSError as exc:
        root.error("Failed to establish session log file: %s", exc)
        session_log_path = None

    root._visualmatch_logging_configured = True  # type: ignore[attr-defined]
    root._visualmatch_session_log = session_log_path  # type: ignore[attr-defined]
    return session_log_path
