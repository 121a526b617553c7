"""JSON-lines logging for organizer runs.

Every pass reports through :func:`log_event`, which writes one JSON object per
line. Paths under the user's home directory are written as ``~/...``.
"""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

LOGGER_NAME = "workspace_organizer"
DEFAULT_LOG_DIR = Path.home() / ".workspace_organizer" / "logs"
_MAX_BYTES = 10 * 1024 * 1024
_BACKUP_COUNT = 5


def _sanitize(value: str) -> str:
    home = str(Path.home())
    if value == home:
        return "~"
    for separator in ("/", "\\"):
        prefix = home + separator
        if value.startswith(prefix):
            return "~/" + value[len(prefix):]
    return value


def _scrub(value: Any) -> Any:
    if isinstance(value, str):
        return _sanitize(value)
    if isinstance(value, dict):
        return {key: _scrub(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_scrub(item) for item in value]
    return value


def _build_handler(log_path: Path | None, max_bytes: int, backup_count: int) -> logging.Handler:
    if log_path is None:
        return logging.StreamHandler()
    log_path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")


def configure_logging(
    log_path: Path | None = None,
    *,
    level: int = logging.INFO,
    max_bytes: int = _MAX_BYTES,
    backup_count: int = _BACKUP_COUNT,
) -> logging.Logger:
    """Attach a single handler to the ``workspace_organizer`` logger.

    Passing *log_path* replaces any handler installed by an earlier call;
    without it an existing handler is kept and only its level changes.
    """

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    if logger.handlers and log_path is None:
        for existing in logger.handlers:
            existing.setLevel(level)
        return logger

    for existing in list(logger.handlers):
        logger.removeHandler(existing)
        existing.close()

    handler = _build_handler(log_path, max_bytes, backup_count)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    return logger


def next_log_path(label: str, *, base_dir: Path | None = None) -> Path:
    """Return an unused ``<label>-YYYYmmdd-HHMMSS.log`` path under *base_dir*."""

    directory = base_dir or DEFAULT_LOG_DIR
    stem = f"{label}-{datetime.now():%Y%m%d-%H%M%S}"
    candidate = directory / f"{stem}.log"
    suffix = 1
    while candidate.exists():
        candidate = directory / f"{stem}-{suffix}.log"
        suffix += 1
    return candidate


def log_event(
    logger: logging.Logger,
    *,
    level: int,
    action: str,
    message: str,
    request_id: str | None = None,
    path: str | None = None,
    extra: dict[str, Any] | None = None,
) -> None:
    if not logger.isEnabledFor(level):
        return
    record: dict[str, Any] = {
        "ts": datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        "level": logging.getLevelName(level),
        "action": action,
        "message": _sanitize(message),
    }
    if request_id is not None:
        record["requestId"] = request_id
    if path is not None:
        record["path"] = path
    if extra:
        record.update(_scrub(extra))
    logger.log(level, json.dumps(record, ensure_ascii=False))


__all__ = ["DEFAULT_LOG_DIR", "LOGGER_NAME", "configure_logging", "log_event", "next_log_path"]
