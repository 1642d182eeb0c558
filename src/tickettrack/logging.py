"""Logging setup for tickettrack.

Everything under the ``tickettrack`` logger goes to one rotating file, and
optionally to the console. Session cookies must never reach a log line:
route anything that may contain one through :func:`sanitize_for_log` or
:func:`mask_token` first.
"""

from __future__ import annotations

import logging
import os
import re
from logging.handlers import RotatingFileHandler
from pathlib import Path

ROOT_LOGGER = "tickettrack"

DEFAULT_LOG_DIR = Path.home() / ".tickettrack" / "logs"
DEFAULT_LOG_FILE = "tickettrack.log"
DEFAULT_MAX_BYTES = 10 * 1024 * 1024  # 10MB
DEFAULT_BACKUP_COUNT = 5
DEFAULT_LOG_LEVEL = "INFO"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_SECRET_PATTERNS = [
    (re.compile(r"(?i)(cookie:\s*)[^\r\n]+"), r"\1[REDACTED]"),
    (re.compile(r"(?i)\b(ticket|auth_token|session|sid|xsrf_token)=[^;\s]+"), r"\1=[REDACTED]"),
    (re.compile(r"Bearer [a-zA-Z0-9._-]+"), "Bearer [REDACTED]"),
    (re.compile(r"token=[a-zA-Z0-9._-]+"), "token=[REDACTED]"),
]


def _resolve_level(level: str | None) -> tuple[str, int]:
    name = level or os.environ.get("TICKETTRACK_LOG_LEVEL", DEFAULT_LOG_LEVEL)
    return name, getattr(logging, name.upper(), logging.INFO)


def _resolve_dir(log_dir: str | Path | None) -> Path:
    if log_dir is None:
        log_dir = os.environ.get("TICKETTRACK_LOG_DIR", DEFAULT_LOG_DIR)
    path = Path(log_dir).expanduser()
    path.mkdir(parents=True, exist_ok=True)
    return path


def _with_format(handler: logging.Handler, level: int) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler


def _reset_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def setup_logging(
    log_dir: str | Path | None = None,
    log_file: str = DEFAULT_LOG_FILE,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    level: str | None = None,
    console: bool = True,
) -> logging.Logger:
    """Configure the ``tickettrack`` logger.

    Safe to call more than once; earlier handlers are closed and replaced.

    Args:
        log_dir: Directory for log files. Falls back to TICKETTRACK_LOG_DIR,
                 then ~/.tickettrack/logs.
        log_file: Log file name inside ``log_dir``.
        max_bytes: Size at which the file is rotated.
        backup_count: Rotated files to keep.
        level: DEBUG, INFO, WARNING or ERROR. Falls back to
               TICKETTRACK_LOG_LEVEL, then INFO.
        console: Also log to stderr.

    Returns:
        The configured ``tickettrack`` logger.
    """
    level_name, log_level = _resolve_level(level)
    log_path = _resolve_dir(log_dir) / log_file

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(log_level)
    _reset_handlers(logger)

    logger.addHandler(
        _with_format(
            RotatingFileHandler(
                log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
            ),
            log_level,
        )
    )
    if console:
        logger.addHandler(_with_format(logging.StreamHandler(), log_level))

    logger.info("Logging to %s at %s", log_path, level_name)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Logger for a component, e.g. ``get_logger("asana.client")``."""
    prefix = f"{ROOT_LOGGER}."
    return logging.getLogger(name if name.startswith(prefix) else prefix + name)


def truncate_output(output: str, max_length: int = 2000) -> str:
    """Shorten long text (e.g. response bodies) before logging it."""
    overflow = len(output) - max_length
    if overflow <= 0:
        return output
    return f"{output[:max_length]}\n... [truncated, {overflow} more chars]"


def sanitize_for_log(text: str) -> str:
    """Redact Cookie headers, session cookie values and bearer tokens."""
    for pattern, replacement in _SECRET_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


def mask_token(token: str | None) -> str:
    """Describe a session token by length only."""
    if not token:
        return "<none>"
    return f"<{len(token)} chars>"
