# logger.py
"""
Logging for the client and the CLI.

Services log through stdlib loggers (`get_logger(__name__)`, %-style args);
stores, strategies and the CLI log through loguru. `setup_logging` forwards
loguru records to the stdlib handlers so both end up in one console and one
rotating file, and installs a filter that keeps registered secrets out of
every record.

    from g2g_seller.core.logger import setup_logging, get_logger
    setup_logging(log_level="DEBUG")
    logger = get_logger(__name__)
"""

from __future__ import annotations

import logging
from logging import Logger
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Iterable, Optional, Set

from loguru import logger as loguru_logger

from g2g_seller.core.config import LOG_DIR

_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"
_FILENAME = "g2g_seller.log"
_QUIET = ("httpx", "httpcore", "hpack")

_secrets: Set[str] = set()


def mask_secret(value: Optional[str], keep: int = 5) -> str:
    """First `keep` chars of a token followed by ***."""
    if not value:
        return "<empty>"
    return f"{value[:keep]}***"


def register_secrets(values: Iterable[Optional[str]]) -> None:
    """Values that must never appear in a log line in full."""
    _secrets.update(v for v in values if v and len(v) > 8)


def redact(text: str) -> str:
    for secret in _secrets:
        if secret in text:
            text = text.replace(secret, mask_secret(secret))
    return text


class RedactingFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if _secrets:
            record.msg = redact(record.getMessage())
            record.args = None
        return True


def setup_logging(
    *,
    log_level: str | int = logging.INFO,
    log_path: str | Path | None = None,
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 5,
) -> Path:
    """Install console + rotating file handlers on the root logger.

    Safe to call again: previous handlers are replaced. Returns the log file.
    """
    level = _resolve_level(log_level)
    path = _resolve_log_path(log_path)
    formatter = logging.Formatter(_FORMAT, datefmt=_DATEFMT)

    handlers = [
        logging.StreamHandler(),
        RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"),
    ]
    root = logging.getLogger()
    for old in list(root.handlers):
        root.removeHandler(old)
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(level)
        handler.addFilter(RedactingFilter())
        root.addHandler(handler)
    root.setLevel(level)

    for name in _QUIET:
        logging.getLogger(name).setLevel(logging.WARNING)

    # loguru records go through the same handlers
    loguru_logger.remove()
    loguru_logger.add(_to_stdlib, level=level, format="{message}")
    return path


def get_logger(name: Optional[str] = None) -> Logger:
    return logging.getLogger(name)


def _to_stdlib(message) -> None:
    record = message.record
    logging.getLogger(record["name"]).log(record["level"].no, record["message"])


def _resolve_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Invalid log level: {level}")
    return resolved


def _resolve_log_path(target: str | Path | None) -> Path:
    target_path = Path(target) if target is not None else LOG_DIR
    if target_path.suffix:
        target_path.parent.mkdir(parents=True, exist_ok=True)
        return target_path
    target_path.mkdir(parents=True, exist_ok=True)
    return target_path / _FILENAME
