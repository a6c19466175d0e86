"""Logging setup for a lanshare session."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from lanshare.config import Settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# httpx logs every request at INFO; one line per relay is already ours
NOISY_LOGGERS = ("httpx", "httpcore")


def resolve_log_file(settings: Settings):
    """A relative LANSHARE_LOG_FILE lives under LANSHARE_HOME."""
    if not settings.log_file:
        return None
    path = Path(settings.log_file).expanduser()
    return path if path.is_absolute() else settings.home / path


def configure_logging(settings: Settings, max_bytes: int = 1_000_000, backup_count: int = 3) -> logging.Logger:
    """
    Attach handlers to the `lanshare` logger from Settings.

    Calling it again only adjusts the level, so a UI that re-creates
    sessions does not duplicate output.
    """
    logger = logging.getLogger("lanshare")
    logger.setLevel(settings.log_level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT)
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    log_file = resolve_log_file(settings)
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger


__all__ = ["configure_logging", "resolve_log_file"]
