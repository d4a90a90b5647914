"""Root logger setup for audit runs (CLI and pytest sessions)."""
from __future__ import annotations

import logging
from typing import Optional

from site_compliance.env_defaults import env_value

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> logging.Logger:
    """Attach stream (and optional file) handlers to the root logger.

    Args:
        level: Level name; defaults to LOG_LEVEL, then INFO
        log_file: Append log records here too; defaults to SITE_COMPLIANCE_LOG_FILE

    Returns:
        The package logger
    """
    level_name = (level or env_value("LOG_LEVEL", "INFO") or "INFO").upper()
    numeric_level = getattr(logging, level_name, None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level_name}")

    log_file = log_file or env_value("SITE_COMPLIANCE_LOG_FILE")
    formatter = logging.Formatter(LOG_FORMAT)
    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(numeric_level)
    stream_handler.setFormatter(formatter)
    root_logger.addHandler(stream_handler)

    logger = logging.getLogger("site_compliance")
    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, mode='a')
            file_handler.setLevel(numeric_level)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
        except OSError as e:
            logger.error(f"Failed to setup file logging: {e}")

    return logger
