"""Logging configuration for the process hosting the engine."""

import logging
import sys

LOG_FORMATS: dict[str, str] = {
    "simple": "%(name)s - %(levelname)s - %(message)s",
    "detailed": "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s",
}


def setup_logging(level: str = "INFO", format_style: str = "simple") -> None:
    """
    Configure the root logger once for the whole application.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL). Unknown names fall back to INFO.
        format_style: "simple" or "detailed"
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    log_format = LOG_FORMATS.get(format_style, LOG_FORMATS["simple"])
    logging.basicConfig(
        level=numeric_level,
        format=log_format,
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )
