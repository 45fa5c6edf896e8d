"""Structured logging configuration."""

import logging
import sys
from typing import Optional

FORMATS = {
    "structured": '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    "simple": '%(levelname)s - %(message)s',
}


def setup_logging(level: str = "INFO", format_type: str = "structured",
                  log_file: Optional[str] = None) -> logging.Logger:
    """Setup logging for the engine: stdout handler, optional file handler."""

    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    formatter = logging.Formatter(FORMATS.get(format_type, FORMATS["simple"]))

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    logger = logging.getLogger('arxis_engine')
    logger.setLevel(log_level)

    return logger
