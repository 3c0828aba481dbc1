"""
Logging setup for the Todo service.
"""
from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


# PUBLIC_INTERFACE
def setup_logging(log_level: str = "INFO") -> None:
    """
    Configure the root logger with a single stream handler.

    Args:
        log_level: Level name (DEBUG, INFO, WARNING, ERROR, CRITICAL). Unknown
            names fall back to INFO.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=[logging.StreamHandler()])
