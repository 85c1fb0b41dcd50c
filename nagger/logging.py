from __future__ import annotations

import os
import sys
from typing import Optional

from loguru import logger as _loguru_logger

from nagger.config import LoggingConfig

_LOGGER = None

_SINKS = {
    "stderr": sys.stderr,
    "stdout": sys.stdout,
}


def _configure(config: LoggingConfig):
    level = os.environ.get("LOG_LEVEL", config.level)
    log_format = os.environ.get("LOG_FORMAT", config.format)
    sink = _SINKS.get(config.sink, config.sink)
    _loguru_logger.remove()
    _loguru_logger.configure(extra={"tag": "nagger"})
    _loguru_logger.add(
        sink,
        format=log_format,
        level=level,
        enqueue=True,
    )
    return _loguru_logger


def setup_logging(config: Optional[LoggingConfig] = None):
    """
    Return the shared loguru logger, configuring it on first use.

    Passing a config after the first call reconfigures the sink, which the
    CLI does once it has read the configuration file.
    """
    global _LOGGER
    if _LOGGER is not None and config is None:
        return _LOGGER

    _LOGGER = _configure(config or LoggingConfig())
    return _LOGGER
