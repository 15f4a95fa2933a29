#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
xdrfile Logging Utilities - logging with colored terminal output

Usage:
    from xdrfile.utils.log import get_logger

    logger = get_logger(__name__)
    logger.debug("Opened trajectory")
"""

import logging

from .colors import get_color_printer

DEFAULT_LEVEL = logging.WARNING

_loggers = {}


class ColoredHandler(logging.StreamHandler):
    """Logging handler that colours warnings and errors"""

    def __init__(self, stream=None):
        super().__init__(stream)
        self.color_printer = get_color_printer()

    def emit(self, record):
        try:
            msg = self.format(record)
            if record.levelno >= logging.ERROR:
                msg = f"{self.color_printer.error('✗')} {msg}"
            elif record.levelno == logging.WARNING:
                msg = f"{self.color_printer.warning('⚠')} {msg}"
            elif record.levelno <= logging.DEBUG:
                msg = self.color_printer.dim(msg)
            self.stream.write(msg + self.terminator)
            self.flush()
        except Exception:
            self.handleError(record)


def get_logger(name: str) -> logging.Logger:
    """
    Get an xdrfile logger with colored output.

    Parameters
    ----------
    name : str
        Logger name (typically __name__)

    Returns
    -------
    logging.Logger
        Configured logger instance
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = ColoredHandler()
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        logger.addHandler(handler)
        logger.setLevel(DEFAULT_LEVEL)
        logger.propagate = False  # Prevent duplicate output from root logger
    _loggers[name] = logger
    return logger


def set_log_level(level) -> None:
    """Set the level of every logger handed out by :func:`get_logger`"""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {level}")
    for logger in _loggers.values():
        logger.setLevel(level)
