"""
Logging and configuration helpers for xdrfile.
"""

from .config import XDRConfig, get_config, reset_config
from .log import get_logger, set_log_level

__all__ = ['XDRConfig', 'get_config', 'reset_config', 'get_logger', 'set_log_level']
