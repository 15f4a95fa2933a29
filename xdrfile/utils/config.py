#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
xdrfile Configuration - YAML configuration loading with defaults

Configuration is looked up in this order:

1. an explicit path passed to :class:`XDRConfig`
2. the ``XDRFILE_CONFIG`` environment variable
3. ``~/.xdrfile/config.yaml``

User values are merged recursively over the built-in defaults.
"""

import copy
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .log import get_logger, set_log_level

logger = get_logger(__name__)

CONFIG_ENV_VAR = "XDRFILE_CONFIG"
DEFAULT_CONFIG_PATH = Path.home() / '.xdrfile' / 'config.yaml'

DEFAULT_CONFIG = {
    'native': {
        'library': None,  # explicit path to the shared libxdrfile
        'search_names': ['xdrfile', 'libxdrfile'],
    },
    'logging': {
        'level': 'WARNING',
    },
}


class XDRConfig:
    """Configuration loading and lookup"""

    def __init__(self, config_path=None):
        """
        Parameters
        ----------
        config_path : str or Path, optional
            Path to a YAML configuration file
        """
        self.config_path = self._resolve_path(config_path)
        self.config = self._load_config()

    @staticmethod
    def _resolve_path(config_path) -> Optional[Path]:
        if config_path is not None:
            return Path(config_path)
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            return Path(env_path)
        if DEFAULT_CONFIG_PATH.exists():
            return DEFAULT_CONFIG_PATH
        return None

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file or use defaults"""
        default_config = copy.deepcopy(DEFAULT_CONFIG)

        if self.config_path is None:
            return default_config
        if not self.config_path.exists():
            logger.warning(f"Config file not found: {self.config_path}. Using default configuration.")
            return default_config

        logger.debug(f"Loading configuration from: {self.config_path}")
        with open(self.config_path, 'r') as f:
            user_config = yaml.safe_load(f) or {}
        if not isinstance(user_config, dict):
            raise ValueError(f"Configuration file {self.config_path} must contain a mapping")

        return self._merge_configs(default_config, user_config)

    def _merge_configs(self, default: Dict[str, Any], user: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge user configuration into defaults"""
        merged = dict(default)
        for key, value in user.items():
            if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
                merged[key] = self._merge_configs(merged[key], value)
            else:
                merged[key] = value
        return merged

    def get(self, dotted_key: str, default=None):
        """Look up ``section.key`` style keys"""
        node = self.config
        for part in dotted_key.split('.'):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node


_global_config = None


def get_config() -> XDRConfig:
    """Get global configuration instance"""
    global _global_config
    if _global_config is None:
        _global_config = XDRConfig()
        set_log_level(_global_config.get('logging.level', 'WARNING'))
    return _global_config


def reset_config() -> None:
    """Forget the cached global configuration"""
    global _global_config
    _global_config = None
