"""Configuration loading for the legacy MM processor.

Configuration lives in config/config.yaml; every recognized option can be
overridden with its environment variable.

Usage Examples
--------------

    >>> from config import get_config
    >>> config = get_config()
    >>> config.challenge_subtracks
    ['MARATHON_MATCH', 'DEVELOP_MARATHON_MATCH']

Custom config path:
    >>> from pathlib import Path
    >>> config = load_config(config_path=Path("/custom/path/config.yaml"))
"""

from config.config import (
    DEFAULT_CONFIG_FILE,
    ProcessorConfig,
    get_config,
    load_config,
    load_yaml,
    reset_config,
    set_config,
    split_csv,
)

__all__ = [
    "DEFAULT_CONFIG_FILE",
    "ProcessorConfig",
    "get_config",
    "load_config",
    "load_yaml",
    "reset_config",
    "set_config",
    "split_csv",
]
