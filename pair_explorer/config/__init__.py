"""
Configuration management for pair-explorer.

Use get_config() to access all configuration settings.

Example:
    from pair_explorer.config import get_config

    config = get_config()

    rpc_url = config.chains.RPC_URL
    multicall = config.chains.validate_multicall_address()
"""

from .base import BaseConfig, ConfigError
from .chains import ChainConfig
from .manager import ConfigManager, get_config, reload_config

__all__ = [
    "BaseConfig",
    "ConfigError",
    "ChainConfig",
    "ConfigManager",
    "get_config",
    "reload_config",
]
