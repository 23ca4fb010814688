"""
Single entry point to pair-explorer settings.

``get_config()`` returns a process-wide ConfigManager built on first use;
``reload_config()`` rebuilds it after the environment changed.
"""

import logging
from typing import Any, Dict, Optional

from ..batchers.errors import ConfigurationError
from .base import BaseConfig, ConfigError
from .chains import ChainConfig

logger = logging.getLogger(__name__)


class ConfigManager:
    """
    Holds the base and chain settings for one environment.

    Args:
        environment: Overrides ``ENVIRONMENT`` from the process environment
    """

    def __init__(self, environment: Optional[str] = None):
        overrides = {"ENVIRONMENT": environment} if environment else {}
        try:
            self._base = BaseConfig(**overrides)
            self._chains = ChainConfig(**overrides)
        except ConfigError as e:
            logger.error(f"Could not load configuration: {e}")
            raise
        except Exception as e:
            logger.error(f"Could not load configuration: {e}")
            raise ConfigError(f"Configuration initialization failed: {e}") from e

        logger.info(f"Loaded {self.environment} configuration")

    @property
    def environment(self) -> str:
        return self._base.ENVIRONMENT

    @property
    def base(self) -> BaseConfig:
        return self._base

    @property
    def chains(self) -> ChainConfig:
        return self._chains

    def validate_configuration(self) -> bool:
        """
        Check that a fetch could run with these settings.

        Problems are logged, not raised. The resolver reports them per fetch
        as configuration errors.
        """
        problems = []
        if not self._chains.RPC_URL:
            problems.append("RPC URL not configured (PAIR_EXPLORER_RPC_URL / ETHEREUM_RPC_URL)")
        try:
            self._chains.validate_multicall_address()
        except ConfigurationError as e:
            problems.append(f"{e} (MULTICALL_ADDRESS)")

        for problem in problems:
            logger.warning(problem)
        return not problems

    def to_dict(self) -> Dict[str, Any]:
        return {
            "environment": self.environment,
            "base": self._base.to_dict(),
            "chains": self._chains.to_dict(),
        }

    def __repr__(self) -> str:
        return f"ConfigManager(environment={self.environment})"


_config_manager: Optional[ConfigManager] = None


def get_config(environment: Optional[str] = None, force_reload: bool = False) -> ConfigManager:
    """Return the shared ConfigManager, building it if needed."""
    global _config_manager

    if force_reload or _config_manager is None:
        manager = ConfigManager(environment=environment)
        manager.validate_configuration()
        _config_manager = manager
    return _config_manager


def reload_config(environment: Optional[str] = None) -> ConfigManager:
    return get_config(environment=environment, force_reload=True)
