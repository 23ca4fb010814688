"""
Environment-backed settings shared by every pair-explorer config class.

Values come from the process environment, with a ``.env`` file in the
working directory loaded first.
"""

import logging
import os
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
ENVIRONMENTS = ["local", "dev", "staging", "production", "test"]


class ConfigError(Exception):
    """Raised when a setting is missing or has an unusable value."""


@dataclass
class BaseConfig:
    """Deployment environment and logging settings."""

    ENVIRONMENT: str = field(default_factory=lambda: os.getenv("ENVIRONMENT", "local"))
    LOG_LEVEL: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    def __post_init__(self):
        self._validate_config()
        logging.basicConfig(level=self.log_level, format=LOG_FORMAT)

    @property
    def log_level(self) -> int:
        return getattr(logging, self.LOG_LEVEL.upper())

    def _validate_config(self):
        if self.ENVIRONMENT not in ENVIRONMENTS:
            raise ConfigError(
                f"Invalid environment: {self.ENVIRONMENT} (expected one of {', '.join(ENVIRONMENTS)})"
            )
        if not isinstance(getattr(logging, str(self.LOG_LEVEL).upper(), None), int):
            raise ConfigError(f"Invalid log level: {self.LOG_LEVEL}")

    @staticmethod
    def get_env(key: str, default: Optional[str] = None, required: bool = False) -> Optional[str]:
        """
        Read one environment variable.

        Args:
            key: Variable name
            default: Returned when the variable is unset
            required: Raise instead of returning ``None``

        Raises:
            ConfigError: If ``required`` and the variable is unset
        """
        value = os.environ.get(key, default)
        if value is None and required:
            raise ConfigError(f"Required environment variable '{key}' is not set")
        return value

    @classmethod
    def get_env_int(cls, key: str, default: Optional[int] = None, required: bool = False) -> Optional[int]:
        raw = cls.get_env(key, required=required)
        if raw is None:
            return default
        try:
            return int(raw)
        except ValueError:
            raise ConfigError(f"Environment variable '{key}' must be an integer, got: {raw}")

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}
