"""
Base configuration for riskscan.

Every configuration class is a dataclass whose defaults are read from the
environment (after ``.env`` is loaded) through the typed helpers below.
Malformed values raise ConfigError before any scan starts.
"""

import os
import logging
from typing import Any, Dict, Optional, List
from dataclasses import dataclass, field
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

ENVIRONMENTS = ("local", "dev", "staging", "production")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_TRUE_VALUES = ("true", "1", "yes", "on")
_FALSE_VALUES = ("false", "0", "no", "off", "")


class ConfigError(Exception):
    """Raised for unknown chains, missing endpoints and malformed settings."""
    pass


@dataclass
class BaseConfig:
    """Environment and logging settings shared by every configuration class."""

    ENVIRONMENT: str = field(default_factory=lambda: os.getenv("ENVIRONMENT", "local"))
    # Scan progress is logged at INFO; the report itself goes to stdout
    LOG_LEVEL: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "WARNING"))

    def __post_init__(self):
        self._setup_logging()
        self._validate_config()

    def _setup_logging(self):
        level = logging.getLevelName(self.LOG_LEVEL.upper())
        if not isinstance(level, int):
            raise ConfigError(f"Invalid log level: {self.LOG_LEVEL}")
        logging.basicConfig(level=level, format=LOG_FORMAT)

    def _validate_config(self):
        """Validate configuration values; subclasses extend this."""
        if self.ENVIRONMENT not in ENVIRONMENTS:
            raise ConfigError(f"Invalid environment: {self.ENVIRONMENT}")

    @staticmethod
    def get_env(key: str, default: Optional[str] = None, required: bool = False) -> Optional[str]:
        """
        Read a raw environment variable.

        Args:
            key: Environment variable name
            default: Value used when the variable is unset
            required: Raise instead of returning None when unset

        Returns:
            The variable's value, or the default

        Raises:
            ConfigError: If a required variable is missing
        """
        value = os.getenv(key, default)
        if required and value is None:
            raise ConfigError(f"Required environment variable '{key}' is not set")
        return value

    @staticmethod
    def get_env_int(key: str, default: Optional[int] = None, required: bool = False) -> int:
        value = BaseConfig.get_env(key, None if default is None else str(default), required)
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ConfigError(f"Environment variable '{key}' must be an integer, got: {value}")

    @staticmethod
    def get_env_float(key: str, default: Optional[float] = None, required: bool = False) -> float:
        value = BaseConfig.get_env(key, None if default is None else str(default), required)
        try:
            return float(value)
        except (TypeError, ValueError):
            raise ConfigError(f"Environment variable '{key}' must be a number, got: {value}")

    @staticmethod
    def get_env_bool(key: str, default: bool = False) -> bool:
        """Read a boolean flag; anything outside true/false spellings is an error."""
        value = BaseConfig.get_env(key)
        if value is None:
            return default
        normalized = value.strip().lower()
        if normalized in _TRUE_VALUES:
            return True
        if normalized in _FALSE_VALUES:
            return False
        raise ConfigError(f"Environment variable '{key}' must be a boolean, got: {value}")

    @staticmethod
    def get_env_list(key: str, default: Optional[List[str]] = None, separator: str = ",") -> List[str]:
        """Read a separated list, dropping blank items."""
        value = BaseConfig.get_env(key)
        if value is None:
            return list(default or [])
        return [item.strip() for item in value.split(separator) if item.strip()]

    def to_dict(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in self.__dataclass_fields__ if not name.startswith("_")}
