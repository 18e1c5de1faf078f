"""
Base configuration classes for the LiveRugby configuration system.

Configuration is read ONLY from environment variables (.env file).

Features:
- Type-safe data classes
- Environment variable based configuration
- Hierarchical configuration structure
- Validation and defaults
"""

import os
from abc import ABC
from dataclasses import dataclass, field
from typing import Any, Dict, List

from dotenv import load_dotenv

load_dotenv()


VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


@dataclass
class LoggingConfig:
    """Standardized logging configuration."""
    level: str = "INFO"
    format: str = (
        "%(asctime)s - %(name)s - %(levelname)s - "
        "%(funcName)s:%(lineno)d - %(message)s"
    )
    dir: str = "logs"
    json: bool = False


@dataclass
class RetryConfig:
    """Transport-level retry for idempotent HTTP GETs."""
    max_attempts: int = 3
    backoff_factor: float = 1.0
    status_codes: tuple = field(
        default_factory=lambda: (500, 502, 503, 504)
    )


@dataclass
class RequestConfig:
    """HTTP request configuration."""
    timeout: int = 10


def env_bool(name: str, default: bool) -> bool:
    """Read a boolean environment variable ('true'/'1'/'yes')."""
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in ('true', '1', 'yes')


def env_int(name: str, default: int) -> int:
    """Read an integer environment variable, keeping the default on bad input."""
    value = os.getenv(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


class BaseConfig(ABC):
    """
    Base configuration class with common functionality.

    Configuration is read ONLY from environment variables (.env file).
    """

    def __init__(self):
        """Initialize configuration from environment variables."""
        self._load_config()
        self._apply_env_overrides()

    def _load_config(self):
        """Initialize configuration with defaults. Overridden by subclasses."""
        pass

    def _apply_env_overrides(self):
        """
        Apply environment variable overrides.

        Subclasses extend this with their own variables.
        """
        if hasattr(self, 'logging') and isinstance(self.logging, LoggingConfig):
            if os.getenv('LOG_LEVEL'):
                self.logging.level = os.getenv('LOG_LEVEL').upper()
            if os.getenv('LOG_DIR'):
                self.logging.dir = os.getenv('LOG_DIR')
            self.logging.json = env_bool('LOG_JSON', self.logging.json)

        if hasattr(self, 'retry') and isinstance(self.retry, RetryConfig):
            self.retry.max_attempts = env_int('HTTP_MAX_RETRIES', self.retry.max_attempts)

        if hasattr(self, 'request') and isinstance(self.request, RequestConfig):
            self.request.timeout = env_int('HTTP_TIMEOUT', self.request.timeout)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert configuration to dictionary.

        Returns:
            Dictionary representation of configuration
        """
        result = {}
        for field_name, field_value in self.__dict__.items():
            if field_name.startswith('_'):
                continue
            if isinstance(
                field_value, (list, dict, str, int, float, bool, type(None))
            ):
                result[field_name] = field_value
            elif hasattr(field_value, '__dict__'):
                result[field_name] = dict(field_value.__dict__)
            else:
                result[field_name] = str(field_value)
        return result

    def validate(self) -> List[str]:
        """
        Validate configuration values.

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = []

        if hasattr(self, 'logging') and isinstance(self.logging, LoggingConfig):
            if self.logging.level not in VALID_LOG_LEVELS:
                errors.append(
                    f"Invalid log level: {self.logging.level}. "
                    f"Must be one of {VALID_LOG_LEVELS}"
                )

        if hasattr(self, 'request') and isinstance(self.request, RequestConfig):
            if self.request.timeout <= 0:
                errors.append("HTTP timeout must be positive")

        return errors
