"""Configuration package.

Usage:
    from liverugby.config import LiveRugbyConfig

    config = LiveRugbyConfig()
    errors = config.validate(require_api_key=True)
"""

from .base import BaseConfig, LoggingConfig, RequestConfig, RetryConfig
from .liverugby_config import (
    ApiConfig,
    FirebaseConfig,
    ListenerConfig,
    LiveRugbyConfig,
    PushConfig,
    WidgetConfig,
)


def load_config() -> LiveRugbyConfig:
    """Build the configuration from the current environment."""
    return LiveRugbyConfig()


__all__ = [
    'BaseConfig',
    'LoggingConfig',
    'RequestConfig',
    'RetryConfig',
    'ApiConfig',
    'FirebaseConfig',
    'ListenerConfig',
    'LiveRugbyConfig',
    'PushConfig',
    'WidgetConfig',
    'load_config',
]
