"""
LiveRugby configuration.

Configuration is read ONLY from environment variables (.env file).
"""

import os
from dataclasses import dataclass
from typing import Dict, List, Optional

from .base import BaseConfig, LoggingConfig, RequestConfig, RetryConfig, env_int
from ..core.constants import (
    Collections,
    DEFAULT_TIMEZONE,
    MULTICAST_TOKEN_LIMIT,
    RECENT_EVENTS_LIMIT,
)


@dataclass
class ApiConfig:
    """API-Sports rugby configuration."""
    base_url: str = "https://v1.rugby.api-sports.io"
    api_key: str = ""
    timezone: str = DEFAULT_TIMEZONE

    def get_headers(self) -> Dict[str, str]:
        """Get HTTP headers for API requests."""
        return {
            "accept": "application/json",
            "x-apisports-key": self.api_key,
        }


@dataclass
class FirebaseConfig:
    """Firebase project and callable functions configuration."""
    credentials_path: Optional[str] = None
    project_id: str = ""
    functions_region: str = "europe-west1"
    functions_base_url: str = ""

    def callable_url(self, name: str) -> str:
        """URL of an HTTPS callable function."""
        base = self.functions_base_url or (
            f"https://{self.functions_region}-{self.project_id}.cloudfunctions.net"
        )
        return f"{base.rstrip('/')}/{name}"


@dataclass
class ListenerConfig:
    """Document store listener configuration."""
    live_matches_collection: str = Collections.LIVE_MATCHES
    live_events_collection: str = Collections.LIVE_EVENTS
    matches_collection: str = Collections.MATCHES
    events_limit: int = RECENT_EVENTS_LIMIT


@dataclass
class PushConfig:
    """Push relay configuration."""
    batch_size: int = MULTICAST_TOKEN_LIMIT
    starting_window_minutes: int = 60


@dataclass
class WidgetConfig:
    """Widget snapshot configuration."""
    snapshot_dir: str = "data/widget"
    lookahead_days: int = 7


class LiveRugbyConfig(BaseConfig):
    """
    LiveRugby configuration.

    Usage:
        config = LiveRugbyConfig()
        print(config.api.base_url)

    Required Environment Variables:
        API_SPORTS_KEY: API-Sports authentication key (backend only)
    """

    def _load_config(self):
        """Initialize configuration with defaults."""
        self.api = ApiConfig()
        self.request = RequestConfig()
        self.retry = RetryConfig()
        self.firebase = FirebaseConfig()
        self.listener = ListenerConfig()
        self.push = PushConfig()
        self.widget = WidgetConfig()
        self.logging = LoggingConfig()

    def _apply_env_overrides(self):
        """Apply environment variable overrides."""
        super()._apply_env_overrides()

        if os.getenv('API_SPORTS_KEY'):
            self.api.api_key = os.getenv('API_SPORTS_KEY')
        if os.getenv('RUGBY_API_BASE_URL'):
            self.api.base_url = os.getenv('RUGBY_API_BASE_URL')
        if os.getenv('RUGBY_API_TIMEZONE'):
            self.api.timezone = os.getenv('RUGBY_API_TIMEZONE')

        if os.getenv('GOOGLE_APPLICATION_CREDENTIALS'):
            self.firebase.credentials_path = os.getenv('GOOGLE_APPLICATION_CREDENTIALS')
        project_id = os.getenv('FIREBASE_PROJECT_ID') or os.getenv('GOOGLE_CLOUD_PROJECT')
        if project_id:
            self.firebase.project_id = project_id
        if os.getenv('FUNCTIONS_REGION'):
            self.firebase.functions_region = os.getenv('FUNCTIONS_REGION')
        if os.getenv('FUNCTIONS_BASE_URL'):
            self.firebase.functions_base_url = os.getenv('FUNCTIONS_BASE_URL')

        self.listener.events_limit = env_int('LIVE_EVENTS_LIMIT', self.listener.events_limit)
        self.push.batch_size = env_int('PUSH_BATCH_SIZE', self.push.batch_size)

        if os.getenv('WIDGET_SNAPSHOT_DIR'):
            self.widget.snapshot_dir = os.getenv('WIDGET_SNAPSHOT_DIR')

    def validate(self, require_api_key: bool = False) -> List[str]:
        """
        Validate configuration values.

        Args:
            require_api_key: Backend processes must have an API key

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = super().validate()

        if require_api_key and not self.api.api_key:
            errors.append("API_SPORTS_KEY is required")

        if not 0 < self.push.batch_size <= MULTICAST_TOKEN_LIMIT:
            errors.append(
                f"PUSH_BATCH_SIZE must be between 1 and {MULTICAST_TOKEN_LIMIT}"
            )

        if self.listener.events_limit <= 0:
            errors.append("LIVE_EVENTS_LIMIT must be positive")

        return errors
