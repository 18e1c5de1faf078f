"""Core functionality for LiveRugby.

This package contains:
- interfaces.py: Protocol definitions for platform collaborators
- exceptions.py: Custom exception hierarchy
- constants.py: Project-wide constants
- types.py: Common type definitions and aliases

Usage:
    from liverugby.core import DocumentStoreProtocol, LiveRugbyError
    from liverugby.core.constants import MatchStatus, Collections
    from liverugby.core.types import MatchID, JSONDict
"""

from .interfaces import (
    SubscriptionProtocol,
    DocumentStoreProtocol,
    LiveActivityPort,
    WidgetSnapshotPort,
)
from .exceptions import (
    LiveRugbyError,
    ConfigurationError,
    DocumentStoreError,
    RugbyApiError,
    ApiConnectionError,
    ApiTimeoutError,
    ApiRateLimitError,
    ApiResponseError,
    FunctionError,
    FunctionCallError,
    InvalidResponseError,
    ListenerError,
    PushError,
    PushSendError,
    format_error,
)

__all__ = [
    'SubscriptionProtocol',
    'DocumentStoreProtocol',
    'LiveActivityPort',
    'WidgetSnapshotPort',
    'LiveRugbyError',
    'ConfigurationError',
    'DocumentStoreError',
    'RugbyApiError',
    'ApiConnectionError',
    'ApiTimeoutError',
    'ApiRateLimitError',
    'ApiResponseError',
    'FunctionError',
    'FunctionCallError',
    'InvalidResponseError',
    'ListenerError',
    'PushError',
    'PushSendError',
    'format_error',
]
