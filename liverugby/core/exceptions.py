"""Custom exception hierarchy for LiveRugby.

All exceptions inherit from LiveRugbyError so callers can catch every
project-specific failure with a single except block.

Exception Hierarchy:
    LiveRugbyError (base)
    ├── ConfigurationError
    ├── DocumentStoreError
    ├── RugbyApiError
    │   ├── ApiConnectionError
    │   ├── ApiTimeoutError
    │   ├── ApiRateLimitError
    │   └── ApiResponseError
    ├── FunctionError
    ├── FunctionCallError
    │   └── InvalidResponseError
    ├── ListenerError
    └── PushError
        └── PushSendError

Missing optional fields in upstream documents are never errors; the
normalizer defaults them. These exceptions cover the failures that must
reach the caller (network, RPC, push transport, configuration).

Usage:
    from liverugby.core.exceptions import RugbyApiError

    try:
        client.games_by_date(today)
    except RugbyApiError as e:
        logger.error(f"API call failed: {e}")
"""


class LiveRugbyError(Exception):
    """Base exception for all LiveRugby errors.

    Attributes:
        message: Error message
        details: Optional dictionary with additional error details
    """

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message

    def to_dict(self) -> dict:
        """Convert error to dictionary.

        Returns:
            Dictionary with error information
        """
        return {
            'error_type': self.__class__.__name__,
            'message': self.message,
            'details': self.details,
        }


# =============================================================================
# Configuration Errors
# =============================================================================

class ConfigurationError(LiveRugbyError):
    """Configuration-related errors.

    Raised when:
    - Required environment variables are missing
    - Configuration validation fails
    """
    pass


# =============================================================================
# Document Store Errors
# =============================================================================

class DocumentStoreError(LiveRugbyError):
    """Error reading from or writing to the document store."""
    pass


# =============================================================================
# Rugby API Errors
# =============================================================================

class RugbyApiError(LiveRugbyError):
    """Base exception for third-party rugby API errors."""

    def __init__(self, message: str, status_code: int = None, details: dict = None):
        super().__init__(message, details)
        self.status_code = status_code

    def to_dict(self) -> dict:
        data = super().to_dict()
        if self.status_code is not None:
            data['status_code'] = self.status_code
        return data


class ApiConnectionError(RugbyApiError):
    """API unreachable (DNS, refused connection, TLS failure)."""
    pass


class ApiTimeoutError(RugbyApiError):
    """Request took longer than the configured timeout."""
    pass


class ApiRateLimitError(RugbyApiError):
    """API returned 429 or reported an exhausted request quota."""
    pass


class ApiResponseError(RugbyApiError):
    """Non-success HTTP status, undecodable body, or an `errors` payload."""
    pass


# =============================================================================
# Callable Function Errors
# =============================================================================

class FunctionError(LiveRugbyError):
    """Error raised by a backend callable handler.

    The code follows the callable protocol vocabulary
    (``unauthenticated``, ``invalid-argument``, ``internal``) and is mapped
    to an HTTP status by the transport layer.
    """

    def __init__(self, code: str, message: str, details: dict = None):
        super().__init__(message, details)
        self.code = code

    def to_dict(self) -> dict:
        data = super().to_dict()
        data['code'] = self.code
        return data


class FunctionCallError(LiveRugbyError):
    """A remote callable could not be completed (transport or error reply)."""

    def __init__(self, message: str, function: str = None, code: str = None, details: dict = None):
        super().__init__(message, details)
        self.function = function
        self.code = code

    def to_dict(self) -> dict:
        data = super().to_dict()
        if self.function:
            data['function'] = self.function
        if self.code:
            data['code'] = self.code
        return data


class InvalidResponseError(FunctionCallError):
    """A callable answered, but with ``success: false`` or without the expected key."""
    pass


# =============================================================================
# Listener / Push Errors
# =============================================================================

class ListenerError(LiveRugbyError):
    """Subscription could not be established."""
    pass


class PushError(LiveRugbyError):
    """Base exception for push relay errors."""
    pass


class PushSendError(PushError):
    """The messaging transport rejected a whole multicast call.

    Attributes:
        partial_result: Per-token results of the batches sent before the
            failure, when there were any
    """

    def __init__(self, message: str, details: dict = None, partial_result=None):
        super().__init__(message, details)
        self.partial_result = partial_result


# =============================================================================
# Utility Functions
# =============================================================================

def format_error(error: Exception) -> dict:
    """Format any exception into a structured dictionary.

    Args:
        error: Exception to format

    Returns:
        Dictionary with error information
    """
    if isinstance(error, LiveRugbyError):
        return error.to_dict()

    return {
        'error_type': error.__class__.__name__,
        'message': str(error),
        'details': {},
    }


__all__ = [
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
