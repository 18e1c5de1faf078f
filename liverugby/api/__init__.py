"""
API package - rugby data client, callable handlers and callable client.
"""
from .client import RugbyApiClient
from .callable import (
    INTERNAL,
    INVALID_ARGUMENT,
    NOT_FOUND,
    UNAUTHENTICATED,
    CallContext,
    error_response,
    handle_callable,
    resolve_context,
)
from .functions import RugbyFunctions, require_arg, require_auth
from .functions_client import FunctionsClient

__all__ = [
    'RugbyApiClient',
    'INTERNAL', 'INVALID_ARGUMENT', 'NOT_FOUND', 'UNAUTHENTICATED',
    'CallContext', 'error_response', 'handle_callable', 'resolve_context',
    'RugbyFunctions', 'require_arg', 'require_auth',
    'FunctionsClient',
]
