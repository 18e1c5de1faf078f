"""
HTTPS callable protocol.

Requests are ``POST`` with a JSON body ``{"data": {...}}`` and an optional
``Authorization: Bearer <Firebase ID token>`` header. Responses are
``{"result": ...}`` on success and ``{"error": {"status", "message"}}``
otherwise, with the HTTP status derived from the error code.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Tuple

from firebase_admin import auth

from ..core.constants import HttpStatus
from ..core.exceptions import FunctionError
from ..core.types import JSONDict
from ..utils.logging_utils import get_logger

logger = get_logger()

UNAUTHENTICATED = 'unauthenticated'
INVALID_ARGUMENT = 'invalid-argument'
NOT_FOUND = 'not-found'
INTERNAL = 'internal'

ERROR_STATUS = {
    UNAUTHENTICATED: (HttpStatus.UNAUTHORIZED, 'UNAUTHENTICATED'),
    INVALID_ARGUMENT: (HttpStatus.BAD_REQUEST, 'INVALID_ARGUMENT'),
    NOT_FOUND: (HttpStatus.NOT_FOUND, 'NOT_FOUND'),
    INTERNAL: (HttpStatus.INTERNAL_ERROR, 'INTERNAL'),
}

# Reverse mapping used by the client side
STATUS_CODES = {status: code for code, (_, status) in ERROR_STATUS.items()}


@dataclass
class CallContext:
    """Caller identity; ``uid`` is None for unauthenticated calls."""
    uid: Optional[str] = None
    token: Dict[str, Any] = field(default_factory=dict)


Handler = Callable[[JSONDict, CallContext], Any]
TokenVerifier = Callable[[str], Dict[str, Any]]


def error_response(error: FunctionError) -> Tuple[JSONDict, int]:
    http_status, status = ERROR_STATUS.get(error.code, ERROR_STATUS[INTERNAL])
    return {'error': {'status': status, 'message': error.message}}, http_status


def _bearer_token(request) -> Optional[str]:
    header = request.headers.get('Authorization', '')
    if header.startswith('Bearer '):
        return header[len('Bearer '):].strip() or None
    return None


def resolve_context(request, verify_token: Optional[TokenVerifier] = None) -> CallContext:
    """
    Build the call context from the Authorization header.

    Raises:
        FunctionError: ``unauthenticated`` when a token is present but invalid
    """
    token = _bearer_token(request)
    if token is None:
        return CallContext()

    verify = verify_token or auth.verify_id_token
    try:
        decoded = verify(token)
    except (ValueError, auth.InvalidIdTokenError, auth.ExpiredIdTokenError) as e:
        raise FunctionError(UNAUTHENTICATED, "Jeton d'authentification invalide") from e
    return CallContext(uid=decoded.get('uid'), token=decoded)


def handle_callable(
    request,
    handler: Handler,
    verify_token: Optional[TokenVerifier] = None,
) -> Tuple[JSONDict, int]:
    """
    Run a handler behind the callable protocol.

    Args:
        request: Flask request (as given by functions_framework)
        handler: ``handler(data, context)`` returning a JSON-serializable result
        verify_token: ID-token verifier, defaults to firebase_admin.auth

    Returns:
        ``(body, http_status)`` tuple
    """
    name = getattr(handler, '__name__', 'handler')
    if request.method != 'POST':
        return error_response(FunctionError(INVALID_ARGUMENT, "POST requis"))

    body = request.get_json(silent=True)
    if not isinstance(body, dict) or 'data' not in body:
        return error_response(FunctionError(INVALID_ARGUMENT, "Corps de requête invalide"))
    data = body.get('data') or {}
    if not isinstance(data, dict):
        return error_response(FunctionError(INVALID_ARGUMENT, "Paramètres invalides"))

    try:
        context = resolve_context(request, verify_token)
        result = handler(data, context)
    except FunctionError as e:
        if e.code == INTERNAL:
            logger.error(f"{name} failed: {e}")
        else:
            logger.info(f"{name} rejected: {e.code} - {e.message}")
        return error_response(e)
    except Exception as e:
        logger.exception(f"Unexpected error in {name}: {e}")
        return error_response(FunctionError(INTERNAL, str(e)))

    return {'result': result}, HttpStatus.OK
