"""
Multicast push relay over Firebase Cloud Messaging.

Usage:
    relay = PushRelay()
    result = relay.send_multicast(tokens, NotificationPayload(title="...", body="..."))
    registry.cleanup_invalid_tokens(uid, result.invalid_tokens)
"""

from typing import Any, Callable, Dict, List, Optional

from firebase_admin import exceptions as firebase_exceptions
from firebase_admin import messaging

from ..core.constants import INVALID_TOKEN_CODES, MULTICAST_TOKEN_LIMIT
from ..core.exceptions import PushSendError
from ..models import MulticastResult, NotificationPayload, TokenSendResult
from ..utils.date_utils import epoch_millis
from ..utils.logging_utils import get_logger
from ..utils.metrics import RelayMetrics

logger = get_logger()

MulticastSender = Callable[[messaging.MulticastMessage], Any]


def is_invalid_token_error(error: Optional[Exception]) -> bool:
    """Permanent token failure: the token is no longer registered.

    INVALID_ARGUMENT is not enough on its own, FCM also answers it for a
    rejected message (payload too large, bad data key).
    """
    if error is None:
        return False
    if isinstance(error, messaging.UnregisteredError):
        return True
    return getattr(error, 'code', None) in INVALID_TOKEN_CODES


def _error_code(error: Optional[Exception]) -> Optional[str]:
    if error is None:
        return None
    return getattr(error, 'code', None) or error.__class__.__name__


def build_data_payload(data: Optional[Dict[str, Any]] = None) -> Dict[str, str]:
    """FCM data values must be strings; None values are dropped and a ms timestamp added."""
    payload = {key: str(value) for key, value in (data or {}).items() if value is not None}
    payload['timestamp'] = str(epoch_millis())
    return payload


def chunk_tokens(tokens: List[str], size: int = MULTICAST_TOKEN_LIMIT) -> List[List[str]]:
    size = max(1, min(size, MULTICAST_TOKEN_LIMIT))
    return [tokens[i:i + size] for i in range(0, len(tokens), size)]


class PushRelay:
    """Sends one notification to many device tokens, at most 500 per call."""

    def __init__(
        self,
        send: Optional[MulticastSender] = None,
        batch_size: int = MULTICAST_TOKEN_LIMIT,
    ):
        self._send = send or messaging.send_each_for_multicast
        self.batch_size = batch_size
        self.metrics = RelayMetrics()

    def _build_message(
        self,
        tokens: List[str],
        notification: NotificationPayload,
        data: Dict[str, str],
    ) -> messaging.MulticastMessage:
        return messaging.MulticastMessage(
            tokens=tokens,
            notification=messaging.Notification(
                title=notification.title,
                body=notification.body,
                image=notification.image_url,
            ),
            data=data,
        )

    def send_multicast(
        self,
        tokens: List[str],
        notification: NotificationPayload,
        data: Optional[Dict[str, Any]] = None,
    ) -> MulticastResult:
        """
        Send a notification to every token.

        Args:
            tokens: Device registration tokens, any count
            notification: Title, body and optional image
            data: Extra data map; a string ``timestamp`` is added

        Returns:
            Aggregated per-token result. ``success`` is False only when there
            was nothing to send.

        Raises:
            PushSendError: If the messaging transport rejects a whole call. Its
                ``partial_result`` holds the results of the earlier batches.
        """
        if not tokens:
            logger.info("No tokens to notify")
            return MulticastResult(success=False)

        self.metrics.multicast_calls += 1
        payload = build_data_payload(data)
        result = MulticastResult(success=True)

        for batch in chunk_tokens(list(tokens), self.batch_size):
            message = self._build_message(batch, notification, payload)
            try:
                response = self._send(message)
            except firebase_exceptions.FirebaseError as e:
                logger.error(f"Multicast batch of {len(batch)} tokens failed: {e}")
                raise PushSendError(
                    f"Multicast send failed: {e}",
                    details={'batch_size': len(batch), 'sent_so_far': result.success_count},
                    partial_result=result,
                ) from e

            batch_results = []
            for token, send_response in zip(batch, response.responses):
                error = None if send_response.success else send_response.exception
                if error is not None:
                    logger.warning(f"Push to token {token[:20]}... failed: {_error_code(error)}")
                batch_results.append(TokenSendResult(
                    token=token,
                    success=send_response.success,
                    message_id=send_response.message_id if send_response.success else None,
                    error_code=_error_code(error),
                    error_message=str(error) if error is not None else None,
                    invalid_token=is_invalid_token_error(error),
                ))

            successes = sum(1 for r in batch_results if r.success)
            failures = len(batch_results) - successes
            invalid = sum(1 for r in batch_results if r.invalid_token)
            self.metrics.record_batch(successes, failures, invalid)

            result.results.extend(batch_results)
            result.success_count += successes
            result.failure_count += failures

        logger.info(
            f"Multicast sent: {result.success_count} succeeded, {result.failure_count} failed "
            f"({len(result.invalid_tokens)} invalid tokens)"
        )
        return result
