"""
Remote Live Activity updates over APNs, routed through FCM.

Each running activity registered an APNs push token
(``activityPushTokens/{matchId}_{uid}``). Updates and the final state are
sent as ``liveactivity`` pushes; tokens that APNs rejects are deactivated.
"""

from datetime import timedelta
from typing import Any, Callable, Optional

from firebase_admin import exceptions as firebase_exceptions
from firebase_admin import messaging

from ..core.constants import ACTIVITY_DISMISSAL_SECONDS, MatchStatus
from ..core.types import MatchID
from ..models import LiveActivityState
from ..push.relay import is_invalid_token_error
from ..push.tokens import ActivityTokenRegistry
from ..utils.date_utils import epoch_seconds, utc_now
from ..utils.logging_utils import LoggerAdapter, get_logger

MessageSender = Callable[[messaging.Message], Any]

ALERT_TITLE = "Match en direct"
FINAL_EVENT_TEXT = "Match terminé"


def build_activity_message(
    token: str,
    state: LiveActivityState,
    event: str = "update",
    dismissal_date: Optional[int] = None,
) -> messaging.Message:
    """APNs ``liveactivity`` push carrying the content state."""
    custom_data = {
        'timestamp': epoch_seconds(),
        'event': event,
        'content-state': state.to_content_state(),
    }
    if dismissal_date is not None:
        custom_data['dismissal-date'] = dismissal_date

    alert = None
    if state.recent_event:
        alert = messaging.ApsAlert(title=ALERT_TITLE, body=state.score_text)

    aps = messaging.Aps(
        alert=alert,
        sound='default' if alert else None,
        custom_data=custom_data,
    )
    return messaging.Message(
        apns=messaging.APNSConfig(
            headers={'apns-push-type': 'liveactivity', 'apns-priority': '10'},
            payload=messaging.APNSPayload(aps=aps),
        ),
        token=token,
    )


class ActivityPushSender:
    """Pushes Live Activity states to every device following a match."""

    def __init__(self, tokens: ActivityTokenRegistry, send: Optional[MessageSender] = None):
        self.tokens = tokens
        self._send = send or messaging.send
        self.logger = get_logger()

    def _deliver(self, match_id: MatchID, state: LiveActivityState, event: str,
                 dismissal_date: Optional[int] = None) -> int:
        log = LoggerAdapter(self.logger, {'match_id': match_id})
        active = self.tokens.active_tokens(match_id)
        if not active:
            log.info("No active Live Activity tokens")
            return 0

        sent = 0
        for doc_id, token in active:
            message = build_activity_message(token, state, event, dismissal_date)
            try:
                self._send(message)
                sent += 1
            except firebase_exceptions.FirebaseError as e:
                log.error(f"Live Activity {event} failed for {doc_id}: {e}")
                if is_invalid_token_error(e):
                    self.tokens.deactivate(doc_id, error=getattr(e, 'code', None))
        log.info(f"Live Activity {event} sent to {sent}/{len(active)} devices")
        return sent

    def send_update(self, match_id: MatchID, state: LiveActivityState) -> int:
        return self._deliver(match_id, state, "update")

    def end_activity(self, match_id: MatchID, home_score: int, away_score: int) -> int:
        """Send the final state, then deactivate every token of the match."""
        state = LiveActivityState(
            home_score=home_score,
            away_score=away_score,
            status=MatchStatus.FULL_TIME,
            recent_event=FINAL_EVENT_TEXT,
        )
        dismissal = epoch_seconds(utc_now() + timedelta(seconds=ACTIVITY_DISMISSAL_SECONDS))
        sent = self._deliver(match_id, state, "end", dismissal_date=dismissal)
        for doc_id, _ in self.tokens.active_tokens(match_id):
            self.tokens.deactivate(doc_id)
        return sent
