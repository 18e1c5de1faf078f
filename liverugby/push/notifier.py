"""Sends match notifications to subscribed users and prunes dead tokens."""

from typing import Dict, List

from ..core.constants import NotificationEvent
from ..core.exceptions import PushSendError
from ..models import Match, MulticastResult
from ..utils.logging_utils import LoggerAdapter, get_logger
from .events import MatchTransition
from .messages import build_event_notification, create_favorite_teams_notification
from .relay import PushRelay
from .tokens import SubscriptionRegistry, TokenRegistry


def match_data_payload(match: Match, event_type: str) -> Dict[str, str]:
    """Data map attached to every match notification."""
    return {
        'matchId': str(match.id),
        'eventType': event_type,
        'homeTeam': match.home_team.name,
        'awayTeam': match.away_team.name,
        'homeScore': str(match.home_score or 0),
        'awayScore': str(match.away_score or 0),
        'status': match.status_code,
    }


class MatchNotifier:
    """Fans one match transition out to every subscriber's devices."""

    def __init__(self, relay: PushRelay, tokens: TokenRegistry, subscriptions: SubscriptionRegistry):
        self.relay = relay
        self.tokens = tokens
        self.subscriptions = subscriptions
        self.logger = get_logger()

    def _send_to_user(self, uid: str, tokens: List[str], payload, data) -> MulticastResult:
        try:
            result = self.relay.send_multicast(tokens, payload, data)
        except PushSendError as e:
            if e.partial_result is not None and e.partial_result.invalid_tokens:
                self.tokens.cleanup_invalid_tokens(uid, e.partial_result.invalid_tokens)
            raise
        if result.invalid_tokens:
            self.tokens.cleanup_invalid_tokens(uid, result.invalid_tokens)
        return result

    def notify_event(self, match: Match, event: MatchTransition) -> int:
        """
        Notify subscribers of one transition.

        Every subscriber is attempted even when a send fails for another.

        Returns:
            Number of devices reached

        Raises:
            PushSendError: If the transport failed for at least one subscriber,
                after the others were served
        """
        log = LoggerAdapter(self.logger, {'match_id': match.id})
        subscribers = self.subscriptions.subscribers(match.id, event.type)
        if not subscribers:
            log.info(f"No subscriptions for {event.type}")
            return 0

        payload = build_event_notification(event, match)
        data = match_data_payload(match, event.type)
        delivered = 0
        failed_users = []
        for uid in subscribers:
            tokens = self.tokens.tokens_for_user(uid)
            if not tokens:
                continue
            try:
                delivered += self._send_to_user(uid, tokens, payload, data).success_count
            except PushSendError as e:
                failed_users.append(uid)
                log.error(f"{event.type} not delivered to {uid}: {e}")

        log.info(f"{event.type}: {delivered} notifications sent to {len(subscribers)} subscribers")
        if failed_users:
            raise PushSendError(
                f"{event.type} not delivered to {len(failed_users)} of {len(subscribers)} subscribers",
                details={'event': event.type, 'failed_users': failed_users, 'delivered': delivered},
            )
        return delivered

    def notify_favorite_teams(self, today_matches: List[Match]) -> int:
        """
        Daily digest for users whose favorite teams play today. Users who
        turned notifications off are skipped; a failed send is logged and
        the next user is served.

        Returns:
            Number of users notified
        """
        notified = 0
        for user in self.tokens.users_with_notifications():
            favorite_ids = set(self.subscriptions.favorite_team_ids(user['uid']))
            if not favorite_ids:
                continue
            matches = [
                m for m in today_matches
                if m.home_team.id in favorite_ids or m.away_team.id in favorite_ids
            ]
            if not matches:
                continue

            payload = create_favorite_teams_notification(matches)
            data = {'type': NotificationEvent.FAVORITE_TEAM_PLAYING, 'matchCount': len(matches)}
            try:
                self._send_to_user(user['uid'], user['tokens'], payload, data)
            except PushSendError as e:
                self.logger.error(f"Favorite teams digest not delivered to {user['uid']}: {e}")
                continue
            notified += 1

        self.logger.info(f"Favorite teams digest sent to {notified} users")
        return notified
