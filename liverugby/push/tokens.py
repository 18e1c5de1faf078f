"""
Device-token, match-subscription and favorite-team registries.

All state lives in the document store:
- ``fcmTokens/{token}`` plus the ``users/{uid}.fcmTokens`` array
- ``matchSubscriptions/{uid}_{matchId}``
- ``users/{uid}/favorites/{teamId}``
- ``activityPushTokens/{matchId}_{uid}``
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..core.constants import Collections, NotificationEvent
from ..core.exceptions import DocumentStoreError
from ..core.interfaces import DocumentStoreProtocol
from ..core.types import DeviceToken, JSONDict, MatchID, TeamID, UserID
from ..utils.extractor import SafeFieldExtractor as fx
from ..utils.logging_utils import get_logger

logger = get_logger()


def _short(token: str) -> str:
    return f"{token[:20]}..."


def favorites_collection(uid: UserID) -> str:
    return f"{Collections.USERS}/{uid}/{Collections.FAVORITES}"


class TokenRegistry:
    """FCM registration tokens of users."""

    def __init__(self, store: DocumentStoreProtocol):
        self.store = store

    def register_token(
        self,
        uid: UserID,
        token: DeviceToken,
        platform: str,
        device_id: Optional[str] = None,
    ) -> JSONDict:
        token_data = {
            'token': token,
            'userId': uid,
            'platform': platform.lower(),
            'deviceId': device_id,
            'updatedAt': self.store.server_timestamp(),
            'enabled': True,
        }
        self.store.set_document(Collections.FCM_TOKENS, token, token_data, merge=True)
        self.store.set_document(
            Collections.USERS, uid,
            {'lastTokenUpdate': self.store.server_timestamp()},
            merge=True,
        )
        self.store.array_union(Collections.USERS, uid, 'fcmTokens', [token])
        logger.info(f"FCM token registered for {uid} ({platform.lower()}): {_short(token)}")
        return token_data

    def unregister_token(self, uid: UserID, token: DeviceToken):
        self.store.update_document(Collections.FCM_TOKENS, token, {
            'enabled': False,
            'disabledAt': self.store.server_timestamp(),
        })
        self.store.array_remove(Collections.USERS, uid, 'fcmTokens', [token])
        logger.info(f"FCM token unregistered for {uid}: {_short(token)}")

    def tokens_for_user(self, uid: UserID) -> List[DeviceToken]:
        user = self.store.get_document(Collections.USERS, uid)
        return [t for t in (fx.get_list(user, 'fcmTokens') or []) if isinstance(t, str)]

    def cleanup_invalid_tokens(self, uid: UserID, invalid_tokens: Sequence[DeviceToken]) -> int:
        """
        Remove permanently invalid tokens from a user's record.

        Best effort: a store failure is logged and the remaining tokens are
        still processed.

        Returns:
            Number of tokens removed
        """
        removed = 0
        for token in invalid_tokens:
            try:
                self.store.array_remove(Collections.USERS, uid, 'fcmTokens', [token])
                removed += 1
            except DocumentStoreError as e:
                logger.error(f"Failed to remove invalid token for {uid}: {e}")
        if removed:
            logger.info(f"{removed} invalid tokens removed for {uid}")
        return removed

    def _users_with_tokens(self, results: List[Tuple[str, JSONDict]]) -> List[Dict[str, Any]]:
        users = []
        for uid, data in results:
            tokens = fx.get_list(data, 'fcmTokens') or []
            if not tokens:
                continue
            users.append({
                'uid': uid,
                'tokens': tokens,
                'preferences': fx.get_dict(data, 'notificationPreferences') or {},
                'favoriteTeams': fx.get_list(data, 'favoriteTeams') or [],
            })
        return users

    def users_with_notifications(self) -> List[Dict[str, Any]]:
        """Users with at least one token who left notifications enabled."""
        results = self.store.query(Collections.USERS, [('settings.notifications', '==', True)])
        return self._users_with_tokens(results)


class SubscriptionRegistry:
    """Per-match subscriptions and favorite teams."""

    def __init__(self, store: DocumentStoreProtocol):
        self.store = store

    @staticmethod
    def subscription_id(uid: UserID, match_id: MatchID) -> str:
        return f"{uid}_{match_id}"

    def subscribe(
        self,
        uid: UserID,
        match_id: MatchID,
        event_types: Optional[Sequence[str]] = None,
    ) -> JSONDict:
        subscription = {
            'userId': uid,
            'matchId': match_id,
            'eventTypes': list(event_types or NotificationEvent.DEFAULT_SUBSCRIPTION),
            'subscribedAt': self.store.server_timestamp(),
            'active': True,
        }
        self.store.set_document(
            Collections.MATCH_SUBSCRIPTIONS,
            self.subscription_id(uid, match_id),
            subscription,
            merge=True,
        )
        logger.info(f"User {uid} subscribed to match {match_id}")
        return subscription

    def unsubscribe(self, uid: UserID, match_id: MatchID):
        self.store.update_document(
            Collections.MATCH_SUBSCRIPTIONS,
            self.subscription_id(uid, match_id),
            {'active': False, 'unsubscribedAt': self.store.server_timestamp()},
        )
        logger.info(f"User {uid} unsubscribed from match {match_id}")

    def subscribers(self, match_id: MatchID, event_type: str) -> List[UserID]:
        """Users with an active subscription to ``event_type`` for the match."""
        results = self.store.query(Collections.MATCH_SUBSCRIPTIONS, [
            ('matchId', '==', match_id),
            ('active', '==', True),
            ('eventTypes', 'array-contains', event_type),
        ])
        return [uid for uid in (fx.get_str(data, 'userId') for _, data in results) if uid]

    def add_favorite(
        self,
        uid: UserID,
        team_id: TeamID,
        team_name: Optional[str] = None,
        team_logo: Optional[str] = None,
        notify_matches: bool = True,
    ) -> JSONDict:
        favorite = {
            'teamId': team_id,
            'teamName': team_name or '',
            'teamLogo': team_logo or '',
            'notifyMatches': notify_matches is not False,
            'addedAt': self.store.server_timestamp(),
        }
        self.store.set_document(favorites_collection(uid), str(team_id), favorite, merge=True)
        logger.info(f"User {uid} added favorite team {team_id}")
        return favorite

    def favorite_team_ids(self, uid: UserID) -> List[TeamID]:
        """Favorite teams the user wants match notifications for."""
        results = self.store.query(favorites_collection(uid), [('notifyMatches', '==', True)])
        team_ids = []
        for doc_id, _ in results:
            try:
                team_ids.append(int(doc_id))
            except ValueError:
                logger.debug(f"Ignoring non-numeric favorite id {doc_id!r} for {uid}")
        return team_ids


class ActivityTokenRegistry:
    """Live Activity push tokens, one per (match, user)."""

    def __init__(self, store: DocumentStoreProtocol):
        self.store = store

    @staticmethod
    def token_id(match_id: MatchID, uid: UserID) -> str:
        return f"{match_id}_{uid}"

    def register(self, uid: UserID, match_id: MatchID, token: str, platform: str = 'ios') -> JSONDict:
        data = {
            'matchId': match_id,
            'token': token,
            'userId': uid,
            'platform': platform,
            'updatedAt': self.store.server_timestamp(),
            'active': True,
        }
        self.store.set_document(Collections.ACTIVITY_PUSH_TOKENS, self.token_id(match_id, uid), data, merge=True)
        logger.info(f"Activity push token registered for match {match_id}, user {uid}: {_short(token)}")
        return data

    def unregister(self, uid: UserID, match_id: MatchID):
        self.deactivate(self.token_id(match_id, uid))
        logger.info(f"Activity push token unregistered for match {match_id}, user {uid}")

    def deactivate(self, doc_id: str, error: Optional[str] = None):
        data: JSONDict = {'active': False, 'deactivatedAt': self.store.server_timestamp()}
        if error:
            data['error'] = error
        self.store.update_document(Collections.ACTIVITY_PUSH_TOKENS, doc_id, data)

    def active_tokens(self, match_id: MatchID) -> List[Tuple[str, str]]:
        """``(doc_id, token)`` pairs of the active activities for a match."""
        results = self.store.query(Collections.ACTIVITY_PUSH_TOKENS, [
            ('matchId', '==', match_id),
            ('active', '==', True),
        ])
        return [(doc_id, data['token']) for doc_id, data in results if fx.get_str(data, 'token')]
