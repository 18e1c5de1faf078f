"""
Backend callable handlers and scheduled jobs.

Every callable takes ``(data, context)`` and returns ``{success: True,
...payload}``. Argument and authentication problems raise
``FunctionError`` with the matching code; upstream API and store failures
become ``internal`` errors carrying the original message.
"""

from functools import wraps
from typing import Any, Callable, Optional

from ..config import LiveRugbyConfig
from ..core.constants import Collections, VALID_PLATFORMS
from ..core.exceptions import DocumentStoreError, FunctionError, RugbyApiError
from ..core.interfaces import DocumentStoreProtocol
from ..core.types import JSONDict
from ..models import User
from ..push.monitor import MatchMonitor
from ..push.tokens import ActivityTokenRegistry, SubscriptionRegistry, TokenRegistry
from ..utils.date_utils import current_season, today_display
from ..utils.logging_utils import get_logger
from .callable import INTERNAL, INVALID_ARGUMENT, UNAUTHENTICATED, CallContext
from .client import RugbyApiClient

logger = get_logger()

AUTH_REQUIRED_MESSAGE = "Vous devez être connecté"


def require_auth(context: CallContext) -> str:
    if not context.uid:
        raise FunctionError(UNAUTHENTICATED, AUTH_REQUIRED_MESSAGE)
    return context.uid


def require_arg(data: JSONDict, name: str, message: Optional[str] = None) -> Any:
    value = data.get(name)
    if value is None or value == "" or value is False:
        raise FunctionError(INVALID_ARGUMENT, message or f"{name} requis")
    return value


def upstream_errors(func: Callable) -> Callable:
    """Convert API and store failures raised by a handler into ``internal`` errors."""
    @wraps(func)
    def wrapper(self, data: JSONDict, context: CallContext):
        try:
            return func(self, data, context)
        except (RugbyApiError, DocumentStoreError) as e:
            logger.error(f"{func.__name__} failed: {e}")
            raise FunctionError(INTERNAL, e.message, details=e.to_dict()) from e
    return wrapper


class RugbyFunctions:
    """Handlers behind the deployed HTTPS callables."""

    def __init__(
        self,
        client: RugbyApiClient,
        store: DocumentStoreProtocol,
        config: LiveRugbyConfig,
        monitor: Optional[MatchMonitor] = None,
    ):
        self.client = client
        self.store = store
        self.config = config
        self.monitor = monitor
        self.tokens = TokenRegistry(store)
        self.subscriptions = SubscriptionRegistry(store)
        self.activity_tokens = ActivityTokenRegistry(store)

    def _today(self) -> str:
        return today_display(self.config.api.timezone)

    def _cache_matches(self, date: str, matches, **extra):
        document = {
            'date': date,
            'matches': matches,
            'updatedAt': self.store.server_timestamp(),
        }
        document.update(extra)
        self.store.set_document(self.config.listener.matches_collection, date, document)

    # ------------------------------------------------------------------
    # Rugby data
    # ------------------------------------------------------------------

    @upstream_errors
    def get_today_matches(self, data: JSONDict, context: CallContext) -> JSONDict:
        require_auth(context)
        today = self._today()
        matches = self.client.games_by_date(today)
        self._cache_matches(today, matches)
        return {'success': True, 'matches': matches}

    @upstream_errors
    def get_league_matches(self, data: JSONDict, context: CallContext) -> JSONDict:
        require_auth(context)
        league = require_arg(data, 'league')
        matches = self.client.games_by_league(league, data.get('season'))
        return {'success': True, 'matches': matches}

    @upstream_errors
    def get_team_matches(self, data: JSONDict, context: CallContext) -> JSONDict:
        require_auth(context)
        team_id = require_arg(data, 'teamId')
        matches = self.client.games_by_team(team_id, data.get('season'))
        return {'success': True, 'matches': matches}

    @upstream_errors
    def get_league_teams(self, data: JSONDict, context: CallContext) -> JSONDict:
        require_auth(context)
        league_id = require_arg(data, 'leagueId')
        season = data.get('season') or current_season()
        teams = self.client.teams_by_league(league_id, season)
        self.store.set_document(Collections.LEAGUES, str(league_id), {
            'leagueId': league_id,
            'teams': teams,
            'season': season,
            'updatedAt': self.store.server_timestamp(),
        }, merge=True)
        return {'success': True, 'teams': teams}

    @upstream_errors
    def get_league_standings(self, data: JSONDict, context: CallContext) -> JSONDict:
        require_auth(context)
        league_id = require_arg(data, 'leagueId')
        standings = self.client.standings(league_id, data.get('season'))
        return {'success': True, 'standings': standings}

    @upstream_errors
    def search_teams(self, data: JSONDict, context: CallContext) -> JSONDict:
        require_auth(context)
        team_name = require_arg(data, 'teamName')
        return {'success': True, 'teams': self.client.search_teams(team_name)}

    @upstream_errors
    def get_match_details(self, data: JSONDict, context: CallContext) -> JSONDict:
        require_auth(context)
        match_id = require_arg(data, 'matchId')
        return {'success': True, 'match': self.client.game(match_id)}

    # ------------------------------------------------------------------
    # Push registration
    # ------------------------------------------------------------------

    @upstream_errors
    def register_fcm_token(self, data: JSONDict, context: CallContext) -> JSONDict:
        uid = require_auth(context)
        token = data.get('token')
        if not token or not isinstance(token, str):
            raise FunctionError(INVALID_ARGUMENT, "Token FCM invalide")
        platform = data.get('platform')
        if not isinstance(platform, str) or platform.lower() not in VALID_PLATFORMS:
            raise FunctionError(INVALID_ARGUMENT, "Platform doit être ios ou android")

        self.tokens.register_token(uid, token, platform, data.get('deviceId'))
        return {'success': True, 'message': "Token enregistré avec succès"}

    @upstream_errors
    def unregister_fcm_token(self, data: JSONDict, context: CallContext) -> JSONDict:
        uid = require_auth(context)
        token = require_arg(data, 'token', "Token requis")
        self.tokens.unregister_token(uid, token)
        return {'success': True, 'message': "Token désactivé avec succès"}

    @upstream_errors
    def subscribe_to_match(self, data: JSONDict, context: CallContext) -> JSONDict:
        uid = require_auth(context)
        match_id = require_arg(data, 'matchId')
        subscription = self.subscriptions.subscribe(uid, match_id, data.get('eventTypes'))
        subscription = {k: v for k, v in subscription.items() if k != 'subscribedAt'}
        return {
            'success': True,
            'message': "Abonnement créé avec succès",
            'subscription': subscription,
        }

    @upstream_errors
    def unsubscribe_from_match(self, data: JSONDict, context: CallContext) -> JSONDict:
        uid = require_auth(context)
        match_id = require_arg(data, 'matchId')
        self.subscriptions.unsubscribe(uid, match_id)
        return {'success': True, 'message': "Désabonnement effectué avec succès"}

    @upstream_errors
    def add_favorite_team(self, data: JSONDict, context: CallContext) -> JSONDict:
        uid = require_auth(context)
        team_id = require_arg(data, 'teamId')
        favorite = self.subscriptions.add_favorite(
            uid,
            team_id,
            data.get('teamName'),
            data.get('teamLogo'),
            notify_matches=data.get('notifyMatches') is not False,
        )
        favorite = {k: v for k, v in favorite.items() if k != 'addedAt'}
        return {'success': True, 'message': "Équipe ajoutée aux favoris", 'favorite': favorite}

    @upstream_errors
    def register_activity_push_token(self, data: JSONDict, context: CallContext) -> JSONDict:
        uid = require_auth(context)
        match_id = data.get('matchId')
        if isinstance(match_id, bool) or not isinstance(match_id, int) or not match_id:
            raise FunctionError(INVALID_ARGUMENT, "Match ID invalide")
        token = data.get('token')
        if not token or not isinstance(token, str):
            raise FunctionError(INVALID_ARGUMENT, "Activity Push Token invalide")
        if data.get('platform') != 'ios':
            raise FunctionError(
                INVALID_ARGUMENT,
                "Les Live Activities sont disponibles uniquement sur iOS",
            )

        self.activity_tokens.register(uid, match_id, token)
        return {'success': True, 'message': "Activity Push Token enregistré avec succès"}

    @upstream_errors
    def unregister_activity_push_token(self, data: JSONDict, context: CallContext) -> JSONDict:
        uid = require_auth(context)
        match_id = require_arg(data, 'matchId', "Match ID requis")
        self.activity_tokens.unregister(uid, match_id)
        return {'success': True, 'message': "Activity Push Token désactivé"}

    # ------------------------------------------------------------------
    # Scheduled jobs and triggers
    # ------------------------------------------------------------------

    def update_matches_daily(self) -> int:
        """Refresh today's cached matches. Returns the number of matches stored."""
        today = self._today()
        matches = self.client.games_by_date(today)
        self._cache_matches(today, matches, autoUpdated=True)
        logger.info(f"Matches updated for {today}: {len(matches)}")
        return len(matches)

    def monitor_live_matches(self) -> int:
        if self.monitor is None:
            raise FunctionError(INTERNAL, "Match monitor is not configured")
        return self.monitor.run_once(self._today())

    def notify_favorite_teams_matches(self) -> int:
        if self.monitor is None:
            raise FunctionError(INTERNAL, "Match monitor is not configured")
        return self.monitor.notify_favorite_teams(self._today())

    def receive_webhook(self, api_key: Optional[str], event: JSONDict) -> str:
        """
        Store a pushed feed event where the live listener reads it.

        Raises:
            FunctionError: ``unauthenticated`` when the key does not match
        """
        if not self.config.api.api_key or api_key != self.config.api.api_key:
            raise FunctionError(UNAUTHENTICATED, "Unauthorized")
        if not isinstance(event, dict):
            raise FunctionError(INVALID_ARGUMENT, "Invalid event payload")

        collection = self.config.listener.live_events_collection
        doc_id = self.store.add_document(collection, {
            'event': event,
            'receivedAt': self.store.server_timestamp(),
            'processed': False,
        })
        fixture = event.get('fixture')
        match_id = fixture.get('id') if isinstance(fixture, dict) else 'unknown'
        logger.info(f"Event stored {doc_id}: {event.get('type', 'unknown')} for match {match_id}")
        self.store.update_document(collection, doc_id, {'processed': True})
        return doc_id

    def create_user_profile(self, uid: str, email: str = "", display_name: str = "",
                            photo_url: str = "") -> JSONDict:
        """Initial ``users/{uid}`` document written on sign-up."""
        profile = User(uid=uid, email=email or "", display_name=display_name or "",
                       photo_url=photo_url or "").to_document()
        profile['createdAt'] = self.store.server_timestamp()
        self.store.set_document(Collections.USERS, uid, profile)
        logger.info(f"User profile created: {uid}")
        return profile

    def callables(self) -> JSONDict:
        """Deployed callable name to handler."""
        return {
            'getTodayMatches': self.get_today_matches,
            'getLeagueMatches': self.get_league_matches,
            'getTeamMatches': self.get_team_matches,
            'getLeagueTeams': self.get_league_teams,
            'getLeagueStandings': self.get_league_standings,
            'searchTeams': self.search_teams,
            'getMatchDetails': self.get_match_details,
            'registerFCMToken': self.register_fcm_token,
            'unregisterFCMToken': self.unregister_fcm_token,
            'subscribeToMatch': self.subscribe_to_match,
            'unsubscribeFromMatch': self.unsubscribe_from_match,
            'addFavoriteTeam': self.add_favorite_team,
            'registerActivityPushToken': self.register_activity_push_token,
            'unregisterActivityPushToken': self.unregister_activity_push_token,
        }
