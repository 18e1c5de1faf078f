"""Client for the deployed HTTPS callables.

Every callable answers ``{success: bool, ...payload}`` inside the
protocol's ``result`` envelope. A transport failure, an ``error`` reply,
``success: false`` and a missing payload key all raise
``FunctionCallError`` (the last two as ``InvalidResponseError``), so
callers handle them the same way.
"""

from typing import Any, Callable, List, Optional, Union

import requests

from ..config import LiveRugbyConfig
from ..core.exceptions import FunctionCallError, InvalidResponseError
from ..core.types import JSONDict, MatchID
from ..models import Match, Standing, Team
from ..processors import (
    extract_standings,
    parse_match,
    parse_matches,
    parse_standings,
    parse_team,
    require_success,
)
from ..utils.logging_utils import get_logger
from .callable import INTERNAL, STATUS_CODES

IdToken = Union[str, Callable[[], Optional[str]], None]


class FunctionsClient:
    """Calls backend callables and unwraps their responses."""

    def __init__(
        self,
        config: LiveRugbyConfig,
        session: Optional[requests.Session] = None,
        id_token: IdToken = None,
    ):
        """
        Initialize the client.

        Args:
            config: LiveRugby configuration (functions URL, timeouts)
            session: Optional pre-built session, mainly for tests
            id_token: Firebase ID token, or a callable returning a fresh one
        """
        self.config = config
        self.logger = get_logger()
        self.session = session or requests.Session()
        self._id_token = id_token

    def _headers(self) -> JSONDict:
        headers = {'Content-Type': 'application/json'}
        token = self._id_token() if callable(self._id_token) else self._id_token
        if token:
            headers['Authorization'] = f"Bearer {token}"
        return headers

    def call(self, name: str, data: Optional[JSONDict] = None) -> Any:
        """
        POST ``{"data": data}`` to a callable and return its ``result``.

        Raises:
            FunctionCallError: Transport failure or an ``error`` reply
        """
        url = self.config.firebase.callable_url(name)
        self.logger.debug(f"Calling {name}")

        try:
            response = self.session.post(
                url,
                json={'data': data or {}},
                headers=self._headers(),
                timeout=self.config.request.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise FunctionCallError(f"Call to {name} failed: {e}", function=name) from e

        try:
            body = response.json()
        except ValueError as e:
            raise FunctionCallError(
                f"Undecodable reply from {name} (HTTP {response.status_code})",
                function=name,
            ) from e

        if not isinstance(body, dict):
            raise FunctionCallError(f"Unexpected reply from {name}", function=name)

        error = body.get('error')
        if error is not None or 'result' not in body:
            error = error if isinstance(error, dict) else {}
            code = STATUS_CODES.get(error.get('status'), INTERNAL)
            raise FunctionCallError(
                error.get('message') or f"{name} failed with HTTP {response.status_code}",
                function=name,
                code=code,
                details={'http_status': response.status_code},
            )

        return body['result']

    def call_for(self, name: str, key: str, data: Optional[JSONDict] = None) -> Any:
        """Call and return ``result[key]`` of a successful response."""
        return require_success(self.call(name, data), key, function=name)

    # ------------------------------------------------------------------
    # Typed helpers
    # ------------------------------------------------------------------

    def get_today_matches(self) -> List[Match]:
        return parse_matches(self.call_for('getTodayMatches', 'matches'))

    def get_league_matches(self, league: int, season: Optional[int] = None) -> List[Match]:
        data: JSONDict = {'league': league}
        if season:
            data['season'] = season
        return parse_matches(self.call_for('getLeagueMatches', 'matches', data))

    def get_team_matches(self, team_id: int, season: Optional[int] = None) -> List[Match]:
        data: JSONDict = {'teamId': team_id}
        if season:
            data['season'] = season
        return parse_matches(self.call_for('getTeamMatches', 'matches', data))

    def get_league_teams(self, league_id: int, season: Optional[int] = None) -> List[Team]:
        data: JSONDict = {'leagueId': league_id}
        if season:
            data['season'] = season
        teams = self.call_for('getLeagueTeams', 'teams', data)
        return [parse_team(raw) for raw in teams if isinstance(raw, dict)]

    def search_teams(self, team_name: str) -> List[Team]:
        teams = self.call_for('searchTeams', 'teams', {'teamName': team_name})
        return [parse_team(raw) for raw in teams if isinstance(raw, dict)]

    def get_league_standings(self, league_id: int, season: Optional[int] = None) -> List[Standing]:
        data: JSONDict = {'leagueId': league_id}
        if season:
            data['season'] = season
        result = self.call('getLeagueStandings', data)
        return parse_standings(extract_standings(result, function='getLeagueStandings'))

    def get_match_details(self, match_id: MatchID) -> Match:
        raw = self.call_for('getMatchDetails', 'match', {'matchId': match_id})
        if not isinstance(raw, dict):
            raise InvalidResponseError("Match details are not an object", function='getMatchDetails')
        return parse_match(raw)

    def register_fcm_token(self, token: str, platform: str, device_id: Optional[str] = None) -> str:
        data: JSONDict = {'token': token, 'platform': platform}
        if device_id:
            data['deviceId'] = device_id
        return self.call_for('registerFCMToken', 'message', data)

    def unregister_fcm_token(self, token: str) -> str:
        return self.call_for('unregisterFCMToken', 'message', {'token': token})

    def subscribe_to_match(self, match_id: MatchID, event_types: Optional[List[str]] = None) -> JSONDict:
        data: JSONDict = {'matchId': match_id}
        if event_types:
            data['eventTypes'] = list(event_types)
        return self.call_for('subscribeToMatch', 'subscription', data)

    def unsubscribe_from_match(self, match_id: MatchID) -> str:
        return self.call_for('unsubscribeFromMatch', 'message', {'matchId': match_id})

    def add_favorite_team(self, team_id: int, team_name: str = "", team_logo: str = "",
                          notify_matches: bool = True) -> JSONDict:
        return self.call_for('addFavoriteTeam', 'favorite', {
            'teamId': team_id,
            'teamName': team_name,
            'teamLogo': team_logo,
            'notifyMatches': notify_matches,
        })

    def register_activity_push_token(self, match_id: MatchID, token: str) -> str:
        return self.call_for('registerActivityPushToken', 'message', {
            'matchId': match_id,
            'token': token,
            'platform': 'ios',
        })

    def unregister_activity_push_token(self, match_id: MatchID) -> str:
        return self.call_for('unregisterActivityPushToken', 'message', {'matchId': match_id})

    def close(self):
        if self.session:
            self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
