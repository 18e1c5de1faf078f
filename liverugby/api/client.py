"""HTTP client for the API-Sports rugby API."""

from typing import Any, Dict, List, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..config import LiveRugbyConfig
from ..core.constants import HttpStatus
from ..core.exceptions import (
    ApiConnectionError,
    ApiRateLimitError,
    ApiResponseError,
    ApiTimeoutError,
)
from ..core.types import DateStr, JSONDict, QueryParams
from ..utils.date_utils import current_season
from ..utils.logging_utils import get_logger


class RugbyApiClient:
    """Thin client over ``v1.rugby.api-sports.io``.

    Every method returns the raw ``response`` array of the API envelope.
    Failures raise ``RugbyApiError`` subclasses; nothing is retried here
    beyond the session's transport retry on 5xx.
    """

    def __init__(self, config: LiveRugbyConfig, session: Optional[requests.Session] = None):
        """
        Initialize the client.

        Args:
            config: LiveRugby configuration (API key, timeouts, retry policy)
            session: Optional pre-built session, mainly for tests
        """
        self.config = config
        self.logger = get_logger()
        self.session = session or self._create_session()

    def _create_session(self) -> requests.Session:
        """
        Create a requests session with automatic retries.

        Returns:
            Configured requests session
        """
        session = requests.Session()

        retry_strategy = Retry(
            total=self.config.retry.max_attempts,
            backoff_factor=self.config.retry.backoff_factor,
            status_forcelist=list(self.config.retry.status_codes),
            allowed_methods=["GET"],
            raise_on_status=False
        )

        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        return session

    def get(self, endpoint: str, params: Optional[QueryParams] = None) -> List[Any]:
        """
        GET an endpoint and unwrap the ``response`` array.

        Args:
            endpoint: Path such as ``/games``
            params: Query parameters

        Returns:
            The ``response`` list (empty when the API sent none)

        Raises:
            ApiTimeoutError, ApiConnectionError: Transport failures
            ApiRateLimitError: HTTP 429 or an exhausted request quota
            ApiResponseError: Other non-200 statuses, bad JSON, ``errors`` payload
        """
        url = f"{self.config.api.base_url.rstrip('/')}{endpoint}"
        self.logger.debug(f"GET {url} {params or {}}")

        try:
            response = self.session.get(
                url,
                params=params,
                headers=self.config.api.get_headers(),
                timeout=self.config.request.timeout
            )
        except requests.exceptions.Timeout as e:
            raise ApiTimeoutError(f"Request timeout: {endpoint}") from e
        except requests.exceptions.ConnectionError as e:
            raise ApiConnectionError(f"Connection error: {endpoint} - {e}") from e
        except requests.exceptions.RequestException as e:
            raise ApiResponseError(f"Request failed: {endpoint} - {e}") from e

        if response.status_code == HttpStatus.RATE_LIMITED:
            raise ApiRateLimitError(f"Rate limited: {endpoint}", status_code=response.status_code)
        if response.status_code != HttpStatus.OK:
            raise ApiResponseError(
                f"Request failed with status {response.status_code}: {endpoint}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise ApiResponseError(f"Failed to decode JSON response: {endpoint}") from e

        return self._unwrap(payload, endpoint)

    def _unwrap(self, payload: Any, endpoint: str) -> List[Any]:
        if not isinstance(payload, dict):
            raise ApiResponseError(f"Unexpected payload type from {endpoint}")

        # API-Sports reports quota and auth problems with HTTP 200 and an `errors` object
        errors = payload.get('errors')
        if errors:
            details = errors if isinstance(errors, dict) else {'errors': errors}
            if isinstance(errors, dict) and 'requests' in errors:
                raise ApiRateLimitError(f"Request quota exhausted: {endpoint}", details=details)
            raise ApiResponseError(f"API reported errors for {endpoint}", details=details)

        result = payload.get('response')
        if result is None:
            return []
        if isinstance(result, list):
            self.logger.debug(f"{endpoint}: {len(result)} results")
            return result
        return [result]

    # ------------------------------------------------------------------
    # Endpoints
    # ------------------------------------------------------------------

    def games_by_date(self, date: DateStr, timezone: Optional[str] = None) -> List[JSONDict]:
        return self.get('/games', {'date': date, 'timezone': timezone or self.config.api.timezone})

    def games_by_league(self, league: int, season: Optional[int] = None) -> List[JSONDict]:
        params: Dict[str, Any] = {'league': league}
        if season:
            params['season'] = season
        return self.get('/games', params)

    def games_by_team(self, team_id: int, season: Optional[int] = None) -> List[JSONDict]:
        return self.get('/games', {'team': team_id, 'season': season or current_season()})

    def game(self, match_id: int) -> Optional[JSONDict]:
        """A single game, or None when the id is unknown."""
        results = self.get('/games', {'id': match_id})
        return results[0] if results else None

    def teams_by_league(self, league_id: int, season: Optional[int] = None) -> List[JSONDict]:
        return self.get('/teams', {'league': league_id, 'season': season or current_season()})

    def search_teams(self, name: str) -> List[JSONDict]:
        return self.get('/teams', {'search': name})

    def standings(self, league_id: int, season: Optional[int] = None) -> List[Any]:
        return self.get('/standings', {'league': league_id, 'season': season or current_season()})

    def close(self):
        """Close the session."""
        if self.session:
            self.session.close()
        self.logger.debug("Session closed")

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
