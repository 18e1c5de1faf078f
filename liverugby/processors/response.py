"""Unwrapping of ``{success: bool, ...}`` callable responses.

The third-party nesting of standings has varied; ``extract_standings``
tries the known shapes in order and raises when none matches.
"""

from typing import Any, List, Optional

from ..core.exceptions import InvalidResponseError
from ..core.types import JSONDict, JSONList
from ..utils.extractor import SafeFieldExtractor as fx
from ..utils.logging_utils import get_logger

logger = get_logger()


def require_success(payload: Any, key: str, function: Optional[str] = None) -> Any:
    """Return ``payload[key]`` from a successful response.

    ``success: false``, a non-object payload or a missing key are all
    treated the same way: an ``InvalidResponseError``.
    """
    if not isinstance(payload, dict):
        raise InvalidResponseError("Response is not an object", function=function)
    if payload.get('success') is not True:
        raise InvalidResponseError(
            payload.get('error') or "Call reported failure",
            function=function,
            details={'key': key},
        )
    if payload.get(key) is None:
        raise InvalidResponseError(f"Response is missing '{key}'", function=function)
    return payload[key]


def _flatten_groups(standings: JSONList) -> JSONList:
    rows = []
    for group in standings:
        if isinstance(group, list):
            rows.extend(row for row in group if isinstance(row, dict))
        elif isinstance(group, dict):
            rows.append(group)
    return rows


def _from_api_response(payload: JSONDict) -> Optional[JSONList]:
    """``response[0].league.standings[0]`` or ``response.league.standings[0]``."""
    response = payload.get('response')
    if isinstance(response, list):
        response = response[0] if response else None
    groups = fx.get_list(fx.get_dict(response, 'league'), 'standings')
    if groups:
        first = groups[0]
        if isinstance(first, list):
            return [row for row in first if isinstance(row, dict)]
    # Rugby endpoints also answer with flat rows directly under `response`
    if isinstance(payload.get('response'), list):
        rows = payload['response']
        if rows and all(isinstance(row, list) for row in rows):
            return _flatten_groups(rows)
    return None


def _from_standings_key(payload: JSONDict) -> Optional[JSONList]:
    standings = fx.get_list(payload, 'standings')
    if standings is None:
        return None
    return _flatten_groups(standings)


def extract_standings(payload: Any, function: str = "getLeagueStandings") -> List[JSONDict]:
    """Raw standings rows from any known response nesting.

    Order: explicit ``success: false`` raises; with ``success: true`` the
    ``standings`` key wins over the raw ``response`` shape; without a
    ``success`` flag the raw API shape is tried first.
    """
    if not isinstance(payload, dict):
        raise InvalidResponseError("Standings response is not an object", function=function)

    success = payload.get('success')
    if success is False:
        raise InvalidResponseError(
            payload.get('error') or "Standings call reported failure",
            function=function,
        )

    if success is True:
        strategies = (_from_standings_key, _from_api_response)
    else:
        strategies = (_from_api_response, _from_standings_key)

    for strategy in strategies:
        rows = strategy(payload)
        if rows is not None:
            logger.debug(f"Standings unwrapped via {strategy.__name__}: {len(rows)} rows")
            return rows

    raise InvalidResponseError("Unrecognized standings response shape", function=function)
