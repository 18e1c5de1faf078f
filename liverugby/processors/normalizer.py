"""Schema normalizer: raw match, event and team documents to canonical records.

Every function here is pure and total. Missing optional data is defaulted,
type mismatches read as absent, and only identity fields fall back to
sentinels (0 / "Unknown"). Nothing raises on malformed upstream input.
"""

from typing import Any, List, Optional

from ..core.constants import MatchStatus
from ..core.types import JSONDict
from ..models import (
    EventPlayer,
    EventsSummary,
    LeagueRef,
    Match,
    MatchEvent,
    Team,
    TeamRef,
)
from ..models.match import UNKNOWN_NAME
from ..utils.extractor import SafeFieldExtractor as fx
from ..utils.logging_utils import get_logger

logger = get_logger()


def normalize_status(raw_status: str) -> str:
    """Canonicalize known full-time synonyms to ``FT``.

    A deliberately narrow special case: case-insensitive "FINISHED" or
    "FULL TIME" anywhere in the text, or exactly "TERMINÉ". Everything else
    passes through unchanged.
    """
    upper = raw_status.upper()
    if any(marker in upper for marker in MatchStatus.FULL_TIME_MARKERS):
        return MatchStatus.FULL_TIME
    if upper in MatchStatus.FULL_TIME_EXACT:
        return MatchStatus.FULL_TIME
    return raw_status


def parse_team_ref(raw: Any) -> TeamRef:
    """Team reference; the logo is carried through verbatim (absent -> None)."""
    if not isinstance(raw, dict):
        return TeamRef()
    return TeamRef(
        id=fx.get_int(raw, 'id') or 0,
        name=fx.get_str(raw, 'name') or UNKNOWN_NAME,
        logo=fx.get_str(raw, 'logo'),
    )


def parse_league_ref(raw: Any) -> Optional[LeagueRef]:
    if not isinstance(raw, dict):
        return None
    return LeagueRef(
        id=fx.get_int(raw, 'id'),
        name=fx.get_str(raw, 'name'),
        season=fx.get_int(raw, 'season'),
        logo=fx.get_str(raw, 'logo'),
    )


def parse_event(raw: Any) -> Optional[MatchEvent]:
    """One event, or None when type, time or team is missing.

    A player record without a name is treated as absent.
    """
    event_type = fx.get_str(raw, 'type')
    event_time = fx.get_str(raw, 'time')
    team = fx.get_str(raw, 'team')
    if event_type is None or event_time is None or team is None:
        return None

    player = None
    player_raw = fx.get_dict(raw, 'player')
    player_name = fx.get_str(player_raw, 'name')
    if player_name is not None:
        player = EventPlayer(id=fx.get_int(player_raw, 'id'), name=player_name)

    return MatchEvent(
        type=event_type,
        time=event_time,
        team=team,
        player=player,
        detail=fx.get_str(raw, 'detail'),
    )


def parse_events(raw_events: Any) -> List[MatchEvent]:
    """Parse an event array, silently dropping malformed entries."""
    if not isinstance(raw_events, list):
        return []
    events = []
    for raw in raw_events:
        event = parse_event(raw)
        if event is None:
            logger.debug(f"Dropped malformed event: {raw!r}")
            continue
        events.append(event)
    return events


def parse_events_summary(raw: Any) -> Optional[EventsSummary]:
    if not isinstance(raw, dict):
        return None
    return EventsSummary(
        tries=fx.get_int(raw, 'tries') or 0,
        conversions=fx.get_int(raw, 'conversions') or 0,
        penalties=fx.get_int(raw, 'penalties') or 0,
        yellow_cards=fx.get_int(raw, 'yellowCards') or 0,
        red_cards=fx.get_int(raw, 'redCards') or 0,
        substitutions=fx.get_int(raw, 'substitutions') or 0,
    )


def _parse_venue(raw: JSONDict):
    venue = raw.get('venue')
    if isinstance(venue, dict):
        return fx.get_str(venue, 'name'), fx.get_str(venue, 'city')
    if isinstance(venue, str):
        return venue, None
    return None, None


def parse_match(raw: JSONDict) -> Match:
    """Normalize an API-Sports ``/games`` item.

    ``status`` may be a plain string or a ``{short, long}`` object; scores
    are kept only when both sides are integers.
    """
    if not isinstance(raw, dict):
        logger.debug(f"Match payload is not an object: {type(raw).__name__}")
        return Match()

    status_short = fx.get_str(raw, 'status_short')
    elapsed = None
    status_raw = raw.get('status')
    if isinstance(status_raw, dict):
        status_short = fx.get_str(status_raw, 'short') or status_short
        status_text = fx.get_str(status_raw, 'long') or status_short or "Unknown"
        elapsed = fx.get_int(status_raw, 'elapsed')
    elif isinstance(status_raw, str):
        status_text = status_raw
    else:
        status_text = "Unknown"

    teams = fx.get_dict(raw, 'teams') or {}
    scores = fx.get_dict(raw, 'scores') or {}
    home_score = fx.get_int(scores, 'home')
    away_score = fx.get_int(scores, 'away')
    if home_score is None or away_score is None:
        home_score = away_score = None

    country = raw.get('country')
    if isinstance(country, dict):
        country = fx.get_str(country, 'name')
    elif not isinstance(country, str):
        country = None

    venue, city = _parse_venue(raw)
    events = parse_events(raw.get('events'))

    return Match(
        id=fx.get_int(raw, 'id') or 0,
        date=fx.get_str(raw, 'date') or "",
        time=fx.get_str(raw, 'time'),
        timestamp=fx.get_int(raw, 'timestamp'),
        timezone=fx.get_str(raw, 'timezone'),
        status=normalize_status(status_text),
        status_short=status_short,
        home_team=parse_team_ref(teams.get('home')),
        away_team=parse_team_ref(teams.get('away')),
        home_score=home_score,
        away_score=away_score,
        venue=venue,
        city=city,
        country=country,
        league=parse_league_ref(raw.get('league')),
        elapsed=elapsed,
        events=events,
        events_summary=parse_events_summary(raw.get('eventsSummary')),
    )


def parse_live_match(raw: JSONDict, match_id: int) -> Match:
    """Normalize a ``liveMatches/{id}`` document.

    This shape carries flat ``homeTeam``/``awayTeam`` objects, scores that
    default to 0, a ``time`` block with clock fields, and the event list
    with its denormalized summary.
    """
    if not isinstance(raw, dict):
        return Match(id=match_id)

    time_block = fx.get_dict(raw, 'time') or {}
    raw_status = fx.get_str(raw, 'status') or "Unknown"
    venue, city = _parse_venue(raw)

    if 'homeTeam' not in raw or 'awayTeam' not in raw:
        logger.debug(f"Live match {match_id} is missing a team block")

    return Match(
        id=match_id,
        date=fx.get_str(time_block, 'date') or "",
        timestamp=fx.get_int(time_block, 'timestamp'),
        timezone="UTC",
        timer=fx.get_str(time_block, 'timer'),
        elapsed=fx.get_int(time_block, 'elapsed'),
        status=normalize_status(raw_status),
        home_team=parse_team_ref(raw.get('homeTeam')),
        away_team=parse_team_ref(raw.get('awayTeam')),
        home_score=fx.get_int(raw, 'homeScore') or 0,
        away_score=fx.get_int(raw, 'awayScore') or 0,
        league=parse_league_ref(raw.get('league')),
        venue=venue,
        city=city,
        events=parse_events(raw.get('events')),
        events_summary=parse_events_summary(raw.get('eventsSummary')),
    )


def parse_team(raw: JSONDict) -> Team:
    """Normalize a ``/teams`` item."""
    if not isinstance(raw, dict):
        return Team()
    arena = fx.get_dict(raw, 'arena') or {}
    national = raw.get('national')
    return Team(
        id=fx.get_int(raw, 'id') or 0,
        name=fx.get_str(raw, 'name') or UNKNOWN_NAME,
        logo=fx.get_str(raw, 'logo'),
        national=national if isinstance(national, bool) else False,
        founded=fx.get_int(raw, 'founded'),
        country=fx.get_str(fx.get_dict(raw, 'country'), 'name'),
        venue_name=fx.get_str(arena, 'name'),
        venue_capacity=fx.get_int(arena, 'capacity'),
        venue_location=fx.get_str(arena, 'location'),
    )


def parse_matches(raw_matches: Any) -> List[Match]:
    if not isinstance(raw_matches, list):
        return []
    return [parse_match(raw) for raw in raw_matches if isinstance(raw, dict)]
