"""
Processors - normalization of raw upstream documents into canonical records.
"""
from .normalizer import (
    normalize_status,
    parse_event,
    parse_events,
    parse_events_summary,
    parse_league_ref,
    parse_live_match,
    parse_match,
    parse_matches,
    parse_team,
    parse_team_ref,
)
from .standings import (
    GOAL_STRATEGIES,
    STAT_STRATEGIES,
    parse_standing,
    parse_standings,
    standings_to_dataframe,
)
from .response import extract_standings, require_success

__all__ = [
    'normalize_status', 'parse_event', 'parse_events', 'parse_events_summary',
    'parse_league_ref', 'parse_live_match', 'parse_match', 'parse_matches',
    'parse_team', 'parse_team_ref',
    'GOAL_STRATEGIES', 'STAT_STRATEGIES', 'parse_standing', 'parse_standings',
    'standings_to_dataframe',
    'extract_standings', 'require_success',
]
