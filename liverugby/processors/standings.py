"""League table normalization.

The upstream standings schema has changed shape over time. Win/draw/loss
counts and points-for/against are resolved by walking an ordered list of
extraction strategies; the first strategy whose grouping object exists
wins, even when some of its fields are missing (they default to 0 or None).
"""

from typing import Callable, List, NamedTuple, Optional, Sequence, Tuple

import pandas as pd

from ..core.types import JSONDict
from ..models import Standing
from ..models.match import UNKNOWN_NAME
from ..utils.extractor import SafeFieldExtractor as fx

WIN_KEYS = ('win', 'won')
DRAW_KEYS = ('draw', 'draws')
LOSE_KEYS = ('lose', 'lost', 'losses')

GameCounts = Tuple[int, int, int, int]  # played, won, draw, lost
GoalPair = Tuple[Optional[int], Optional[int]]  # for, against


class StatStrategy(NamedTuple):
    name: str
    extract: Callable[[JSONDict], Optional[GameCounts]]


class GoalStrategy(NamedTuple):
    name: str
    extract: Callable[[JSONDict], Optional[GoalPair]]


def _from_games(raw: JSONDict) -> Optional[GameCounts]:
    """``games.played`` plus ``games.{win,draw,lose}.total`` sub-objects."""
    games = fx.get_dict(raw, 'games')
    if games is None:
        return None
    return (
        fx.get_int(games, 'played') or 0,
        fx.get_int(fx.get_dict(games, 'win'), 'total') or 0,
        fx.get_int(fx.get_dict(games, 'draw'), 'total') or 0,
        fx.get_int(fx.get_dict(games, 'lose'), 'total') or 0,
    )


def _counts_with_spellings(group: JSONDict) -> GameCounts:
    return (
        fx.get_int(group, 'played') or 0,
        fx.first_int(group, WIN_KEYS) or 0,
        fx.first_int(group, DRAW_KEYS) or 0,
        fx.first_int(group, LOSE_KEYS) or 0,
    )


def _from_all(raw: JSONDict) -> Optional[GameCounts]:
    """``all`` grouping with direct integers under alternate spellings."""
    group = fx.get_dict(raw, 'all')
    if group is None:
        return None
    return _counts_with_spellings(group)


def _from_root(raw: JSONDict) -> Optional[GameCounts]:
    """Root-level fields, same spellings. Always applies."""
    return _counts_with_spellings(raw)


def _goal_pair(goals: JSONDict) -> GoalPair:
    return fx.get_int(goals, 'for'), fx.get_int(goals, 'against')


def _goals_from_all(raw: JSONDict) -> Optional[GoalPair]:
    goals = fx.get_dict(fx.get_dict(raw, 'all'), 'goals')
    return _goal_pair(goals) if goals is not None else None


def _goals_from_root_object(raw: JSONDict) -> Optional[GoalPair]:
    goals = fx.get_dict(raw, 'goals')
    return _goal_pair(goals) if goals is not None else None


def _goals_from_root_fields(raw: JSONDict) -> Optional[GoalPair]:
    return (
        fx.first_int(raw, ('goals_for', 'for')),
        fx.first_int(raw, ('goals_against', 'against')),
    )


STAT_STRATEGIES: Sequence[StatStrategy] = (
    StatStrategy('games', _from_games),
    StatStrategy('all', _from_all),
    StatStrategy('root', _from_root),
)

GOAL_STRATEGIES: Sequence[GoalStrategy] = (
    GoalStrategy('all.goals', _goals_from_all),
    GoalStrategy('goals', _goals_from_root_object),
    GoalStrategy('root', _goals_from_root_fields),
)

DIFF_KEYS = ('goals_diff', 'diff')


def resolve_game_counts(raw: JSONDict) -> GameCounts:
    for strategy in STAT_STRATEGIES:
        counts = strategy.extract(raw)
        if counts is not None:
            return counts
    return 0, 0, 0, 0


def resolve_goals(raw: JSONDict) -> Tuple[Optional[int], Optional[int], Optional[int]]:
    """Return (for, against, diff). The diff is None when nothing resolves, never 0."""
    goals_for, goals_against = None, None
    for strategy in GOAL_STRATEGIES:
        pair = strategy.extract(raw)
        if pair is not None:
            goals_for, goals_against = pair
            break

    if goals_for is not None and goals_against is not None:
        return goals_for, goals_against, goals_for - goals_against
    return goals_for, goals_against, fx.first_int(raw, DIFF_KEYS)


def parse_standing(raw: JSONDict) -> Standing:
    """Normalize one standings row.

    Team comes from ``team.{id,name,logo}``, else the legacy flat
    ``team_id``/``team_name``/``team_logo`` fields. Points are always read
    from the root.
    """
    if not isinstance(raw, dict):
        return Standing()

    team = fx.get_dict(raw, 'team')
    if team is not None:
        team_id = fx.get_int(team, 'id') or 0
        team_name = fx.get_str(team, 'name') or UNKNOWN_NAME
        team_logo = fx.get_str(team, 'logo')
    else:
        team_id = fx.get_int(raw, 'team_id') or 0
        team_name = fx.get_str(raw, 'team_name') or UNKNOWN_NAME
        team_logo = fx.get_str(raw, 'team_logo')

    played, won, draw, lost = resolve_game_counts(raw)
    goals_for, goals_against, goals_diff = resolve_goals(raw)

    return Standing(
        position=fx.get_int(raw, 'position') or 0,
        team_id=team_id,
        team_name=team_name,
        team_logo=team_logo,
        played=played,
        won=won,
        draw=draw,
        lost=lost,
        points=fx.get_int(raw, 'points') or 0,
        goals_for=goals_for,
        goals_against=goals_against,
        goals_diff=goals_diff,
        form=fx.get_str(raw, 'form'),
        description=fx.get_str(raw, 'description'),
    )


def parse_standings(rows: List[JSONDict]) -> List[Standing]:
    return [parse_standing(row) for row in rows if isinstance(row, dict)]


STANDINGS_COLUMNS = [
    'position', 'team_name', 'played', 'won', 'draw', 'lost',
    'goals_for', 'goals_against', 'goals_diff', 'points', 'form',
]


def standings_to_dataframe(standings: List[Standing]) -> pd.DataFrame:
    """Tabular view of a league table, sorted by position."""
    if not standings:
        return pd.DataFrame(columns=STANDINGS_COLUMNS)
    df = pd.DataFrame([s.model_dump() for s in standings])
    return df[STANDINGS_COLUMNS].sort_values('position').reset_index(drop=True)
