"""
Home-screen widget data.

Picks the single most relevant match (live first, then the next kick-off,
then the latest result) and persists it as a JSON snapshot the widget
reads between refreshes.
"""

import json
from datetime import date, timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..core.constants import DATE_FORMAT_DISPLAY, MatchStatus
from ..core.interfaces import DocumentStoreProtocol
from ..core.types import TeamID
from ..models import Match, TeamRef, WidgetMatchData, WidgetTeam
from ..processors.normalizer import parse_matches
from ..utils.date_utils import parse_display_date, today_display
from ..utils.logging_utils import get_logger

logger = get_logger()

SNAPSHOT_FILENAME = "widget_match.json"


def _timestamp(match: Match) -> int:
    return match.timestamp or 0


def find_best_match(matches: List[Match]) -> Optional[Match]:
    """Live match, else soonest not-started one, else the most recent by kick-off."""
    if not matches:
        return None

    for match in matches:
        if match.status_code in MatchStatus.WIDGET_LIVE_STATUSES:
            return match

    upcoming = [m for m in matches if m.status_code == MatchStatus.NOT_STARTED]
    if upcoming:
        return min(upcoming, key=_timestamp)

    return max(matches, key=_timestamp)


def team_matches(matches: List[Match], team_id: TeamID) -> List[Match]:
    return [m for m in matches if team_id in (m.home_team.id, m.away_team.id)]


def _widget_team(team: TeamRef, score: Optional[int]) -> WidgetTeam:
    return WidgetTeam(id=team.id, name=team.name, logo=team.logo or "", score=score)


def build_widget_data(match: Match) -> WidgetMatchData:
    return WidgetMatchData(
        match_id=match.id,
        league=match.league.name if match.league and match.league.name else "",
        league_logo=match.league.logo if match.league and match.league.logo else "",
        date=match.event_datetime,
        status=match.status_code,
        home_team=_widget_team(match.home_team, match.home_score),
        away_team=_widget_team(match.away_team, match.away_score),
        venue=match.venue,
        elapsed=match.elapsed,
    )


class WidgetDataService:
    """Finds the widget match for a favorite team from the cached daily matches."""

    def __init__(self, store: DocumentStoreProtocol, matches_collection: str = "matches",
                 lookahead_days: int = 7):
        self.store = store
        self.matches_collection = matches_collection
        self.lookahead_days = lookahead_days

    def matches_for_date(self, date_str: str) -> List[Match]:
        doc = self.store.get_document(self.matches_collection, date_str)
        if not doc:
            return []
        return parse_matches(doc.get('matches'))

    def fetch_match_for_team(self, team_id: TeamID, today: Optional[str] = None) -> Optional[WidgetMatchData]:
        """
        Widget data for a team: today's best match, else its next match
        within the look-ahead window, else None.
        """
        today = today or today_display()
        best = find_best_match(team_matches(self.matches_for_date(today), team_id))
        if best is not None:
            return build_widget_data(best)
        return self.fetch_next_match_for_team(team_id, parse_display_date(today))

    def fetch_next_match_for_team(self, team_id: TeamID, start: date) -> Optional[WidgetMatchData]:
        upcoming: List[Match] = []
        for offset in range(1, self.lookahead_days + 1):
            day = (start + timedelta(days=offset)).strftime(DATE_FORMAT_DISPLAY)
            upcoming.extend(team_matches(self.matches_for_date(day), team_id))
        if not upcoming:
            logger.info(f"No match for team {team_id} in the next {self.lookahead_days} days")
            return None
        return build_widget_data(min(upcoming, key=_timestamp))


class JsonWidgetSnapshotStore:
    """Widget snapshot persisted as a JSON file; implements WidgetSnapshotPort."""

    def __init__(self, snapshot_dir: str = "data/widget", filename: str = SNAPSHOT_FILENAME):
        self.path = Path(snapshot_dir) / filename

    def save_snapshot(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix('.tmp')
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False, indent=2, default=str)
        tmp_path.replace(self.path)
        logger.debug(f"Widget snapshot saved to {self.path}")

    def load_snapshot(self) -> Optional[Dict[str, Any]]:
        if not self.path.exists():
            return None
        with open(self.path, 'r', encoding='utf-8') as f:
            return json.load(f)
