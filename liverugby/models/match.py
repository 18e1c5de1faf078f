"""Match-related Pydantic models."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field

from .events import EventsSummary, MatchEvent
from ..core.constants import MatchStatus
from ..utils.date_utils import parse_iso_datetime


UNKNOWN_NAME = "Unknown"


class TeamRef(BaseModel):
    """Team reference embedded in a match."""

    model_config = ConfigDict(extra='ignore', validate_assignment=True)

    id: int = Field(0, description="Team identifier, 0 when unknown")
    name: str = Field(UNKNOWN_NAME, description="Team display name")
    logo: Optional[str] = Field(None, description="Team logo URL")


class LeagueRef(BaseModel):
    """League reference embedded in a match."""

    model_config = ConfigDict(extra='ignore', validate_assignment=True)

    id: Optional[int] = Field(None, description="League identifier")
    name: Optional[str] = Field(None, description="League name")
    season: Optional[int] = Field(None, description="Season year")
    logo: Optional[str] = Field(None, description="League logo URL")


class Match(BaseModel):
    """Canonical match record.

    Rebuilt from every fetch or snapshot; never owned long-term. Status
    ordering is not enforced: the record reflects whatever the upstream
    source last reported.
    """

    model_config = ConfigDict(extra='ignore', validate_assignment=True)

    id: int = Field(0, description="Match identifier")
    date: str = Field("", description="ISO date or date-time as sent upstream")
    time: Optional[str] = Field(None, description="Kick-off time HH:MM")
    timestamp: Optional[int] = Field(None, description="Kick-off epoch seconds")
    timezone: Optional[str] = Field(None, description="Timezone of date/time")

    status: str = Field("Unknown", description="Short code or raw status text")
    status_short: Optional[str] = Field(None, description="Short status code when sent separately")

    home_team: TeamRef = Field(default_factory=TeamRef)
    away_team: TeamRef = Field(default_factory=TeamRef)
    home_score: Optional[int] = Field(None, description="Absent until kick-off")
    away_score: Optional[int] = Field(None, description="Absent until kick-off")

    venue: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    league: Optional[LeagueRef] = None

    timer: Optional[str] = Field(None, description="Match clock, e.g. 12:34")
    elapsed: Optional[int] = Field(None, description="Minutes played")
    events: List[MatchEvent] = Field(default_factory=list)
    events_summary: Optional[EventsSummary] = None

    @property
    def status_code(self) -> str:
        """Short code when available, else the raw status."""
        return self.status_short or self.status

    @property
    def has_score(self) -> bool:
        return self.home_score is not None and self.away_score is not None

    @property
    def score_text(self) -> str:
        if self.has_score:
            return f"{self.home_score} - {self.away_score}"
        return "- : -"

    @property
    def is_live(self) -> bool:
        if self.status_code in MatchStatus.IN_PLAY_STATUSES or self.status_code == MatchStatus.HALF_TIME:
            return True
        return any(marker in self.status for marker in MatchStatus.LIVE_MARKERS)

    @property
    def is_finished(self) -> bool:
        if self.status_code in MatchStatus.COMPLETED_STATUSES:
            return True
        return any(marker in self.status for marker in MatchStatus.FINISHED_MARKERS)

    @property
    def is_upcoming(self) -> bool:
        if self.status_code in MatchStatus.PENDING_STATUSES:
            return True
        return any(marker in self.status for marker in MatchStatus.UPCOMING_MARKERS)

    @property
    def event_datetime(self) -> Optional[datetime]:
        """Kick-off instant.

        Resolution order: timestamp, then an ISO date-time in ``date`` when no
        separate time is given, then ``date`` + ``time`` in the match
        timezone (UTC when unknown).
        """
        if self.timestamp is not None:
            return datetime.fromtimestamp(self.timestamp, tz=timezone.utc)

        if self.time is None:
            return parse_iso_datetime(self.date)

        try:
            tz = ZoneInfo(self.timezone) if self.timezone else timezone.utc
        except (ZoneInfoNotFoundError, ValueError):
            tz = timezone.utc
        try:
            naive = datetime.strptime(f"{self.date} {self.time}", "%Y-%m-%d %H:%M")
        except ValueError:
            return None
        return naive.replace(tzinfo=tz)

    def to_live_document(self) -> Dict[str, Any]:
        """Serialize to the `liveMatches/{id}` document shape read by the listener."""
        doc: Dict[str, Any] = {
            'time': {
                'date': self.date,
                'timestamp': self.timestamp,
                'timer': self.timer,
                'elapsed': self.elapsed,
            },
            'status': self.status_code,
            'homeTeam': self.home_team.model_dump(),
            'awayTeam': self.away_team.model_dump(),
            'homeScore': self.home_score if self.home_score is not None else 0,
            'awayScore': self.away_score if self.away_score is not None else 0,
            'events': [event.model_dump(exclude_none=True) for event in self.events],
            'venue': {'name': self.venue, 'city': self.city},
        }
        if self.league is not None:
            doc['league'] = {
                'id': self.league.id,
                'name': self.league.name,
                'logo': self.league.logo,
            }
        summary = self.events_summary or EventsSummary.from_events(self.events)
        doc['eventsSummary'] = summary.to_document()
        return doc
