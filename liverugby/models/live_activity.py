"""Live Activity (lock screen / Dynamic Island) models."""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..core.constants import MatchStatus
from ..utils.date_utils import utc_now


class LiveActivityAttributes(BaseModel):
    """Static content, fixed for the lifetime of an activity."""

    model_config = ConfigDict(extra='ignore', validate_assignment=True)

    match_id: int
    home_team_name: str
    home_team_logo: Optional[str] = None
    away_team_name: str
    away_team_logo: Optional[str] = None
    league_name: Optional[str] = None
    match_datetime: Optional[datetime] = None


class LiveActivityState(BaseModel):
    """Fixed-shape content state pushed on every update."""

    model_config = ConfigDict(extra='ignore', validate_assignment=True)

    home_score: int = 0
    away_score: int = 0
    status: str = MatchStatus.LIVE
    elapsed: Optional[int] = Field(None, description="Minutes played")
    last_update: datetime = Field(default_factory=utc_now)
    recent_event: Optional[str] = Field(None, description="Short text, e.g. Essai marqué!")

    @property
    def score_text(self) -> str:
        return f"{self.home_score} - {self.away_score}"

    @property
    def status_label(self) -> str:
        return MatchStatus.LABELS.get(self.status, self.status)

    @property
    def is_finished(self) -> bool:
        return self.status in (MatchStatus.FULL_TIME, "Finished")

    def to_content_state(self) -> Dict[str, Any]:
        """APNs `content-state` dictionary (camelCase, ISO timestamp)."""
        return {
            'homeScore': self.home_score,
            'awayScore': self.away_score,
            'status': self.status,
            'elapsed': self.elapsed,
            'lastUpdate': self.last_update.isoformat(),
            'recentEvent': self.recent_event,
        }
