"""Home-screen widget snapshot models."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from ..core.constants import MatchStatus


class WidgetTeam(BaseModel):
    model_config = ConfigDict(extra='ignore', validate_assignment=True)

    id: int
    name: str
    logo: str = ""
    score: Optional[int] = None


class WidgetMatchData(BaseModel):
    """Everything the widget renders for one match."""

    model_config = ConfigDict(extra='ignore', validate_assignment=True)

    match_id: int
    league: str
    league_logo: str = ""
    date: Optional[datetime] = None
    status: str = MatchStatus.NOT_STARTED
    home_team: WidgetTeam
    away_team: WidgetTeam
    venue: Optional[str] = None
    elapsed: Optional[int] = None

    @property
    def display_status(self) -> str:
        return MatchStatus.WIDGET_LABELS.get(self.status, self.status)

    @property
    def is_live(self) -> bool:
        return self.status in MatchStatus.WIDGET_LIVE_STATUSES
