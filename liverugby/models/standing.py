"""League table Pydantic model."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Standing(BaseModel):
    """One row of a league table."""

    model_config = ConfigDict(extra='ignore', validate_assignment=True)

    position: int = Field(0, description="Rank in the table")
    team_id: int = Field(0, description="Team identifier")
    team_name: str = Field("Unknown", description="Team name")
    team_logo: Optional[str] = Field(None, description="Team logo URL")

    played: int = 0
    won: int = 0
    draw: int = 0
    lost: int = 0
    points: int = 0

    goals_for: Optional[int] = Field(None, description="Points scored")
    goals_against: Optional[int] = Field(None, description="Points conceded")
    goals_diff: Optional[int] = Field(None, description="Differential, None when unknown")

    form: Optional[str] = Field(None, description="Recent results, e.g. WWLDW")
    description: Optional[str] = Field(None, description="Qualification note")

    @property
    def id(self) -> str:
        return f"{self.position}-{self.team_id}"

    @property
    def win_rate(self) -> float:
        if self.played <= 0:
            return 0.0
        return self.won / self.played * 100
