"""Team and league reference models."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Team(BaseModel):
    """Team record as returned by the /teams endpoint."""

    model_config = ConfigDict(extra='ignore', validate_assignment=True)

    id: int = 0
    name: str = "Unknown"
    logo: Optional[str] = None
    country: Optional[str] = None
    founded: Optional[int] = None
    national: bool = False
    venue_name: Optional[str] = Field(None, description="Home arena")
    venue_capacity: Optional[int] = None
    venue_location: Optional[str] = None


class RugbyLeague(Enum):
    """Leagues followed by the app, keyed by API-Sports league id."""

    TOP14 = 16
    FRANCE = 1
    PREMIERSHIP = 13
    URC = 76
    SIX_NATIONS = 51
    PRO14 = 17
    SUPER_RUGBY = 18
    RUGBY_CHAMPIONSHIP = 19

    @property
    def display_name(self) -> str:
        return _LEAGUE_INFO[self][0]

    @property
    def short_name(self) -> str:
        return _LEAGUE_INFO[self][1]

    @property
    def country(self) -> str:
        return _LEAGUE_INFO[self][2]

    @classmethod
    def from_id(cls, league_id: int) -> Optional["RugbyLeague"]:
        try:
            return cls(league_id)
        except ValueError:
            return None


_LEAGUE_INFO = {
    RugbyLeague.TOP14: ("Top 14", "Top 14", "France"),
    RugbyLeague.FRANCE: ("Équipe de France", "France", "France"),
    RugbyLeague.PREMIERSHIP: ("Gallagher Premiership", "Premiership", "Angleterre"),
    RugbyLeague.URC: ("United Rugby Championship", "URC", "Multi-nations"),
    RugbyLeague.SIX_NATIONS: ("Tournoi des 6 Nations", "6 Nations", "Europe"),
    RugbyLeague.PRO14: ("Pro14", "Pro14", "Multi-nations"),
    RugbyLeague.SUPER_RUGBY: ("Super Rugby", "Super Rugby", "Hémisphère Sud"),
    RugbyLeague.RUGBY_CHAMPIONSHIP: ("Rugby Championship", "TRC", "Hémisphère Sud"),
}


class League(BaseModel):
    """League reference record."""

    model_config = ConfigDict(extra='ignore', validate_assignment=True)

    id: int
    name: str
    short_name: Optional[str] = None
    country: Optional[str] = None
    logo: Optional[str] = None

    @classmethod
    def known(cls, league: RugbyLeague) -> "League":
        return cls(
            id=league.value,
            name=league.display_name,
            short_name=league.short_name,
            country=league.country,
        )
