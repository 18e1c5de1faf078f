"""In-game event Pydantic models."""

from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..core.constants import MatchEventType


class EventPlayer(BaseModel):
    """Player attached to an event. Only present when a name is known."""

    model_config = ConfigDict(extra='ignore', validate_assignment=True)

    id: Optional[int] = Field(None, description="Player identifier")
    name: str = Field(..., description="Player display name")


class MatchEvent(BaseModel):
    """A try, conversion, penalty, card or substitution reported by the feed."""

    model_config = ConfigDict(extra='ignore', validate_assignment=True)

    type: str = Field(..., description="Event type, open set (try, conversion, ...)")
    time: str = Field(..., description="Match clock label, e.g. 23'")
    team: str = Field(..., description="Side: home or away")
    player: Optional[EventPlayer] = Field(None, description="Scoring or carded player")
    detail: Optional[str] = Field(None, description="Free-text detail")

    @property
    def event_id(self) -> str:
        """Derived identity. Two events sharing time, type and team collide."""
        return f"{self.time}-{self.type}-{self.team}"

    @property
    def emoji(self) -> str:
        return MatchEventType.EMOJIS.get(self.type.lower(), MatchEventType.DEFAULT_EMOJI)

    @property
    def description(self) -> str:
        player_name = self.player.name if self.player else MatchEventType.UNKNOWN_PLAYER
        template = MatchEventType.DESCRIPTIONS.get(self.type.lower())
        if template:
            text = template.format(player=player_name)
        else:
            text = f"{self.type} - {player_name}"
        return f"{self.emoji} {text} ({self.time})"


class EventsSummary(BaseModel):
    """Per-match counters denormalized from the event list."""

    model_config = ConfigDict(extra='ignore', validate_assignment=True)

    tries: int = 0
    conversions: int = 0
    penalties: int = 0
    yellow_cards: int = 0
    red_cards: int = 0
    substitutions: int = 0

    @property
    def is_empty(self) -> bool:
        return not any((
            self.tries, self.conversions, self.penalties,
            self.yellow_cards, self.red_cards, self.substitutions,
        ))

    @classmethod
    def from_events(cls, events: Iterable[MatchEvent]) -> "EventsSummary":
        """Aggregate counters from parsed events; unknown types are ignored."""
        fields = {
            MatchEventType.TRY: 'tries',
            MatchEventType.CONVERSION: 'conversions',
            MatchEventType.PENALTY: 'penalties',
            MatchEventType.YELLOW_CARD: 'yellow_cards',
            MatchEventType.RED_CARD: 'red_cards',
            MatchEventType.SUBSTITUTION: 'substitutions',
        }
        counts = dict.fromkeys(fields.values(), 0)
        for event in events:
            name = fields.get(event.type.lower())
            if name:
                counts[name] += 1
        return cls(**counts)

    def to_document(self) -> dict:
        """Firestore `eventsSummary` shape."""
        return {
            'tries': self.tries,
            'conversions': self.conversions,
            'penalties': self.penalties,
            'yellowCards': self.yellow_cards,
            'redCards': self.red_cards,
            'substitutions': self.substitutions,
        }
