"""Detection of notable transitions between two observed states of a match."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..core.constants import MatchStatus, NotificationEvent
from ..models import Match
from ..utils.date_utils import utc_now

STARTING_WINDOW = (25, 30)  # minutes before kick-off, (exclusive, inclusive]
STARTED_STATUSES = (MatchStatus.LIVE, MatchStatus.FIRST_HALF)


@dataclass(frozen=True)
class MatchTransition:
    type: str
    data: Dict[str, Any] = field(default_factory=dict)


def _winner(match: Match) -> str:
    home, away = match.home_score or 0, match.away_score or 0
    if home > away:
        return 'home'
    if away > home:
        return 'away'
    return 'draw'


def detect_match_events(
    previous: Optional[Match],
    current: Match,
    now: Optional[datetime] = None,
) -> List[MatchTransition]:
    """
    Transitions from ``previous`` (None when never observed) to ``current``.

    A score change is only reported when a previous state exists; status
    transitions fire whenever the previous status differs, including a
    first observation.
    """
    events: List[MatchTransition] = []
    status = current.status_code
    previous_status = previous.status_code if previous is not None else None

    kickoff = current.event_datetime
    if kickoff is not None and previous is None:
        minutes = (kickoff - (now or utc_now())).total_seconds() / 60
        if STARTING_WINDOW[0] < minutes <= STARTING_WINDOW[1]:
            events.append(MatchTransition(
                NotificationEvent.MATCH_STARTING,
                {'minutesUntilStart': round(minutes)},
            ))

    if status in STARTED_STATUSES and previous_status not in STARTED_STATUSES:
        events.append(MatchTransition(NotificationEvent.MATCH_STARTED))

    # Stored live documents carry 0 where the API has no score yet
    if previous is not None and (
        (current.home_score or 0) != (previous.home_score or 0)
        or (current.away_score or 0) != (previous.away_score or 0)
    ):
        events.append(MatchTransition(NotificationEvent.SCORE_UPDATE, {
            'homeScore': current.home_score,
            'awayScore': current.away_score,
            'previousHomeScore': previous.home_score,
            'previousAwayScore': previous.away_score,
        }))

    if status == MatchStatus.HALF_TIME and previous_status != MatchStatus.HALF_TIME:
        events.append(MatchTransition(NotificationEvent.HALFTIME, {
            'homeScore': current.home_score,
            'awayScore': current.away_score,
        }))

    if status == MatchStatus.FULL_TIME and previous_status != MatchStatus.FULL_TIME:
        events.append(MatchTransition(NotificationEvent.MATCH_ENDED, {
            'homeScore': current.home_score,
            'awayScore': current.away_score,
            'winner': _winner(current),
        }))

    return events


def recent_event_text(events: List[MatchTransition]) -> Optional[str]:
    """Short Live Activity text for the most relevant transition, if any."""
    types = {event.type for event in events}
    for event_type, text in NotificationEvent.RECENT_EVENT_TEXT:
        if event_type in types:
            return text
    return None
