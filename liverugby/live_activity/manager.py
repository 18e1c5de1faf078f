"""
Lifecycle of Live Activities, keyed by match id.

The manager holds the static attributes and the latest content state of
each running activity. When an ``ActivityPushSender`` is attached, every
state change is also pushed to the devices following the match.
"""

import threading
from dataclasses import dataclass
from typing import Dict, List, Optional

from ..core.constants import MatchStatus
from ..core.types import MatchID
from ..models import LiveActivityAttributes, LiveActivityState, Match
from ..utils.logging_utils import get_logger
from .apns import FINAL_EVENT_TEXT, ActivityPushSender


@dataclass
class LiveActivity:
    attributes: LiveActivityAttributes
    state: LiveActivityState


def attributes_for(match: Match) -> LiveActivityAttributes:
    return LiveActivityAttributes(
        match_id=match.id,
        home_team_name=match.home_team.name,
        home_team_logo=match.home_team.logo,
        away_team_name=match.away_team.name,
        away_team_logo=match.away_team.logo,
        league_name=match.league.name if match.league else None,
        match_datetime=match.event_datetime,
    )


def state_for(match: Match, recent_event: Optional[str] = None) -> LiveActivityState:
    return LiveActivityState(
        home_score=match.home_score or 0,
        away_score=match.away_score or 0,
        status=match.status_code,
        elapsed=match.elapsed,
        recent_event=recent_event,
    )


class LiveActivityManager:
    """In-process registry of running activities; implements LiveActivityPort."""

    def __init__(self, sender: Optional[ActivityPushSender] = None, enabled: bool = True):
        self.sender = sender
        self.enabled = enabled
        self._activities: Dict[MatchID, LiveActivity] = {}
        self._lock = threading.RLock()
        self.logger = get_logger()

    def is_active(self, match_id: MatchID) -> bool:
        with self._lock:
            return match_id in self._activities

    def get(self, match_id: MatchID) -> Optional[LiveActivity]:
        with self._lock:
            return self._activities.get(match_id)

    @property
    def active_match_ids(self) -> List[MatchID]:
        with self._lock:
            return list(self._activities)

    def start_activity(self, match: Match) -> bool:
        """Start following a match. Starting twice keeps the existing activity."""
        if not self.enabled:
            self.logger.warning("Live Activities are disabled")
            return False
        with self._lock:
            if match.id in self._activities:
                self.logger.info(f"Live Activity already running for match {match.id}")
                return True
            initial = state_for(match)
            if match.status_code == "Unknown":
                initial.status = MatchStatus.NOT_STARTED
            self._activities[match.id] = LiveActivity(attributes_for(match), initial)
        self.logger.info(f"Live Activity started for match {match.id}")
        return True

    def update_activity(self, match: Match, recent_event: Optional[str] = None) -> bool:
        with self._lock:
            activity = self._activities.get(match.id)
            if activity is None:
                self.logger.warning(f"No Live Activity running for match {match.id}")
                return False
            activity.state = state_for(match, recent_event)
            state = activity.state

        if self.sender is not None:
            self.sender.send_update(match.id, state)
        self.logger.debug(f"Live Activity updated for match {match.id}: {state.score_text}")
        return True

    def end_activity(self, match: Match) -> bool:
        with self._lock:
            activity = self._activities.pop(match.id, None)
        if activity is None:
            self.logger.warning(f"No Live Activity running for match {match.id}")
            return False

        home, away = match.home_score or 0, match.away_score or 0
        activity.state = LiveActivityState(
            home_score=home,
            away_score=away,
            status=MatchStatus.FULL_TIME,
            recent_event=FINAL_EVENT_TEXT,
        )
        if self.sender is not None:
            self.sender.end_activity(match.id, home, away)
        self.logger.info(f"Live Activity ended for match {match.id}")
        return True

    def end_all_activities(self) -> int:
        with self._lock:
            count = len(self._activities)
            self._activities.clear()
        self.logger.info(f"Stopped {count} Live Activities")
        return count
