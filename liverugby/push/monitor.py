"""
Scheduled live-match monitoring.

Every run reads today's cached matches, refreshes the relevant ones from
the API, diffs each against its stored ``liveMatches`` document, notifies
subscribers and Live Activities of the transitions and stores the new state.
"""

from datetime import datetime, timedelta
from typing import List, Optional

from ..config import LiveRugbyConfig
from ..core.constants import Collections, MatchStatus, NotificationEvent
from ..core.exceptions import LiveRugbyError, PushSendError
from ..core.interfaces import DocumentStoreProtocol
from ..core.types import MatchID
from ..models import LiveActivityState, Match
from ..processors.normalizer import parse_live_match, parse_match, parse_matches
from ..utils.date_utils import today_display, utc_now
from ..utils.logging_utils import LoggerAdapter, get_logger
from .events import MatchTransition, detect_match_events, recent_event_text
from .notifier import MatchNotifier

MONITORED_STATUSES = (MatchStatus.LIVE, MatchStatus.FIRST_HALF, MatchStatus.SECOND_HALF)


def relevant_matches(
    matches: List[Match],
    now: Optional[datetime] = None,
    window_minutes: int = 60,
) -> List[Match]:
    """Matches in play, or kicking off within the window."""
    now = now or utc_now()
    horizon = now + timedelta(minutes=window_minutes)
    selected = []
    for match in matches:
        if match.status_code in MONITORED_STATUSES:
            selected.append(match)
            continue
        kickoff = match.event_datetime
        if kickoff is not None and now <= kickoff <= horizon:
            selected.append(match)
    return selected


class MatchMonitor:
    """Polls the API for relevant matches and fans out the detected transitions."""

    def __init__(
        self,
        client,
        store: DocumentStoreProtocol,
        notifier: MatchNotifier,
        config: LiveRugbyConfig,
        activity_sender=None,
    ):
        self.client = client
        self.store = store
        self.notifier = notifier
        self.config = config
        self.activity_sender = activity_sender
        self.logger = get_logger()

    def _today_matches(self, today: Optional[str]) -> Optional[List[Match]]:
        today = today or today_display(self.config.api.timezone)
        doc = self.store.get_document(self.config.listener.matches_collection, today)
        if not doc:
            self.logger.info(f"No matches cached for {today}")
            return None
        return parse_matches(doc.get('matches'))

    def check_match(self, match_id: MatchID, now: Optional[datetime] = None) -> List[MatchTransition]:
        """
        Refresh one match and act on its transitions.

        The new state is stored only once every transition reached the
        relay. When a send fails the stored state is kept, so the next run
        detects the same transitions again and retries them.

        Returns:
            The transitions detected since the stored state
        """
        log = LoggerAdapter(self.logger, {'match_id': match_id})
        raw = self.client.game(match_id)
        if raw is None:
            log.warning("Match not returned by the API")
            return []

        current = parse_match(raw)
        collection = self.config.listener.live_matches_collection
        stored = self.store.get_document(collection, str(match_id))
        previous = parse_live_match(stored, match_id) if stored else None

        events = detect_match_events(previous, current, now)

        undelivered = []
        for event in events:
            try:
                self.notifier.notify_event(current, event)
            except PushSendError as e:
                undelivered.append(event.type)
                log.error(f"{event.type} notification failed: {e}")

        if events and self.activity_sender is not None:
            try:
                self._update_live_activities(current, events)
            except LiveRugbyError as e:
                log.error(f"Live Activity update failed: {e}")

        if undelivered:
            log.warning(f"Stored state kept, retrying next run: {', '.join(undelivered)}")
        else:
            document = current.to_live_document()
            document['lastChecked'] = self.store.server_timestamp()
            self.store.set_document(collection, str(match_id), document)

        if events:
            log.info(f"Transitions: {', '.join(e.type for e in events)}")
        return events

    def _update_live_activities(self, match: Match, events: List[MatchTransition]):
        state = LiveActivityState(
            home_score=match.home_score or 0,
            away_score=match.away_score or 0,
            status=match.status_code if match.status_code != "Unknown" else MatchStatus.LIVE,
            elapsed=match.elapsed,
            recent_event=recent_event_text(events),
        )
        self.activity_sender.send_update(match.id, state)
        if any(e.type == NotificationEvent.MATCH_ENDED for e in events):
            self.activity_sender.end_activity(match.id, state.home_score, state.away_score)

    def run_once(self, today: Optional[str] = None, now: Optional[datetime] = None) -> int:
        """
        One monitoring pass. A failing match is logged and the others still run.

        Returns:
            Number of matches checked
        """
        matches = self._today_matches(today)
        if not matches:
            return 0

        selected = relevant_matches(matches, now, self.config.push.starting_window_minutes)
        self.logger.info(f"Found {len(selected)} relevant matches")

        checked = 0
        for match in selected:
            try:
                self.check_match(match.id, now)
                checked += 1
            except LiveRugbyError as e:
                self.logger.error(f"Failed to check match {match.id}: {e}")
        return checked

    def notify_favorite_teams(self, today: Optional[str] = None) -> int:
        matches = self._today_matches(today)
        if not matches:
            return 0
        return self.notifier.notify_favorite_teams(matches)
