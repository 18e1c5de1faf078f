"""
Update sinks fed by the fan-out dispatcher.

Every sink receives the same ``LiveMatchUpdated`` message. ``send`` never
raises: a failure is logged and reported as False so the other sinks are
unaffected.
"""

import threading
from typing import Dict, Optional

from .bus import LiveMatchUpdated
from ..core.exceptions import PushSendError
from ..core.interfaces import LiveActivityPort, WidgetSnapshotPort
from ..models import Match
from ..push.events import detect_match_events, recent_event_text
from ..utils.logging_utils import get_logger
from ..widget.snapshot import build_widget_data, find_best_match


class UpdateSink:
    """Base class for update sinks."""

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self.logger = get_logger()

    @property
    def name(self) -> str:
        return self.__class__.__name__

    def send(self, update: LiveMatchUpdated) -> bool:
        """
        Deliver an update to this sink.

        Args:
            update: New canonical state, with the previous one when known

        Returns:
            True if delivered, False if disabled, skipped or failed
        """
        if not self.enabled:
            return False

        try:
            return self._send_impl(update)
        except Exception as e:
            self.logger.error(f"Failed to deliver match {update.match_id} through {self.name}: {e}")
            return False

    def _send_impl(self, update: LiveMatchUpdated) -> bool:
        """Implementation-specific delivery. Override in subclasses."""
        raise NotImplementedError

    def forget(self, match_id: int) -> None:
        """Drop the state kept for a match that is no longer followed."""

    def reset(self) -> None:
        """Drop the state kept for every match."""


class LiveActivitySink(UpdateSink):
    """Pushes state to the Live Activity for the match, when one is running."""

    def __init__(self, port: LiveActivityPort, enabled: bool = True):
        super().__init__(enabled)
        self.port = port

    def _send_impl(self, update: LiveMatchUpdated) -> bool:
        match = update.match
        if not self.port.is_active(match.id):
            return False
        if match.is_finished:
            return self.port.end_activity(match)
        events = detect_match_events(update.previous, match)
        return self.port.update_activity(match, recent_event=recent_event_text(events))


class WidgetSnapshotSink(UpdateSink):
    """Keeps the widget snapshot on the most relevant known match."""

    def __init__(self, port: WidgetSnapshotPort, team_id: Optional[int] = None, enabled: bool = True):
        super().__init__(enabled)
        self.port = port
        self.team_id = team_id
        self._matches: Dict[int, Match] = {}
        self._lock = threading.Lock()

    def forget(self, match_id: int) -> None:
        with self._lock:
            self._matches.pop(match_id, None)

    def reset(self) -> None:
        with self._lock:
            self._matches.clear()

    def _send_impl(self, update: LiveMatchUpdated) -> bool:
        with self._lock:
            self._matches[update.match_id] = update.match
            candidates = list(self._matches.values())
        if self.team_id is not None:
            candidates = [
                m for m in candidates
                if self.team_id in (m.home_team.id, m.away_team.id)
            ]

        best = find_best_match(candidates)
        if best is None:
            return False
        self.port.save_snapshot(build_widget_data(best).model_dump(mode='json'))
        return True


class PushRelaySink(UpdateSink):
    """Notifies match subscribers of the transitions between two states."""

    def __init__(self, notifier, enabled: bool = True):
        super().__init__(enabled)
        self.notifier = notifier

    def _send_impl(self, update: LiveMatchUpdated) -> bool:
        events = detect_match_events(update.previous, update.match)
        if not events:
            return False
        delivered = True
        for event in events:
            try:
                self.notifier.notify_event(update.match, event)
            except PushSendError as e:
                self.logger.error(f"{event.type} relay failed for match {update.match_id}: {e}")
                delivered = False
        return delivered
