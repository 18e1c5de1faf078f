"""
Fan-out of normalized match updates.

The dispatcher owns the published map (latest canonical state per match,
read by UI bindings), broadcasts typed messages on the bus and hands each
update to every registered sink. Sinks are independent: there is no
ordering between them and one failure never blocks the others.
"""

import threading
from typing import Dict, List, Optional

from .bus import LiveMatchUpdated, MatchEventReceived, MessageBus
from .sinks import UpdateSink
from ..core.interfaces import LiveActivityPort
from ..core.types import JSONDict, MatchID
from ..models import Match
from ..processors.normalizer import parse_event
from ..utils.logging_utils import get_logger


class FanOutDispatcher:
    """Publishes match states and feed events to the UI bus and the sinks."""

    def __init__(
        self,
        bus: Optional[MessageBus] = None,
        sinks: Optional[List[UpdateSink]] = None,
        live_activity: Optional[LiveActivityPort] = None,
    ):
        self.bus = bus or MessageBus()
        self.sinks: List[UpdateSink] = list(sinks or [])
        self.live_activity = live_activity
        self._published: Dict[MatchID, Match] = {}
        self._lock = threading.RLock()
        self.logger = get_logger()

    def add_sink(self, sink: UpdateSink):
        self.sinks.append(sink)

    @property
    def published(self) -> Dict[MatchID, Match]:
        """Copy of the published map."""
        with self._lock:
            return dict(self._published)

    def get(self, match_id: MatchID) -> Optional[Match]:
        with self._lock:
            return self._published.get(match_id)

    def publish_match(self, match: Match, previous: Optional[Match] = None) -> Dict[str, bool]:
        """
        Publish a new canonical state.

        Args:
            match: New state
            previous: State it replaces, when known

        Returns:
            Per-sink delivery outcome keyed by sink name
        """
        with self._lock:
            self._published[match.id] = match

        update = LiveMatchUpdated(match_id=match.id, match=match, previous=previous)
        self.bus.publish(update)

        results = {}
        for sink in self.sinks:
            results[sink.name] = sink.send(update)
        return results

    def publish_event(
        self,
        match_id: MatchID,
        event_type: str,
        event_data: Optional[JSONDict] = None,
        source: str = "unknown",
    ) -> None:
        """Relay a feed event: refresh the Live Activity then broadcast it."""
        event_data = event_data or {}
        match = self.get(match_id)

        if match is not None and self.live_activity is not None:
            try:
                if self.live_activity.is_active(match_id):
                    event = parse_event(event_data)
                    recent = event.description if event else event_type
                    self.live_activity.update_activity(match, recent_event=recent)
            except Exception as e:
                self.logger.error(f"Live Activity update failed for match {match_id}: {e}")

        self.bus.publish(MatchEventReceived(
            match_id=match_id,
            event_type=event_type,
            event_data=event_data,
            source=source,
        ))

    def remove(self, match_id: MatchID):
        """Forget a match that is no longer followed, here and in every sink."""
        with self._lock:
            self._published.pop(match_id, None)
        for sink in self.sinks:
            sink.forget(match_id)

    def clear(self):
        with self._lock:
            self._published.clear()
        for sink in self.sinks:
            sink.reset()
