"""
Real-time listener for live matches.

For each followed match the listener keeps two standing subscriptions:
the ``liveMatches/{id}`` document and the most recent feed events in
``liveEvents``. Every snapshot is normalized and compared with the cached
state; only actual changes reach the dispatcher.

Firestore delivers snapshots on its own thread, so the caches are guarded
by a lock. A failing callback is logged and the subscription stays
registered.

Usage:
    with LiveMatchListener(store, dispatcher, config) as listener:
        listener.start_listening(49925)
        ...
"""

import threading
from typing import Dict, List, Optional

from ..config import LiveRugbyConfig
from ..core.constants import TODAY_MATCHES_KEY
from ..core.exceptions import DocumentStoreError, ListenerError
from ..core.interfaces import DocumentStoreProtocol, SubscriptionProtocol
from ..core.types import JSONDict, MatchID
from ..dispatch import FanOutDispatcher, TodayMatchesUpdated
from ..models import Match, MatchEvent
from ..processors.normalizer import parse_live_match, parse_matches
from ..utils.date_utils import today_display
from ..utils.extractor import SafeFieldExtractor as fx
from ..utils.logging_utils import LoggerAdapter, get_logger
from ..utils.metrics import ListenerMetrics


class LiveMatchListener:
    """Owns the live-match subscriptions and caches of one process."""

    def __init__(
        self,
        store: DocumentStoreProtocol,
        dispatcher: FanOutDispatcher,
        config: Optional[LiveRugbyConfig] = None,
    ):
        self.store = store
        self.dispatcher = dispatcher
        self.config = config or LiveRugbyConfig()
        self.logger = get_logger()
        self.metrics = ListenerMetrics()

        self._lock = threading.RLock()
        self._listeners: Dict[MatchID, SubscriptionProtocol] = {}
        self._event_listeners: Dict[MatchID, SubscriptionProtocol] = {}
        self._today_listener: Optional[SubscriptionProtocol] = None

        self._matches: Dict[MatchID, Match] = {}
        self._events: Dict[MatchID, List[MatchEvent]] = {}
        self.today_matches: List[Match] = []

    # ------------------------------------------------------------------
    # Match documents
    # ------------------------------------------------------------------

    def is_listening(self, match_id: MatchID) -> bool:
        with self._lock:
            return match_id in self._listeners

    @property
    def active_match_ids(self) -> List[MatchID]:
        with self._lock:
            return list(self._listeners)

    def start_listening(self, match_id: MatchID) -> bool:
        """
        Subscribe to a match and its feed events.

        Returns:
            True if a subscription was created, False if one already existed

        Raises:
            ListenerError: If the store refuses the subscription. No
                subscription is left behind when the events watch fails
        """
        log = LoggerAdapter(self.logger, {'match_id': match_id})
        with self._lock:
            if match_id in self._listeners:
                log.warning("Listener already active")
                return False

            if self.metrics.started_at is None:
                self.metrics.start()

            try:
                subscription = self.store.watch_document(
                    self.config.listener.live_matches_collection,
                    str(match_id),
                    lambda data: self._on_match_snapshot(match_id, data),
                )
            except DocumentStoreError as e:
                raise ListenerError(f"Cannot listen to match {match_id}: {e}") from e

            self._listeners[match_id] = subscription
            log.info("Listening for live updates")

        try:
            self.start_listening_to_events(match_id)
        except ListenerError:
            log.error("Feed events unavailable, releasing the match subscription")
            self.stop_listening(match_id)
            raise
        return True

    def _on_match_snapshot(self, match_id: MatchID, data: Optional[JSONDict]):
        log = LoggerAdapter(self.logger, {'match_id': match_id})
        self.metrics.record_snapshot()
        if data is None:
            self.metrics.record_missing()
            log.warning("Document does not exist in live matches")
            return

        try:
            match = parse_live_match(data, match_id)
            with self._lock:
                if match_id not in self._listeners:
                    return
                previous = self._matches.get(match_id)
                if previous == match:
                    self.metrics.record_duplicate()
                    log.debug("Unchanged snapshot skipped")
                    return
                self._matches[match_id] = match
                self._events[match_id] = list(match.events)

            self.metrics.record_update()
            log.info(
                f"Updated: {match.home_team.name} {match.score_text} "
                f"{match.away_team.name} ({match.status})"
            )
            self.dispatcher.publish_match(match, previous)
        except Exception as e:
            self.metrics.record_error(match_id, e)
            log.error(f"Failed to process snapshot: {e}")

    def stop_listening(self, match_id: MatchID) -> bool:
        """Release both subscriptions of a match and evict its cached state."""
        with self._lock:
            subscription = self._listeners.pop(match_id, None)
            event_subscription = self._event_listeners.pop(match_id, None)
            self._matches.pop(match_id, None)
            self._events.pop(match_id, None)

        if subscription is None and event_subscription is None:
            return False

        if subscription is not None:
            subscription.unsubscribe()
        if event_subscription is not None:
            event_subscription.unsubscribe()
        self.dispatcher.remove(match_id)
        self.logger.info(f"Stopped listening to match {match_id}")
        return True

    # ------------------------------------------------------------------
    # Feed events
    # ------------------------------------------------------------------

    def start_listening_to_events(self, match_id: MatchID) -> bool:
        """Subscribe to the most recent feed events of a match."""
        with self._lock:
            if match_id in self._event_listeners:
                self.logger.warning(f"Event listener already active for match {match_id}")
                return False
            try:
                subscription = self.store.watch_query(
                    self.config.listener.live_events_collection,
                    [('event.fixture.id', '==', match_id)],
                    lambda docs: self._on_events(match_id, docs),
                    order_by='receivedAt',
                    descending=True,
                    limit=self.config.listener.events_limit,
                )
            except DocumentStoreError as e:
                raise ListenerError(f"Cannot listen to events of match {match_id}: {e}") from e
            self._event_listeners[match_id] = subscription
        return True

    def _on_events(self, match_id: MatchID, documents: List[JSONDict]):
        for document in documents:
            try:
                self.handle_event(match_id, document)
            except Exception as e:
                self.metrics.record_error(match_id, e)
                self.logger.error(f"Failed to handle event for match {match_id}: {e}")

    def handle_event(self, match_id: MatchID, document: JSONDict) -> bool:
        """Relay one ``liveEvents`` document; incomplete ones are ignored."""
        event_data = fx.get_dict(document, 'event')
        event_type = fx.get_str(event_data, 'type')
        if event_type is None:
            self.logger.warning(f"Incomplete event data for match {match_id}")
            return False

        source = fx.get_str(document, 'source') or "unknown"
        self.metrics.record_event()
        self.logger.info(f"New event for match {match_id}: {event_type} (source: {source})")
        self.dispatcher.publish_event(match_id, event_type, event_data, source)
        return True

    # ------------------------------------------------------------------
    # Today's matches
    # ------------------------------------------------------------------

    def listen_to_today_matches(self, today: Optional[str] = None) -> bool:
        today = today or today_display(self.config.api.timezone)
        with self._lock:
            if self._today_listener is not None:
                self.logger.warning("Today's matches listener already active")
                return False
            try:
                self._today_listener = self.store.watch_document(
                    self.config.listener.matches_collection,
                    today,
                    self._on_today_matches,
                )
            except DocumentStoreError as e:
                raise ListenerError(f"Cannot listen to {TODAY_MATCHES_KEY}: {e}") from e
        self.logger.info(f"Listening to matches of {today}")
        return True

    def _on_today_matches(self, data: Optional[JSONDict]):
        if not data or not isinstance(data.get('matches'), list):
            self.logger.warning("No matches for today")
            return
        try:
            matches = parse_matches(data['matches'])
            with self._lock:
                self.today_matches = matches
            self.logger.info(f"{len(matches)} matches updated")
            self.dispatcher.bus.publish(TodayMatchesUpdated(count=len(matches), matches=matches))
        except Exception as e:
            self.metrics.record_error(TODAY_MATCHES_KEY, e)
            self.logger.error(f"Failed to process today's matches: {e}")

    def stop_listening_to_today_matches(self) -> bool:
        with self._lock:
            subscription, self._today_listener = self._today_listener, None
        if subscription is None:
            return False
        subscription.unsubscribe()
        return True

    # ------------------------------------------------------------------
    # Accessors and teardown
    # ------------------------------------------------------------------

    def get_match(self, match_id: MatchID) -> Optional[Match]:
        with self._lock:
            return self._matches.get(match_id)

    def get_events(self, match_id: MatchID) -> List[MatchEvent]:
        with self._lock:
            return list(self._events.get(match_id, []))

    def stop_all(self):
        """Release every subscription and clear every cache."""
        with self._lock:
            subscriptions = list(self._listeners.values()) + list(self._event_listeners.values())
            if self._today_listener is not None:
                subscriptions.append(self._today_listener)
            self._listeners.clear()
            self._event_listeners.clear()
            self._today_listener = None
            self._matches.clear()
            self._events.clear()
            self.today_matches = []

        for subscription in subscriptions:
            subscription.unsubscribe()
        self.dispatcher.clear()
        self.logger.info(f"All listeners stopped ({len(subscriptions)} subscriptions released)")

    def close(self):
        self.stop_all()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
