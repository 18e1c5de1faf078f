"""Tests for the live match listener."""

from unittest.mock import Mock

import pytest

from liverugby.core.constants import Collections
from liverugby.core.exceptions import DocumentStoreError, ListenerError
from liverugby.dispatch import LiveMatchUpdated, MatchEventReceived, TodayMatchesUpdated
from liverugby.listeners import LiveMatchListener

MATCH_ID = 49925


@pytest.fixture
def listener(store, dispatcher, config):
    listener = LiveMatchListener(store, dispatcher, config)
    yield listener
    listener.close()


def collect(bus, message_type):
    received = []
    bus.subscribe(message_type, received.append)
    return received


def feed_event(match_id, event_type="try", **extra):
    return {
        'event': {
            'type': event_type,
            'time': "23'",
            'team': "home",
            'player': {'name': "Antoine Dupont"},
            'fixture': {'id': match_id},
            **extra,
        },
        'source': "webhook",
        'receivedAt': "2025-03-01T20:28:00Z",
    }


class TestSubscriptionLifecycle:
    """Tests for start/stop bookkeeping."""

    def test_start_twice_keeps_one_subscription_pair(self, listener, store):
        """A second start is a no-op: one document and one events watch"""
        assert listener.start_listening(MATCH_ID) is True
        assert listener.start_listening(MATCH_ID) is False

        assert store.active_watch_count == 2
        assert listener.active_match_ids == [MATCH_ID]

    def test_stop_releases_and_clears(self, listener, store, sample_live_doc, dispatcher):
        listener.start_listening(MATCH_ID)
        store.set_document(Collections.LIVE_MATCHES, MATCH_ID, sample_live_doc)
        assert listener.get_match(MATCH_ID) is not None

        assert listener.stop_listening(MATCH_ID) is True
        assert store.active_watch_count == 0
        assert listener.get_match(MATCH_ID) is None
        assert listener.get_events(MATCH_ID) == []
        assert dispatcher.get(MATCH_ID) is None
        assert listener.is_listening(MATCH_ID) is False

    def test_stop_twice(self, listener):
        listener.start_listening(MATCH_ID)
        assert listener.stop_listening(MATCH_ID) is True
        assert listener.stop_listening(MATCH_ID) is False

    def test_stop_unknown_match(self, listener):
        assert listener.stop_listening(12345) is False

    def test_restart_after_stop(self, listener, store):
        listener.start_listening(MATCH_ID)
        listener.stop_listening(MATCH_ID)
        assert listener.start_listening(MATCH_ID) is True
        assert store.active_watch_count == 2

    def test_watch_failure_raises_listener_error(self, listener, store):
        store.fail_on.add('watch')
        with pytest.raises(ListenerError):
            listener.start_listening(MATCH_ID)
        assert listener.is_listening(MATCH_ID) is False

    def test_events_watch_failure_releases_match_watch(self, listener, store, monkeypatch):
        monkeypatch.setattr(store, 'watch_query', Mock(side_effect=DocumentStoreError("watch refused")))
        with pytest.raises(ListenerError):
            listener.start_listening(MATCH_ID)
        assert store.active_watch_count == 0
        assert listener.is_listening(MATCH_ID) is False
        assert listener.active_match_ids == []

    def test_stop_all(self, listener, store):
        listener.start_listening(1)
        listener.start_listening(2)
        listener.listen_to_today_matches(today="2025-03-01")
        assert store.active_watch_count == 5

        listener.stop_all()
        assert store.active_watch_count == 0
        assert listener.active_match_ids == []
        assert listener.today_matches == []

    def test_context_manager_releases(self, store, dispatcher, config):
        with LiveMatchListener(store, dispatcher, config) as listener:
            listener.start_listening(MATCH_ID)
        assert store.active_watch_count == 0


class TestMatchSnapshots:
    """Tests for snapshot normalization and deduplication."""

    def test_snapshot_is_published(self, listener, store, bus, sample_live_doc):
        updates = collect(bus, LiveMatchUpdated)
        listener.start_listening(MATCH_ID)
        store.set_document(Collections.LIVE_MATCHES, MATCH_ID, sample_live_doc)

        assert len(updates) == 1
        assert updates[0].previous is None
        match = updates[0].match
        assert match.id == MATCH_ID
        assert match.home_team.logo == sample_live_doc['homeTeam']['logo']
        assert match.away_team.logo is None
        assert len(listener.get_events(MATCH_ID)) == 2

    def test_identical_snapshot_is_skipped(self, listener, store, bus, sample_live_doc):
        updates = collect(bus, LiveMatchUpdated)
        listener.start_listening(MATCH_ID)
        store.set_document(Collections.LIVE_MATCHES, MATCH_ID, sample_live_doc)
        store.emit(Collections.LIVE_MATCHES, MATCH_ID)

        assert len(updates) == 1
        assert listener.metrics.duplicates_skipped == 1
        assert listener.metrics.snapshots_received == 2

    def test_changed_snapshot_carries_previous(self, listener, store, bus, sample_live_doc):
        updates = collect(bus, LiveMatchUpdated)
        listener.start_listening(MATCH_ID)
        store.set_document(Collections.LIVE_MATCHES, MATCH_ID, sample_live_doc)
        store.update_document(Collections.LIVE_MATCHES, MATCH_ID, {'homeScore': 14})

        assert len(updates) == 2
        assert updates[1].previous.home_score == 7
        assert updates[1].match.home_score == 14
        assert listener.get_match(MATCH_ID).score_text == "14 - 3"

    def test_missing_document(self, listener, store, bus):
        updates = collect(bus, LiveMatchUpdated)
        listener.start_listening(MATCH_ID)
        store.emit(Collections.LIVE_MATCHES, MATCH_ID)

        assert updates == []
        assert listener.metrics.missing_documents == 1

    def test_failing_delivery_keeps_subscription(self, listener, store, dispatcher, sample_live_doc):
        """A callback error is recorded and later snapshots still arrive"""
        listener.start_listening(MATCH_ID)
        original = dispatcher.publish_match
        dispatcher.publish_match = Mock(side_effect=RuntimeError("sink exploded"))
        store.set_document(Collections.LIVE_MATCHES, MATCH_ID, sample_live_doc)

        assert listener.metrics.delivery_errors == 1
        assert listener.is_listening(MATCH_ID)

        dispatcher.publish_match = Mock(wraps=original)
        store.update_document(Collections.LIVE_MATCHES, MATCH_ID, {'awayScore': 10})
        assert dispatcher.publish_match.call_count == 1

    def test_snapshot_after_stop_is_ignored(self, listener, store, bus, sample_live_doc):
        updates = collect(bus, LiveMatchUpdated)
        listener.start_listening(MATCH_ID)
        callback = store._doc_watches[0][2]
        listener.stop_listening(MATCH_ID)

        callback(sample_live_doc)
        assert updates == []
        assert listener.get_match(MATCH_ID) is None


class TestFeedEvents:
    """Tests for the liveEvents query subscription."""

    def test_new_event_is_relayed(self, listener, store, bus):
        received = collect(bus, MatchEventReceived)
        listener.start_listening(MATCH_ID)
        store.add_document(Collections.LIVE_EVENTS, feed_event(MATCH_ID))

        assert len(received) == 1
        assert received[0].event_type == "try"
        assert received[0].source == "webhook"
        assert received[0].event_data['player']['name'] == "Antoine Dupont"
        assert listener.metrics.events_received == 1

    def test_other_match_events_are_not_delivered(self, listener, store, bus):
        received = collect(bus, MatchEventReceived)
        listener.start_listening(MATCH_ID)
        store.add_document(Collections.LIVE_EVENTS, feed_event(11111))
        assert received == []

    def test_incomplete_event_is_ignored(self, listener, dispatcher):
        dispatcher.publish_event = Mock()
        assert listener.handle_event(MATCH_ID, {'event': {'time': "5'"}}) is False
        assert listener.handle_event(MATCH_ID, {'source': "webhook"}) is False
        dispatcher.publish_event.assert_not_called()

    def test_source_defaults_to_unknown(self, listener, dispatcher):
        dispatcher.publish_event = Mock()
        assert listener.handle_event(MATCH_ID, {'event': {'type': "redcard"}}) is True
        dispatcher.publish_event.assert_called_once_with(MATCH_ID, "redcard", {'type': "redcard"}, "unknown")

    def test_events_listener_started_once(self, listener):
        listener.start_listening(MATCH_ID)
        assert listener.start_listening_to_events(MATCH_ID) is False


class TestTodayMatches:
    """Tests for the matches/{date} subscription."""

    def test_today_matches_published(self, listener, store, bus, sample_game):
        received = collect(bus, TodayMatchesUpdated)
        assert listener.listen_to_today_matches(today="2025-03-01") is True
        store.set_document(Collections.MATCHES, "2025-03-01", {'matches': [sample_game]})

        assert len(received) == 1
        assert received[0].count == 1
        assert listener.today_matches[0].home_team.name == "Toulouse"

    def test_today_listener_started_once(self, listener):
        listener.listen_to_today_matches(today="2025-03-01")
        assert listener.listen_to_today_matches(today="2025-03-01") is False

    def test_document_without_matches(self, listener, store, bus):
        received = collect(bus, TodayMatchesUpdated)
        listener.listen_to_today_matches(today="2025-03-01")
        store.set_document(Collections.MATCHES, "2025-03-01", {'updatedAt': "now"})
        assert received == []

    def test_stop_today_listener(self, listener, store):
        listener.listen_to_today_matches(today="2025-03-01")
        assert listener.stop_listening_to_today_matches() is True
        assert listener.stop_listening_to_today_matches() is False
        assert store.active_watch_count == 0
