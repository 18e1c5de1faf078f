"""End-to-end tests of the assembled application."""

from unittest.mock import Mock

import pytest
from firebase_admin import messaging

from liverugby.api import FunctionsClient
from liverugby.app import build_app
from liverugby.core.constants import Collections
from liverugby.dispatch import LiveMatchUpdated, MatchEventReceived

from conftest import FakeMulticast

MATCH_ID = 49925


@pytest.fixture
def activity_send():
    return Mock(return_value="projects/test/messages/1")


@pytest.fixture
def app(config, store, fake_multicast, activity_send):
    app = build_app(config, store=store, multicast_send=fake_multicast, activity_send=activity_send)
    yield app
    app.close()


class TestBuildApp:

    def test_wiring(self, app, store):
        assert [s.name for s in app.dispatcher.sinks] == [
            'LiveActivitySink', 'WidgetSnapshotSink', 'PushRelaySink',
        ]
        assert app.dispatcher.sinks[2].enabled is False
        assert app.dispatcher.live_activity is app.live_activities
        assert app.listener.store is store
        assert app.functions.monitor is app.monitor
        assert app.relay.batch_size == 500

    def test_functions_client(self, app):
        client = app.functions_client(id_token="id-token")
        assert isinstance(client, FunctionsClient)
        client.close()

    def test_close_releases_subscriptions(self, config, store):
        with build_app(config, store=store) as app:
            app.listener.start_listening(MATCH_ID)
            assert store.active_watch_count == 2
        assert store.active_watch_count == 0


class TestLiveFlow:
    """A liveMatches write travels through the listener to every consumer."""

    def test_snapshot_reaches_widget_with_logos(self, app, store, sample_live_doc):
        updates = []
        app.bus.subscribe(LiveMatchUpdated, updates.append)
        app.listener.start_listening(MATCH_ID)

        store.set_document(Collections.LIVE_MATCHES, MATCH_ID, sample_live_doc)

        assert updates[0].match.home_team.logo == sample_live_doc['homeTeam']['logo']
        snapshot = app.widget_store.load_snapshot()
        assert snapshot['match_id'] == MATCH_ID
        assert snapshot['home_team']['logo'] == sample_live_doc['homeTeam']['logo']
        assert snapshot['away_team']['logo'] == ""
        assert snapshot['home_team']['score'] == 7

    def test_running_activity_is_pushed(self, app, store, activity_send, sample_live_doc):
        app.functions.activity_tokens.register("user-1", MATCH_ID, "apns-token")
        app.listener.start_listening(MATCH_ID)
        store.set_document(Collections.LIVE_MATCHES, MATCH_ID, sample_live_doc)
        app.live_activities.start_activity(app.listener.get_match(MATCH_ID))

        store.update_document(Collections.LIVE_MATCHES, MATCH_ID, {'homeScore': 14})

        message = activity_send.call_args[0][0]
        assert isinstance(message, messaging.Message)
        assert message.token == "apns-token"
        content = message.apns.payload.aps.custom_data['content-state']
        assert content['homeScore'] == 14
        assert content['recentEvent'] == "Essai marqué!"

    def test_final_whistle_ends_activity(self, app, store, activity_send, sample_live_doc):
        app.functions.activity_tokens.register("user-1", MATCH_ID, "apns-token")
        app.listener.start_listening(MATCH_ID)
        store.set_document(Collections.LIVE_MATCHES, MATCH_ID, sample_live_doc)
        app.live_activities.start_activity(app.listener.get_match(MATCH_ID))

        store.update_document(Collections.LIVE_MATCHES, MATCH_ID, {'status': "FT"})

        assert not app.live_activities.is_active(MATCH_ID)
        assert app.functions.activity_tokens.active_tokens(MATCH_ID) == []
        event = activity_send.call_args[0][0].apns.payload.aps.custom_data['event']
        assert event == "end"

    def test_webhook_event_reaches_listener(self, app, store, activity_send, sample_live_doc):
        received = []
        app.bus.subscribe(MatchEventReceived, received.append)
        app.functions.activity_tokens.register("user-1", MATCH_ID, "apns-token")
        app.listener.start_listening(MATCH_ID)
        store.set_document(Collections.LIVE_MATCHES, MATCH_ID, sample_live_doc)
        app.live_activities.start_activity(app.listener.get_match(MATCH_ID))

        app.functions.receive_webhook("test-key", {
            'type': "try",
            'time': "31'",
            'team': "away",
            'player': {'name': "Gregory Alldritt"},
            'fixture': {'id': MATCH_ID},
        })

        assert received[0].event_type == "try"
        assert app.live_activities.get(MATCH_ID).state.recent_event == "⭐ Essai de Gregory Alldritt (31')"
        assert activity_send.called

    def test_relayed_updates_notify_subscribers(self, config, store, sample_live_doc):
        send = FakeMulticast()
        with build_app(config, store=store, multicast_send=send, relay_updates=True) as app:
            app.functions.tokens.register_token("fan", "device-token", "ios")
            app.functions.subscriptions.subscribe("fan", MATCH_ID)
            app.listener.start_listening(MATCH_ID)
            store.set_document(Collections.LIVE_MATCHES, MATCH_ID, sample_live_doc)
            send.calls.clear()

            store.update_document(Collections.LIVE_MATCHES, MATCH_ID, {'awayScore': 10})

        assert len(send.calls) == 1
        assert send.calls[0].tokens == ["device-token"]
        assert send.calls[0].notification.body == "Toulouse 7 - 10 La Rochelle"
