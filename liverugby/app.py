"""
Composition root.

Builds every component of one process from a single configuration. No
component is a module-level singleton; tests and entry points build
their own ``App`` and close it when done.

Usage:
    with build_app(load_config()) as app:
        app.listener.start_listening(49925)
"""

from dataclasses import dataclass
from typing import Callable, Optional

import requests

from .api import FunctionsClient, RugbyApiClient, RugbyFunctions
from .config import LiveRugbyConfig
from .core.interfaces import DocumentStoreProtocol
from .dispatch import (
    FanOutDispatcher,
    LiveActivitySink,
    MessageBus,
    PushRelaySink,
    WidgetSnapshotSink,
)
from .listeners import LiveMatchListener
from .live_activity import ActivityPushSender, LiveActivityManager
from .push import (
    ActivityTokenRegistry,
    MatchMonitor,
    MatchNotifier,
    PushRelay,
    SubscriptionRegistry,
    TokenRegistry,
)
from .utils.logging_utils import get_logger
from .widget import JsonWidgetSnapshotStore

logger = get_logger()


@dataclass
class App:
    config: LiveRugbyConfig
    store: DocumentStoreProtocol
    bus: MessageBus
    dispatcher: FanOutDispatcher
    listener: LiveMatchListener
    live_activities: LiveActivityManager
    widget_store: JsonWidgetSnapshotStore
    relay: PushRelay
    notifier: MatchNotifier
    client: RugbyApiClient
    monitor: MatchMonitor
    functions: RugbyFunctions

    def functions_client(self, id_token=None) -> FunctionsClient:
        return FunctionsClient(self.config, id_token=id_token)

    def close(self):
        """Release listener subscriptions and the HTTP session."""
        self.listener.close()
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def build_app(
    config: Optional[LiveRugbyConfig] = None,
    store: Optional[DocumentStoreProtocol] = None,
    session: Optional[requests.Session] = None,
    multicast_send: Optional[Callable] = None,
    activity_send: Optional[Callable] = None,
    widget_team_id: Optional[int] = None,
    relay_updates: bool = False,
) -> App:
    """
    Wire the components of one process.

    Args:
        config: Configuration, read from the environment when omitted
        store: Document store, Firestore when omitted
        session: HTTP session for the rugby API client
        multicast_send: Replacement for ``messaging.send_each_for_multicast``
        activity_send: Replacement for ``messaging.send``
        widget_team_id: Restrict the widget snapshot to one team
        relay_updates: Also push listener-observed transitions to subscribers.
            Off by default, the scheduled monitor already notifies them.

    Returns:
        The assembled App
    """
    config = config or LiveRugbyConfig()

    if store is None:
        from .storage import FirestoreDocumentStore
        store = FirestoreDocumentStore(config=config.firebase)

    activity_sender = ActivityPushSender(ActivityTokenRegistry(store), send=activity_send)
    live_activities = LiveActivityManager(sender=activity_sender)

    relay = PushRelay(send=multicast_send, batch_size=config.push.batch_size)
    notifier = MatchNotifier(relay, TokenRegistry(store), SubscriptionRegistry(store))

    widget_store = JsonWidgetSnapshotStore(config.widget.snapshot_dir)
    bus = MessageBus()
    dispatcher = FanOutDispatcher(
        bus=bus,
        sinks=[
            LiveActivitySink(live_activities),
            WidgetSnapshotSink(widget_store, team_id=widget_team_id),
            PushRelaySink(notifier, enabled=relay_updates),
        ],
        live_activity=live_activities,
    )
    listener = LiveMatchListener(store, dispatcher, config)

    client = RugbyApiClient(config, session=session)
    monitor = MatchMonitor(client, store, notifier, config, activity_sender=activity_sender)
    functions = RugbyFunctions(client, store, config, monitor=monitor)

    logger.debug(f"App built with sinks: {', '.join(s.name for s in dispatcher.sinks)}")
    return App(
        config=config,
        store=store,
        bus=bus,
        dispatcher=dispatcher,
        listener=listener,
        live_activities=live_activities,
        widget_store=widget_store,
        relay=relay,
        notifier=notifier,
        client=client,
        monitor=monitor,
        functions=functions,
    )
