"""
Dispatch package - typed message bus and fan-out of match updates.
"""
from .bus import LiveMatchUpdated, MatchEventReceived, MessageBus, TodayMatchesUpdated
from .dispatcher import FanOutDispatcher
from .sinks import LiveActivitySink, PushRelaySink, UpdateSink, WidgetSnapshotSink

__all__ = [
    'LiveMatchUpdated', 'MatchEventReceived', 'MessageBus', 'TodayMatchesUpdated',
    'FanOutDispatcher',
    'LiveActivitySink', 'PushRelaySink', 'UpdateSink', 'WidgetSnapshotSink',
]
