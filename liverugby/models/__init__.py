"""Pydantic models for LiveRugby canonical records."""

from .events import EventPlayer, EventsSummary, MatchEvent
from .match import LeagueRef, Match, TeamRef
from .standing import Standing
from .team import League, RugbyLeague, Team
from .user import User, UserSettings
from .live_activity import LiveActivityAttributes, LiveActivityState
from .notification import MulticastResult, NotificationPayload, TokenSendResult
from .widget import WidgetMatchData, WidgetTeam

__all__ = [
    'EventPlayer', 'EventsSummary', 'MatchEvent',
    'LeagueRef', 'Match', 'TeamRef',
    'Standing',
    'League', 'RugbyLeague', 'Team',
    'User', 'UserSettings',
    'LiveActivityAttributes', 'LiveActivityState',
    'MulticastResult', 'NotificationPayload', 'TokenSendResult',
    'WidgetMatchData', 'WidgetTeam',
]
