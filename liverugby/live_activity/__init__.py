"""
Live Activity package - lock screen / Dynamic Island state.
"""
from .apns import ActivityPushSender, build_activity_message
from .manager import LiveActivity, LiveActivityManager, attributes_for, state_for

__all__ = [
    'ActivityPushSender', 'build_activity_message',
    'LiveActivity', 'LiveActivityManager', 'attributes_for', 'state_for',
]
