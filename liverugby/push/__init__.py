"""
Push package - notification texts, FCM multicast relay, token registries
and live-match monitoring.
"""
from .events import MatchTransition, detect_match_events, recent_event_text
from .messages import (
    build_event_notification,
    create_favorite_teams_notification,
    create_match_end_notification,
    create_match_start_notification,
    create_score_update_notification,
)
from .relay import PushRelay, build_data_payload, chunk_tokens, is_invalid_token_error
from .tokens import ActivityTokenRegistry, SubscriptionRegistry, TokenRegistry
from .notifier import MatchNotifier, match_data_payload
from .monitor import MatchMonitor, relevant_matches

__all__ = [
    'MatchTransition', 'detect_match_events', 'recent_event_text',
    'build_event_notification', 'create_favorite_teams_notification',
    'create_match_end_notification', 'create_match_start_notification',
    'create_score_update_notification',
    'PushRelay', 'build_data_payload', 'chunk_tokens', 'is_invalid_token_error',
    'ActivityTokenRegistry', 'SubscriptionRegistry', 'TokenRegistry',
    'MatchNotifier', 'match_data_payload',
    'MatchMonitor', 'relevant_matches',
]
