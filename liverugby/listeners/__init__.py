"""
Listeners package - document store subscriptions for live matches.
"""
from .live_match_listener import LiveMatchListener

__all__ = ['LiveMatchListener']
