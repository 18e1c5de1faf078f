"""
Typed in-process message bus.

Subscribers register for a message class; publishing delivers the message
to every handler registered for that exact class. A failing handler is
logged and the remaining handlers still run.

Usage:
    from liverugby.dispatch import MessageBus, LiveMatchUpdated

    bus = MessageBus()
    bus.subscribe(LiveMatchUpdated, lambda msg: print(msg.match.score_text))
"""

import threading
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar

from ..core.types import JSONDict
from ..models import Match
from ..utils.logging_utils import get_logger


@dataclass(frozen=True)
class LiveMatchUpdated:
    """A live match document produced a new canonical state."""
    match_id: int
    match: Match
    previous: Optional[Match] = None


@dataclass(frozen=True)
class MatchEventReceived:
    """A feed event (try, card, ...) arrived for a match."""
    match_id: int
    event_type: str
    event_data: JSONDict = field(default_factory=dict)
    source: str = "unknown"


@dataclass(frozen=True)
class TodayMatchesUpdated:
    """The cached list of today's matches changed."""
    count: int
    matches: List[Match] = field(default_factory=list)


M = TypeVar('M')
Handler = Callable[[Any], None]


class MessageBus:
    """Publish/subscribe channel keyed by message type."""

    def __init__(self):
        self._handlers: Dict[type, List[Handler]] = defaultdict(list)
        self._lock = threading.Lock()
        self.logger = get_logger()

    def subscribe(self, message_type: Type[M], handler: Callable[[M], None]) -> Callable[[], None]:
        """Register a handler and return a callable that removes it."""
        with self._lock:
            self._handlers[message_type].append(handler)

        def _remove():
            with self._lock:
                if handler in self._handlers[message_type]:
                    self._handlers[message_type].remove(handler)

        return _remove

    def publish(self, message: Any) -> int:
        """Deliver to every handler for ``type(message)``; returns how many succeeded."""
        with self._lock:
            handlers = list(self._handlers.get(type(message), ()))

        delivered = 0
        for handler in handlers:
            try:
                handler(message)
                delivered += 1
            except Exception as e:
                self.logger.error(
                    f"Handler {getattr(handler, '__name__', handler)!r} failed "
                    f"for {type(message).__name__}: {e}"
                )
        return delivered

    def handler_count(self, message_type: type) -> int:
        with self._lock:
            return len(self._handlers.get(message_type, ()))
