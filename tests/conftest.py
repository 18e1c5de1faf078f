"""Pytest configuration and fixtures"""

import copy
import itertools
from types import SimpleNamespace

import pytest

from liverugby.config import LiveRugbyConfig
from liverugby.core.exceptions import DocumentStoreError
from liverugby.dispatch import FanOutDispatcher, MessageBus

SERVER_TIMESTAMP = "SERVER_TIMESTAMP"


def _resolve(data, path):
    current = data
    for key in path.split('.'):
        if not isinstance(current, dict) or key not in current:
            return None
        current = current[key]
    return current


def _matches(data, filters):
    for path, op, value in filters:
        field_value = _resolve(data, path)
        if op == '==':
            if field_value != value:
                return False
        elif op == 'array-contains':
            if not isinstance(field_value, list) or value not in field_value:
                return False
        else:
            raise ValueError(f"Unsupported operator {op}")
    return True


def _deep_merge(target, source):
    for key, value in source.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _deep_merge(target[key], value)
        else:
            target[key] = copy.deepcopy(value)


class FakeSubscription:
    """Subscription handle counting its releases."""

    def __init__(self, registry, entry):
        self._registry = registry
        self._entry = entry
        self.unsubscribe_calls = 0

    def unsubscribe(self):
        self.unsubscribe_calls += 1
        if self._entry in self._registry:
            self._registry.remove(self._entry)


class InMemoryDocumentStore:
    """Document store fake.

    Watches fire synchronously on later writes; ``emit`` replays the current
    state of a watched document the way Firestore does right after a watch
    is attached.
    """

    def __init__(self):
        self.collections = {}
        self._doc_watches = []
        self._query_watches = []
        self._ids = itertools.count(1)
        self.fail_on = set()

    # -- helpers ---------------------------------------------------------

    def _check(self, operation):
        if operation in self.fail_on:
            raise DocumentStoreError(f"{operation} failed")

    def _collection(self, name):
        return self.collections.setdefault(name, {})

    def _notify(self, collection, doc_id, is_new):
        data = self.collections.get(collection, {}).get(doc_id)
        for watched_collection, watched_id, callback in list(self._doc_watches):
            if watched_collection == collection and watched_id == doc_id:
                callback(copy.deepcopy(data))
        if not is_new or data is None:
            return
        for watched_collection, filters, callback in list(self._query_watches):
            if watched_collection == collection and _matches(data, filters):
                callback([copy.deepcopy(data)])

    @property
    def active_watch_count(self):
        return len(self._doc_watches) + len(self._query_watches)

    def put(self, collection, doc_id, data):
        """Seed a document without triggering watches."""
        self._collection(collection)[str(doc_id)] = copy.deepcopy(data)

    def emit(self, collection, doc_id):
        """Deliver the current state of a document to its watchers."""
        self._notify(collection, str(doc_id), False)

    # -- DocumentStoreProtocol -------------------------------------------

    def get_document(self, collection, doc_id):
        self._check('get')
        data = self.collections.get(collection, {}).get(str(doc_id))
        return copy.deepcopy(data)

    def set_document(self, collection, doc_id, data, merge=False):
        self._check('set')
        docs = self._collection(collection)
        doc_id = str(doc_id)
        is_new = doc_id not in docs
        if merge and not is_new:
            _deep_merge(docs[doc_id], data)
        else:
            docs[doc_id] = copy.deepcopy(data)
        self._notify(collection, doc_id, is_new)

    def update_document(self, collection, doc_id, data):
        self._check('update')
        docs = self._collection(collection)
        doc_id = str(doc_id)
        if doc_id not in docs:
            raise DocumentStoreError(f"Document {collection}/{doc_id} does not exist")
        docs[doc_id].update(copy.deepcopy(data))
        self._notify(collection, doc_id, False)

    def add_document(self, collection, data):
        self._check('add')
        doc_id = f"doc-{next(self._ids)}"
        self._collection(collection)[doc_id] = copy.deepcopy(data)
        self._notify(collection, doc_id, True)
        return doc_id

    def query(self, collection, filters=(), order_by=None, descending=False, limit=None):
        self._check('query')
        results = [
            (doc_id, copy.deepcopy(data))
            for doc_id, data in self.collections.get(collection, {}).items()
            if _matches(data, filters)
        ]
        if order_by:
            results.sort(key=lambda item: str(_resolve(item[1], order_by)), reverse=descending)
        if limit:
            results = results[:limit]
        return results

    def array_union(self, collection, doc_id, field, values):
        self._check('update')
        docs = self._collection(collection)
        if str(doc_id) not in docs:
            raise DocumentStoreError(f"Document {collection}/{doc_id} does not exist")
        current = docs[str(doc_id)].setdefault(field, [])
        current.extend(v for v in values if v not in current)

    def array_remove(self, collection, doc_id, field, values):
        self._check('update')
        docs = self._collection(collection)
        if str(doc_id) not in docs:
            raise DocumentStoreError(f"Document {collection}/{doc_id} does not exist")
        docs[str(doc_id)][field] = [v for v in docs[str(doc_id)].get(field, []) if v not in values]

    def server_timestamp(self):
        return SERVER_TIMESTAMP

    def watch_document(self, collection, doc_id, on_snapshot):
        self._check('watch')
        entry = (collection, str(doc_id), on_snapshot)
        self._doc_watches.append(entry)
        return FakeSubscription(self._doc_watches, entry)

    def watch_query(self, collection, filters, on_snapshot, order_by=None, descending=False, limit=None):
        self._check('watch')
        filters = list(filters)
        entry = (collection, filters, on_snapshot)
        self._query_watches.append(entry)
        return FakeSubscription(self._query_watches, entry)


def send_response(success=True, message_id="msg-1", exception=None):
    return SimpleNamespace(success=success, message_id=message_id, exception=exception)


class FakeMulticast:
    """Stands in for messaging.send_each_for_multicast and records each call."""

    def __init__(self, failures=None):
        self.calls = []
        self.failures = failures or {}

    def __call__(self, message):
        self.calls.append(message)
        responses = []
        for token in message.tokens:
            error = self.failures.get(token)
            if error is None:
                responses.append(send_response(message_id=f"msg-{token}"))
            else:
                responses.append(send_response(success=False, message_id=None, exception=error))
        return SimpleNamespace(responses=responses)


class TokenError(Exception):
    """Send error carrying an FCM error code."""

    def __init__(self, code):
        super().__init__(code)
        self.code = code


@pytest.fixture
def store():
    """Create an empty in-memory document store"""
    return InMemoryDocumentStore()


@pytest.fixture
def config(tmp_path, monkeypatch):
    """Create test configuration"""
    monkeypatch.setenv('API_SPORTS_KEY', 'test-key')
    monkeypatch.delenv('PUSH_BATCH_SIZE', raising=False)
    monkeypatch.delenv('LIVE_EVENTS_LIMIT', raising=False)
    config = LiveRugbyConfig()
    config.widget.snapshot_dir = str(tmp_path / "widget")
    config.logging.dir = str(tmp_path / "logs")
    return config


@pytest.fixture
def bus():
    return MessageBus()


@pytest.fixture
def dispatcher(bus):
    return FanOutDispatcher(bus=bus)


@pytest.fixture
def fake_multicast():
    return FakeMulticast()


@pytest.fixture
def sample_game():
    """API-Sports /games item"""
    return {
        "id": 49925,
        "date": "2025-03-01T21:05:00+01:00",
        "time": "21:05",
        "timestamp": 1740859500,
        "timezone": "Europe/Paris",
        "week": "18",
        "status": {"long": "First Half", "short": "1H"},
        "country": {"id": 2, "name": "France"},
        "league": {"id": 16, "name": "Top 14", "season": 2024, "logo": "https://media.api-sports.io/rugby/leagues/16.png"},
        "teams": {
            "home": {"id": 107, "name": "Toulouse", "logo": "https://media.api-sports.io/rugby/teams/107.png"},
            "away": {"id": 95, "name": "La Rochelle", "logo": "https://media.api-sports.io/rugby/teams/95.png"},
        },
        "scores": {"home": 10, "away": 3},
    }


@pytest.fixture
def sample_live_doc():
    """liveMatches/{id} document"""
    return {
        "homeTeam": {"id": 107, "name": "Toulouse", "logo": "https://media.api-sports.io/rugby/teams/107.png"},
        "awayTeam": {"id": 95, "name": "La Rochelle"},
        "homeScore": 7,
        "awayScore": 3,
        "status": "1H",
        "time": {"date": "2025-03-01", "timestamp": 1740859500, "timer": "23:10", "elapsed": 23},
        "league": {"id": 16, "name": "Top 14", "logo": "https://media.api-sports.io/rugby/leagues/16.png"},
        "events": [
            {"type": "try", "time": "12'", "team": "home", "player": {"id": 1, "name": "Antoine Dupont"}},
            {"type": "penalty", "time": "18'", "team": "away", "player": {"name": "Ihaia West"}},
        ],
        "eventsSummary": {"tries": 1, "conversions": 0, "penalties": 1},
    }
