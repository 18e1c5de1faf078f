"""Metrics tracking for the listener and the push relay."""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass
class ListenerMetrics:
    """Counters for snapshot delivery on the change listener."""

    snapshots_received: int = 0
    updates_published: int = 0
    duplicates_skipped: int = 0
    missing_documents: int = 0
    events_received: int = 0
    delivery_errors: int = 0
    started_at: Optional[datetime] = None
    errors: List[Dict[str, Any]] = field(default_factory=list)

    def start(self):
        self.started_at = datetime.now()

    def record_snapshot(self):
        self.snapshots_received += 1

    def record_update(self):
        self.updates_published += 1

    def record_duplicate(self):
        self.duplicates_skipped += 1

    def record_missing(self):
        self.missing_documents += 1

    def record_event(self):
        self.events_received += 1

    def record_error(self, match_id: Any, error: Exception):
        """Record a delivery failure; the subscription stays registered."""
        self.delivery_errors += 1
        self.errors.append({
            'match_id': match_id,
            'error': str(error),
            'error_type': error.__class__.__name__,
            'timestamp': datetime.now().isoformat()
        })

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        if self.started_at:
            data['started_at'] = self.started_at.isoformat()
        return data


@dataclass
class RelayMetrics:
    """Counters for multicast sends."""

    multicast_calls: int = 0
    batches_sent: int = 0
    success_count: int = 0
    failure_count: int = 0
    invalid_tokens: int = 0

    def record_batch(self, success_count: int, failure_count: int, invalid_count: int):
        self.batches_sent += 1
        self.success_count += success_count
        self.failure_count += failure_count
        self.invalid_tokens += invalid_count

    def get_success_rate(self) -> float:
        """Percentage of tokens delivered, over every call."""
        total = self.success_count + self.failure_count
        if total == 0:
            return 0.0
        return round((self.success_count / total) * 100, 2)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['success_rate'] = self.get_success_rate()
        return data
