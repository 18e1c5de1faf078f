"""Protocol definitions for LiveRugby components.

Platform collaborators (the document store, the Live Activity surface,
the widget snapshot) are reached only through these narrow ports, so the
normalization and fan-out core runs the same against Firestore or an
in-memory fake.

Protocols defined:
- SubscriptionProtocol: handle returned by a standing watch
- DocumentStoreProtocol: document-oriented store (Firestore)
- LiveActivityPort: lock-screen / Dynamic Island state surface
- WidgetSnapshotPort: home-screen widget snapshot persistence
"""

from typing import Any, Dict, Iterable, List, Optional, Protocol, Tuple, runtime_checkable

from .types import DocumentCallback, JSONDict, QueryCallback, QueryFilter


@runtime_checkable
class SubscriptionProtocol(Protocol):
    """A standing subscription that can be released exactly once."""

    def unsubscribe(self) -> None:
        ...


@runtime_checkable
class DocumentStoreProtocol(Protocol):
    """Protocol for document store implementations.

    Documents are loosely-typed nested dictionaries addressed by
    ``(collection, doc_id)``. Writes accept the store's sentinel values
    (see ``server_timestamp``).
    """

    def get_document(self, collection: str, doc_id: str) -> Optional[JSONDict]:
        """Return the document data, or None if it does not exist."""
        ...

    def set_document(self, collection: str, doc_id: str, data: JSONDict, merge: bool = False) -> None:
        ...

    def update_document(self, collection: str, doc_id: str, data: JSONDict) -> None:
        """Update fields of an existing document.

        Raises:
            DocumentStoreError: If the document does not exist
        """
        ...

    def add_document(self, collection: str, data: JSONDict) -> str:
        """Create a document with a generated id and return that id."""
        ...

    def query(
        self,
        collection: str,
        filters: Iterable[QueryFilter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Tuple[str, JSONDict]]:
        """Run a one-shot query and return ``(doc_id, data)`` pairs.

        Supported operators: ``==``, ``array-contains``.
        """
        ...

    def array_union(self, collection: str, doc_id: str, field: str, values: List[Any]) -> None:
        ...

    def array_remove(self, collection: str, doc_id: str, field: str, values: List[Any]) -> None:
        ...

    def server_timestamp(self) -> Any:
        """Sentinel replaced by the commit time on write."""
        ...

    def watch_document(
        self,
        collection: str,
        doc_id: str,
        on_snapshot: DocumentCallback,
    ) -> SubscriptionProtocol:
        """Deliver the document (None when missing) on every commit."""
        ...

    def watch_query(
        self,
        collection: str,
        filters: Iterable[QueryFilter],
        on_snapshot: QueryCallback,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> SubscriptionProtocol:
        """Deliver the documents added to the query result on every change."""
        ...


@runtime_checkable
class LiveActivityPort(Protocol):
    """Platform live-activity surface keyed by match id."""

    def is_active(self, match_id: int) -> bool:
        ...

    def update_activity(self, match: Any, recent_event: Optional[str] = None) -> bool:
        """Push the canonical match state. Returns False when no activity exists."""
        ...

    def end_activity(self, match: Any) -> bool:
        ...


@runtime_checkable
class WidgetSnapshotPort(Protocol):
    """Persistence for the widget's current match snapshot."""

    def save_snapshot(self, data: Dict[str, Any]) -> None:
        ...

    def load_snapshot(self) -> Optional[Dict[str, Any]]:
        ...


__all__ = [
    'SubscriptionProtocol',
    'DocumentStoreProtocol',
    'LiveActivityPort',
    'WidgetSnapshotPort',
]
