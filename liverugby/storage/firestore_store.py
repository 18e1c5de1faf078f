"""
Firestore adapter for the document store port.

Initializes the Firebase Admin SDK once per process (service account file
when GOOGLE_APPLICATION_CREDENTIALS points at one, Application Default
Credentials otherwise) and maps the narrow store operations onto the
Firestore client.
"""

import os
from typing import Any, Iterable, List, Optional, Tuple

import firebase_admin
from firebase_admin import credentials, firestore
from google.api_core import exceptions as google_exceptions
from google.cloud.firestore_v1.base_query import FieldFilter

from ..config import FirebaseConfig
from ..core.exceptions import DocumentStoreError
from ..core.types import DocumentCallback, JSONDict, QueryCallback, QueryFilter
from ..utils.logging_utils import get_logger

logger = get_logger()


def initialize_firebase(config: Optional[FirebaseConfig] = None) -> None:
    """Initialize the default Firebase app if no app exists yet."""
    if firebase_admin._apps:
        return

    cred_path = config.credentials_path if config else os.getenv('GOOGLE_APPLICATION_CREDENTIALS')
    options = {'projectId': config.project_id} if config and config.project_id else None

    if cred_path and os.path.exists(cred_path):
        cred = credentials.Certificate(cred_path)
        firebase_admin.initialize_app(cred, options)
        logger.info(f"Firebase initialized with credentials: {cred_path}")
    else:
        firebase_admin.initialize_app(options=options)
        logger.info("Firebase initialized with application default credentials")


class FirestoreSubscription:
    """Handle around a Firestore watch; unsubscribing twice is harmless."""

    def __init__(self, watch, description: str):
        self._watch = watch
        self.description = description

    def unsubscribe(self) -> None:
        if self._watch is None:
            return
        self._watch.unsubscribe()
        self._watch = None
        logger.debug(f"Unsubscribed from {self.description}")


class FirestoreDocumentStore:
    """Document store backed by Cloud Firestore."""

    def __init__(self, client=None, config: Optional[FirebaseConfig] = None):
        if client is None:
            initialize_firebase(config)
            client = firestore.client()
        self.db = client

    # ------------------------------------------------------------------
    # Reads and writes
    # ------------------------------------------------------------------

    def _doc(self, collection: str, doc_id: str):
        return self.db.collection(collection).document(str(doc_id))

    def get_document(self, collection: str, doc_id: str) -> Optional[JSONDict]:
        try:
            snapshot = self._doc(collection, doc_id).get()
        except google_exceptions.GoogleAPICallError as e:
            raise DocumentStoreError(
                f"Failed to read {collection}/{doc_id}: {e}",
                details={'collection': collection, 'doc_id': doc_id},
            ) from e
        return snapshot.to_dict() if snapshot.exists else None

    def set_document(self, collection: str, doc_id: str, data: JSONDict, merge: bool = False) -> None:
        try:
            self._doc(collection, doc_id).set(data, merge=merge)
        except google_exceptions.GoogleAPICallError as e:
            raise DocumentStoreError(f"Failed to write {collection}/{doc_id}: {e}") from e

    def update_document(self, collection: str, doc_id: str, data: JSONDict) -> None:
        try:
            self._doc(collection, doc_id).update(data)
        except google_exceptions.NotFound as e:
            raise DocumentStoreError(
                f"Document {collection}/{doc_id} does not exist",
                details={'collection': collection, 'doc_id': doc_id},
            ) from e
        except google_exceptions.GoogleAPICallError as e:
            raise DocumentStoreError(f"Failed to update {collection}/{doc_id}: {e}") from e

    def add_document(self, collection: str, data: JSONDict) -> str:
        try:
            _, ref = self.db.collection(collection).add(data)
        except google_exceptions.GoogleAPICallError as e:
            raise DocumentStoreError(f"Failed to add to {collection}: {e}") from e
        return ref.id

    def _build_query(
        self,
        collection: str,
        filters: Iterable[QueryFilter],
        order_by: Optional[str],
        descending: bool,
        limit: Optional[int],
    ):
        query = self.db.collection(collection)
        for field_path, op, value in filters:
            query = query.where(filter=FieldFilter(field_path, op, value))
        if order_by:
            direction = firestore.Query.DESCENDING if descending else firestore.Query.ASCENDING
            query = query.order_by(order_by, direction=direction)
        if limit:
            query = query.limit(limit)
        return query

    def query(
        self,
        collection: str,
        filters: Iterable[QueryFilter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Tuple[str, JSONDict]]:
        query = self._build_query(collection, filters, order_by, descending, limit)
        try:
            return [(doc.id, doc.to_dict()) for doc in query.stream()]
        except google_exceptions.GoogleAPICallError as e:
            raise DocumentStoreError(f"Query on {collection} failed: {e}") from e

    def array_union(self, collection: str, doc_id: str, field: str, values: List[Any]) -> None:
        self.update_document(collection, doc_id, {field: firestore.ArrayUnion(values)})

    def array_remove(self, collection: str, doc_id: str, field: str, values: List[Any]) -> None:
        self.update_document(collection, doc_id, {field: firestore.ArrayRemove(values)})

    def server_timestamp(self) -> Any:
        return firestore.SERVER_TIMESTAMP

    # ------------------------------------------------------------------
    # Watches
    # ------------------------------------------------------------------

    def watch_document(self, collection: str, doc_id: str, on_snapshot: DocumentCallback) -> FirestoreSubscription:
        """Subscribe to one document.

        Firestore invokes the callback on its own thread with the list of
        snapshots; the callback here receives the data dict or None.
        """
        def _callback(doc_snapshots, changes, read_time):
            for snapshot in doc_snapshots:
                on_snapshot(snapshot.to_dict() if snapshot.exists else None)
            if not doc_snapshots:
                on_snapshot(None)

        try:
            watch = self._doc(collection, doc_id).on_snapshot(_callback)
        except google_exceptions.GoogleAPICallError as e:
            raise DocumentStoreError(f"Cannot watch {collection}/{doc_id}: {e}") from e
        return FirestoreSubscription(watch, f"{collection}/{doc_id}")

    def watch_query(
        self,
        collection: str,
        filters: Iterable[QueryFilter],
        on_snapshot: QueryCallback,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> FirestoreSubscription:
        """Subscribe to a query; only documents newly added to the result are delivered."""
        query = self._build_query(collection, list(filters), order_by, descending, limit)

        def _callback(query_snapshot, changes, read_time):
            added = [
                change.document.to_dict()
                for change in changes
                if change.type.name == 'ADDED'
            ]
            if added:
                on_snapshot(added)

        try:
            watch = query.on_snapshot(_callback)
        except google_exceptions.GoogleAPICallError as e:
            raise DocumentStoreError(f"Cannot watch query on {collection}: {e}") from e
        return FirestoreSubscription(watch, f"query:{collection}")
