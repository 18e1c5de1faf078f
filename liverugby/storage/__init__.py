"""
Storage package - document store adapters.
"""
from .firestore_store import FirestoreDocumentStore, FirestoreSubscription, initialize_firebase

__all__ = ['FirestoreDocumentStore', 'FirestoreSubscription', 'initialize_firebase']
