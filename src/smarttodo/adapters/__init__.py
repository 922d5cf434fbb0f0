"""Adapters - I/O implementations of ports."""

from .firebase_auth import AuthenticationError, FirebaseAuthAdapter, LocalAuthAdapter
from .file_store import FileTaskStore
from .firestore import FirestoreTaskStore

__all__ = [
    "AuthenticationError",
    "FirebaseAuthAdapter",
    "LocalAuthAdapter",
    "FileTaskStore",
    "FirestoreTaskStore",
]
