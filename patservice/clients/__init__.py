"""Expose constructed client wrappers."""

from .dynamodb import DynamoDBTokenStore
from .kms import DataKeyPair, KMSKeyProvider
from .local_keys import LocalKeyProvider
from .sqlite_store import SQLiteTokenStore

__all__ = [
    "DataKeyPair",
    "DynamoDBTokenStore",
    "KMSKeyProvider",
    "LocalKeyProvider",
    "SQLiteTokenStore",
]
