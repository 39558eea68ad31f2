"""Service layer exports."""

from .credentials import CredentialService, KeyProvider, TokenStore, to_epoch_seconds

__all__ = [
    "CredentialService",
    "KeyProvider",
    "TokenStore",
    "to_epoch_seconds",
]
