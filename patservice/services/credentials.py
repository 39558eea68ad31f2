"""
Issue, list and revoke repository access tokens.

Tokens use envelope encryption: every Issue call asks the key provider for a
fresh data key, stores the encrypted half as the record's ``token`` and hands
the plaintext half back to the caller. The table therefore never holds a
usable credential; turning a stored value back into one requires the master
key. Validating a presented credential (decrypting and comparing, checking
``expiration``) is left to whatever gateway consumes these records.
"""

from __future__ import annotations

import base64
import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional, Protocol, Union

from patservice.clients.kms import DataKeyPair
from patservice.core.errors import ValidationError
from patservice.models import TokenRecord

logger = logging.getLogger(__name__)


class KeyProvider(Protocol):
    def generate_key_pair(self) -> DataKeyPair: ...


class TokenStore(Protocol):
    def put(self, record: TokenRecord) -> None: ...

    def query_by_repo(
        self,
        repo_id: str,
        username: Optional[str] = None,
        *,
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> List[TokenRecord]: ...

    def delete_by_token(self, token: str) -> bool: ...


def to_epoch_seconds(expiration: Union[int, datetime]) -> int:
    """Convert an expiry to epoch seconds; naive datetimes are taken as UTC."""
    if isinstance(expiration, datetime):
        if expiration.tzinfo is None:
            expiration = expiration.replace(tzinfo=timezone.utc)
        return int(expiration.timestamp())
    if isinstance(expiration, bool) or not isinstance(expiration, int):
        raise ValidationError("Expiration must be a datetime or epoch seconds.")
    return expiration


def _require(value: Optional[str], name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{name} is required.")
    return value


class CredentialService:
    """Token lifecycle operations over an injected key provider and store."""

    def __init__(self, key_provider: KeyProvider, token_store: TokenStore) -> None:
        self._keys = key_provider
        self._store = token_store

    def issue(
        self, repo_id: str, username: str, expiration: Union[int, datetime]
    ) -> str:
        """Mint a token for ``username`` on ``repo_id`` and return its plaintext."""
        _require(repo_id, "repo_id")
        _require(username, "username")
        expires_at = to_epoch_seconds(expiration)

        pair = self._keys.generate_key_pair()
        record = TokenRecord(
            token=base64.b64encode(pair.ciphertext).decode("ascii"),
            repo_id=repo_id,
            username=username,
            expiration=expires_at,
        )
        self._store.put(record)
        logger.info(
            "Issued token for user %s on repo %s expiring at %d",
            username,
            repo_id,
            expires_at,
        )
        return base64.b64encode(pair.plaintext).decode("ascii")

    def list(
        self,
        repo_id: str,
        username: Optional[str] = None,
        *,
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> List[TokenRecord]:
        """Return every stored token for a repository, optionally for one user."""
        _require(repo_id, "repo_id")
        records = self._store.query_by_repo(
            repo_id, username or None, should_stop=should_stop
        )
        logger.info("Listed %d token(s) for repo %s", len(records), repo_id)
        return records

    def revoke(self, token: str) -> bool:
        """Delete a stored token; revoking an unknown token still succeeds."""
        _require(token, "token")
        success = self._store.delete_by_token(token)
        logger.info("Revoked token")
        return success


__all__ = ["CredentialService", "KeyProvider", "TokenStore", "to_epoch_seconds"]
