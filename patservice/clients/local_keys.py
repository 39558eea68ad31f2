"""Fernet-wrapped data keys for running without AWS KMS."""

from __future__ import annotations

import base64
import binascii
import hashlib
import os

from cryptography.fernet import Fernet, InvalidToken

from patservice.clients.kms import DataKeyPair
from patservice.core.errors import KeyProviderError


class LocalKeyProvider:
    """Generate random data keys wrapped by a key derived from a local secret."""

    def __init__(self, *, secret: str, number_of_bytes: int = 20) -> None:
        if not secret:
            raise ValueError("Local key secret must be provided.")
        digest = hashlib.sha256(secret.encode("utf-8")).digest()
        self._fernet = Fernet(base64.urlsafe_b64encode(digest))
        self._number_of_bytes = number_of_bytes

    def generate_key_pair(self) -> DataKeyPair:
        """Return fresh random bytes together with their wrapped form."""
        plaintext = os.urandom(self._number_of_bytes)
        ciphertext = self._fernet.encrypt(plaintext)
        return DataKeyPair(plaintext=plaintext, ciphertext=ciphertext)

    def unwrap(self, stored_token: str) -> bytes:
        """Recover the plaintext key behind a stored (base64) token value."""
        try:
            ciphertext = base64.b64decode(stored_token, validate=True)
            return self._fernet.decrypt(ciphertext)
        except (binascii.Error, InvalidToken) as exc:
            raise KeyProviderError("Failed to unwrap data key; invalid ciphertext.") from exc


__all__ = ["LocalKeyProvider"]
