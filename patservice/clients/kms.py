"""
AWS KMS wrapper producing single-use data-key pairs.
"""

from __future__ import annotations

import logging
from typing import Any, NamedTuple, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from patservice.core.config import AWSSettings
from patservice.core.errors import KeyProviderError

logger = logging.getLogger(__name__)


class DataKeyPair(NamedTuple):
    """The plaintext and encrypted halves of one generated data key."""

    plaintext: bytes
    ciphertext: bytes


class KMSKeyProvider:
    """Generate fresh data keys under a KMS master key."""

    def __init__(self, settings: AWSSettings, client: Optional[Any] = None) -> None:
        self._key_id = settings.kms_key_id
        self._number_of_bytes = settings.data_key_bytes
        self._client = client or boto3.client("kms", region_name=settings.region_name)

    def generate_key_pair(self) -> DataKeyPair:
        """Request a new data key; nothing is cached between calls."""
        try:
            response = self._client.generate_data_key(
                KeyId=self._key_id,
                NumberOfBytes=self._number_of_bytes,
            )
        except (BotoCoreError, ClientError) as exc:
            logger.warning("KMS GenerateDataKey failed for key %s: %s", self._key_id, exc)
            raise KeyProviderError("Unable to generate a data key.") from exc

        plaintext = response.get("Plaintext")
        ciphertext = response.get("CiphertextBlob")
        if not plaintext or not ciphertext:
            raise KeyProviderError("KMS response did not include both key forms.")
        return DataKeyPair(plaintext=bytes(plaintext), ciphertext=bytes(ciphertext))


__all__ = ["DataKeyPair", "KMSKeyProvider"]
