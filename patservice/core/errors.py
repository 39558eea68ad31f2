"""Error taxonomy shared by the token service layers."""

from __future__ import annotations


class CredentialServiceError(Exception):
    """Base class for failures raised while handling a token operation."""


class ValidationError(CredentialServiceError):
    """A required input was missing or empty."""


class KeyProviderError(CredentialServiceError):
    """The key-management backend was unavailable, denied, or returned junk."""


class StoreError(CredentialServiceError):
    """The token table was unavailable or returned a malformed item."""


class OperationCancelled(CredentialServiceError):
    """A paginated read was aborted before it could complete."""


__all__ = [
    "CredentialServiceError",
    "KeyProviderError",
    "OperationCancelled",
    "StoreError",
    "ValidationError",
]
