"""
Factory functions to provide shared clients and services as FastAPI dependencies.
"""

from functools import lru_cache

from patservice.api.dispatcher import RequestRouter
from patservice.clients import (
    DynamoDBTokenStore,
    KMSKeyProvider,
    LocalKeyProvider,
    SQLiteTokenStore,
)
from patservice.core.config import get_settings
from patservice.services import CredentialService, KeyProvider, TokenStore


@lru_cache()
def get_key_provider() -> KeyProvider:
    """Provide the data-key generator for the configured backend."""
    settings = get_settings()
    if settings.token_backend == "local":
        return LocalKeyProvider(secret=settings.local.key_secret or "")
    aws = settings.aws_settings()
    return KMSKeyProvider(aws)


@lru_cache()
def get_token_store() -> TokenStore:
    """Provide the token table for the configured backend."""
    settings = get_settings()
    if settings.token_backend == "local":
        return SQLiteTokenStore(
            settings.local.store_path, page_size=settings.local.page_size
        )
    return DynamoDBTokenStore(settings.aws_settings())


@lru_cache()
def get_credential_service() -> CredentialService:
    """Provide the credential service wired to shared clients."""
    return CredentialService(
        key_provider=get_key_provider(),
        token_store=get_token_store(),
    )


def get_request_router() -> RequestRouter:
    """Build a request router around the shared credential service."""
    return RequestRouter(get_credential_service())


__all__ = [
    "get_credential_service",
    "get_key_provider",
    "get_request_router",
    "get_token_store",
]
