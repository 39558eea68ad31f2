"""Expose dependency helpers for FastAPI routers."""

from .clients import (
    get_credential_service,
    get_key_provider,
    get_request_router,
    get_token_store,
)

__all__ = [
    "get_credential_service",
    "get_key_provider",
    "get_request_router",
    "get_token_store",
]
