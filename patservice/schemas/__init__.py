"""Public schema exports."""

from .tokens import (
    DeleteTokenRequest,
    DeleteTokenResponse,
    ErrorResponse,
    GenerateTokenRequest,
    GenerateTokenResponse,
    ListTokensRequest,
    ListTokensResponse,
    TokenItem,
)

__all__ = [
    "DeleteTokenRequest",
    "DeleteTokenResponse",
    "ErrorResponse",
    "GenerateTokenRequest",
    "GenerateTokenResponse",
    "ListTokensRequest",
    "ListTokensResponse",
    "TokenItem",
]
