"""
Pydantic models for token management requests and responses.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator

from patservice.models import TokenRecord

_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_NUMERIC = re.compile(r"^[-+]?\d+(\.\d*)?$")


class GenerateTokenRequest(BaseModel):
    """Incoming payload for issuing a token."""

    repoid: str = Field(..., min_length=1, description="Repository the token grants.")
    username: str = Field(..., min_length=1, description="Principal receiving the token.")
    expiration: Union[StrictInt, datetime] = Field(
        ..., description="Expiry as an ISO 8601 date/time or integer epoch seconds."
    )

    @field_validator("expiration", mode="before")
    @classmethod
    def _normalize_expiration(cls, value):
        """
        Keep epoch seconds as integers and treat a bare date as midnight UTC.

        Numbers never reach pydantic's datetime parsing, which reads large
        values as milliseconds. Numeric strings and fractional seconds are
        rejected rather than guessed at.
        """
        if isinstance(value, bool):
            raise ValueError("expiration must be a date/time or epoch seconds")
        if isinstance(value, float):
            if not value.is_integer():
                raise ValueError("expiration must be whole epoch seconds")
            return int(value)
        if isinstance(value, str):
            text = value.strip()
            if _NUMERIC.match(text):
                raise ValueError("epoch seconds must be sent as a JSON number")
            if _DATE_ONLY.match(text):
                return f"{text}T00:00:00+00:00"
        return value

    @field_validator("expiration")
    @classmethod
    def _assume_utc(cls, value: Union[int, datetime]) -> Union[int, datetime]:
        if isinstance(value, datetime) and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class GenerateTokenResponse(BaseModel):
    """Bearer credential returned to the caller exactly once."""

    token: str


class ListTokensRequest(BaseModel):
    """Query for tokens on one repository, optionally narrowed to one user."""

    repoid: str = Field(..., min_length=1)
    username: Optional[str] = Field(
        None, description="Empty or omitted means every user on the repository."
    )


class TokenItem(BaseModel):
    """Listed token record as exposed to callers."""

    token: str
    repoID: str
    username: str
    expiration: int

    @classmethod
    def from_record(cls, record: TokenRecord) -> "TokenItem":
        return cls(
            token=record.token,
            repoID=record.repo_id,
            username=record.username,
            expiration=record.expiration,
        )


class ListTokensResponse(BaseModel):
    items: List[TokenItem] = Field(default_factory=list)


class DeleteTokenRequest(BaseModel):
    """Revocation request naming the stored token value."""

    token: str = Field(..., min_length=1)


class DeleteTokenResponse(BaseModel):
    success: bool


class ErrorResponse(BaseModel):
    """Generic error envelope; never carries backend detail."""

    message: str

    model_config = ConfigDict(frozen=True)


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
