"""
Domain model for access token persistence.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Mapping

from pydantic import BaseModel, ConfigDict, Field

from patservice.core.errors import StoreError


class TokenRecord(BaseModel):
    """Represents a token record stored in the token table."""

    token: str = Field(
        ..., description="Base64 ciphertext of the data key; the table's primary key."
    )
    repo_id: str = Field(..., alias="repoID", description="Repository the token grants.")
    username: str = Field(..., description="Principal the token was issued for.")
    expiration: int = Field(..., description="Expiry as epoch seconds, not enforced here.")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def to_item(self) -> Dict[str, Any]:
        """Render the record using the table's attribute names."""
        return self.model_dump(by_alias=True)

    @classmethod
    def from_item(cls, item: Mapping[str, Any]) -> "TokenRecord":
        """Build a record from a stored item, rejecting malformed rows."""
        try:
            expiration = item["expiration"]
            if isinstance(expiration, Decimal):
                if expiration != expiration.to_integral_value():
                    raise ValueError(f"non-integral expiration {expiration}")
                expiration = int(expiration)
            return cls(
                token=item["token"],
                repo_id=item["repoID"],
                username=item["username"],
                expiration=expiration,
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise StoreError("Malformed token item returned from store.") from exc


__all__ = ["TokenRecord"]
