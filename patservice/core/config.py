"""
Application configuration models and helpers.

Centralizes settings management so both the Lambda entrypoint and the local
FastAPI app share a consistent configuration surface.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AWSSettings(BaseSettings):
    """Settings for the AWS services backing token storage."""

    region_name: str = Field("us-east-1", validation_alias="AWS_REGION")
    dynamodb_table_name: str = Field(..., validation_alias="DYNAMODB_TABLE_NAME")
    repo_index_name: str = Field(
        "repoIDIndex",
        validation_alias="DYNAMODB_REPO_INDEX",
        description="Global secondary index keyed by (repoID, username).",
    )
    query_page_size: Optional[int] = Field(
        None,
        validation_alias="DYNAMODB_QUERY_PAGE_SIZE",
        description="Optional Limit for each index query page.",
    )
    kms_key_id: str = Field(
        ...,
        validation_alias=AliasChoices("KMS_KEY_ID", "KMSKEYID"),
        description="Master key used to generate data-key pairs.",
    )
    data_key_bytes: int = Field(20, validation_alias="DATA_KEY_BYTES", ge=1, le=1024)

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


class LocalSettings(BaseSettings):
    """Settings for the SQLite/Fernet backends used during local development."""

    store_path: str = Field("data/tokens.db", validation_alias="LOCAL_STORE_PATH")
    key_secret: Optional[str] = Field(
        None,
        validation_alias="LOCAL_KEY_SECRET",
        description="Secret used to derive the local key-wrapping key.",
    )
    page_size: int = Field(100, validation_alias="LOCAL_QUERY_PAGE_SIZE", ge=1)

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


class AppSettings(BaseSettings):
    """Root settings object for the service."""

    environment: str = Field("development", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    token_backend: Literal["aws", "local"] = Field(
        "aws", validation_alias="TOKEN_BACKEND"
    )
    lambda_cancel_margin_ms: int = Field(
        1000,
        validation_alias="LAMBDA_CANCEL_MARGIN_MS",
        description="Remaining Lambda time below which paginated reads abort.",
    )
    local: LocalSettings = Field(default_factory=LocalSettings)
    aws: Optional[AWSSettings] = None

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @field_validator("token_backend", mode="before")
    @classmethod
    def _normalize_backend(cls, value: str) -> str:
        """Accept the backend name in any case."""
        if isinstance(value, str):
            return value.strip().lower()
        return value

    def aws_settings(self) -> AWSSettings:
        """Return AWS settings, loading them from the environment on first use."""
        if self.aws is None:
            self.aws = AWSSettings()  # type: ignore[call-arg]
        return self.aws


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AppSettings",
    "AWSSettings",
    "LocalSettings",
    "get_settings",
]
