"""
Application configuration using Pydantic Settings.

All configuration is loaded from environment variables (and an optional
env file) with sensible defaults.
"""

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


SECRET_FIELDS = frozenset({"s3_secret_key", "s3_access_key"})


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------
    app_name: str = Field(default="objectstore", description="Application name")
    app_env: Literal["development", "staging", "production"] = Field(
        default="production", description="Environment"
    )
    config_file: str | None = Field(
        default=None, description="Env file the settings were loaded from"
    )

    # -------------------------------------------------------------------------
    # Storage
    # -------------------------------------------------------------------------
    storage_backend: Literal["local", "s3", "gcs", "etcd"] = Field(
        default="local", description="Storage backend type"
    )
    storage_prefix: str = Field(
        default="", description="Sub-namespace inside the bucket or root"
    )
    local_storage_path: str = Field(
        default="tmp", description="Local storage root directory"
    )

    # S3/MinIO settings
    s3_bucket_name: str = Field(default="", description="S3 bucket name")
    s3_region: str = Field(default="us-east-1", description="S3 region")
    s3_endpoint_url: str | None = Field(
        default=None, description="S3 endpoint URL (for MinIO)"
    )
    s3_access_key: str | None = Field(default=None, description="S3 access key")
    s3_secret_key: str | None = Field(default=None, description="S3 secret key")
    s3_sse: str | None = Field(
        default=None, description="Server-side encryption algorithm (e.g. AES256)"
    )

    # Google Cloud Storage settings
    gcs_bucket_name: str = Field(default="", description="GCS bucket name")
    gcs_credentials_file: str | None = Field(
        default=None, description="Service account JSON file"
    )
    gcs_project: str | None = Field(default=None, description="GCP project id")

    # etcd settings
    etcd_endpoints: Annotated[list[str], NoDecode] = Field(
        default=["localhost:2379"], description="etcd endpoints (host:port or URL)"
    )
    etcd_namespace: str = Field(
        default="", description="Key namespace, derived from app name/env if empty"
    )
    etcd_ssl_enabled: bool = Field(default=False, description="Use TLS for etcd")
    etcd_ssl_ca: str | None = Field(default=None, description="CA certificate file")
    etcd_ssl_cert: str | None = Field(default=None, description="Client certificate")
    etcd_ssl_key: str | None = Field(default=None, description="Client key")
    etcd_ssl_verify: bool = Field(default=True, description="Verify server cert")
    etcd_timeout: float = Field(default=10.0, description="etcd request timeout")

    # -------------------------------------------------------------------------
    # Snapshot diffing
    # -------------------------------------------------------------------------
    diff_timestamp_tolerance_seconds: float = Field(
        default=0.0, ge=0, description="Timestamp delta ignored when diffing"
    )

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level"
    )
    log_format: Literal["json", "console"] = Field(
        default="console", description="Log format"
    )

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------
    @field_validator("storage_prefix", mode="before")
    @classmethod
    def validate_storage_prefix(cls, v: str | None) -> str:
        """Strip leading/trailing separators from the prefix."""
        # objectstore.storage imports this module through the factory
        from objectstore.storage.objects import clean_prefix

        return clean_prefix(v or "")

    @field_validator("etcd_endpoints", mode="before")
    @classmethod
    def split_etcd_endpoints(cls, v: str | list[str]) -> list[str]:
        """Accept a comma-separated endpoint list."""
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @property
    def derived_etcd_namespace(self) -> str:
        """Namespace used when none is configured explicitly."""
        return f"/{self.app_name}/{self.app_env}/"

    def resolve_etcd_namespace(self) -> str:
        """
        Return the etcd namespace, establishing it if unset.

        A derived namespace is written to ``config_file`` when that file does
        not exist yet, so later runs keep using the same namespace.
        """
        if self.etcd_namespace:
            return self.etcd_namespace

        namespace = self.derived_etcd_namespace
        if self.config_file:
            path = Path(self.config_file)
            if not path.exists():
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(f"ETCD_NAMESPACE={namespace}\n", encoding="utf-8")
        return namespace

    def public_dump(self) -> dict[str, object]:
        """Settings as a plain dict with secrets masked."""
        data = self.model_dump()
        for name in SECRET_FIELDS:
            if data.get(name):
                data[name] = "********"
        return data


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
