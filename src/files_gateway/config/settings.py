# src/files_gateway/config/settings.py
from functools import lru_cache
from typing import Any

import pydantic
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from files_gateway.errors import ConfigurationError


class Settings(BaseSettings):
    """
    Single source of truth for the gateway's settings.

    Configuration precedence:
    1. Environment variables (highest priority)
    2. .env file (if exists)
    3. Default values in this class (lowest priority)

    The four AWS values have no defaults: the process refuses to start
    without them.

    Usage:
        from files_gateway.config.settings import get_settings
        settings = get_settings()
        bucket_name = settings.s3_bucket_name
    """

    # AWS Core Settings
    aws_access_key_id: str = Field(description="Static access key for the storage backend")
    aws_secret_access_key: str = Field(description="Static secret key for the storage backend")
    aws_region: str = Field(description="Region the storage client signs requests for")
    aws_endpoint_url: str = Field(
        description="Base endpoint of the storage backend, e.g. http://localhost:9000",
    )

    # S3 Configuration
    s3_bucket_name: str = Field(
        default="default",
        description="The single bucket every object is stored in",
    )

    # Streaming
    max_multipart_memory: int = Field(
        default=8 << 20,
        gt=0,
        description="Bytes of an uploaded part held in memory before spilling to a temp file",
    )
    download_chunk_size: int = Field(
        default=64 * 1024,
        gt=0,
        description="Read size used when relaying an object to the client",
    )
    disconnect_poll_interval: float = Field(
        default=0.1,
        gt=0,
        description="Seconds between client-disconnect checks during an upload",
    )

    # Backend deadlines
    storage_connect_timeout: float = Field(default=10.0, gt=0)
    storage_read_timeout: float = Field(default=60.0, gt=0)

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080, gt=0, lt=65536)

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator(
        "aws_access_key_id",
        "aws_secret_access_key",
        "aws_region",
        "aws_endpoint_url",
        mode="before",
    )
    @classmethod
    def reject_blank(cls, v: Any) -> Any:
        """Treat empty or whitespace-only values the same as missing ones."""
        if isinstance(v, str):
            v = v.strip()
            if not v:
                raise ValueError("must not be empty")
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        valid_levels = ["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]
        v = v.upper()
        if v not in valid_levels:
            raise ValueError(f"Invalid log_level: {v}. Must be one of {valid_levels}")
        return v

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )


def load_settings(**overrides: Any) -> Settings:
    """
    Build a Settings instance, converting validation failures into a ConfigurationError.

    Args:
        overrides: Field values that take precedence over the environment
            (pydantic-settings init kwargs such as ``_env_file`` are accepted too)

    Returns:
        Validated, immutable Settings

    Raises:
        ConfigurationError: If a required value is missing or invalid
    """
    try:
        return Settings(**overrides)
    except pydantic.ValidationError as e:
        problems = []
        for error in e.errors():
            field = str(error["loc"][0]) if error["loc"] else "settings"
            problems.append(f"{field.upper()} ({error['msg']})")
        raise ConfigurationError(f"missing or invalid configuration: {'; '.join(problems)}") from e


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    This ensures we only create one Settings instance per process.
    """
    return load_settings()
