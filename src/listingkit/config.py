"""Settings for the remote backend connection.

All settings can be overridden via environment variables with the
``LISTINGKIT_`` prefix, e.g. ``LISTINGKIT_URL`` and
``LISTINGKIT_ANON_KEY``, or from a ``.env`` file.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RemoteSettings(BaseSettings):
    """Connection settings for the hosted backend."""

    model_config = SettingsConfigDict(
        env_prefix="LISTINGKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    url: str = Field(description="Project URL, e.g. https://xyz.supabase.co")
    anon_key: str = Field(description="Public API key sent with every request")
    access_token: str | None = Field(
        default=None,
        description="User session token; the anon key is used when absent",
    )
    schema_name: str = Field(default="public", description="Database schema")

    timeout: float = Field(default=10.0, gt=0, description="Request timeout in seconds")
    retries: int = Field(
        default=2, ge=0, description="Retries for transient failures"
    )
    retry_wait: float = Field(
        default=0.5, ge=0, description="Wait before the first retry, grows per retry"
    )

    redis_url: str | None = Field(
        default=None, description="Use a Redis cache backend when set"
    )
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @property
    def rest_url(self) -> str:
        return f"{self.url}/rest/v1"


@lru_cache
def get_settings() -> RemoteSettings:
    """Return settings read once from the environment."""
    return RemoteSettings()  # type: ignore[call-arg]
