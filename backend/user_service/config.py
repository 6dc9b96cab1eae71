"""Application Configuration - environment-driven settings via pydantic-settings.

Invariants:
    - database_url and jwt_secret are required; missing values abort startup
    - Settings is frozen: built once, passed to components, never mutated
    - get_settings() is cached (lru_cache) - single instance per process
"""

from functools import lru_cache

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def normalize_database_url(url: str) -> str:
    """Plain postgresql:// and postgres:// DSNs need the asyncpg driver suffix."""
    for scheme in ("postgresql://", "postgres://"):
        if url.startswith(scheme):
            return url.replace(scheme, "postgresql+asyncpg://", 1)
    return url


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    # Database
    database_url: str = Field(
        min_length=1,
        validation_alias=AliasChoices("DSN", "DATABASE_URL", "database_url"),
    )
    database_pool_size: int = 10
    database_max_overflow: int = 5

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        return normalize_database_url(v) if isinstance(v, str) else v

    # Tokens
    jwt_secret: str = Field(min_length=1)
    jwt_algorithm: str = "HS256"
    token_ttl_hours: int = Field(24, ge=1)

    # API
    cors_origins: list[str] = ["http://localhost:3000"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
