"""Application configuration using pydantic-settings."""
import logging
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_OPENAI_MODEL = "google/gemma-3-27b-it-qat-q4_0-gguf"

# Level names understood by both logging and uvicorn
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")

# Drivers accepted in DATABASE_URL and rewritten to the async driver
_SYNC_URL_SCHEMES = ("postgres://", "postgresql://", "postgresql+psycopg2://")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Database
    database_url: str = Field(validation_alias="DATABASE_URL")
    db_pool_size: int = Field(default=5, validation_alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=0, validation_alias="DB_MAX_OVERFLOW")

    # Chat-completion endpoint used for tagging
    openai_url: str | None = Field(default=None, validation_alias="OPENAI_URL")
    openai_model: str = Field(default=DEFAULT_OPENAI_MODEL, validation_alias="OPENAI_MODEL")
    # Comma-separated "Name: Value" pairs (stored as string, parsed via property)
    openai_extra_headers_str: str = Field(default="", validation_alias="OPENAI_EXTRA_HEADERS")

    # HTTP server
    host: str = Field(default="0.0.0.0", validation_alias="HOST")  # noqa: S104
    port: int = Field(default=3000, validation_alias="PORT")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    # CORS - comma-separated list of allowed origins
    cors_origins_str: str = Field(default="*", validation_alias="CORS_ORIGINS")

    @field_validator("database_url")
    @classmethod
    def use_async_driver(cls, v: str) -> str:
        """Rewrite plain postgres URLs so SQLAlchemy uses the asyncpg driver."""
        for scheme in _SYNC_URL_SCHEMES:
            if v.startswith(scheme):
                return "postgresql+asyncpg://" + v[len(scheme):]
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept any case and the WARN/FATAL aliases; store the canonical name."""
        level = logging.getLevelName(v.strip().upper())
        name = logging.getLevelName(level) if isinstance(level, int) else None
        if name not in LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}")
        return name

    @property
    def cors_origins(self) -> list[str]:
        """Parse comma-separated CORS origins string into a list."""
        if not self.cors_origins_str:
            return []
        return [origin.strip() for origin in self.cors_origins_str.split(",") if origin.strip()]

    @property
    def openai_extra_headers(self) -> dict[str, str]:
        """
        Parse OPENAI_EXTRA_HEADERS into a header dict.

        Pairs without a colon or with an empty name are skipped. Values may
        themselves contain colons (only the first one separates name and value).
        """
        headers: dict[str, str] = {}
        for pair in self.openai_extra_headers_str.split(","):
            name, sep, value = pair.partition(":")
            name = name.strip()
            if not sep or not name:
                if pair.strip():
                    logger.warning("Ignoring malformed OPENAI_EXTRA_HEADERS entry")
                continue
            headers[name] = value.strip()
        return headers


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
