"""
GeoStream settings

Settings are loaded from environment variables with the prefix
"GEOSTREAM_" and "__" as nested delimiter:

- GEOSTREAM_QUERY_CONTEXT__CHUNK_BYTE_SIZE -> query_context.chunk_byte_size
- GEOSTREAM_LOGGING__LOG_LEVEL -> logging.log_level
"""

from functools import lru_cache

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = [
    "LoggingSettings",
    "QueryContextSettings",
    "Settings",
    "get_settings",
]


class QueryContextSettings(BaseModel):
    """Limits handed to running query processors"""

    chunk_byte_size: int = Field(
        1_048_576, gt=0, description="Target byte size of merged result chunks"
    )


class LoggingSettings(BaseModel):
    log_level: str = Field("INFO", description="Minimum log level")


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    query_context: QueryContextSettings = Field(default_factory=QueryContextSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = SettingsConfigDict(
        env_prefix="GEOSTREAM_",
        env_nested_delimiter="__",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
