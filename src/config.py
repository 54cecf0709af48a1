from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Redis (connection profiles + query history)
    REDIS_URL: str = "redis://localhost:6379/0"

    # Connection profile encryption
    CONNECTIONS_SECRET_KEY: str = "gxplorer_super_secret_key"

    # Gremlin
    DEFAULT_SERVER_URL: str = "ws://localhost:8182/gremlin"
    GREMLIN_POOL_SIZE: int = 4

    # Explorer
    QUERY_HISTORY_LIMIT: int = 20
    DEFAULT_QUERY: str = "g.V().limit(10)"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = Field(default="json", description="'json' for production, 'console' for dev")


def get_settings() -> Settings:
    return Settings()
