"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Wikidata
    WIKIDATA_SPARQL_ENDPOINT: str = "https://query.wikidata.org/sparql"
    WIKIDATA_API_ENDPOINT: str = "https://www.wikidata.org/w/api.php"
    WIKIDATA_TIMEOUT_SECONDS: float = 30.0
    WIKIDATA_LANGUAGE: str = "en"
    AUTOCOMPLETE_TIMEOUT_SECONDS: float = 5.0
    USER_AGENT: str = "Box-to-Box-Game/1.0"

    # Local player database (built offline by scripts/build_player_database.py)
    PLAYERS_DB_PATH: str = "./data/players.json"
    MANUAL_ACHIEVEMENTS_PATH: str = "./data/manual_achievements.json"

    # Board generation
    BOARD_MAX_ATTEMPTS: int = 10

    # HTTP surface
    CORS_ORIGINS: str = "*"  # Comma-separated
    RATE_LIMIT_HEALTH: str = "120/minute"
    RATE_LIMIT_GENERATE_BOARD: str = "30/minute"
    METRICS_BEARER_TOKEN: Optional[str] = None  # /metrics is public when unset

    LOG_LEVEL: str = "INFO"
    PORT: int = 5000

    # Sentry (disabled unless SENTRY_DSN is set)
    SENTRY_DSN: Optional[str] = None
    SENTRY_ENVIRONMENT: str = "development"
    SENTRY_TRACES_SAMPLE_RATE: float = 0.05

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
