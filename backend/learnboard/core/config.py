"""Application configuration."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App
    APP_NAME: str = "LearnBoard"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    ENV: str = "development"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./learnboard.db"
    DATABASE_ECHO: bool = False

    # Snapshot keys (the whole store is rewritten under these on every mutation)
    SNAPSHOT_KEY: str = "blog-roadmap-storage"
    LANGUAGES_SNAPSHOT_KEY: str = "blog-languages-storage"

    # AI roadmap generation endpoint
    GENERATION_URL: str | None = None
    GENERATION_API_KEY: str | None = None
    GENERATION_TIMEOUT: float = 60.0

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENV == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENV == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
