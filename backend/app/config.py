from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Mission Control application settings.

    All values are loaded from environment variables.
    A .env file in the backend directory is also supported.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # --- Database ---
    DATABASE_URL: str = "postgresql+asyncpg://mission:mission@db:5432/mission_control"

    # --- Memory notes ---
    MEMORY_ROOT: str = "."  # Directory holding MEMORY.md and memory/*.md

    # --- Search ---
    SEARCH_DEFAULT_LIMIT: int = 20
    SEARCH_MAX_FILE_BYTES: int = 300_000

    # --- Cron job listing (calendar) ---
    CRON_API_URL: str = "http://localhost:3001/api/cron"
    CRON_API_TIMEOUT_SECONDS: float = 1.5

    # --- Agent presence ---
    AGENT_ID: str = "miles"
    AGENT_STATUS_TTL_SECONDS: int = 120

    # --- CORS ---
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    @property
    def async_database_url(self) -> str:
        """Ensure the database URL uses the asyncpg driver."""
        url = self.DATABASE_URL
        if url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return url


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings singleton."""
    return Settings()
