"""Application configuration management."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Document store
    MONGODB_URL: str = "mongodb://localhost:27017"
    MONGODB_DATABASE: str = "kuraldb"
    MONGODB_MAX_POOL_SIZE: int = 50
    MONGODB_SERVER_SELECTION_TIMEOUT_MS: int = 5000

    # Deadline for the joined reads (count, page, summary) of one request
    STORE_TIMEOUT_SECONDS: float = 30.0

    # JWT Configuration
    SECRET_KEY: str = "dev-secret-key-change-me"
    JWT_ALGORITHM: str = "HS256"

    # Pagination
    DEFAULT_PAGE_LIMIT: int = 20
    MAX_PAGE_LIMIT: int = 1000

    # Rate limiting (per client IP)
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_MAX: int = 100
    RATE_LIMIT_WINDOW_SECONDS: int = 900

    # CORS
    CORS_ORIGINS: str = "*"

    # Environment
    ENVIRONMENT: str = "development"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def store_timeout_ms(self) -> int:
        """Per-operation limit handed to the store client."""
        return int(self.STORE_TIMEOUT_SECONDS * 1000)


settings = Settings()


def get_settings() -> Settings:
    return settings
