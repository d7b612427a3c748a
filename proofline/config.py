"""
Configuration management using Pydantic Settings.
Loads configuration from environment variables and .env file.
"""
from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database Configuration
    DATABASE_HOST: str = "localhost"
    DATABASE_PORT: int = 5432
    DATABASE_NAME: str = "postgres"
    DATABASE_USER: str = "proofline_user"
    DATABASE_PASSWORD: str  # Required - no default for security
    DB_SCHEMA: str = "proofline"  # Schema name for all tables (use "proofline_test" for tests)

    # Application Configuration
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    # Correction Provider Configuration
    CORRECTION_PROVIDER: str = "sapling"  # Options: sapling, mock, noop
    SAPLING_API_KEY: Optional[str] = None  # Required when using Sapling provider
    SAPLING_API_URL: str = "https://api.sapling.ai/api/v1/edits"
    SAPLING_LANG: str = "en"
    SAPLING_TIMEOUT: float = 30.0

    # Cost Controls (server side)
    CORRECTION_MIN_CONTENT_LENGTH: int = 20  # Skip plain text shorter than this
    CORRECTION_MAX_TEXT_LENGTH: int = 5000  # Truncate text before the upstream call
    CORRECTION_RATE_LIMIT_REQUESTS: int = 30  # Max upstream calls per window
    CORRECTION_RATE_LIMIT_WINDOW: int = 60  # Window length in seconds
    RECENT_QUERY_TTL_SECONDS: int = 600  # 10 minutes
    RECENT_QUERY_MAX_ENTRIES: int = 100  # Oldest half evicted above this

    # Client Pipeline Configuration
    CLIENT_API_BASE_URL: str = "http://localhost:8000"
    CLIENT_CACHE_PATH: str = "~/.cache/proofline/spellcheck_cache.json"
    CLIENT_CACHE_TTL_HOURS: int = 24
    CLIENT_CACHE_MAX_ITEMS: int = 50
    CLIENT_DEBOUNCE_SECONDS: float = 5.0
    CLIENT_REQUEST_TIMEOUT: float = 30.0

    # CORS Configuration
    CORS_ORIGINS: str = "*"

    # Database Pool Configuration
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10

    # Development/Debug
    DEBUG: bool = False
    RELOAD: bool = False

    # Authentication & JWT Configuration
    JWT_SECRET_KEY: str  # Required - no default for security
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_DAYS: int = 30

    # Logging Configuration (Optional - per-module log levels)
    APP_LOG_LEVEL: Optional[str] = None
    SQLALCHEMY_LOG_LEVEL: Optional[str] = None
    UVICORN_LOG_LEVEL: Optional[str] = None
    HTTPX_LOG_LEVEL: Optional[str] = None
    ASYNCPG_LOG_LEVEL: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True
    )

    @property
    def database_url(self) -> str:
        """Construct async database URL."""
        return (
            f"postgresql+asyncpg://{self.DATABASE_USER}:{self.DATABASE_PASSWORD}"
            f"@{self.DATABASE_HOST}:{self.DATABASE_PORT}/{self.DATABASE_NAME}"
        )

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        if self.CORS_ORIGINS == "*":
            return ["*"]
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def client_cache_ttl_ms(self) -> int:
        """Convert client cache TTL from hours to milliseconds."""
        return self.CLIENT_CACHE_TTL_HOURS * 60 * 60 * 1000


# Global settings instance
settings = Settings()
