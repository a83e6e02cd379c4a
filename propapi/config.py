"""
API configuration and settings management.
"""
import os


class Config:
    """Application configuration."""

    # Database
    DB_PATH: str = os.getenv("PROPTECH_DB", "./data/db/properties.db")

    # API settings
    API_TITLE: str = "PropTech Properties API"
    API_VERSION: str = "1.0.0"
    API_DESCRIPTION: str = "Collect real-estate listings and search the property index"

    # CORS settings
    CORS_ORIGINS: list = ["*"]
    CORS_ALLOW_CREDENTIALS: bool = True
    CORS_ALLOW_METHODS: list = ["*"]
    CORS_ALLOW_HEADERS: list = ["*"]

    # Collection
    DEFAULT_COLLECT_COUNT: int = 20
    MAX_COLLECT_COUNT: int = int(os.getenv("MAX_COLLECT_COUNT", "50"))
    HEADLESS: bool = os.getenv("HEADLESS", "1").strip().lower() in ("1", "true", "yes")

    # Pagination defaults
    DEFAULT_API_LIMIT: int = 50
    MAX_API_LIMIT: int = 500

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    @classmethod
    def validate(cls) -> None:
        """Validate configuration on startup."""
        if not cls.DB_PATH:
            raise ValueError("Database path not configured")
        if cls.MAX_COLLECT_COUNT < 1:
            raise ValueError(f"MAX_COLLECT_COUNT must be positive, got {cls.MAX_COLLECT_COUNT}")


# Global config instance
config = Config()
