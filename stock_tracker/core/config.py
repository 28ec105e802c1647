"""Application configuration loaded via pydantic settings."""

from typing import List
import secrets

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Strongly-typed application settings with environment overrides."""

    # Application
    APP_NAME: str = "Weekly Stock Tracker"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False

    # Security
    SECRET_KEY: str = secrets.token_urlsafe(32)
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Database
    DATABASE_URL: str = "sqlite:///./stock_tracker/stock_tracker.db"

    # CORS
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_LEVELS: str = "TRACE,ERROR,WARNING,INFO"
    LOG_FILE_PATH: str = "./stock_tracker/logs/app.log"

    # Dashboard client
    API_BASE_URL: str = "http://localhost:8000/api/v1"
    CLIENT_TIMEOUT_SECONDS: float = 10.0
    CLIENT_MAX_WORKERS: int = 8

    class Config:
        """Configure environment file loading behavior."""

        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


settings = Settings()
