# config/settings.py
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Project settings.
    Values are read from environment variables or from the .env file.
    """
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    APP_NAME: str = "Employee Performance Validator API"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"

    # database
    DATABASE_URL: str = "sqlite:///./performance.db"

    # JWT (bearer token) settings
    SECRET_KEY: str = "your-super-secret-key-please-change-this-to-a-strong-random-string"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    # SPA origins allowed to call the API
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    LOG_LEVEL: str = "INFO"

    # per-IP throttling of /api/ routes
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_MAX_REQUESTS: int = 100
    RATE_LIMIT_WINDOW_SECONDS: int = 15 * 60

    # pagination
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 1000

    # default admin seeded at startup (only employees self-register)
    SEED_DEFAULT_ADMIN: bool = True
    DEFAULT_ADMIN_USERNAME: str = "admin"
    DEFAULT_ADMIN_EMAIL: str = "admin@performance.local"
    DEFAULT_ADMIN_PASSWORD: str = "admin123"


settings = Settings()
