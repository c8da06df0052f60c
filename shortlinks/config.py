from typing import Optional

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    DATABASE_URL: str
    REDIS_URL: Optional[str] = None
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Pool settings apply to server databases; SQLite only uses the busy timeout
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_RECYCLE: int = 1800
    DB_BUSY_TIMEOUT: float = 30.0

    PUBLIC_BASE_URL: Optional[str] = None
    SHORT_CODE_LENGTH: int = 8
    CODE_GENERATION_ATTEMPTS: int = 10

    JWT_SECRET: str = "change-me-in-production"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_DAYS: int = 7
    RESET_TOKEN_EXPIRE_MINUTES: int = 15

    # Per-client fixed window for POST /api/urls/shorten
    SHORTEN_RATE_LIMIT: int = 30
    SHORTEN_RATE_WINDOW: int = 60

    class Config:
        env_file = ".env"

settings = Settings()
