import json
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Stock core settings, read from the environment and ``.env``."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Database
    DATABASE_URL: str
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30  # seconds
    DB_POOL_RECYCLE: int = 1800  # seconds
    DB_CREATE_TABLES: bool = False  # create_all on startup, for local runs only

    # App
    APP_NAME: str = "Warehouse Stock Core"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # CORS: JSON list, comma-separated string, or list
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    # Background jobs
    SCHEDULER_ENABLED: bool = True
    RESERVATION_EXPIRY_INTERVAL_MINUTES: int = 15

    # Stock position
    STOCK_SUBTRACT_RESERVATIONS: bool = False  # Fill reserved_stock from active reservations
    STOCK_SUBTRACT_QC_HOLDS: bool = False  # Fill held_stock from ON_HOLD QC holds

    # Reservations
    RESERVATION_ENFORCE_AVAILABILITY: bool = False  # Refuse reservations beyond current stock

    # Physical count
    COUNT_INVESTIGATE_THRESHOLD: int = 10  # Variance above this needs investigation

    @field_validator('CORS_ORIGINS', mode='before')
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            v = v.strip()
            if v.startswith("["):
                return json.loads(v)
            return [origin.strip() for origin in v.split(',') if origin.strip()]
        return v

    @property
    def cors_origins_list(self) -> list[str]:
        return list(self.CORS_ORIGINS)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
