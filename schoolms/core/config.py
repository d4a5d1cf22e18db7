from functools import lru_cache
from typing import Dict, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    # App config
    PROJECT_NAME: str = "School Management System"
    APP_VERSION: str = "0.1.0"
    APP_ENV: str = "development"
    DEBUG: bool = True
    API_PREFIX: str = "/api"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"

    # Cache
    CACHE_ENABLED: bool = True
    CACHE_BACKEND: str = "memory"  # memory | redis
    CACHE_KEY_PREFIX: str = "schoolms:"
    CACHE_DEFAULT_TTL: int = 600
    # "entity.operation" -> seconds, e.g. {"student.list": 120}
    CACHE_TTL_OVERRIDES: Dict[str, int] = {}
    CACHE_SINGLE_FLIGHT: bool = False

    # Memory cache, budget is expressed in size units (one unit per entry by default)
    MEMORY_CACHE_MAX_SIZE: int = 1024
    MEMORY_CACHE_CLEANUP_INTERVAL: int = 60

    # Redis
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_PASSWORD: Optional[str] = None
    REDIS_DB: int = 0

    # Metrics
    METRICS_ENABLED: bool = True

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=True, extra="ignore"
    )

    @field_validator("CACHE_BACKEND")
    @classmethod
    def validate_cache_backend(cls, v: str) -> str:
        v = v.lower()
        if v not in ("memory", "redis"):
            raise ValueError("CACHE_BACKEND phải là 'memory' hoặc 'redis'")
        return v

    @field_validator("CACHE_DEFAULT_TTL", "MEMORY_CACHE_MAX_SIZE")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be a positive integer")
        return v

    @field_validator("CACHE_TTL_OVERRIDES")
    @classmethod
    def validate_ttl_overrides(cls, v: Dict[str, int]) -> Dict[str, int]:
        for name, seconds in v.items():
            entity, _, operation = name.partition(".")
            if not entity or not operation:
                raise ValueError(
                    f"TTL override '{name}' must look like 'entity.operation'"
                )
            if seconds <= 0:
                raise ValueError(f"TTL override '{name}' must be positive")
        return v

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance
    """
    return Settings()
