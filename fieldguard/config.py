from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Error keys
    ERROR_TAG: str = "json"  # serialization tag consulted by the default error-key naming

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False  # True for structured JSON output, False for colored console

    class Config:
        env_prefix = "FIELDGUARD_"
        env_file = ".env"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
