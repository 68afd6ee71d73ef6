from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    NEXTCLOUD_URL: str | None = None
    ANALYTICS_COLLECTION: int | None = None
    NEXTCLOUD_USER: str | None = None
    NEXTCLOUD_APP_PASSWORD: str | None = None
    ANALYTICS_TIMEOUT_S: float = 10.0
    LOG_LEVEL: str = "INFO"

    # the .env may belong to the host application
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

@lru_cache()
def get_settings() -> Settings:
    """Load settings from the environment and ./.env on first use."""
    return Settings()
