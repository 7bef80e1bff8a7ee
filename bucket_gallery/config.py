from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Core
    APP_NAME: str = "S3 Image Gallery"
    APP_SECRET_KEY: str = "change-this-secret"
    LOG_LEVEL: str = "INFO"

    # Sessions (in-memory only)
    SESSION_TTL_SECONDS: int = 86400
    MAX_SESSIONS: int = 256

    # Listing fetch
    FETCH_TIMEOUT_SECONDS: float = 15.0
    FETCH_USER_AGENT: str = "bucket-gallery/0.1"
    FETCH_MAX_BYTES: int = 10_000_000

    # Lazy loader
    VISIBILITY_THRESHOLD: float = 0.1  # fraction of the placeholder that must be on screen

settings = Settings()
