"""Application config from environment. Load .env before importing this (e.g. in app.py)."""
from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    database_url: str = "sqlite:///./roasboard.db"

    # CORS (comma-separated origins; default dev)
    cors_origins: str = "http://localhost:5173,http://localhost:3000,http://127.0.0.1:5173,http://127.0.0.1:3000"

    # Logging
    log_level: str = "INFO"

    # Uploads
    max_upload_mb: int = 20

    # Partnership defaults for new projects (percent)
    default_platform_tax: float = 6.0
    default_tax: float = 0.0
    default_participation: float = 100.0

    @property
    def cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024

    @field_validator("log_level")
    @classmethod
    def log_level_upper(cls, v: str) -> str:
        return v.upper() if v else "INFO"


def get_settings() -> Settings:
    """Return validated settings (singleton per process)."""
    return Settings()
