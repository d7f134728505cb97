"""Application settings.

Values come from ``STOREFRONT_*`` environment variables or a ``.env`` file in
the working directory. Nothing here is read at import time by the core
components; they receive a ``Settings`` instance (or the values they need)
from whoever constructs them.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_IMAGE_TYPES = (
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "image/webp",
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="STOREFRONT_", env_file=".env", extra="ignore")

    database_url: str = "sqlite:///storefront.db"
    pool_size: int = Field(default=10, ge=1)
    pool_timeout: float = Field(default=30.0, gt=0)

    connect_attempts: int = Field(default=10, ge=1)
    connect_interval: float = Field(default=5.0, ge=0)
    connect_backoff: float = Field(default=1.0, ge=1.0)

    upload_dir: Path = Path("uploads")
    max_upload_bytes: int = Field(default=5 * 1024 * 1024, ge=1)
    allowed_image_types: tuple[str, ...] = DEFAULT_IMAGE_TYPES

    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: list[str] = ["*"]

    log_dir: Path | None = Path("logs")


@lru_cache
def get_settings() -> Settings:
    return Settings()
