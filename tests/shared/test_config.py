from pathlib import Path

from shared.config import DEFAULT_IMAGE_TYPES, Settings


def test_defaults(monkeypatch):
    monkeypatch.delenv("STOREFRONT_DATABASE_URL", raising=False)
    settings = Settings(_env_file=None)

    assert settings.database_url == "sqlite:///storefront.db"
    assert settings.connect_attempts == 10
    assert settings.connect_interval == 5.0
    assert settings.max_upload_bytes == 5 * 1024 * 1024
    assert settings.allowed_image_types == DEFAULT_IMAGE_TYPES
    assert settings.upload_dir == Path("uploads")
    assert settings.port == 3000


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("STOREFRONT_DATABASE_URL", "postgresql+psycopg2://shop:secret@db/shop")
    monkeypatch.setenv("STOREFRONT_CONNECT_ATTEMPTS", "3")
    monkeypatch.setenv("STOREFRONT_MAX_UPLOAD_BYTES", "1024")

    settings = Settings(_env_file=None)

    assert settings.database_url == "postgresql+psycopg2://shop:secret@db/shop"
    assert settings.connect_attempts == 3
    assert settings.max_upload_bytes == 1024
