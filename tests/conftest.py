from pathlib import Path

import pytest
from catalogue.product.catalog import ProductCatalog
from catalogue.product.images import ImageStore, ImageUpload
from ordering.order.engine import OrderEngine
from shared.config import Settings
from storage import RetryPolicy, connect

# Smallest valid PNG: 1x1 transparent pixel.
PNG_BYTES = bytes.fromhex(
    "89504e470d0a1a0a0000000d4948445200000001000000010806000000"
    "1f15c4890000000d49444154789c6360000002000100e221bc330000000049454e44ae426082"
)


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = Path(item.fspath)

        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/bdd/" in str(test_path):
            item.add_marker(pytest.mark.bdd)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture()
def settings(tmp_path):
    return Settings(
        _env_file=None,
        database_url=f"sqlite:///{tmp_path / 'store.db'}",
        upload_dir=tmp_path / "uploads",
        connect_attempts=1,
        connect_interval=0,
        log_dir=None,
    )


@pytest.fixture()
def engine(settings):
    engine = connect(settings, RetryPolicy(max_attempts=1, interval=0))
    yield engine
    engine.dispose()


@pytest.fixture()
def images(settings):
    return ImageStore.from_settings(settings)


@pytest.fixture()
def catalog(engine, images):
    return ProductCatalog(engine, images)


@pytest.fixture()
def orders(engine):
    return OrderEngine(engine)


@pytest.fixture()
def png():
    def _make(filename="photo.png", data=PNG_BYTES):
        return ImageUpload(filename=filename, content_type="image/png", data=data)

    return _make


@pytest.fixture()
def stored_assets(images):
    """Names of the files currently in the upload directory."""

    def _list() -> list[str]:
        return sorted(path.name for path in images.directory.iterdir())

    return _list


@pytest.fixture()
def client(settings):
    from app import create_app
    from fastapi.testclient import TestClient

    with TestClient(create_app(settings)) as client:
        yield client
