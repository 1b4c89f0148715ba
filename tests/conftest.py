"""Shared pytest fixtures for Image Gallery tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from imagegallery.api.main import create_app
from imagegallery.core.config import GalleryConfig
from imagegallery.core.sqlite_store import SQLiteRecordStore
from imagegallery.core.uploads import UploadStorage

# Smallest byte sequences that start like real JPEG / PNG files.
JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00" + b"\x00" * 64 + b"\xff\xd9"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path) -> GalleryConfig:
    """Create a test configuration with temporary directories.

    Args:
        temp_dir: Temporary directory from fixture

    Returns:
        GalleryConfig using the embedded store inside ``temp_dir``
    """
    return GalleryConfig(
        _env_file=None,
        store_backend="sqlite",
        sqlite_path=str(temp_dir / "data" / "database.sqlite"),
        public_dir=str(temp_dir / "public"),
    )


@pytest.fixture
def sqlite_store(test_config: GalleryConfig) -> Generator[SQLiteRecordStore, None, None]:
    """Initialized SQLite record store in the temporary directory."""
    store = SQLiteRecordStore(test_config.sqlite_path)
    store.initialize()
    yield store
    store.close()


@pytest.fixture
def upload_storage(test_config: GalleryConfig) -> UploadStorage:
    """Upload storage rooted at the test public directory."""
    return UploadStorage(test_config.public_dir)


@pytest.fixture
def test_client(test_config: GalleryConfig) -> Generator[TestClient, None, None]:
    """FastAPI TestClient with the lifespan (store open/close) running."""
    app = create_app(test_config)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def jpeg_bytes() -> bytes:
    """A tiny JPEG-looking payload."""
    return JPEG_BYTES


@pytest.fixture
def sample_images(test_client: TestClient) -> list[dict]:
    """Upload three images through the API, oldest first.

    Returns:
        The ``image`` objects returned by ``POST /upload`` in upload order.
    """
    uploaded = []
    for title, name, content, content_type in [
        ("Mountains", "mountains.jpg", JPEG_BYTES, "image/jpeg"),
        ("Harbour", "harbour.png", PNG_BYTES, "image/png"),
        ("Forest", "forest.jpg", JPEG_BYTES, "image/jpeg"),
    ]:
        resp = test_client.post(
            "/upload",
            data={"title": title},
            files={"image": (name, content, content_type)},
        )
        assert resp.status_code == 200
        uploaded.append(resp.json()["image"])
    return uploaded
