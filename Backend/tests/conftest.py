import os
from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from gallery.core.config import Settings
from gallery.main import create_app
from gallery.services.storage import MemoryStorage

INDEX_HTML = "<!doctype html><title>Khoảnh khắc</title>"


@pytest.fixture
def media_dir(tmp_path):
    return tmp_path / "anhkiniem"


@pytest.fixture
def site_dir(tmp_path):
    site = tmp_path / "site"
    site.mkdir()
    (site / "index.html").write_text(INDEX_HTML, encoding="utf-8")
    return site


@pytest.fixture
def app_settings(media_dir, site_dir):
    return Settings(
        MEDIA_ROOT_PATH=media_dir,
        STATIC_ROOT=site_dir,
        INDEX_PAGE=site_dir / "index.html",
    )


@pytest.fixture
def storage(media_dir):
    return MemoryStorage(media_dir, max_upload_bytes=20 * 1024 * 1024)


@pytest.fixture
def client(app_settings):
    # Entering the context runs the lifespan, which creates the media directory
    with TestClient(create_app(app_settings)) as test_client:
        yield test_client


@pytest.fixture
def make_file(media_dir):
    """Drop a file straight into the storage directory with a chosen timestamp."""
    def _make(name: str, data: bytes = b"data", when: datetime | None = None):
        media_dir.mkdir(parents=True, exist_ok=True)
        path = media_dir / name
        path.write_bytes(data)
        if when is not None:
            ts = when.timestamp()
            os.utime(path, (ts, ts))
        return path
    return _make


class ChunkedStream:
    """Minimal async reader standing in for an UploadFile."""

    def __init__(self, data: bytes):
        self._data = data
        self._pos = 0

    async def read(self, size: int = -1) -> bytes:
        if size < 0:
            size = len(self._data) - self._pos
        chunk = self._data[self._pos:self._pos + size]
        self._pos += len(chunk)
        return chunk
