"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from clipforge.api.main import create_app
from clipforge.infrastructure.config import (
    ExportConfig,
    RecordingConfig,
    Settings,
    ThumbnailConfig,
)
from tests.factories import create_media_file


@pytest.fixture
def media_file(tmp_path: Path) -> Path:
    """A stand-in media file on disk."""
    return create_media_file(tmp_path)


@pytest.fixture
def work_dir(tmp_path: Path) -> Path:
    path = tmp_path / "work"
    path.mkdir()
    return path


@pytest.fixture
def export_config(work_dir: Path) -> ExportConfig:
    return ExportConfig(temp_dir=work_dir)


@pytest.fixture
def test_settings(tmp_path: Path, work_dir: Path) -> Settings:
    """Test settings with overrides."""
    return Settings(
        app={"environment": "test"},
        export=ExportConfig(temp_dir=work_dir),
        thumbnails=ThumbnailConfig(cache_dir=tmp_path / "thumbnails"),
        recording=RecordingConfig(startup_grace_seconds=0.2, flush_seconds=0.0),
    )


@pytest.fixture
def app(test_settings: Settings):
    """Application wired with test settings."""
    return create_app(test_settings)


@pytest_asyncio.fixture
async def client(app) -> AsyncClient:
    """Async test client bound to the application."""
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac
