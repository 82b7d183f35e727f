"""Pytest configuration and fixtures."""

import asyncio
import json
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from config import Config, StorageConfig, SystemConfig, ThemesConfig
from kiosk import KioskManager, ThemeRegistry
from portal import PortalServer
from store import KioskStore


TEST_THEMES = {
    "default": {"name": "Par défaut", "category": "basic", "hasBackground": False},
    "ocean": {"name": "Océan", "category": "environment", "hasBackground": True},
    "christmas": {"name": "Noël", "category": "seasonal", "hasBackground": False},
}


@pytest.fixture
def registry_path(tmp_path: Path) -> Path:
    """Theme registry file with a few themes."""
    path = tmp_path / "themes.json"
    path.write_text(json.dumps(TEST_THEMES), encoding="utf-8")
    return path


@pytest.fixture
def themes(registry_path: Path) -> ThemeRegistry:
    return ThemeRegistry(str(registry_path))


@pytest.fixture
def data_path(tmp_path: Path) -> Path:
    """Location of the kiosk document, in a directory that does not exist yet."""
    return tmp_path / "data" / "kiosk.json"


@pytest.fixture
def store(data_path: Path) -> KioskStore:
    return KioskStore(str(data_path))


@pytest.fixture
def kiosk_manager(store: KioskStore, themes: ThemeRegistry) -> KioskManager:
    return KioskManager(store, themes)


@pytest.fixture
def sample_document() -> dict:
    """A small valid kiosk document."""
    return {
        "globalSettings": {
            "theme": "ocean",
            "titleFontSize": 56,
            "descriptionFontSize": 20,
            "watermark": {
                "enabled": True,
                "position": "top-left",
                "size": 80,
                "opacity": 40,
                "image": "/watermarks/watermark-logo.png",
            },
            "performance": {"reduceAnimations": True},
        },
        "slides": [
            {
                "id": 1, "text": "Bienvenue", "description": "Hall A", "image": "",
                "accentColor": "#112233", "time": None, "visibility": True,
            },
            {
                "id": 2, "text": "", "description": "", "image": "/upload/abc-map.png",
                "accentColor": "#4CAF50", "time": 12000, "visibility": False,
            },
        ],
    }


@pytest.fixture
def server_config(tmp_path: Path, registry_path: Path, data_path: Path) -> Config:
    return Config(
        system=SystemConfig(syslog=False),
        storage=StorageConfig(
            data_file=str(data_path),
            upload_dir=str(tmp_path / "public" / "upload"),
            watermark_dir=str(tmp_path / "public" / "watermarks"),
        ),
        themes=ThemesConfig(registry_path=str(registry_path), watch=False),
    )


@pytest.fixture
def portal(server_config: Config) -> PortalServer:
    server = PortalServer(config=server_config)
    asyncio.run(server.initialize())
    yield server
    asyncio.run(server.stop())


@pytest.fixture
def client(portal: PortalServer):
    with TestClient(portal.app) as test_client:
        yield test_client
