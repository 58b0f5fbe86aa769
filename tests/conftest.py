"""Pytest fixtures for taskboard"""
from pathlib import Path

import pytest

from taskboard.config import Config
from taskboard.main import init_app
from taskboard.storage import MemStorage, SqliteStorage


@pytest.fixture(params=["memory", "sqlite"])
def storage(request, tmp_path: Path):
    if request.param == "memory":
        backend = MemStorage()
    else:
        backend = SqliteStorage(tmp_path / "test.db")
    try:
        yield backend
    finally:
        backend.close()


@pytest.fixture()
def config() -> Config:
    return Config()


@pytest.fixture()
async def client(aiohttp_client, config, storage):
    app = init_app(config, storage=storage)
    return await aiohttp_client(app)


@pytest.fixture()
def deceased_payload() -> dict:
    return {
        "fullName": "Nguyen Van B",
        "prayerType": "deceased",
        "birthYear": 1940,
        "deathYear": 2010,
        "burialLocation": "Hue",
    }
