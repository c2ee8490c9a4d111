"""Shared fixtures for API endpoint tests.

Provides:
- Settings pointing the CSV file at a per-test temporary directory
- A WaitlistStore for that file
- FastAPI TestClient built by create_app with the store dependency overridden
"""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from config.settings import LoggingConfig, ServerConfig, Settings, StorageConfig
from waitlist.storage import WaitlistStore

WAITLIST_URL = "/api/waitlist"


@pytest.fixture()
def csv_path(tmp_path) -> Path:
    return tmp_path / "media" / "waitlist.csv"


@pytest.fixture()
def settings(csv_path) -> Settings:
    """Settings with storage under tmp_path and no log file."""
    return Settings(
        storage=StorageConfig(csv_path=csv_path, lock_timeout=1.0),
        logging=LoggingConfig(file=None),
        server=ServerConfig(route_prefix=WAITLIST_URL),
    )


@pytest.fixture()
def store(csv_path) -> WaitlistStore:
    return WaitlistStore(csv_path, lock_timeout=1.0)


@pytest.fixture()
def app(settings, store):
    """Application with get_waitlist_store overridden to the test store."""
    from waitlist.api.dependencies import get_waitlist_store
    from waitlist.app import create_app

    app = create_app(settings)
    app.dependency_overrides[get_waitlist_store] = lambda: store
    return app


@pytest.fixture()
def client(app) -> TestClient:
    return TestClient(app)
