"""
Integration test configuration and fixtures.

Each test gets its own application instance wired to a fresh in-memory
log store, so stored entries never leak between tests.
"""

import pytest
from fastapi.testclient import TestClient

from config.settings import Settings
from main import create_app
from storage.memory_store import InMemoryLogStore


@pytest.fixture
def test_settings() -> Settings:
    """Settings that ignore any .env file in the working directory."""
    return Settings(_env_file=None)


@pytest.fixture
def app_store() -> InMemoryLogStore:
    return InMemoryLogStore()


@pytest.fixture
def client(test_settings, app_store):
    """Test client for an application backed by app_store."""
    app = create_app(settings=test_settings, log_store=app_store)
    with TestClient(app) as test_client:
        yield test_client
