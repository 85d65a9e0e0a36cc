"""Fixtures that run the assembled FastAPI application in-process."""

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from farmlink.app import create_app
from farmlink.config import AppConfig


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """TestClient over a fresh app; each app gets its own seeded in-memory database."""
    app = create_app(AppConfig())
    with TestClient(app) as test_client:
        yield test_client
