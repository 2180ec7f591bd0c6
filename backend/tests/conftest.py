"""Shared pytest fixtures."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from forumlite.core.config import settings
from forumlite.main import app


@pytest.fixture
def client():
    """Test client with the application lifespan running."""
    with TestClient(app) as c:
        yield c


@pytest.fixture
def api_prefix() -> str:
    return f"{settings.api_v1_prefix}/composer"
