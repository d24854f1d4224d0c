# tests/conftest.py

"""
Shared fixtures.

Settings require Supabase credentials, so placeholders are set before any
app module is imported. Nothing here talks to Supabase.
"""

import os

os.environ.setdefault("SUPABASE_URL", "https://example.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-service-role-key")

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.dependencies import get_current_user


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def auth_client():
    """Client whose requests are authenticated as `user_1`."""
    app.dependency_overrides[get_current_user] = lambda: "user_1"
    yield TestClient(app)
    app.dependency_overrides.pop(get_current_user, None)
