# tests/conftest.py

"""
Pytest configuration and shared fixtures for testing.
"""

import pytest
from fastapi.testclient import TestClient
from unittest.mock import patch
from typing import Generator

from main import create_app
from dependencies.auth import CurrentUser, get_current_user
from fake_supabase import FakeSupabase


ORG_A = "11111111-1111-4111-8111-111111111111"
ORG_B = "22222222-2222-4222-8222-222222222222"


@pytest.fixture(scope="function")
def app():
    """Create a test FastAPI application instance."""
    return create_app()


@pytest.fixture(scope="function")
def client(app) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI application."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def store() -> Generator[FakeSupabase, None, None]:
    """In-memory Supabase behind core.db and the auth dependency."""
    fake = FakeSupabase()
    fake.seed(
        "organizations",
        {"id": ORG_A, "name": "Agence A"},
        {"id": ORG_B, "name": "Agence B"},
    )
    with patch("core.db.get_supabase_client", return_value=fake), \
            patch("dependencies.auth.get_supabase_client", return_value=fake), \
            patch("core.supabase_client.get_supabase_client", return_value=fake):
        yield fake


@pytest.fixture
def as_user(app):
    """Make every request run as the given CurrentUser."""

    def _as(user: CurrentUser):
        app.dependency_overrides[get_current_user] = lambda: user
        return user

    yield _as
    app.dependency_overrides.clear()


@pytest.fixture
def super_admin():
    return CurrentUser(
        id="super-user-id",
        auth_user_id="super-auth-id",
        email="root@example.com",
        role="admin",
        is_super_admin=True,
    )


@pytest.fixture
def manager_profile(store):
    """Org A profile allowed to manage profiles."""
    profile, = store.seed("profiles", {
        "organization_id": ORG_A,
        "name": "Gestionnaire",
        "is_system_profile": False,
        "is_active": True,
    })
    store.seed("profile_object_permissions", {
        "profile_id": profile["id"],
        "object_type": "Profile",
        "access_level": "ReadWrite",
        "can_create": True,
        "can_read": True,
        "can_edit": True,
        "can_delete": False,
        "can_view_all": False,
    })
    return profile


@pytest.fixture
def org_a_manager(manager_profile):
    return CurrentUser(
        id="manager-a-id",
        auth_user_id="manager-a-auth",
        email="manager@agence-a.example",
        organization_id=ORG_A,
        profile_id=manager_profile["id"],
    )


@pytest.fixture
def org_b_user(store):
    profile, = store.seed("profiles", {"organization_id": ORG_B, "name": "Lecteur B"})
    return CurrentUser(
        id="reader-b-id",
        auth_user_id="reader-b-auth",
        email="reader@agence-b.example",
        organization_id=ORG_B,
        profile_id=profile["id"],
    )


@pytest.fixture(autouse=True)
def reset_cache():
    """Reset cache before each test."""
    from core.cache import cache_clear
    cache_clear()
    yield
    cache_clear()
