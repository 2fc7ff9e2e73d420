# tests/conftest.py

"""
Pytest configuration and shared fixtures for testing.
"""

import pytest
from fastapi.testclient import TestClient
from typing import Generator

from main import create_app
from tests.fake_supabase import FakeSupabase


ROUTER_MODULES = (
    "dependencies.auth",
    "routers.owner_applications",
    "routers.owners",
    "routers.locations",
    "routers.zones",
    "routers.health",
    "routers.profile",
)
CALLER_SCOPED_MODULES = (
    "routers.owner_applications",
    "routers.owners",
)


@pytest.fixture
def supabase() -> FakeSupabase:
    """Empty in-memory store."""
    return FakeSupabase()


@pytest.fixture
def app(supabase, monkeypatch):
    """Test application wired to the in-memory store."""
    for module in ROUTER_MODULES:
        monkeypatch.setattr(f"{module}.get_supabase_client", lambda: supabase)

    def caller_client(token):
        return supabase.as_user(supabase.store.tokens.get(token))

    for module in CALLER_SCOPED_MODULES:
        monkeypatch.setattr(f"{module}.get_user_client", caller_client)

    return create_app()


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI application."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin(supabase):
    return supabase.add_profile("super_admin", full_name="Site Admin")


@pytest.fixture
def owner(supabase):
    return supabase.add_profile("location_owner", full_name="Lot Owner")


@pytest.fixture
def user(supabase):
    return supabase.add_profile("user", full_name="Regular User")


def auth_headers(profile: dict) -> dict:
    return {"Authorization": f"Bearer token-{profile['id']}"}


CONTACT_INFO = {
    "contact_person": "Asha Verma",
    "phone": "+91 98100 00000",
    "email": "asha@example.com",
    "justification": "I run the parking lot behind the market.",
}
