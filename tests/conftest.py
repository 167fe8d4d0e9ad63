# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Swaps the Supabase singleton for an in-memory fake (tests/fakes.py)
# - Provides an authenticated API client
# =============================================================================

import os
from datetime import datetime, timezone
from uuid import UUID

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_dummy")
os.environ.setdefault("SMTP_HOST", "smtp.test.local")
os.environ.setdefault("SMTP_USER", "mailer")
os.environ.setdefault("SMTP_PASS", "secret")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

import pytest

from lib.supabase_client import SupabaseClient
from lib.utils import to_iso
from tests.fakes import FakeSupabase

USER_ID = "11111111-1111-4111-8111-111111111111"
OTHER_USER_ID = "22222222-2222-4222-8222-222222222222"
ADMIN_ID = "33333333-3333-4333-8333-333333333333"


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def fake_db():
    """In-memory Supabase installed as the client singleton."""
    fake = FakeSupabase()
    SupabaseClient._instance = fake
    yield fake
    SupabaseClient._instance = None


@pytest.fixture
def user_id() -> str:
    return USER_ID


@pytest.fixture
def other_user_id() -> str:
    return OTHER_USER_ID


@pytest.fixture
def now() -> datetime:
    """Fixed clock for cooldown and reset arithmetic."""
    return datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def seed_role(fake_db):
    """Store a role row: seed_role(user_id, "paid_user")."""
    def _seed(user: str, role: str):
        fake_db.seed("user_roles", {"user_id": user, "role": role})
    return _seed


@pytest.fixture
def seed_slot(fake_db):
    """
    Store a team slot whose last change happened at `changed_at`.

    Example:
        seed_slot(USER_ID, "429283", changed_at=now - timedelta(days=8))
    """
    def _seed(user: str, team_id: str, changed_at: datetime, **fields):
        row = {
            "user_id": user,
            "team_id": team_id,
            "team_name": fields.pop("team_name", f"Team {team_id}"),
            "sport": fields.pop("sport", "unihockey"),
            "club_id": fields.pop("club_id", "452800"),
            "created_at": to_iso(fields.pop("created_at", changed_at)),
            "last_changed_at": to_iso(changed_at),
            **fields,
        }
        return fake_db.seed("user_team_slots", row)[0]
    return _seed


@pytest.fixture
def api_client(fake_db):
    """
    TestClient acting as USER_ID (override `as_user` to switch identity).

    Example:
        client = api_client
        client.as_user(ADMIN_ID)
        client.get("/api/v1/tasks/abc")
    """
    from fastapi.testclient import TestClient

    from app.auth import AuthUser, get_current_user
    from app.main import app

    identity = {"id": USER_ID, "email": "fan@example.com"}

    def _current_user() -> AuthUser:
        return AuthUser(id=UUID(identity["id"]), email=identity["email"])

    app.dependency_overrides[get_current_user] = _current_user
    client = TestClient(app)

    def as_user(user: str, email: str | None = "fan@example.com"):
        identity["id"] = user
        identity["email"] = email

    client.as_user = as_user
    yield client
    app.dependency_overrides.clear()
