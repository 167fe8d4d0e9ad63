# =============================================================================
# tests/test_api.py - HTTP API Tests
# =============================================================================
# End-to-end through FastAPI's TestClient against the in-memory store.
# Checks status codes and the structured error body:
#   {"detail": ..., "code": ..., "suggestion": ..., "details": {...}}
#
# Run with: pytest tests/test_api.py -v
# =============================================================================

import time
from datetime import timedelta
from types import SimpleNamespace
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from app.config import settings
from app.main import app
from lib.utils import utc_now
from tests.conftest import ADMIN_ID, OTHER_USER_ID, USER_ID

SLOTS = "/api/v1/team-slots"
CREDITS = "/api/v1/credits"


def token(sub: str = USER_ID, expires_in: int = 3600) -> str:
    claims = {
        "sub": sub,
        "email": "fan@example.com",
        "aud": "authenticated",
        "exp": int(time.time()) + expires_in,
    }
    return jwt.encode(claims, settings.SUPABASE_JWT_SECRET, algorithm="HS256")


# =============================================================================
# Authentication
# =============================================================================

class TestAuthentication:
    """Real token verification (no dependency override)."""

    @pytest.fixture
    def client(self, fake_db):
        app.dependency_overrides.clear()
        return TestClient(app)

    def test_missing_token(self, client):
        response = client.get(SLOTS)

        assert response.status_code == 401
        assert response.json()["code"] == "UNAUTHENTICATED"
        assert response.headers["www-authenticate"] == "Bearer"

    def test_valid_token(self, client):
        response = client.get("/api/v1/auth/verify", headers={"Authorization": f"Bearer {token()}"})

        assert response.status_code == 200
        assert response.json()["user_id"] == USER_ID

    def test_expired_token(self, client):
        response = client.get(SLOTS, headers={"Authorization": f"Bearer {token(expires_in=-60)}"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Token has expired"

    def test_garbage_token(self, client):
        response = client.get(SLOTS, headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401

    def test_role_endpoint(self, client, seed_role):
        seed_role(USER_ID, "paid_user")

        response = client.get("/api/v1/auth/role", headers={"Authorization": f"Bearer {token()}"})

        body = response.json()
        assert body["role"] == "paid_user"
        assert body["is_paid_user"] is True
        assert body["limits"] == {"max_teams": 3, "monthly_credits": 10}


# =============================================================================
# Team Slots
# =============================================================================

class TestTeamSlotEndpoints:

    def test_claim_then_quota(self, api_client):
        # Act
        first = api_client.post(SLOTS, json={"team_id": "100", "sport": "unihockey"})
        second = api_client.post(SLOTS, json={"team_id": "200", "sport": "unihockey"})

        # Assert
        assert first.status_code == 200
        assert first.json()["team_id"] == "100"
        assert second.status_code == 409
        body = second.json()
        assert body["code"] == "QUOTA_EXCEEDED"
        assert body["details"] == {"limit": 1, "current": 1}
        assert body["suggestion"]

    def test_list(self, api_client, seed_slot):
        seed_slot(USER_ID, "100", changed_at=utc_now() - timedelta(days=2, hours=1))

        body = api_client.get(SLOTS).json()

        assert body["used"] == 1
        assert body["can_add_slot"] is False
        assert body["slots"][0]["days_until_editable"] == 5

    def test_delete_locked_slot(self, api_client, seed_slot):
        slot = seed_slot(USER_ID, "100", changed_at=utc_now() - timedelta(days=6, hours=23))

        response = api_client.delete(f"{SLOTS}/{slot['id']}")

        assert response.status_code == 409
        assert response.json()["code"] == "COOLDOWN_ACTIVE"
        assert response.json()["details"]["days_remaining"] == 1

    def test_delete_unlocked_slot(self, api_client, seed_slot, fake_db):
        slot = seed_slot(USER_ID, "100", changed_at=utc_now() - timedelta(days=7, minutes=1))

        response = api_client.delete(f"{SLOTS}/{slot['id']}")

        assert response.status_code == 200
        assert response.json() == {"slot_id": slot["id"], "deleted": True}
        assert fake_db.rows("user_team_slots") == []

    def test_foreign_and_missing_slots(self, api_client, seed_slot):
        foreign = seed_slot(OTHER_USER_ID, "100", changed_at=utc_now() - timedelta(days=30))

        assert api_client.delete(f"{SLOTS}/{foreign['id']}").status_code == 403
        assert api_client.delete(f"{SLOTS}/does-not-exist").status_code == 404

    def test_rebind(self, api_client, seed_slot):
        slot = seed_slot(USER_ID, "100", changed_at=utc_now() - timedelta(days=9))

        response = api_client.patch(f"{SLOTS}/{slot['id']}", json={"team_id": "200"})

        assert response.status_code == 200
        assert response.json()["team_id"] == "200"
        assert api_client.get(f"{SLOTS}/teams/200").json()["in_slot"] is True

    def test_invalid_body(self, api_client):
        response = api_client.post(SLOTS, json={"team_id": "100", "sport": "curling"})

        assert response.status_code == 422
        assert response.json()["code"] == "VALIDATION_ERROR"


# =============================================================================
# Credits
# =============================================================================

class TestCreditEndpoints:

    def test_uninitialized_balance(self, api_client):
        response = api_client.get(CREDITS)

        assert response.status_code == 404
        assert response.json()["code"] == "CREDITS_UNINITIALIZED"

    def test_provision_and_consume_until_empty(self, api_client):
        # Arrange
        assert api_client.post(f"{CREDITS}/provision").json()["credits_remaining"] == 3

        # Act
        responses = [api_client.post(f"{CREDITS}/consume", json={"template_info": "Result"}) for _ in range(4)]

        # Assert
        assert [r.status_code for r in responses] == [200, 200, 200, 402]
        assert responses[2].json()["balance"]["credits_remaining"] == 0
        assert responses[3].json()["code"] == "INSUFFICIENT_CREDITS"
        history = api_client.get(f"{CREDITS}/transactions", params={"limit": 5}).json()
        assert len(history) == 3

    def test_provision_uses_role_allowance(self, api_client, seed_role):
        seed_role(USER_ID, "paid_user")

        response = api_client.post(f"{CREDITS}/provision")

        assert response.status_code == 200
        assert response.json()["credits_remaining"] == 10
        assert api_client.post(f"{CREDITS}/provision").json()["credits_remaining"] == 10

    def test_consume_without_body(self, api_client, fake_db):
        fake_db.seed("user_credits", {"user_id": USER_ID, "credits_remaining": 1, "credits_purchased": 0})

        assert api_client.post(f"{CREDITS}/consume").status_code == 200

    def test_purchase_requires_admin(self, api_client):
        response = api_client.post(f"{CREDITS}/purchase", json={"user_id": USER_ID, "amount": 5})

        assert response.status_code == 403
        assert response.json()["code"] == "ADMIN_REQUIRED"

    def test_admin_purchase(self, api_client, seed_role):
        seed_role(ADMIN_ID, "admin")
        api_client.as_user(ADMIN_ID)

        response = api_client.post(f"{CREDITS}/purchase", json={"user_id": USER_ID, "amount": 5})

        assert response.status_code == 200
        assert response.json()["credits_remaining"] == 5


# =============================================================================
# Account, Preferences, Admin, Health
# =============================================================================

class TestOtherEndpoints:

    def test_delete_account_needs_confirmation(self, api_client, fake_db):
        response = api_client.request("DELETE", "/api/v1/account", json={"confirmation": "yes"})

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_CONFIRMATION"
        assert fake_db.auth.admin.deleted_users == []

    def test_delete_account(self, api_client, fake_db):
        response = api_client.request("DELETE", "/api/v1/account", json={"confirmation": "DELETE"})

        assert response.status_code == 200
        assert fake_db.auth.admin.deleted_users == [USER_ID]

    def test_preferences_roundtrip(self, api_client, fake_db):
        fake_db.seed("profiles", {"id": USER_ID, "email": "fan@example.com"})

        response = api_client.patch("/api/v1/preferences", json={"announcement_days_before": 2})

        assert response.status_code == 200
        assert api_client.get("/api/v1/preferences").json()["announcement_days_before"] == 2

    def test_admin_migration_forbidden_for_paid_user(self, api_client, seed_role):
        seed_role(USER_ID, "paid_user")

        assert api_client.post("/api/v1/admin/templates/migrate-api-fields").status_code == 403

    def test_admin_job_trigger(self, api_client, seed_role):
        seed_role(ADMIN_ID, "admin")
        api_client.as_user(ADMIN_ID)

        with patch("workers.tasks.reset_monthly_credits") as task:
            task.delay.return_value = SimpleNamespace(id="task-1")
            response = api_client.post("/api/v1/admin/jobs/reset-monthly-credits")

        assert response.status_code == 200
        assert response.json()["task_id"] == "task-1"
        assert response.json()["status"] == "PENDING"

    def test_health(self, api_client):
        body = api_client.get("/api/v1/health").json()

        assert body["status"] == "healthy"
