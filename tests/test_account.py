# =============================================================================
# tests/test_account.py - Account Deletion Tests
# =============================================================================
# Run with: pytest tests/test_account.py -v
# =============================================================================

import pytest

from app.exceptions import AccountDeletionError, InvalidConfirmationError
from core.services.account_service import DELETION_ORDER, AccountService


@pytest.fixture
def populated(fake_db, user_id, other_user_id):
    """One row per user in every table the deletion touches."""
    for owner in (user_id, other_user_id):
        fake_db.seed("credit_transactions", {"user_id": owner, "amount": -1, "transaction_type": "consumption"})
        fake_db.seed("templates", {"user_id": owner, "name": "My Template", "is_system": False})
        fake_db.seed("user_team_slots", {"user_id": owner, "team_id": "100"})
        fake_db.seed("user_credits", {"user_id": owner, "credits_remaining": 3, "credits_purchased": 0})
        fake_db.seed("user_roles", {"user_id": owner, "role": "free_user"})
        fake_db.seed("user_subscriptions", {"user_id": owner, "tier": "free"})
        fake_db.seed("profiles", {"id": owner, "email": f"{owner}@example.com"})
    return fake_db


class TestDeleteAccount:

    def test_wrong_confirmation(self, populated, user_id):
        with pytest.raises(InvalidConfirmationError):
            AccountService.delete_account(user_id, "delete")

        assert populated.auth.admin.deleted_users == []
        assert len(populated.rows("profiles")) == 2

    def test_deletes_everything_of_the_user(self, populated, user_id, other_user_id):
        # Act
        report = AccountService.delete_account(user_id, "DELETE")

        # Assert
        assert report.success is True
        assert report.failed_tables == []
        assert [step.table for step in report.steps] == [table for table, _ in DELETION_ORDER]
        assert all(step.rows_deleted == 1 for step in report.steps)
        assert populated.auth.admin.deleted_users == [user_id]
        for table, column in DELETION_ORDER:
            owners = [row[column] for row in populated.rows(table)]
            assert owners == [other_user_id], table

    def test_table_failure_is_reported_not_fatal(self, populated, user_id):
        # Arrange
        populated.fail("templates", "delete")

        # Act
        report = AccountService.delete_account(user_id, "DELETE")

        # Assert
        assert report.failed_tables == ["templates"]
        assert "templates" in report.message
        assert populated.auth.admin.deleted_users == [user_id]
        assert user_id not in [r["user_id"] for r in populated.rows("user_credits")]

    def test_identity_failure_is_fatal(self, populated, user_id):
        populated.auth.admin.failure = RuntimeError("User not allowed")

        with pytest.raises(AccountDeletionError) as exc_info:
            AccountService.delete_account(user_id, "DELETE")

        assert exc_info.value.status_code == 500
