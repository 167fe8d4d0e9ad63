# =============================================================================
# core/services/account_service.py - Account Deletion
# =============================================================================
# Purges a user's data table by table, then deletes the auth identity.
# Table steps are best-effort: a failure is logged and recorded in the report
# and the purge moves on. Only the identity deletion is fatal.
# =============================================================================

import logging
from uuid import UUID

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import normalize_uuid
from app.exceptions import AccountDeletionError, InvalidConfirmationError
from core.models.account import AccountDeletionReport, DeletionStep

logger = logging.getLogger(__name__)

CONFIRMATION_TEXT = "DELETE"

# (table, owner column) in deletion order: children before parents
DELETION_ORDER: list[tuple[str, str]] = [
    ("credit_transactions", "user_id"),
    ("templates", "user_id"),
    ("user_team_slots", "user_id"),
    ("user_credits", "user_id"),
    ("user_roles", "user_id"),
    ("user_subscriptions", "user_id"),
    ("profiles", "id"),
]


class AccountService:
    """
    Service for account lifecycle operations.
    """

    @staticmethod
    def delete_account(user_id: UUID | str, confirmation: str) -> AccountDeletionReport:
        """
        Delete all data of a user and the user itself.

        Args:
            user_id: The owner UUID
            confirmation: Must be exactly "DELETE"

        Returns:
            AccountDeletionReport with one step per table

        Raises:
            InvalidConfirmationError: If the confirmation text is wrong
            AccountDeletionError: If the auth identity couldn't be deleted
        """
        if confirmation != CONFIRMATION_TEXT:
            raise InvalidConfirmationError(CONFIRMATION_TEXT)

        user_id_str = normalize_uuid(user_id)
        report = AccountDeletionReport(user_id=user_id_str)

        for table, column in DELETION_ORDER:
            try:
                deleted = SupabaseClient.delete_user_rows(table, user_id_str, column=column)
                report.steps.append(DeletionStep(table=table, success=True, rows_deleted=deleted))
                logger.info(f"Deleted {deleted} row(s) from {table} for user {user_id_str}")
            except SupabaseClientError as e:
                report.steps.append(DeletionStep(table=table, success=False, error=e.message))
                logger.warning(f"Error deleting {table} for user {user_id_str}: {e}")

        try:
            SupabaseClient.delete_auth_user(user_id_str)
        except SupabaseClientError as e:
            logger.error(f"Failed to delete auth user {user_id_str}: {e}")
            raise AccountDeletionError(user_id_str, e.message)

        if report.failed_tables:
            report.message = (
                "Account deleted; some data could not be removed: "
                + ", ".join(report.failed_tables)
            )
        logger.info(f"User account {user_id_str} completely deleted")
        return report
