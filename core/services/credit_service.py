# =============================================================================
# core/services/credit_service.py - Credit Ledger
# =============================================================================
# Every balance change goes through a stored procedure or one conditional
# statement; Python never reads a balance and writes it back.
#
# fetch_balance distinguishes "no ledger row" (None) from a zero balance,
# since a missing row means the account was never provisioned.
# =============================================================================

import logging
from datetime import datetime, timezone
from uuid import UUID

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import normalize_uuid, to_iso, utc_now
from app.exceptions import StoreUnavailableError
from core.models.credits import CreditBalance, CreditTransaction
from core.models.role import Role
from core.services.limits_service import limits_for
from core.services.role_service import RoleService

logger = logging.getLogger(__name__)

CREDITS_TABLE = "user_credits"
TRANSACTIONS_TABLE = "credit_transactions"


def month_start(now: datetime) -> datetime:
    """First instant of the UTC month containing `now`."""
    now = now.astimezone(timezone.utc)
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


class CreditService:
    """
    Service for credit balance operations.
    """

    @staticmethod
    def fetch_balance(user_id: UUID | str) -> CreditBalance | None:
        """
        Current balance of a user.

        Returns:
            CreditBalance, or None if the ledger row doesn't exist

        Raises:
            StoreUnavailableError: If the ledger can't be read
        """
        try:
            row = SupabaseClient.fetch_credits(user_id)
        except SupabaseClientError as e:
            raise StoreUnavailableError("fetch_credits", str(e))

        if row is None:
            return None
        return CreditBalance(**row)

    @staticmethod
    def consume_credit(
        user_id: UUID | str,
        game_url: str | None = None,
        template_info: str | None = None,
    ) -> bool:
        """
        Debit one credit for an export.

        A single call to the consume_credit procedure, which locks the row,
        checks the balance, decrements it and records a consumption
        transaction in one transaction.

        Returns:
            True if a credit was debited, False if the balance was zero
            (or the ledger doesn't exist)

        Raises:
            StoreUnavailableError: If the procedure can't be called
        """
        user_id_str = normalize_uuid(user_id)

        try:
            consumed = SupabaseClient.call_rpc("consume_credit", {
                "p_user_id": user_id_str,
                "p_game_url": game_url,
                "p_template_info": template_info,
            })
        except SupabaseClientError as e:
            raise StoreUnavailableError("consume_credit", str(e))

        if consumed:
            logger.info(f"Consumed 1 credit for user {user_id_str}")
        else:
            logger.info(f"User {user_id_str} has no credits left")
        return bool(consumed)

    @staticmethod
    def provision_balance(user_id: UUID | str, initial_credits: int | None = None) -> CreditBalance:
        """
        Create the ledger row for a user if it doesn't exist yet.

        Existing balances are left alone. Without initial_credits the free
        monthly allowance is granted.

        Returns:
            The balance after provisioning
        """
        user_id_str = normalize_uuid(user_id)
        if initial_credits is None:
            initial_credits = limits_for(Role.FREE_USER).monthly_credits

        try:
            client = SupabaseClient.get_client()
            client.table(CREDITS_TABLE).upsert(
                {
                    "user_id": user_id_str,
                    "credits_remaining": initial_credits,
                    "credits_purchased": 0,
                    "last_reset_date": to_iso(utc_now()),
                },
                on_conflict="user_id",
                ignore_duplicates=True,
            ).execute()
        except Exception as e:
            raise StoreUnavailableError("provision_credits", str(e))

        balance = CreditService.fetch_balance(user_id_str)
        if balance is None:
            raise StoreUnavailableError("provision_credits", "ledger row missing after insert")
        return balance

    @staticmethod
    def add_purchased_credits(user_id: UUID | str, amount: int) -> CreditBalance | None:
        """
        Add purchased credits through the add_purchased_credits procedure.

        Raises:
            ValueError: If amount isn't positive
            StoreUnavailableError: If the procedure fails
        """
        if amount <= 0:
            raise ValueError("amount must be positive")

        user_id_str = normalize_uuid(user_id)
        try:
            SupabaseClient.call_rpc("add_purchased_credits", {
                "p_user_id": user_id_str,
                "p_amount": amount,
            })
        except SupabaseClientError as e:
            raise StoreUnavailableError("add_purchased_credits", str(e))

        logger.info(f"Added {amount} purchased credits for user {user_id_str}")
        return CreditService.fetch_balance(user_id_str)

    @staticmethod
    def list_transactions(user_id: UUID | str, limit: int = 20) -> list[CreditTransaction]:
        """Most recent ledger movements of a user, newest first."""
        user_id_str = normalize_uuid(user_id)

        try:
            client = SupabaseClient.get_client()
            response = (
                client.table(TRANSACTIONS_TABLE)
                .select("*")
                .eq("user_id", user_id_str)
                .order("created_at", desc=True)
                .limit(limit)
                .execute()
            )
        except Exception as e:
            raise StoreUnavailableError("list_credit_transactions", str(e))

        return [CreditTransaction.from_db_row(row) for row in response.data or []]

    @staticmethod
    def apply_monthly_reset(
        user_id: UUID | str,
        role: Role,
        now: datetime | None = None,
    ) -> bool:
        """
        Refill credits_remaining to the role's monthly allowance.

        One call to the reset_monthly_credits procedure, which updates the
        ledger only if last_reset_date is before the current month and
        records the monthly_reset transaction in the same transaction.
        Running it twice in a month is a no-op. Purchased credits left over
        from the previous month are not carried over.

        Returns:
            True if the balance was reset, False if it was already reset this
            month or the ledger doesn't exist

        Raises:
            StoreUnavailableError: If the procedure can't be called
        """
        user_id_str = normalize_uuid(user_id)
        now = now or utc_now()
        allowance = limits_for(role).monthly_credits

        try:
            reset = SupabaseClient.call_rpc("reset_monthly_credits", {
                "p_user_id": user_id_str,
                "p_allowance": allowance,
                "p_month_start": to_iso(month_start(now)),
                "p_now": to_iso(now),
            })
        except SupabaseClientError as e:
            raise StoreUnavailableError("reset_monthly_credits", str(e))

        if reset:
            logger.info(f"Reset credits of user {user_id_str} to {allowance}")
        return bool(reset)

    @staticmethod
    def reset_all_due(now: datetime | None = None) -> dict[str, int]:
        """
        Run apply_monthly_reset for every ledger not yet reset this month.

        Used by the monthly beat task. A failing user is counted and skipped.
        """
        now = now or utc_now()
        try:
            client = SupabaseClient.get_client()
            response = (
                client.table(CREDITS_TABLE)
                .select("user_id")
                .lt("last_reset_date", to_iso(month_start(now)))
                .execute()
            )
        except Exception as e:
            raise StoreUnavailableError("list_due_credit_resets", str(e))

        stats = {"reset": 0, "skipped": 0, "failed": 0}
        for row in response.data or []:
            user_id = row["user_id"]
            try:
                role = RoleService.resolve_role(user_id)
                if CreditService.apply_monthly_reset(user_id, role, now):
                    stats["reset"] += 1
                else:
                    stats["skipped"] += 1
            except StoreUnavailableError as e:
                logger.warning(f"Monthly reset failed for user {user_id}: {e.details.get('error')}")
                stats["failed"] += 1

        logger.info(f"Monthly credit reset finished: {stats}")
        return stats
