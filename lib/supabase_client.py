# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a typed wrapper for Supabase database operations.
# It implements the singleton pattern to reuse a single client connection
# and provides specialized methods for fetching:
# - User roles (tier resolution)
# - Team slots
# - Credit balances
# - Profiles
# plus thin helpers for stored procedures (RPC) and owner-scoped deletes.
#
# Fetch only what's needed, when it's needed. Business rules live in
# core/services, never here.
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   slots = SupabaseClient.fetch_team_slots(user_id)
# =============================================================================

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from supabase import create_client, Client

from app.config import settings

# Set up logging for this module
logger = logging.getLogger(__name__)

# PostgREST error code returned by .single() when no row matches
NO_ROWS_CODE = "PGRST116"


class SupabaseClientError(Exception):
    """
    Error during Supabase operations.

    Provides actionable error messages: errors should tell HOW to fix,
    not just WHAT failed.
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


class SupabaseClient:
    """
    Typed wrapper for Supabase database operations.

    Implements singleton pattern - one client instance is shared across
    the application. All methods are class methods for easy access without
    instantiation.

    Example:
        role = SupabaseClient.fetch_user_role("550e8400-...")
        slots = SupabaseClient.fetch_team_slots("550e8400-...")
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Uses service_role key which bypasses Row Level Security (RLS).
        Ownership checks are therefore done explicitly in the services.

        Returns:
            Client: Supabase client instance

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                )
        return cls._instance

    @classmethod
    def _normalize_uuid(cls, uuid_value: str | UUID) -> str:
        """Convert UUID to string for queries."""
        return str(uuid_value) if isinstance(uuid_value, UUID) else uuid_value

    # -------------------------------------------------------------------------
    # Roles
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_user_role(cls, user_id: str | UUID) -> str | None:
        """
        Fetch the raw role value for a user.

        Args:
            user_id: The owner UUID

        Returns:
            Role string ("free_user", "paid_user", "admin"), or None if the
            user has no role row

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()
        user_id_str = cls._normalize_uuid(user_id)

        try:
            response = (
                client.table("user_roles")
                .select("role")
                .eq("user_id", user_id_str)
                .single()
                .execute()
            )

            if response.data:
                return response.data.get("role")
            return None

        except Exception as e:
            if NO_ROWS_CODE in str(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch user role: {e}",
                code="FETCH_ROLE_FAILED",
                details={"user_id": user_id_str}
            )

    @classmethod
    def upsert_user_role(cls, user_id: str | UUID, role: str) -> dict[str, Any]:
        """
        Create or replace the role row for a user.

        Args:
            user_id: The owner UUID
            role: New role value

        Returns:
            The stored role row

        Raises:
            SupabaseClientError: If the write fails
        """
        client = cls.get_client()
        user_id_str = cls._normalize_uuid(user_id)

        try:
            response = (
                client.table("user_roles")
                .upsert({"user_id": user_id_str, "role": role}, on_conflict="user_id")
                .execute()
            )

            if response.data:
                return response.data[0]
            raise SupabaseClientError(
                message="Upsert returned no data",
                code="UPSERT_NO_DATA"
            )

        except SupabaseClientError:
            raise
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to store user role: {e}",
                code="UPSERT_ROLE_FAILED",
                details={"user_id": user_id_str, "role": role}
            )

    # -------------------------------------------------------------------------
    # Team Slots
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_team_slots(cls, user_id: str | UUID) -> list[dict[str, Any]]:
        """
        Fetch all team slots of a user, oldest first.

        Args:
            user_id: The owner UUID

        Returns:
            List of slot dicts with keys id, user_id, team_id, team_name,
            sport, club_id, created_at, last_changed_at

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()
        user_id_str = cls._normalize_uuid(user_id)

        try:
            response = (
                client.table("user_team_slots")
                .select("*")
                .eq("user_id", user_id_str)
                .order("created_at", desc=False)
                .execute()
            )

            slots = response.data or []
            logger.debug(f"Fetched {len(slots)} team slots for user {user_id_str}")
            return slots

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch team slots: {e}",
                code="FETCH_SLOTS_FAILED",
                details={"user_id": user_id_str}
            )

    @classmethod
    def fetch_team_slot(cls, slot_id: str | UUID) -> dict[str, Any] | None:
        """
        Fetch a single team slot by ID.

        Args:
            slot_id: The slot UUID

        Returns:
            Slot dict, or None if not found

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()
        slot_id_str = cls._normalize_uuid(slot_id)

        try:
            response = (
                client.table("user_team_slots")
                .select("*")
                .eq("id", slot_id_str)
                .single()
                .execute()
            )

            return response.data

        except Exception as e:
            if NO_ROWS_CODE in str(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch team slot: {e}",
                code="FETCH_SLOT_FAILED",
                suggestion="Check that the slot_id exists",
                details={"slot_id": slot_id_str}
            )

    # -------------------------------------------------------------------------
    # Credits
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_credits(cls, user_id: str | UUID) -> dict[str, Any] | None:
        """
        Fetch the credit ledger row of a user.

        Args:
            user_id: The owner UUID

        Returns:
            Dict with credits_remaining, credits_purchased, last_reset_date,
            or None if the ledger was never provisioned

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()
        user_id_str = cls._normalize_uuid(user_id)

        try:
            response = (
                client.table("user_credits")
                .select("credits_remaining, credits_purchased, last_reset_date")
                .eq("user_id", user_id_str)
                .single()
                .execute()
            )

            return response.data

        except Exception as e:
            if NO_ROWS_CODE in str(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch credits: {e}",
                code="FETCH_CREDITS_FAILED",
                details={"user_id": user_id_str}
            )

    # -------------------------------------------------------------------------
    # Profiles
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_profile(
        cls,
        user_id: str | UUID,
        columns: str = "*",
    ) -> dict[str, Any] | None:
        """
        Fetch a profile row (profiles.id is the auth user id).

        Args:
            user_id: The owner UUID
            columns: Column list for the select

        Returns:
            Profile dict, or None if not found

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()
        user_id_str = cls._normalize_uuid(user_id)

        try:
            response = (
                client.table("profiles")
                .select(columns)
                .eq("id", user_id_str)
                .single()
                .execute()
            )

            return response.data

        except Exception as e:
            if NO_ROWS_CODE in str(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch profile: {e}",
                code="FETCH_PROFILE_FAILED",
                details={"user_id": user_id_str}
            )

    # -------------------------------------------------------------------------
    # Stored Procedures & Owner-scoped Deletes
    # -------------------------------------------------------------------------

    @classmethod
    def call_rpc(cls, function_name: str, params: dict[str, Any]) -> Any:
        """
        Call a Postgres function through PostgREST.

        Used for every operation that must be atomic store-side
        (credit consumption, slot claiming).

        Args:
            function_name: Name of the SQL function
            params: Named arguments (p_user_id, ...)

        Returns:
            The function's return value (response.data)

        Raises:
            SupabaseClientError: If the call fails
        """
        client = cls.get_client()

        try:
            response = client.rpc(function_name, params).execute()
            return response.data

        except Exception as e:
            raise SupabaseClientError(
                message=f"RPC {function_name} failed: {e}",
                code="RPC_FAILED",
                details={"function": function_name}
            )

    @classmethod
    def delete_user_rows(
        cls,
        table: str,
        user_id: str | UUID,
        column: str = "user_id",
    ) -> int:
        """
        Delete every row of a table owned by a user.

        Args:
            table: Table name
            user_id: The owner UUID
            column: Owner column (profiles uses "id")

        Returns:
            Number of rows deleted

        Raises:
            SupabaseClientError: If the delete fails
        """
        client = cls.get_client()
        user_id_str = cls._normalize_uuid(user_id)

        try:
            response = (
                client.table(table)
                .delete()
                .eq(column, user_id_str)
                .execute()
            )
            return len(response.data or [])

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to delete rows from {table}: {e}",
                code="DELETE_ROWS_FAILED",
                details={"table": table, "user_id": user_id_str}
            )

    @classmethod
    def delete_auth_user(cls, user_id: str | UUID) -> None:
        """
        Delete the Supabase Auth identity of a user.

        Raises:
            SupabaseClientError: If the admin API rejects the request
        """
        client = cls.get_client()
        user_id_str = cls._normalize_uuid(user_id)

        try:
            client.auth.admin.delete_user(user_id_str)
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to delete auth user: {e}",
                code="DELETE_AUTH_USER_FAILED",
                details={"user_id": user_id_str}
            )
