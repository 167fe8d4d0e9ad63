# =============================================================================
# core/services/team_slot_service.py - Team Slot Business Logic
# =============================================================================
# Enforces the two team slot rules:
# - Quota: a user never holds more slots than their role allows. Checked at
#   write time by the claim_team_slot stored procedure, which counts and
#   inserts under a per-user lock.
# - Cooldown: a slot can only be deleted or rebound once 7 whole days have
#   passed since last_changed_at. Writes are conditional on the cutoff, so a
#   concurrent rebind can't slip a change through.
#
# Day counting is elapsed time in exact 24h units (no calendar days), and the
# same floor formula backs both display and enforcement.
# =============================================================================

import logging
from datetime import datetime, timedelta
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import normalize_uuid, parse_timestamp, to_iso, utc_now
from app.config import settings
from app.exceptions import (
    CooldownActiveError,
    QuotaExceededError,
    StoreUnavailableError,
    TeamAlreadyInSlotError,
    TeamSlotForbiddenError,
    TeamSlotNotFoundError,
)
from core.models.team_slot import TeamSelection, TeamSlot, TeamSlotList, TeamSlotView
from core.services.limits_service import limits_for
from core.services.role_service import RoleService

logger = logging.getLogger(__name__)

TABLE = "user_team_slots"
ONE_MILLISECOND = timedelta(milliseconds=1)
MS_PER_DAY = 86_400_000

# Postgres unique_violation
UNIQUE_VIOLATION = "23505"

# claim_team_slot outcomes
CLAIM_CREATED = "created"
CLAIM_EXISTING = "existing"
CLAIM_QUOTA_EXCEEDED = "quota_exceeded"


def cooldown_days() -> int:
    return settings.TEAM_SLOT_COOLDOWN_DAYS


def days_since_change(last_changed_at: datetime | str, now: datetime | None = None) -> int:
    """
    Whole days elapsed since a slot last changed.

    floor(elapsed_ms / 86_400_000); a timestamp in the future counts as 0.
    """
    now = now or utc_now()
    elapsed_ms = (now - parse_timestamp(last_changed_at)) // ONE_MILLISECOND
    return max(0, elapsed_ms // MS_PER_DAY)


def days_until_editable(slot: TeamSlot, now: datetime | None = None) -> int:
    """
    Days left before a slot may be deleted or rebound (0 = editable now).

    Example:
        # last change 6 days and 1 hour ago
        days_until_editable(slot)  # 1
    """
    return max(0, cooldown_days() - days_since_change(slot.last_changed_at, now))


class TeamSlotService:
    """
    Service for team slot operations.

    All mutations are single conditional statements or one stored
    procedure call, so duplicated or reordered requests stay safe.
    """

    @staticmethod
    def list_slots(user_id: UUID | str) -> list[TeamSlot]:
        """
        List a user's slots, oldest first.

        Raises:
            StoreUnavailableError: If the slots can't be loaded
        """
        try:
            rows = SupabaseClient.fetch_team_slots(user_id)
        except SupabaseClientError as e:
            raise StoreUnavailableError("list_team_slots", str(e))
        return [TeamSlot.from_db_row(row) for row in rows]

    @staticmethod
    def list_slot_views(
        user_id: UUID | str,
        now: datetime | None = None,
    ) -> TeamSlotList:
        """
        Slots with cooldown state plus usage against the user's limit.

        Used by the profile page and to pre-disable buttons client-side.
        """
        now = now or utc_now()
        slots = TeamSlotService.list_slots(user_id)
        max_teams = limits_for(RoleService.resolve_role(user_id)).max_teams

        views = []
        for slot in slots:
            remaining = days_until_editable(slot, now)
            views.append(TeamSlotView(
                **slot.model_dump(),
                days_until_editable=remaining,
                is_editable=remaining == 0,
            ))

        return TeamSlotList(
            slots=views,
            used=len(views),
            max_teams=max_teams,
            can_add_slot=len(views) < max_teams,
        )

    @staticmethod
    def is_team_in_slot(user_id: UUID | str, team_id: str) -> bool:
        """Advisory check whether a team already occupies one of the user's slots."""
        return any(slot.team_id == team_id for slot in TeamSlotService.list_slots(user_id))

    @staticmethod
    def can_add_slot(user_id: UUID | str) -> bool:
        """Advisory check; ensure_slot re-validates store-side."""
        max_teams = limits_for(RoleService.resolve_role(user_id)).max_teams
        return len(TeamSlotService.list_slots(user_id)) < max_teams

    @staticmethod
    def ensure_slot(
        user_id: UUID | str,
        team: TeamSelection,
    ) -> TeamSlot:
        """
        Make sure a team occupies one of the user's slots.

        - Team already stored: refresh team_name/sport/club_id, keep
          last_changed_at (no cooldown for a cosmetic refresh).
        - New team: claim a slot through claim_team_slot, which counts the
          user's slots and inserts in one transaction.

        Args:
            user_id: The owner UUID
            team: The selected team

        Returns:
            The stored slot

        Raises:
            QuotaExceededError: If the user already holds max_teams slots
            StoreUnavailableError: If the store fails
        """
        user_id_str = normalize_uuid(user_id)

        refreshed = TeamSlotService._refresh_team_details(user_id_str, team)
        if refreshed:
            logger.debug(f"Refreshed team {team.team_id} in slot {refreshed.id}")
            return refreshed

        max_teams = limits_for(RoleService.resolve_role(user_id_str)).max_teams

        try:
            result = SupabaseClient.call_rpc("claim_team_slot", {
                "p_user_id": user_id_str,
                "p_team_id": team.team_id,
                "p_team_name": team.team_name,
                "p_sport": team.sport.value if team.sport else None,
                "p_club_id": team.club_id,
                "p_max_teams": max_teams,
            })
        except SupabaseClientError as e:
            raise StoreUnavailableError("claim_team_slot", str(e))

        status = (result or {}).get("status")

        if status == CLAIM_QUOTA_EXCEEDED:
            current = int(result.get("current", max_teams))
            logger.info(f"User {user_id_str} hit team slot limit ({current}/{max_teams})")
            raise QuotaExceededError(limit=max_teams, current=current)

        if status in (CLAIM_CREATED, CLAIM_EXISTING) and result.get("slot"):
            slot = TeamSlot.from_db_row(result["slot"])
            if status == CLAIM_CREATED:
                logger.info(f"Created team slot {slot.id} for user {user_id_str}: {team.team_id}")
            return slot

        raise StoreUnavailableError("claim_team_slot", f"unexpected result: {result!r}")

    @staticmethod
    def delete_slot(
        user_id: UUID | str,
        slot_id: str,
        now: datetime | None = None,
    ) -> bool:
        """
        Delete a slot once its cooldown has elapsed.

        Always re-validated here, whatever the client computed.

        Returns:
            True when the slot was deleted

        Raises:
            TeamSlotNotFoundError: If the slot doesn't exist
            TeamSlotForbiddenError: If another user owns it
            CooldownActiveError: If fewer than 7 days passed since last change
            StoreUnavailableError: If the store fails
        """
        user_id_str = normalize_uuid(user_id)
        now = now or utc_now()

        # Second pass only happens when the slot changed between check and delete
        for _ in range(2):
            TeamSlotService._check_cooldown(
                TeamSlotService._load_owned_slot(user_id_str, slot_id), now
            )

            try:
                client = SupabaseClient.get_client()
                response = (
                    client.table(TABLE)
                    .delete()
                    .eq("id", slot_id)
                    .eq("user_id", user_id_str)
                    .lte("last_changed_at", to_iso(TeamSlotService._cutoff(now)))
                    .execute()
                )
            except Exception as e:
                raise StoreUnavailableError("delete_team_slot", str(e))

            if response.data:
                logger.info(f"Deleted team slot {slot_id} for user {user_id_str}")
                return True

            logger.info(f"Team slot {slot_id} changed during delete, re-checking")

        raise StoreUnavailableError("delete_team_slot", "slot kept changing during delete")

    @staticmethod
    def rebind_slot(
        user_id: UUID | str,
        slot_id: str,
        team: TeamSelection,
        now: datetime | None = None,
    ) -> TeamSlot:
        """
        Bind an existing slot to a different team.

        Subject to the same ownership and cooldown rules as delete_slot.
        Rebinding to the team already in the slot is a cosmetic refresh.

        Raises:
            TeamSlotNotFoundError / TeamSlotForbiddenError: Stale slot reference
            TeamAlreadyInSlotError: If the team sits in another slot
            CooldownActiveError: If the slot is still locked
            StoreUnavailableError: If the store fails
        """
        user_id_str = normalize_uuid(user_id)
        now = now or utc_now()

        slot = TeamSlotService._load_owned_slot(user_id_str, slot_id)
        if slot.team_id == team.team_id:
            return TeamSlotService._refresh_team_details(user_id_str, team) or slot

        if TeamSlotService.is_team_in_slot(user_id_str, team.team_id):
            raise TeamAlreadyInSlotError(team.team_id)

        for _ in range(2):
            TeamSlotService._check_cooldown(slot, now)

            try:
                client = SupabaseClient.get_client()
                response = (
                    client.table(TABLE)
                    .update({**team.to_row(), "last_changed_at": to_iso(now)})
                    .eq("id", slot_id)
                    .eq("user_id", user_id_str)
                    .lte("last_changed_at", to_iso(TeamSlotService._cutoff(now)))
                    .execute()
                )
            except Exception as e:
                if UNIQUE_VIOLATION in str(e):
                    raise TeamAlreadyInSlotError(team.team_id)
                raise StoreUnavailableError("rebind_team_slot", str(e))

            if response.data:
                rebound = TeamSlot.from_db_row(response.data[0])
                logger.info(f"Rebound slot {slot_id} of user {user_id_str} to team {team.team_id}")
                return rebound

            logger.info(f"Team slot {slot_id} changed during rebind, re-checking")
            slot = TeamSlotService._load_owned_slot(user_id_str, slot_id)

        raise StoreUnavailableError("rebind_team_slot", "slot kept changing during rebind")

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _cutoff(now: datetime) -> datetime:
        """Latest last_changed_at that is out of cooldown at `now`."""
        return now - timedelta(days=cooldown_days())

    @staticmethod
    def _check_cooldown(slot: TeamSlot, now: datetime) -> None:
        elapsed_days = days_since_change(slot.last_changed_at, now)
        if elapsed_days < cooldown_days():
            remaining = cooldown_days() - elapsed_days
            logger.info(f"Team slot {slot.id} still locked for {remaining} day(s)")
            raise CooldownActiveError(slot.id, remaining)

    @staticmethod
    def _load_owned_slot(user_id: str, slot_id: str) -> TeamSlot:
        try:
            row = SupabaseClient.fetch_team_slot(slot_id)
        except SupabaseClientError as e:
            raise StoreUnavailableError("fetch_team_slot", str(e))

        if not row:
            raise TeamSlotNotFoundError(slot_id)
        if str(row.get("user_id")) != user_id:
            raise TeamSlotForbiddenError(slot_id)
        return TeamSlot.from_db_row(row)

    @staticmethod
    def _refresh_team_details(user_id: str, team: TeamSelection) -> TeamSlot | None:
        """Update display fields of an already stored team; None if not stored."""
        details: dict[str, Any] = {
            "team_name": team.team_name,
            "sport": team.sport.value if team.sport else None,
            "club_id": team.club_id,
        }

        try:
            client = SupabaseClient.get_client()
            response = (
                client.table(TABLE)
                .update(details)
                .eq("user_id", user_id)
                .eq("team_id", team.team_id)
                .execute()
            )
        except Exception as e:
            raise StoreUnavailableError("refresh_team_slot", str(e))

        if response.data:
            return TeamSlot.from_db_row(response.data[0])
        return None
