# =============================================================================
# app/routers/team_slots.py - Team Slot Endpoints
# =============================================================================
# Slot listing, claiming, rebinding and deletion for the current user.
# Quota and cooldown are always enforced server-side; the list endpoint's
# can_add_slot / days_until_editable only let the client pre-disable buttons.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Depends, Path
from pydantic import BaseModel

from app.auth import get_current_user, AuthUser
from core.models.team_slot import TeamSelection, TeamSlot, TeamSlotList
from core.services.team_slot_service import TeamSlotService

router = APIRouter()

SlotId = Annotated[str, Path(description="Team slot UUID")]


class SlotDeletedResponse(BaseModel):
    slot_id: str
    deleted: bool = True


class TeamInSlotResponse(BaseModel):
    team_id: str
    in_slot: bool


@router.get("", response_model=TeamSlotList)
def list_team_slots(user: AuthUser = Depends(get_current_user)):
    """
    List the user's team slots, oldest first, with cooldown state.
    """
    return TeamSlotService.list_slot_views(user.id)


@router.post("", response_model=TeamSlot)
def ensure_team_slot(
    team: TeamSelection,
    user: AuthUser = Depends(get_current_user),
):
    """
    Make sure the selected team occupies a slot.

    Selecting a team that's already in a slot only refreshes its name,
    sport and club. A new team needs a free slot.

    Errors:
    - 409 QUOTA_EXCEEDED: all slots in use (details: limit, current)
    """
    return TeamSlotService.ensure_slot(user.id, team)


@router.patch("/{slot_id}", response_model=TeamSlot)
def rebind_team_slot(
    slot_id: SlotId,
    team: TeamSelection,
    user: AuthUser = Depends(get_current_user),
):
    """
    Put a different team into an existing slot.

    Errors:
    - 409 COOLDOWN_ACTIVE: slot changed less than 7 days ago (details: days_remaining)
    - 409 TEAM_ALREADY_IN_SLOT: the team already sits in another slot
    - 404 / 403: stale slot reference, reload the list
    """
    return TeamSlotService.rebind_slot(user.id, slot_id, team)


@router.delete("/{slot_id}", response_model=SlotDeletedResponse)
def delete_team_slot(
    slot_id: SlotId,
    user: AuthUser = Depends(get_current_user),
):
    """
    Free a slot.

    Errors:
    - 409 COOLDOWN_ACTIVE: slot changed less than 7 days ago (details: days_remaining)
    - 404 / 403: stale slot reference, reload the list
    """
    TeamSlotService.delete_slot(user.id, slot_id)
    return SlotDeletedResponse(slot_id=slot_id)


@router.get("/teams/{team_id}", response_model=TeamInSlotResponse)
def is_team_in_slot(
    team_id: Annotated[str, Path(description="League team id")],
    user: AuthUser = Depends(get_current_user),
):
    """Whether the team already occupies one of the user's slots."""
    return TeamInSlotResponse(
        team_id=team_id,
        in_slot=TeamSlotService.is_team_in_slot(user.id, team_id),
    )
