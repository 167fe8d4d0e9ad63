# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - role.py: Role enum and derived Entitlement
# - team_slot.py: Team slot rows, selections and list views
# - credits.py: Credit balance and transaction history
# - subscription.py: Subscription status from the billing provider
# - sports.py: League data (clubs, teams, games)
# - template.py: Template migration reports
# - preferences.py: Email and session preferences
# - account.py: Account deletion request/report
#
# These models define the "contract" between API and clients.
# =============================================================================

# -----------------------------------------------------------------------------
# Roles & Entitlements
# -----------------------------------------------------------------------------
from .role import (
    Entitlement,
    Role,
    RoleResponse,
)

# -----------------------------------------------------------------------------
# Team Slots
# -----------------------------------------------------------------------------
from .team_slot import (
    Sport,
    TeamSelection,
    TeamSlot,
    TeamSlotList,
    TeamSlotView,
)

# -----------------------------------------------------------------------------
# Credits
# -----------------------------------------------------------------------------
from .credits import (
    ConsumeCreditRequest,
    ConsumeCreditResponse,
    CreditBalance,
    CreditTransaction,
    PurchaseCreditsRequest,
    TransactionType,
)

# -----------------------------------------------------------------------------
# Subscription, League Data, Templates, Preferences, Account
# -----------------------------------------------------------------------------
from .subscription import SubscriptionStatus, SubscriptionTier
from .sports import Game, NamedEntity
from .template import TemplateMigrationResult
from .preferences import Language, PreferencesUpdate, Theme, UserPreferences
from .account import AccountDeletionReport, DeleteAccountRequest, DeletionStep

__all__ = [
    # Roles
    "Entitlement",
    "Role",
    "RoleResponse",
    # Team slots
    "Sport",
    "TeamSelection",
    "TeamSlot",
    "TeamSlotList",
    "TeamSlotView",
    # Credits
    "ConsumeCreditRequest",
    "ConsumeCreditResponse",
    "CreditBalance",
    "CreditTransaction",
    "PurchaseCreditsRequest",
    "TransactionType",
    # Subscription
    "SubscriptionStatus",
    "SubscriptionTier",
    # League data
    "Game",
    "NamedEntity",
    # Templates
    "TemplateMigrationResult",
    # Preferences
    "Language",
    "PreferencesUpdate",
    "Theme",
    "UserPreferences",
    # Account
    "AccountDeletionReport",
    "DeleteAccountRequest",
    "DeletionStep",
]
