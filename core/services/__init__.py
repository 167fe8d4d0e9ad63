# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .role_service import RoleService
from .limits_service import limits_for
from .team_slot_service import TeamSlotService, days_since_change, days_until_editable
from .credit_service import CreditService
from .subscription_service import SubscriptionService
from .account_service import AccountService
from .sports_data_service import SportsDataService
from .template_service import TemplateService
from .preferences_service import PreferencesService
from .announcement_service import AnnouncementService

__all__ = [
    "RoleService",
    "limits_for",
    "TeamSlotService",
    "days_since_change",
    "days_until_editable",
    "CreditService",
    "SubscriptionService",
    "AccountService",
    "SportsDataService",
    "TemplateService",
    "PreferencesService",
    "AnnouncementService",
]
