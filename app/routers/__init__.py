# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - team_slots.py: Team slot listing, claiming, rebinding, deletion
# - credits.py: Credit balance, consumption and history
# - subscription.py: Stripe subscription check
# - account.py: Account deletion
# - sports.py: League data (clubs, teams, games)
# - preferences.py: Email and session preferences
# - admin.py: Template migrations and job triggers (admin only)
# - tasks.py: Background job status (admin only)
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import team_slots
from . import credits
from . import subscription
from . import account
from . import sports
from . import preferences
from . import admin
from . import tasks

__all__ = [
    "health",
    "team_slots",
    "credits",
    "subscription",
    "account",
    "sports",
    "preferences",
    "admin",
    "tasks",
]
