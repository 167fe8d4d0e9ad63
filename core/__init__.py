# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the KANVA business rules:
# - models/: Pydantic schemas for data validation
# - services/: Team slots, credits, roles, billing sync, league data,
#   template migrations, preferences and announcement emails
#
# Code in this package should NOT import from FastAPI routers or Celery.
# Routers and tasks call in here; persistence goes through lib/.
# =============================================================================
