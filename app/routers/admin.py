# =============================================================================
# app/routers/admin.py - Admin Endpoints
# =============================================================================
# System template migrations and manual triggers for the periodic jobs.
# Everything here requires the admin role.
# =============================================================================

import logging

from fastapi import APIRouter
from pydantic import BaseModel

from app.dependencies import AdminUser
from core.models.template import TemplateMigrationResult
from core.services.template_service import TemplateService

logger = logging.getLogger(__name__)

router = APIRouter()


class TaskSubmitResponse(BaseModel):
    """Response model for task submission."""
    task_id: str
    status: str
    message: str


def _submitted(task_id: str) -> TaskSubmitResponse:
    return TaskSubmitResponse(
        task_id=task_id,
        status="PENDING",
        message="Task submitted. Use GET /api/v1/tasks/{task_id} to check status.",
    )


# =============================================================================
# Template Migrations
# =============================================================================

@router.post("/templates/migrate-api-fields", response_model=TemplateMigrationResult)
def migrate_api_fields(admin: AdminUser):
    """Convert suffix apiFields (teamHome2) to prefix notation (game-2.teamHome)."""
    logger.info(f"Admin {admin.id} started api_field_prefix migration")
    return TemplateService.migrate_api_fields()


@router.post("/templates/strip-result-details", response_model=TemplateMigrationResult)
def strip_result_details(admin: AdminUser):
    """Remove result-detail elements from system result templates."""
    logger.info(f"Admin {admin.id} started strip_result_detail migration")
    return TemplateService.strip_result_details()


# =============================================================================
# Job Triggers
# =============================================================================

@router.post("/jobs/game-announcements", response_model=TaskSubmitResponse)
def trigger_game_announcements(admin: AdminUser):
    """Queue the game announcement job now."""
    from workers.tasks import send_game_announcements

    return _submitted(send_game_announcements.delay().id)


@router.post("/jobs/check-subscriptions", response_model=TaskSubmitResponse)
def trigger_subscription_checks(admin: AdminUser):
    """Queue a Stripe re-check of all paid users."""
    from workers.tasks import check_subscriptions

    return _submitted(check_subscriptions.delay().id)


@router.post("/jobs/reset-monthly-credits", response_model=TaskSubmitResponse)
def trigger_monthly_reset(admin: AdminUser):
    """Queue the monthly credit reset (no-op for ledgers already reset)."""
    from workers.tasks import reset_monthly_credits

    return _submitted(reset_monthly_credits.delay().id)
