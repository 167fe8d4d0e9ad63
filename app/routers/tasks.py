# =============================================================================
# app/routers/tasks.py - Task Status Endpoints
# =============================================================================
# Status of background jobs queued through the admin endpoints.
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, Path
from pydantic import BaseModel

from app.dependencies import AdminUser

logger = logging.getLogger(__name__)

router = APIRouter()


class TaskStatusResponse(BaseModel):
    """Response model for task status."""
    task_id: str
    status: str
    message: str | None = None
    result: dict | None = None
    error: str | None = None


STATUS_MESSAGES = {
    "PENDING": "Waiting in queue...",
    "STARTED": "Starting...",
    "RETRY": "Retrying...",
    "SUCCESS": "Complete",
    "FAILURE": "Failed",
}


@router.get("/{task_id}", response_model=TaskStatusResponse)
def get_task_status(
    task_id: Annotated[str, Path(description="Celery task ID")],
    admin: AdminUser,
):
    """
    Get the status of a background job.

    - PENDING: waiting in queue (also returned for unknown ids)
    - STARTED / RETRY: running
    - SUCCESS: includes the job's stats in `result`
    - FAILURE: includes `error`
    """
    from workers.celery_app import celery_app

    result = celery_app.AsyncResult(task_id)
    response = TaskStatusResponse(
        task_id=task_id,
        status=result.status,
        message=STATUS_MESSAGES.get(result.status),
    )

    if result.status == "SUCCESS" and isinstance(result.result, dict):
        response.result = result.result
    elif result.status == "FAILURE":
        response.error = str(result.result) if result.result else "Unknown error"

    return response
