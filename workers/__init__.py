# =============================================================================
# workers/ - Celery Background Task Workers
# =============================================================================
# This package contains the Celery configuration and task definitions for
# the periodic KANVA jobs.
#
# Components:
# - celery_app.py: Celery application configuration
# - tasks.py: Task definitions (announcements, subscription sync, resets)
# - config.py: Worker-specific settings and the beat schedule
#
# Usage:
#   # Start worker and scheduler
#   python scripts/start_worker.py --beat
#
#   # Submit task (from API)
#   from workers.tasks import reset_monthly_credits
#   result = reset_monthly_credits.delay()
# =============================================================================

from .celery_app import celery_app
from . import tasks

__all__ = [
    "celery_app",
    "tasks",
]
