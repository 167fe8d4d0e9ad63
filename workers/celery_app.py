# =============================================================================
# workers/celery_app.py - Celery Application
# =============================================================================
# The broker and result backend both point at settings.REDIS_URL. Jobs are
# defined in workers/tasks.py and scheduled by the beat_schedule in
# workers/config.py.
#
# Usage:
#   celery -A workers.celery_app worker -Q default,notifications --loglevel=info
#   celery -A workers.celery_app beat --loglevel=info
# =============================================================================

import logging

from celery import Celery
from celery.signals import task_failure, task_postrun, task_prerun, task_retry
from dotenv import load_dotenv

load_dotenv()

from app.config import settings  # noqa: E402

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def create_celery_app(broker_url: str | None = None) -> Celery:
    """
    Build the KANVA Celery app.

    Args:
        broker_url: Redis URL, defaults to settings.REDIS_URL

    Returns:
        Configured Celery app instance
    """
    broker_url = broker_url or settings.REDIS_URL

    app = Celery(
        "kanva_worker",
        broker=broker_url,
        backend=broker_url,
        include=["workers.tasks"],
    )
    app.config_from_object("workers.config:CeleryConfig")

    # Credentials embedded in the URL stay out of the log
    logger.info(f"Celery app created with broker: {broker_url.split('@')[-1]}")
    return app


celery_app = create_celery_app()


@task_prerun.connect
def log_task_start(sender=None, task_id=None, task=None, **extra):
    logger.info(f"Job started: {task.name} [{task_id}]")


@task_postrun.connect
def log_task_end(sender=None, task_id=None, task=None, retval=None, state=None, **extra):
    logger.info(f"Job finished: {task.name} [{task_id}] {state} {retval}")


@task_retry.connect
def log_task_retry(sender=None, request=None, reason=None, **extra):
    logger.warning(f"Job retrying: {sender.name} [{request.id}] - {reason}")


@task_failure.connect
def log_task_failure(sender=None, task_id=None, exception=None, **extra):
    logger.error(f"Job failed: {sender.name} [{task_id}] - {exception}")


if __name__ == "__main__":
    celery_app.start()
