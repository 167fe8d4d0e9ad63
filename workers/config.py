# =============================================================================
# workers/config.py - Celery Worker Configuration
# =============================================================================
# Settings specific to Celery workers, including the beat schedule of the
# periodic jobs.
# =============================================================================

from celery.schedules import crontab

from app.config import settings


class CeleryConfig:
    """
    Celery configuration settings.

    These are applied to the Celery app via app.config_from_object().
    """

    # -------------------------------------------------------------------------
    # Broker Settings (Redis)
    # -------------------------------------------------------------------------

    broker_url = settings.REDIS_URL
    result_backend = settings.REDIS_URL

    # -------------------------------------------------------------------------
    # Task Settings
    # -------------------------------------------------------------------------

    # Acknowledge after completion so a crashed worker doesn't lose the job
    task_acks_late = True

    worker_prefetch_multiplier = 1

    # Task results expire after 1 day (the jobs run daily at most)
    result_expires = 86400

    # The announcement job calls the league API once per team
    task_time_limit = 900
    task_soft_time_limit = 840

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    task_serializer = "json"
    result_serializer = "json"
    accept_content = ["json"]

    # -------------------------------------------------------------------------
    # Task Routing
    # -------------------------------------------------------------------------

    task_queues = {
        "default": {
            "exchange": "default",
            "routing_key": "default",
        },
        "notifications": {
            "exchange": "notifications",
            "routing_key": "notifications",
        },
    }

    # Outgoing mail gets its own queue so it can't starve billing jobs
    task_routes = {
        "workers.tasks.send_game_announcements": {"queue": "notifications"},
    }

    task_default_queue = "default"

    # -------------------------------------------------------------------------
    # Retry Settings
    # -------------------------------------------------------------------------

    task_annotations = {
        "*": {
            "max_retries": 3,
            "default_retry_delay": 60,
        }
    }

    # -------------------------------------------------------------------------
    # Periodic Jobs
    # -------------------------------------------------------------------------

    beat_schedule = {
        "send-game-announcements": {
            "task": "workers.tasks.send_game_announcements",
            "schedule": crontab(hour=7, minute=0),
        },
        "check-subscriptions": {
            "task": "workers.tasks.check_subscriptions",
            "schedule": crontab(hour=3, minute=0),
        },
        "reset-monthly-credits": {
            "task": "workers.tasks.reset_monthly_credits",
            "schedule": crontab(day_of_month=1, hour=0, minute=5),
        },
    }

    # -------------------------------------------------------------------------
    # Monitoring
    # -------------------------------------------------------------------------

    worker_send_task_events = True
    task_send_sent_event = True

    # -------------------------------------------------------------------------
    # Timezone
    # -------------------------------------------------------------------------

    timezone = "UTC"
    enable_utc = True
