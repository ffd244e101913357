"""Celery application configuration for the operational metrics analytics service.

Sets up the broker (Redis), result backend, serialisation, task routing,
retry policies and the beat schedule for the periodic analytics sweeps.
Detection runs as a single beat entry so only one writer creates anomalies.
"""

from __future__ import annotations

from typing import Any

from celery import Celery
from celery.signals import setup_logging as setup_logging_signal

from infrastructure.observability.logging_config import setup_logging
from infrastructure.settings import get_settings

settings = get_settings()

app = Celery("ops_analytics")

# ---------------------------------------------------------------------------
# Broker and result backend
# ---------------------------------------------------------------------------

app.conf.broker_url = settings.celery_broker_url
app.conf.result_backend = settings.celery_result_backend

# ---------------------------------------------------------------------------
# Serialisation
# ---------------------------------------------------------------------------

app.conf.accept_content = ["json"]
app.conf.task_serializer = "json"
app.conf.result_serializer = "json"

# ---------------------------------------------------------------------------
# Task routing
# ---------------------------------------------------------------------------

app.conf.task_routes = {
    "application.tasks.analytics_tasks.*": {"queue": "analytics"},
}

# ---------------------------------------------------------------------------
# Default retry policy
# ---------------------------------------------------------------------------

app.conf.task_annotations = {
    "*": {
        "max_retries": 3,
        "default_retry_delay": 30,
        "retry_backoff": True,
        "retry_backoff_max": 300,
        "retry_jitter": True,
    },
}

# ---------------------------------------------------------------------------
# Beat schedule
# ---------------------------------------------------------------------------

app.conf.beat_schedule = {
    "detect-anomalies": {
        "task": "application.tasks.analytics_tasks.detect_anomalies",
        "schedule": float(settings.detection_interval_seconds),
    },
    "calculate-kpis": {
        "task": "application.tasks.analytics_tasks.calculate_kpis",
        "schedule": float(settings.kpi_interval_seconds),
    },
}

# ---------------------------------------------------------------------------
# Miscellaneous
# ---------------------------------------------------------------------------

app.conf.task_acks_late = True
app.conf.worker_prefetch_multiplier = 1
app.conf.task_track_started = True
app.conf.task_time_limit = 600
app.conf.task_soft_time_limit = 540
app.conf.timezone = "UTC"
app.conf.enable_utc = True


@setup_logging_signal.connect
def configure_worker_logging(**kwargs: Any) -> None:
    """Replace Celery's own logging setup with the structlog JSON pipeline."""
    setup_logging(settings.log_level)


# ---------------------------------------------------------------------------
# Autodiscovery
# ---------------------------------------------------------------------------

app.autodiscover_tasks(["application.tasks.analytics_tasks"])
