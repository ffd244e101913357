"""Application settings loaded from environment variables via Pydantic."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class AnalyticsSettings(BaseSettings):
    """Central configuration for the operational metrics analytics service.

    List values such as ``ANALYTICS_REPORT_METRIC_TYPES`` are read as JSON
    arrays.
    """

    model_config = {"env_prefix": "ANALYTICS_", "case_sensitive": False}

    # Logging
    log_level: str = "INFO"

    # Analysis windows
    detection_window_hours: int = Field(default=24, ge=1)
    kpi_window_hours: int = Field(default=24, ge=1)
    report_metric_types: list[str] = [
        "ResponseTime",
        "CPUUsage",
        "MemoryUsage",
        "ErrorCount",
        "RequestCount",
    ]

    # Beat schedule (seconds)
    detection_interval_seconds: int = Field(default=300, ge=1)
    kpi_interval_seconds: int = Field(default=3600, ge=1)

    # Celery
    celery_broker_url: str = "redis://localhost:6379/1"
    celery_result_backend: str = "redis://localhost:6379/2"


def get_settings() -> AnalyticsSettings:
    """Return settings freshly read from the environment."""
    return AnalyticsSettings()
