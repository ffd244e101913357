"""Background Celery tasks for the periodic analytics sweeps."""

from __future__ import annotations

from typing import Any

from application.tasks.celery_app import app
from infrastructure.observability.logging_config import get_logger

logger = get_logger(__name__)


@app.task(  # type: ignore[untyped-decorator]
    name="application.tasks.analytics_tasks.detect_anomalies",
    bind=True,
    max_retries=2,
    default_retry_delay=30,
)
def detect_anomalies(self: Any) -> dict[str, Any]:
    """Run one anomaly detection sweep over the trailing window."""
    from infrastructure.container import get_container

    log = logger.bind(task="detect_anomalies")
    log.info("anomaly sweep started")

    try:
        created = get_container().anomaly_detector.detect()
    except Exception as exc:
        log.exception("anomaly sweep failed")
        raise self.retry(exc=exc) from exc

    log.info("anomaly sweep finished", created=len(created))
    return {
        "anomalies_created": len(created),
        "anomaly_ids": [str(a.id) for a in created],
        "severities": [a.severity.value for a in created],
    }


@app.task(  # type: ignore[untyped-decorator]
    name="application.tasks.analytics_tasks.calculate_kpis",
    bind=True,
    max_retries=3,
    default_retry_delay=60,
)
def calculate_kpis(self: Any) -> dict[str, Any]:
    """Evaluate every KPI definition and store the resulting records."""
    from infrastructure.container import get_container

    log = logger.bind(task="calculate_kpis")
    log.info("KPI calculation started")

    try:
        records = get_container().kpi_calculator.calculate()
    except Exception as exc:
        log.exception("KPI calculation failed")
        raise self.retry(exc=exc) from exc

    log.info("KPI calculation finished", calculated=len(records))
    return {
        "kpis_calculated": len(records),
        "statuses": {r.kpi_name: r.status.value for r in records},
    }
