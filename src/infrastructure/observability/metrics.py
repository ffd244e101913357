"""
Prometheus metrics for the analytics kernel.

Module-level singletons registered on the default registry; services
import and increment them directly. ``track_operation`` times a block under
``analysis_duration_seconds`` and counts raised errors under
``analysis_failures_total``.
"""

from __future__ import annotations

import time
from collections.abc import Iterator
from contextlib import contextmanager

from prometheus_client import REGISTRY, Counter, Histogram


# ======================================================================
# Custom metrics (module-level singletons)
# ======================================================================

anomalies_detected_total = Counter(
    "anomalies_detected_total",
    "Total anomalies created by detection sweeps",
    labelnames=["metric_name", "severity"],
    registry=REGISTRY,
)

anomalies_suppressed_total = Counter(
    "anomalies_suppressed_total",
    "Outliers suppressed because an unresolved anomaly already covers them",
    labelnames=["metric_name"],
    registry=REGISTRY,
)

anomalies_resolved_total = Counter(
    "anomalies_resolved_total",
    "Total anomalies transitioned to resolved",
    registry=REGISTRY,
)

kpi_records_total = Counter(
    "kpi_records_total",
    "Total KPI records calculated",
    labelnames=["kpi_name", "status"],
    registry=REGISTRY,
)

analysis_failures_total = Counter(
    "analysis_failures_total",
    "Analytical operations that could not produce a result",
    labelnames=["operation", "reason"],
    registry=REGISTRY,
)

analysis_duration_seconds = Histogram(
    "analysis_duration_seconds",
    "Wall-clock duration of analytics operations",
    labelnames=["operation"],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
    registry=REGISTRY,
)


# ======================================================================
# Helpers
# ======================================================================

@contextmanager
def track_operation(operation: str) -> Iterator[None]:
    """Time the block and count it as failed if it raises; the error propagates."""
    start = time.perf_counter()
    try:
        yield
    except Exception as exc:
        analysis_failures_total.labels(operation=operation, reason=type(exc).__name__).inc()
        raise
    finally:
        analysis_duration_seconds.labels(operation=operation).observe(
            time.perf_counter() - start
        )
