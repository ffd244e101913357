from __future__ import annotations

from domain.models.analysis import HealthStatus
from domain.models.metric import MetricType

# metric type -> (critical above, warning above), applied to a window mean
HEALTH_THRESHOLDS: dict[str, tuple[float, float]] = {
    MetricType.RESPONSE_TIME.value: (300.0, 200.0),
    MetricType.CPU_USAGE.value: (85.0, 70.0),
    MetricType.MEMORY_USAGE.value: (90.0, 75.0),
    MetricType.ERROR_COUNT.value: (100.0, 50.0),
}

# (cpu, memory, response time) limits for a single server over the last hour
SERVER_CRITICAL_LIMITS: tuple[float, float, float] = (80.0, 85.0, 300.0)
SERVER_WARNING_LIMITS: tuple[float, float, float] = (70.0, 75.0, 200.0)

METRIC_CATEGORIES: dict[str, str] = {
    MetricType.CPU_USAGE.value: "Infrastructure",
    MetricType.MEMORY_USAGE.value: "Infrastructure",
    MetricType.DISK_IO.value: "Infrastructure",
    MetricType.RESPONSE_TIME.value: "Application",
    MetricType.REQUEST_COUNT.value: "Application",
    MetricType.ERROR_COUNT.value: "Application",
    MetricType.NETWORK_THROUGHPUT.value: "Network",
    MetricType.ACTIVE_CONNECTIONS.value: "Network",
    MetricType.UPTIME.value: "Availability",
}


def determine_health_status(metric_type: str, mean_value: float) -> HealthStatus:
    """Grade a metric's window mean; types without thresholds are always healthy."""
    thresholds = HEALTH_THRESHOLDS.get(metric_type)
    if thresholds is None:
        return HealthStatus.HEALTHY
    critical, warning = thresholds
    if mean_value > critical:
        return HealthStatus.CRITICAL
    if mean_value > warning:
        return HealthStatus.WARNING
    return HealthStatus.HEALTHY


def determine_server_status(cpu: float, memory: float, response_time: float) -> HealthStatus:
    readings = (cpu, memory, response_time)
    if any(value > limit for value, limit in zip(readings, SERVER_CRITICAL_LIMITS)):
        return HealthStatus.CRITICAL
    if any(value > limit for value, limit in zip(readings, SERVER_WARNING_LIMITS)):
        return HealthStatus.WARNING
    return HealthStatus.HEALTHY


def metric_category(metric_name: str) -> str:
    return METRIC_CATEGORIES.get(metric_name, "Other")
