from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from domain.models.analysis import HealthStatus


@dataclass(frozen=True)
class DashboardSummary:
    total_servers: int = 0
    active_alerts: int = 0
    average_response_time: float = 0.0
    system_availability: float = 0.0
    total_requests: int = 0
    total_errors: int = 0


@dataclass(frozen=True)
class TimeSeriesPoint:
    timestamp: datetime
    value: float
    label: str | None = None


@dataclass(frozen=True)
class ServerHealth:
    server_name: str
    cpu_usage: float = 0.0
    memory_usage: float = 0.0
    response_time: float = 0.0
    request_count: int = 0
    status: HealthStatus = HealthStatus.HEALTHY


@dataclass(frozen=True)
class MetricDistribution:
    metric_name: str
    value: float
    category: str


@dataclass(frozen=True)
class DashboardAnalytics:
    summary: DashboardSummary = field(default_factory=DashboardSummary)
    response_time_trend: list[TimeSeriesPoint] = field(default_factory=list)
    throughput_trend: list[TimeSeriesPoint] = field(default_factory=list)
    server_metrics: list[ServerHealth] = field(default_factory=list)
    metric_distribution: list[MetricDistribution] = field(default_factory=list)
