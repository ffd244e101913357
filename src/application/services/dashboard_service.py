"""Dashboard read models built from recent metric points."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable, Iterable, Sequence
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from domain.models.dashboard import (
    DashboardAnalytics,
    DashboardSummary,
    MetricDistribution,
    ServerHealth,
    TimeSeriesPoint,
)
from domain.models.metric import MetricPoint, MetricType
from domain.services import statistics_kernel as stats
from domain.services.health_policy import determine_server_status, metric_category

if TYPE_CHECKING:
    from application.services.anomaly_service import AnomalyStore
    from application.services.metric_service import MetricStore

logger = logging.getLogger(__name__)

SERVER_HEALTH_WINDOW: timedelta = timedelta(hours=1)


def _mean(values: Sequence[float]) -> float:
    return stats.mean(values) if values else 0.0


def _values_of(points: Iterable[MetricPoint], metric_type: MetricType) -> list[float]:
    return [p.value for p in points if p.metric_name == metric_type.value]


def _hourly(
    points: Iterable[MetricPoint],
    reduce: Callable[[Sequence[float]], float],
    labelled: bool = True,
) -> list[TimeSeriesPoint]:
    buckets: dict[datetime, list[float]] = defaultdict(list)
    for point in points:
        buckets[point.timestamp.replace(minute=0, second=0, microsecond=0)].append(point.value)
    return [
        TimeSeriesPoint(
            timestamp=hour,
            value=round(reduce(values), 2),
            label=hour.strftime("%H:%M") if labelled else None,
        )
        for hour, values in sorted(buckets.items())
    ]


class DashboardService:

    def __init__(
        self,
        metric_store: MetricStore,
        anomaly_store: AnomalyStore,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._metrics = metric_store
        self._anomalies = anomaly_store
        self._clock = clock or (lambda: datetime.now(UTC))

    def get_dashboard_analytics(
        self, hours: int = 24, now: datetime | None = None
    ) -> DashboardAnalytics:
        now = now or self._clock()
        points = self._metrics.query(start=now - timedelta(hours=hours), end=now)

        response_times = [p for p in points if p.metric_name == MetricType.RESPONSE_TIME.value]
        requests = [p for p in points if p.metric_name == MetricType.REQUEST_COUNT.value]

        return DashboardAnalytics(
            summary=self._summary(points),
            response_time_trend=_hourly(response_times, _mean),
            throughput_trend=_hourly(requests, sum),
            server_metrics=self.get_server_health(now),
            metric_distribution=self._distribution(points),
        )

    def get_metric_trend(
        self, metric_name: str, hours: int = 24, now: datetime | None = None
    ) -> list[TimeSeriesPoint]:
        """Hourly averages of one metric, oldest hour first."""
        now = now or self._clock()
        points = self._metrics.query(
            metric_name=metric_name, start=now - timedelta(hours=hours), end=now
        )
        return _hourly(points, _mean, labelled=False)

    def get_server_health(self, now: datetime | None = None) -> list[ServerHealth]:
        now = now or self._clock()
        points = self._metrics.query(start=now - SERVER_HEALTH_WINDOW, end=now)

        by_source: dict[str, list[MetricPoint]] = defaultdict(list)
        for point in points:
            by_source[point.source].append(point)

        servers = []
        for source, group in sorted(by_source.items()):
            cpu = _mean(_values_of(group, MetricType.CPU_USAGE))
            memory = _mean(_values_of(group, MetricType.MEMORY_USAGE))
            response = _mean(_values_of(group, MetricType.RESPONSE_TIME))
            servers.append(
                ServerHealth(
                    server_name=source,
                    cpu_usage=round(cpu, 2),
                    memory_usage=round(memory, 2),
                    response_time=round(response, 2),
                    request_count=int(sum(_values_of(group, MetricType.REQUEST_COUNT))),
                    status=determine_server_status(cpu, memory, response),
                )
            )
        return servers

    # -- helpers ----------------------------------------------------------

    def _summary(self, points: Sequence[MetricPoint]) -> DashboardSummary:
        return DashboardSummary(
            total_servers=len({p.source for p in points}),
            active_alerts=len(self._anomalies.get_unresolved()),
            average_response_time=round(_mean(_values_of(points, MetricType.RESPONSE_TIME)), 2),
            system_availability=round(_mean(_values_of(points, MetricType.UPTIME)), 2),
            total_requests=int(sum(_values_of(points, MetricType.REQUEST_COUNT))),
            total_errors=int(sum(_values_of(points, MetricType.ERROR_COUNT))),
        )

    @staticmethod
    def _distribution(points: Sequence[MetricPoint]) -> list[MetricDistribution]:
        by_name: dict[str, list[float]] = defaultdict(list)
        for point in points:
            by_name[point.metric_name].append(point.value)
        return [
            MetricDistribution(
                metric_name=name,
                value=round(_mean(values), 2),
                category=metric_category(name),
            )
            for name, values in by_name.items()
        ]
