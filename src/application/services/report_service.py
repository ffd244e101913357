"""Cross-metric trend report.

Combines trend, variance and seasonality per metric type with anomaly
classification into a single :class:`TrendReport`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from domain.exceptions import AnomalyNotFoundError, DegenerateInputError, InsufficientDataError
from domain.models.analysis import (
    AnomalyClassification,
    HealthStatus,
    MetricTrendSummary,
    TrendDirection,
    TrendReport,
)
from domain.models.metric import MetricType
from domain.services.health_policy import determine_health_status
from infrastructure.observability.metrics import track_operation

if TYPE_CHECKING:
    from application.services.anomaly_service import AnomalyStore
    from application.services.trend_analysis_service import TrendAnalyzer

logger = logging.getLogger(__name__)

DEFAULT_REPORT_METRIC_TYPES: tuple[str, ...] = (
    MetricType.RESPONSE_TIME.value,
    MetricType.CPU_USAGE.value,
    MetricType.MEMORY_USAGE.value,
    MetricType.ERROR_COUNT.value,
    MetricType.REQUEST_COUNT.value,
)

FINDING_CHANGE_PERCENT: float = 10.0
MAX_CLASSIFIED_ANOMALIES: int = 20


class ReportAggregator:

    def __init__(
        self,
        analyzer: TrendAnalyzer,
        anomaly_store: AnomalyStore,
        metric_types: Sequence[str] = DEFAULT_REPORT_METRIC_TYPES,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._analyzer = analyzer
        self._anomalies = anomaly_store
        self._metric_types = tuple(metric_types)
        self._clock = clock or (lambda: datetime.now(UTC))

    def build_report(self, start: datetime, end: datetime) -> TrendReport:
        """Summarise every configured metric type over ``[start, end]``.

        Metric types without enough data are left out of the report rather
        than failing it.
        """
        total_hours = (end - start).total_seconds() / 3600
        metric_trends: list[MetricTrendSummary] = []
        key_findings: list[str] = []
        recommendations: list[str] = []

        with track_operation("build_report"):
            for metric_type in self._metric_types:
                try:
                    trend = self._analyzer.analyze_trend(metric_type, start, end)
                    variance = self._analyzer.analyze_variance(metric_type, start, end)
                    seasonality = self._analyzer.detect_seasonality(metric_type, start, end)
                except (InsufficientDataError, DegenerateInputError) as exc:
                    logger.info("Report skips %s: %s", metric_type, exc.detail)
                    continue

                if variance.mean != 0:
                    change_percent = trend.slope_per_hour * total_hours / variance.mean * 100
                else:
                    change_percent = 0.0
                health = determine_health_status(metric_type, variance.mean)

                metric_trends.append(
                    MetricTrendSummary(
                        metric_type=metric_type,
                        direction=trend.direction,
                        change_percent=round(change_percent, 2),
                        has_seasonality=seasonality.has_seasonality,
                        stability=variance.stability,
                        health_status=health,
                    )
                )

                if trend.is_sustained and abs(change_percent) > FINDING_CHANGE_PERCENT:
                    key_findings.append(
                        f"{metric_type}: {trend.direction.value} trend of "
                        f"{abs(change_percent):.1f}% detected"
                    )
                if seasonality.has_seasonality:
                    key_findings.append(
                        f"{metric_type}: Seasonality detected with "
                        f"{len(seasonality.peak_periods)} peak periods"
                    )

                if health is HealthStatus.CRITICAL:
                    recommendations.append(
                        f"URGENT: {metric_type} requires immediate attention - {trend.description}"
                    )
                elif health is HealthStatus.WARNING and trend.direction is TrendDirection.UPWARD:
                    recommendations.append(
                        f"Monitor {metric_type} closely - trending upward and may become critical"
                    )

            anomalies = sorted(
                (a for a in self._anomalies.get_all() if start <= a.detected_at <= end),
                key=lambda a: a.detected_at,
                reverse=True,
            )
            one_off_spikes = 0
            sustained_issues = 0
            for anomaly in anomalies[:MAX_CLASSIFIED_ANOMALIES]:
                try:
                    result = self._analyzer.classify_anomaly(anomaly.id)
                except AnomalyNotFoundError:
                    logger.warning("Anomaly %s vanished before classification", anomaly.id)
                    continue
                if result.classification is AnomalyClassification.ONE_OFF_SPIKE:
                    one_off_spikes += 1
                elif result.classification is AnomalyClassification.SUSTAINED_ISSUE:
                    sustained_issues += 1

        return TrendReport(
            period_start=start,
            period_end=end,
            generated_at=self._clock(),
            metric_trends=metric_trends,
            key_findings=key_findings,
            recommendations=recommendations,
            total_anomalies=len(anomalies),
            one_off_spikes=one_off_spikes,
            sustained_issues=sustained_issues,
        )
