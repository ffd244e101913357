"""Trend analysis application service.

Fetches metric windows from the :class:`MetricStore` port and hands them to
the domain-layer :class:`TrendCalculator`. All time bounds are inclusive and
metric types are matched by exact name.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING
from uuid import UUID

from domain.exceptions import AnomalyNotFoundError, InvalidHorizonError
from domain.models.analysis import (
    ClassificationResult,
    ForecastResult,
    SeasonalityResult,
    SignificanceResult,
    TrendResult,
    VarianceResult,
)
from domain.models.metric import MetricPoint
from domain.services.trend_calculations import (
    MAX_FORECAST_HOURS,
    MIN_FORECAST_HOURS,
    TrendCalculator,
)
from infrastructure.observability.metrics import track_operation

if TYPE_CHECKING:
    from application.services.anomaly_service import AnomalyStore
    from application.services.metric_service import MetricStore

logger = logging.getLogger(__name__)

FORECAST_LOOKBACK: timedelta = timedelta(days=7)
CLASSIFICATION_RADIUS: timedelta = timedelta(hours=24)


class TrendAnalyzer:

    def __init__(
        self,
        metric_store: MetricStore,
        anomaly_store: AnomalyStore,
        calculator: TrendCalculator | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._metrics = metric_store
        self._anomalies = anomaly_store
        self._calculator = calculator or TrendCalculator()
        self._clock = clock or (lambda: datetime.now(UTC))

    def _window(self, metric_type: str, start: datetime, end: datetime) -> list[MetricPoint]:
        points = self._metrics.query(metric_name=metric_type, start=start, end=end)
        return sorted(points, key=lambda p: p.timestamp)

    def detect_seasonality(
        self, metric_type: str, start: datetime, end: datetime
    ) -> SeasonalityResult:
        with track_operation("detect_seasonality"):
            return self._calculator.seasonality(metric_type, self._window(metric_type, start, end))

    def analyze_variance(self, metric_type: str, start: datetime, end: datetime) -> VarianceResult:
        with track_operation("analyze_variance"):
            return self._calculator.variance(metric_type, self._window(metric_type, start, end))

    def test_significance(
        self,
        metric_type: str,
        baseline_start: datetime,
        baseline_end: datetime,
        comparison_start: datetime,
        comparison_end: datetime,
    ) -> SignificanceResult:
        """Welch's t-test of the comparison period against the baseline period."""
        with track_operation("test_significance"):
            baseline = self._window(metric_type, baseline_start, baseline_end)
            comparison = self._window(metric_type, comparison_start, comparison_end)
            result = self._calculator.significance(metric_type, baseline, comparison)

        logger.info(
            "Significance for %s: change=%.2f%% p=%.4f significant=%s",
            metric_type,
            result.percent_change,
            result.p_value,
            result.is_significant,
        )
        return result

    def analyze_trend(self, metric_type: str, start: datetime, end: datetime) -> TrendResult:
        with track_operation("analyze_trend"):
            return self._calculator.trend(
                metric_type, self._window(metric_type, start, end), start, end
            )

    def forecast(
        self,
        metric_type: str,
        hours_ahead: int,
        now: datetime | None = None,
    ) -> ForecastResult:
        """Project the last seven days' trend ``hours_ahead`` hours forward.

        The horizon is validated before any data is read.
        """
        if not MIN_FORECAST_HOURS <= hours_ahead <= MAX_FORECAST_HOURS:
            raise InvalidHorizonError(hours_ahead, MIN_FORECAST_HOURS, MAX_FORECAST_HOURS)

        end = now or self._clock()
        start = end - FORECAST_LOOKBACK
        with track_operation("forecast"):
            points = self._window(metric_type, start, end)
            trend = self._calculator.trend(metric_type, points, start, end)
            result = self._calculator.forecast(trend, points, hours_ahead)

        if result.warning:
            logger.warning("Low-confidence forecast for %s (R²=%.3f)", metric_type, trend.r_squared)
        return result

    def classify_anomaly(self, anomaly_id: UUID) -> ClassificationResult:
        anomaly = self._anomalies.get_by_id(anomaly_id)
        if anomaly is None:
            raise AnomalyNotFoundError(str(anomaly_id))

        with track_operation("classify_anomaly"):
            points = self._window(
                anomaly.metric_name,
                anomaly.detected_at - CLASSIFICATION_RADIUS,
                anomaly.detected_at + CLASSIFICATION_RADIUS,
            )
            return self._calculator.classify(anomaly, points)
