"""
Pure trend analytics over an already-fetched, timestamp-ordered window.

Every method takes the points it needs and returns a result dataclass; the
application layer is responsible for fetching windows from a store.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from datetime import datetime, timedelta
from uuid import UUID

from domain.exceptions import DegenerateInputError, InsufficientDataError, InvalidHorizonError
from domain.models.analysis import (
    AnomalyClassification,
    ClassificationResult,
    ForecastPoint,
    ForecastResult,
    SeasonalityResult,
    SignificanceResult,
    StabilityLevel,
    TrendDirection,
    TrendPoint,
    TrendResult,
    VarianceResult,
)
from domain.models.anomaly import AnomalyRecord
from domain.models.metric import MetricPoint
from domain.services import statistics_kernel as stats

MIN_TREND_POINTS: int = 10
MIN_SEASONALITY_POINTS: int = 24
MIN_CLASSIFICATION_POINTS: int = 10

MIN_FORECAST_HOURS: int = 1
MAX_FORECAST_HOURS: int = 168

PEAK_FACTOR: float = 1.2
LOW_FACTOR: float = 0.8
SEASONALITY_STRENGTH_THRESHOLD: float = 0.15

STABLE_CV: float = 0.15
MODERATE_CV: float = 0.30

SIGNIFICANCE_LEVEL: float = 0.05
DEGRADATION_PERCENT: float = 20.0

FLAT_SLOPE: float = 0.01
SUSTAINED_R_SQUARED: float = 0.7

CONFIDENCE_Z: float = 1.96
LOW_CONFIDENCE_R_SQUARED: float = 0.5
LOW_CONFIDENCE_WARNING = "Low confidence forecast due to weak trend correlation. Use with caution."

ANOMALY_MATCH_WINDOW: timedelta = timedelta(minutes=5)
BASELINE_TOLERANCE: float = 0.1
SUSTAINED_FACTOR: float = 1.2

_CLASSIFICATIONS: dict[AnomalyClassification, tuple[float, str, bool, str]] = {
    AnomalyClassification.ONE_OFF_SPIKE: (
        0.85,
        "Metric returned to baseline after anomaly. Likely a temporary spike.",
        False,
        "Document incident for pattern analysis. No immediate action needed.",
    ),
    AnomalyClassification.SUSTAINED_ISSUE: (
        0.90,
        "Metric remains elevated after anomaly. Indicates a persistent problem.",
        True,
        "Investigate root cause immediately. Issue is ongoing.",
    ),
    AnomalyClassification.RECURRING_PATTERN: (
        0.75,
        "Metric shows pattern that may recur. Requires monitoring.",
        True,
        "Set up alerts for similar patterns. Investigate underlying cause.",
    ),
    AnomalyClassification.UNKNOWN: (
        0.5,
        "Insufficient data for classification",
        True,
        "Gather more data and monitor closely",
    ),
}


def _values(points: Sequence[MetricPoint]) -> list[float]:
    return [p.value for p in points]


def grade_stability(cv: float) -> StabilityLevel:
    if cv < STABLE_CV:
        return StabilityLevel.STABLE
    if cv < MODERATE_CV:
        return StabilityLevel.MODERATE
    return StabilityLevel.VOLATILE


class TrendCalculator:

    def seasonality(self, metric_type: str, points: Sequence[MetricPoint]) -> SeasonalityResult:
        """Hour-of-day pattern: peaks above 1.2x and lows below 0.8x of the hourly mean."""
        if len(points) < MIN_SEASONALITY_POINTS:
            return SeasonalityResult(
                metric_type=metric_type,
                has_seasonality=False,
                description="Insufficient data for seasonality analysis",
            )

        by_hour: dict[int, list[float]] = defaultdict(list)
        for point in points:
            by_hour[point.timestamp.hour].append(point.value)
        hourly = {hour: stats.mean(values) for hour, values in sorted(by_hour.items())}

        hourly_values = list(hourly.values())
        overall = stats.mean(hourly_values)
        peaks = {f"{h:02d}:00": avg for h, avg in hourly.items() if avg > overall * PEAK_FACTOR}
        lows = {f"{h:02d}:00": avg for h, avg in hourly.items() if avg < overall * LOW_FACTOR}

        cv = stats.coefficient_of_variation(stats.stddev(hourly_values, overall), overall)
        strength = min(cv * 2, 1.0)
        has_seasonality = bool(peaks) and bool(lows) and strength > SEASONALITY_STRENGTH_THRESHOLD

        if has_seasonality:
            description = (
                f"Clear seasonality detected with {len(peaks)} peak periods "
                f"and {len(lows)} low periods"
            )
        else:
            description = "No significant seasonality pattern detected"

        return SeasonalityResult(
            metric_type=metric_type,
            has_seasonality=has_seasonality,
            seasonality_type="Hourly",
            peak_periods=peaks,
            low_periods=lows,
            strength=round(strength, 2),
            description=description,
        )

    def variance(self, metric_type: str, points: Sequence[MetricPoint]) -> VarianceResult:
        if not points:
            raise InsufficientDataError(f"variance of {metric_type}", required=1, actual=0)

        values = _values(points)
        mu = stats.mean(values)
        sigma = stats.stddev(values, mu)
        cv = stats.coefficient_of_variation(sigma, mu)
        low, high = min(values), max(values)

        return VarianceResult(
            metric_type=metric_type,
            mean=round(mu, 2),
            stddev=round(sigma, 2),
            variance=round(sigma * sigma, 2),
            coefficient_of_variation=round(cv, 3),
            stability=grade_stability(cv),
            min_value=round(low, 2),
            max_value=round(high, 2),
            range=round(high - low, 2),
            sample_size=len(values),
        )

    def significance(
        self,
        metric_type: str,
        baseline: Sequence[MetricPoint],
        comparison: Sequence[MetricPoint],
    ) -> SignificanceResult:
        if not baseline or not comparison:
            raise InsufficientDataError(
                f"significance of {metric_type}",
                required=1,
                actual=min(len(baseline), len(comparison)),
            )

        baseline_values = _values(baseline)
        comparison_values = _values(comparison)
        baseline_mean = stats.mean(baseline_values)
        comparison_mean = stats.mean(comparison_values)
        if baseline_mean == 0:
            raise DegenerateInputError(
                f"baseline mean of {metric_type} is zero; percent change is undefined"
            )

        percent_change = (comparison_mean - baseline_mean) / baseline_mean * 100
        t_statistic, p_value = stats.welch_t_test(baseline_values, comparison_values)
        is_significant = p_value < SIGNIFICANCE_LEVEL

        if not is_significant:
            conclusion = (
                f"The change of {percent_change:.2f}% is NOT statistically significant "
                f"(p={p_value:.4f}). This appears to be normal variance."
            )
            recommendation = "Continue monitoring. No immediate action required."
        elif percent_change > 0:
            conclusion = (
                f"The increase of {percent_change:.2f}% IS statistically significant "
                f"(p={p_value:.4f}). This represents a real change, not random variance."
            )
            if percent_change > DEGRADATION_PERCENT:
                recommendation = "Investigate root cause immediately. Significant degradation detected."
            else:
                recommendation = "Monitor closely. Trend may continue if not addressed."
        else:
            conclusion = (
                f"The decrease of {abs(percent_change):.2f}% IS statistically significant "
                f"(p={p_value:.4f}). This represents a real improvement."
            )
            recommendation = "Document changes that led to improvement for future reference."

        return SignificanceResult(
            metric_type=metric_type,
            baseline_mean=round(baseline_mean, 2),
            comparison_mean=round(comparison_mean, 2),
            percent_change=round(percent_change, 2),
            t_statistic=round(t_statistic, 4),
            p_value=round(p_value, 4),
            is_significant=is_significant,
            conclusion=conclusion,
            recommendation=recommendation,
        )

    def trend(
        self,
        metric_type: str,
        points: Sequence[MetricPoint],
        start: datetime,
        end: datetime,
    ) -> TrendResult:
        """Fit value against sample index and scale the slope to units per hour."""
        if len(points) < MIN_TREND_POINTS:
            raise InsufficientDataError(
                f"trend of {metric_type}", required=MIN_TREND_POINTS, actual=len(points)
            )
        total_hours = (end - start).total_seconds() / 3600
        if total_hours <= 0:
            raise DegenerateInputError(f"trend period for {metric_type} has no duration")

        ordered = sorted(points, key=lambda p: p.timestamp)
        n = len(ordered)
        fit = stats.linear_regression(list(range(n)), _values(ordered))

        if abs(fit.slope) < FLAT_SLOPE:
            direction = TrendDirection.STABLE
        elif fit.slope > 0:
            direction = TrendDirection.UPWARD
        else:
            direction = TrendDirection.DOWNWARD

        slope_per_hour = fit.slope * n / total_hours
        is_sustained = fit.r_squared > SUSTAINED_R_SQUARED

        description = (
            f"{direction.value} trend detected with "
            f"{'strong' if is_sustained else 'weak'} correlation (R²={fit.r_squared:.3f}). "
        )
        if direction is TrendDirection.UPWARD:
            description += f"Metric increasing at {abs(slope_per_hour):.2f} units/hour."
        elif direction is TrendDirection.DOWNWARD:
            description += f"Metric decreasing at {abs(slope_per_hour):.2f} units/hour."
        else:
            description += "Metric remains relatively stable."

        return TrendResult(
            metric_type=metric_type,
            direction=direction,
            strength=round(abs(fit.r_squared), 3),
            slope_per_hour=round(slope_per_hour, 4),
            r_squared=round(fit.r_squared, 3),
            is_sustained=is_sustained,
            start=start,
            description=description,
            points=[
                TrendPoint(
                    timestamp=p.timestamp,
                    actual_value=round(p.value, 2),
                    trend_value=round(fit.slope * i + fit.intercept, 2),
                )
                for i, p in enumerate(ordered)
            ],
        )

    def forecast(
        self,
        trend: TrendResult,
        points: Sequence[MetricPoint],
        hours_ahead: int,
    ) -> ForecastResult:
        """Extend *trend* hour by hour with a constant +/-1.96 sigma band."""
        if not MIN_FORECAST_HOURS <= hours_ahead <= MAX_FORECAST_HOURS:
            raise InvalidHorizonError(hours_ahead, MIN_FORECAST_HOURS, MAX_FORECAST_HOURS)

        last = trend.points[-1]
        band = CONFIDENCE_Z * stats.stddev(_values(points))

        predictions = []
        for i in range(1, hours_ahead + 1):
            predicted = last.trend_value + trend.slope_per_hour * i
            predictions.append(
                ForecastPoint(
                    timestamp=last.timestamp + timedelta(hours=i),
                    predicted_value=round(predicted, 2),
                    lower_bound=round(predicted - band, 2),
                    upper_bound=round(predicted + band, 2),
                )
            )

        return ForecastResult(
            metric_type=trend.metric_type,
            predictions=predictions,
            confidence_level=round(trend.r_squared * 100, 1),
            warning=LOW_CONFIDENCE_WARNING if trend.r_squared < LOW_CONFIDENCE_R_SQUARED else None,
        )

    def classify(
        self,
        anomaly: AnomalyRecord,
        points: Sequence[MetricPoint],
    ) -> ClassificationResult:
        """Compare the window mean before the anomaly with the mean after it."""
        if len(points) < MIN_CLASSIFICATION_POINTS:
            return self._classification(anomaly.id, AnomalyClassification.UNKNOWN)

        ordered = sorted(points, key=lambda p: p.timestamp)
        split = next(
            (
                i
                for i, p in enumerate(ordered)
                if abs(p.timestamp - anomaly.detected_at) < ANOMALY_MATCH_WINDOW
            ),
            len(ordered) // 2,
        )
        before = _values(ordered[:split])
        after = _values(ordered[split + 1:])
        before_mean = stats.mean(before) if before else 0.0
        after_mean = stats.mean(after) if after else 0.0

        if abs(after_mean - before_mean) < before_mean * BASELINE_TOLERANCE:
            kind = AnomalyClassification.ONE_OFF_SPIKE
        elif after_mean > before_mean * SUSTAINED_FACTOR:
            kind = AnomalyClassification.SUSTAINED_ISSUE
        else:
            kind = AnomalyClassification.RECURRING_PATTERN
        return self._classification(anomaly.id, kind)

    @staticmethod
    def _classification(anomaly_id: UUID, kind: AnomalyClassification) -> ClassificationResult:
        confidence, reasoning, requires_action, action = _CLASSIFICATIONS[kind]
        return ClassificationResult(
            anomaly_id=anomaly_id,
            classification=kind,
            confidence=confidence,
            reasoning=reasoning,
            requires_action=requires_action,
            recommended_action=action,
        )
