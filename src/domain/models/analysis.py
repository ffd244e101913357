"""Result types produced by the trend-analysis and reporting services."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID


class TrendDirection(enum.Enum):
    UPWARD = "Upward"
    DOWNWARD = "Downward"
    STABLE = "Stable"


class StabilityLevel(enum.Enum):
    STABLE = "Stable"
    MODERATE = "Moderate"
    VOLATILE = "Volatile"


class AnomalyClassification(enum.Enum):
    ONE_OFF_SPIKE = "OneOffSpike"
    SUSTAINED_ISSUE = "SustainedIssue"
    RECURRING_PATTERN = "RecurringPattern"
    UNKNOWN = "Unknown"


class HealthStatus(enum.Enum):
    HEALTHY = "Healthy"
    WARNING = "Warning"
    CRITICAL = "Critical"


@dataclass(frozen=True)
class RegressionResult:
    slope: float
    intercept: float
    r_squared: float


@dataclass(frozen=True)
class TrendPoint:
    timestamp: datetime
    actual_value: float
    trend_value: float


@dataclass(frozen=True)
class TrendResult:
    metric_type: str
    direction: TrendDirection
    strength: float
    slope_per_hour: float
    r_squared: float
    is_sustained: bool
    start: datetime
    description: str = ""
    points: list[TrendPoint] = field(default_factory=list)


@dataclass(frozen=True)
class SeasonalityResult:
    metric_type: str
    has_seasonality: bool
    seasonality_type: str = ""
    peak_periods: dict[str, float] = field(default_factory=dict)
    low_periods: dict[str, float] = field(default_factory=dict)
    strength: float = 0.0
    description: str = ""


@dataclass(frozen=True)
class VarianceResult:
    metric_type: str
    mean: float
    stddev: float
    variance: float
    coefficient_of_variation: float
    stability: StabilityLevel
    min_value: float
    max_value: float
    range: float
    sample_size: int


@dataclass(frozen=True)
class SignificanceResult:
    metric_type: str
    baseline_mean: float
    comparison_mean: float
    percent_change: float
    t_statistic: float
    p_value: float
    is_significant: bool
    conclusion: str = ""
    recommendation: str = ""


@dataclass(frozen=True)
class ForecastPoint:
    timestamp: datetime
    predicted_value: float
    lower_bound: float
    upper_bound: float


@dataclass(frozen=True)
class ForecastResult:
    metric_type: str
    predictions: list[ForecastPoint] = field(default_factory=list)
    confidence_level: float = 0.0
    method: str = "Linear Regression"
    warning: str | None = None


@dataclass(frozen=True)
class ClassificationResult:
    anomaly_id: UUID
    classification: AnomalyClassification
    confidence: float
    reasoning: str
    requires_action: bool
    recommended_action: str


@dataclass(frozen=True)
class MetricTrendSummary:
    metric_type: str
    direction: TrendDirection
    change_percent: float
    has_seasonality: bool
    stability: StabilityLevel
    health_status: HealthStatus


@dataclass(frozen=True)
class TrendReport:
    period_start: datetime
    period_end: datetime
    generated_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    metric_trends: list[MetricTrendSummary] = field(default_factory=list)
    key_findings: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    total_anomalies: int = 0
    one_off_spikes: int = 0
    sustained_issues: int = 0
