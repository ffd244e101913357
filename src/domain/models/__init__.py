from domain.models.analysis import (
    AnomalyClassification,
    ClassificationResult,
    ForecastPoint,
    ForecastResult,
    HealthStatus,
    MetricTrendSummary,
    RegressionResult,
    SeasonalityResult,
    SignificanceResult,
    StabilityLevel,
    TrendDirection,
    TrendPoint,
    TrendReport,
    TrendResult,
    VarianceResult,
)
from domain.models.anomaly import AnomalyRecord, AnomalySeverity
from domain.models.dashboard import (
    DashboardAnalytics,
    DashboardSummary,
    MetricDistribution,
    ServerHealth,
    TimeSeriesPoint,
)
from domain.models.kpi import Aggregation, Directionality, KpiDefinition, KpiRecord, KpiStatus
from domain.models.metric import MetricPoint, MetricType

__all__ = [
    "Aggregation",
    "AnomalyClassification",
    "AnomalyRecord",
    "AnomalySeverity",
    "ClassificationResult",
    "DashboardAnalytics",
    "DashboardSummary",
    "Directionality",
    "ForecastPoint",
    "ForecastResult",
    "HealthStatus",
    "KpiDefinition",
    "KpiRecord",
    "KpiStatus",
    "MetricDistribution",
    "MetricPoint",
    "MetricTrendSummary",
    "MetricType",
    "RegressionResult",
    "SeasonalityResult",
    "ServerHealth",
    "SignificanceResult",
    "StabilityLevel",
    "TimeSeriesPoint",
    "TrendDirection",
    "TrendPoint",
    "TrendReport",
    "TrendResult",
    "VarianceResult",
]
