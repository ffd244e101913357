"""Dependency injection container for the operational metrics analytics service.

Wires the in-memory store adapters, domain calculators and application
services together. Celery tasks resolve services through ``get_container()``.
"""

from __future__ import annotations

import logging
import threading
from datetime import timedelta

from application.services.anomaly_service import AnomalyDetector
from application.services.dashboard_service import DashboardService
from application.services.kpi_service import KpiCalculator
from application.services.metric_service import MetricService
from application.services.report_service import ReportAggregator
from application.services.trend_analysis_service import TrendAnalyzer
from domain.services.anomaly_scoring import AnomalyScorer
from domain.services.kpi_evaluator import KpiEvaluator
from domain.services.trend_calculations import TrendCalculator
from infrastructure.adapters import InMemoryAnomalyStore, InMemoryKpiStore, InMemoryMetricStore
from infrastructure.settings import AnalyticsSettings, get_settings

logger = logging.getLogger(__name__)


class ServiceContainer:
    """Central DI container that owns all service instances."""

    def __init__(self, settings: AnalyticsSettings | None = None) -> None:
        self.settings = settings or get_settings()

        # Infrastructure adapters
        self.metric_store = InMemoryMetricStore()
        self.anomaly_store = InMemoryAnomalyStore()
        self.kpi_store = InMemoryKpiStore()

        # Serialises anomaly check-and-add across every detector using this container
        self.detection_lock = threading.Lock()

        # Domain services
        self.anomaly_scorer = AnomalyScorer()
        self.kpi_evaluator = KpiEvaluator()
        self.trend_calculator = TrendCalculator()

        # Application services
        self.metric_service = MetricService(metric_store=self.metric_store)

        self.anomaly_detector = AnomalyDetector(
            metric_store=self.metric_store,
            anomaly_store=self.anomaly_store,
            scorer=self.anomaly_scorer,
            lock=self.detection_lock,
            window=timedelta(hours=self.settings.detection_window_hours),
        )

        self.kpi_calculator = KpiCalculator(
            metric_store=self.metric_store,
            kpi_store=self.kpi_store,
            evaluator=self.kpi_evaluator,
            window=timedelta(hours=self.settings.kpi_window_hours),
        )

        self.trend_analyzer = TrendAnalyzer(
            metric_store=self.metric_store,
            anomaly_store=self.anomaly_store,
            calculator=self.trend_calculator,
        )

        self.report_aggregator = ReportAggregator(
            analyzer=self.trend_analyzer,
            anomaly_store=self.anomaly_store,
            metric_types=self.settings.report_metric_types,
        )

        self.dashboard_service = DashboardService(
            metric_store=self.metric_store,
            anomaly_store=self.anomaly_store,
        )

        logger.info("ServiceContainer initialized")


# Module-level singleton
_container: ServiceContainer | None = None


def get_container() -> ServiceContainer:
    """Return the global container singleton."""
    global _container
    if _container is None:
        _container = ServiceContainer()
    return _container


def reset_container() -> None:
    """Reset the global container (for testing)."""
    global _container
    _container = None
