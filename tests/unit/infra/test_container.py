"""Tests for infrastructure.container."""

from __future__ import annotations

from datetime import timedelta

import pytest

from infrastructure.container import ServiceContainer, get_container, reset_container
from infrastructure.settings import AnalyticsSettings


@pytest.fixture(autouse=True)
def _isolated():
    reset_container()
    yield
    reset_container()


class TestServiceContainer:
    def test_services_share_stores(self) -> None:
        container = ServiceContainer(AnalyticsSettings())
        point = container.metric_service.record_metric("CPUUsage", 50.0, source="web-01")
        assert container.metric_store.query(metric_name="CPUUsage") == [point]
        assert container.dashboard_service.get_server_health()[0].server_name == "web-01"

    def test_detection_lock_injected(self) -> None:
        container = ServiceContainer(AnalyticsSettings())
        assert container.anomaly_detector._lock is container.detection_lock

    def test_windows_from_settings(self) -> None:
        container = ServiceContainer(AnalyticsSettings(detection_window_hours=6, kpi_window_hours=12))
        assert container.anomaly_detector._window == timedelta(hours=6)
        assert container.kpi_calculator._window == timedelta(hours=12)

    def test_report_types_from_settings(self) -> None:
        container = ServiceContainer(AnalyticsSettings(report_metric_types=["CPUUsage"]))
        assert list(container.report_aggregator._metric_types) == ["CPUUsage"]


class TestSingleton:
    def test_get_container_is_cached(self) -> None:
        assert get_container() is get_container()

    def test_reset_builds_fresh_container(self) -> None:
        first = get_container()
        reset_container()
        assert get_container() is not first
