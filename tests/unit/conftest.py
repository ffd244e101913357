"""Shared fixtures for unit tests."""

from __future__ import annotations

import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path
from uuid import uuid4

import pytest

# Ensure src is importable
sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from domain.models.metric import MetricPoint
from infrastructure.adapters import InMemoryAnomalyStore, InMemoryKpiStore, InMemoryMetricStore

NOW = datetime(2026, 2, 17, 12, 0, 0, tzinfo=UTC)


def _point(
    metric_name: str,
    value: float,
    timestamp: datetime,
    source: str = "web-01",
    unit: str = "",
) -> MetricPoint:
    return MetricPoint(
        id=uuid4(),
        metric_name=metric_name,
        value=float(value),
        timestamp=timestamp,
        source=source,
        unit=unit,
        tags=None,
    )


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def make_point():
    return _point


@pytest.fixture
def make_series():
    """Build evenly spaced points whose last value lands on *end*."""

    def factory(
        metric_name: str,
        values: list[float],
        end: datetime = NOW,
        step: timedelta = timedelta(minutes=5),
        source: str = "web-01",
    ) -> list[MetricPoint]:
        last = len(values) - 1
        return [
            _point(metric_name, value, end - step * (last - i), source)
            for i, value in enumerate(values)
        ]

    return factory


@pytest.fixture
def metric_store() -> InMemoryMetricStore:
    return InMemoryMetricStore()


@pytest.fixture
def anomaly_store() -> InMemoryAnomalyStore:
    return InMemoryAnomalyStore()


@pytest.fixture
def kpi_store() -> InMemoryKpiStore:
    return InMemoryKpiStore()
