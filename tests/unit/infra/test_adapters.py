"""Tests for infrastructure.adapters."""

from __future__ import annotations

from datetime import timedelta
from uuid import uuid4

import pytest

from domain.exceptions import DuplicateAnomalyError
from domain.models.anomaly import AnomalyRecord
from domain.models.kpi import KpiRecord
from infrastructure.adapters import InMemoryAnomalyStore, InMemoryKpiStore, InMemoryMetricStore


class TestInMemoryMetricStore:
    def test_query_sorted_oldest_first(self, make_point, now) -> None:
        newer = make_point("CPUUsage", 2.0, now)
        older = make_point("CPUUsage", 1.0, now - timedelta(minutes=1))
        store = InMemoryMetricStore([newer, older])
        assert store.query() == [older, newer]

    def test_exact_name_and_source(self, metric_store: InMemoryMetricStore, make_point, now) -> None:
        metric_store.add(make_point("CPUUsage", 1.0, now, source="web-01"))
        metric_store.add(make_point("CPUUsage", 2.0, now, source="web-02"))
        metric_store.add(make_point("CPUUsagePeak", 3.0, now, source="web-01"))

        result = metric_store.query(metric_name="CPUUsage", source="web-01")
        assert [p.value for p in result] == [1.0]

    def test_bounds_inclusive(self, metric_store: InMemoryMetricStore, make_series, now) -> None:
        metric_store.add_many(make_series("CPUUsage", [1.0, 2.0, 3.0, 4.0]))
        result = metric_store.query(start=now - timedelta(minutes=10), end=now - timedelta(minutes=5))
        assert [p.value for p in result] == [2.0, 3.0]


class TestInMemoryAnomalyStore:
    def test_duplicate_unresolved_key_rejected(self, anomaly_store: InMemoryAnomalyStore, now) -> None:
        anomaly_store.add(AnomalyRecord(metric_name="CPUUsage", detected_at=now, dedup_key="CPUUsage:1"))
        with pytest.raises(DuplicateAnomalyError) as exc_info:
            anomaly_store.add(AnomalyRecord(metric_name="CPUUsage", detected_at=now, dedup_key="CPUUsage:1"))
        assert exc_info.value.dedup_key == "CPUUsage:1"
        assert len(anomaly_store.get_all()) == 1

    def test_resolved_key_can_be_reused(self, anomaly_store: InMemoryAnomalyStore, now) -> None:
        first = anomaly_store.add(
            AnomalyRecord(metric_name="CPUUsage", detected_at=now, dedup_key="CPUUsage:1")
        )
        first.is_resolved = True
        first.resolved_at = now
        anomaly_store.update(first)

        anomaly_store.add(AnomalyRecord(metric_name="CPUUsage", detected_at=now, dedup_key="CPUUsage:1"))
        assert len(anomaly_store.get_all()) == 2
        assert len(anomaly_store.get_unresolved()) == 1

    def test_blank_keys_never_collide(self, anomaly_store: InMemoryAnomalyStore, now) -> None:
        anomaly_store.add(AnomalyRecord(metric_name="CPUUsage", detected_at=now))
        anomaly_store.add(AnomalyRecord(metric_name="CPUUsage", detected_at=now))
        assert len(anomaly_store.get_all()) == 2

    def test_get_by_id_missing(self, anomaly_store: InMemoryAnomalyStore) -> None:
        assert anomaly_store.get_by_id(uuid4()) is None


class TestInMemoryKpiStore:
    def test_date_range_inclusive(self, kpi_store: InMemoryKpiStore, now) -> None:
        kpi_store.add(KpiRecord(kpi_name="A", calculated_at=now - timedelta(hours=1)))
        kpi_store.add(KpiRecord(kpi_name="B", calculated_at=now))
        kpi_store.add(KpiRecord(kpi_name="C", calculated_at=now + timedelta(seconds=1)))

        result = kpi_store.get_by_date_range(now - timedelta(hours=1), now)
        assert [r.kpi_name for r in result] == ["A", "B"]
