"""Adapter implementations bridging infrastructure to application-layer ports.

In-memory stores for metric points, anomalies and KPI records. Each store
guards its state with its own lock so a Celery worker and an interactive
caller can share one container.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Optional
from uuid import UUID

from domain.exceptions import DuplicateAnomalyError
from domain.models.anomaly import AnomalyRecord
from domain.models.kpi import KpiRecord
from domain.models.metric import MetricPoint

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# In-memory store adapters (swap for real database stores in production)
# ---------------------------------------------------------------------------

class InMemoryMetricStore:
    """Append-only metric point store."""

    def __init__(self, points: Optional[list[MetricPoint]] = None) -> None:
        self._lock = threading.Lock()
        self._points: list[MetricPoint] = list(points or [])

    def query(
        self,
        metric_name: Optional[str] = None,
        source: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[MetricPoint]:
        with self._lock:
            snapshot = list(self._points)
        matched = [
            p
            for p in snapshot
            if (metric_name is None or p.metric_name == metric_name)
            and (source is None or p.source == source)
            and (start is None or p.timestamp >= start)
            and (end is None or p.timestamp <= end)
        ]
        return sorted(matched, key=lambda p: p.timestamp)

    def add(self, point: MetricPoint) -> MetricPoint:
        with self._lock:
            self._points.append(point)
        return point

    def add_many(self, points: list[MetricPoint]) -> list[MetricPoint]:
        with self._lock:
            self._points.extend(points)
        return points


class InMemoryAnomalyStore:
    """Anomaly store enforcing one unresolved record per dedup key."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._store: dict[UUID, AnomalyRecord] = {}

    def get_all(self) -> list[AnomalyRecord]:
        with self._lock:
            return list(self._store.values())

    def get_unresolved(self) -> list[AnomalyRecord]:
        with self._lock:
            return [a for a in self._store.values() if not a.is_resolved]

    def get_by_id(self, anomaly_id: UUID) -> Optional[AnomalyRecord]:
        with self._lock:
            return self._store.get(anomaly_id)

    def add(self, record: AnomalyRecord) -> AnomalyRecord:
        with self._lock:
            if record.dedup_key and any(
                a.dedup_key == record.dedup_key and not a.is_resolved
                for a in self._store.values()
            ):
                raise DuplicateAnomalyError(record.dedup_key)
            self._store[record.id] = record
        return record

    def update(self, record: AnomalyRecord) -> AnomalyRecord:
        with self._lock:
            self._store[record.id] = record
        return record


class InMemoryKpiStore:
    """Append-only KPI record store."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: list[KpiRecord] = []

    def get_all(self) -> list[KpiRecord]:
        with self._lock:
            return list(self._records)

    def get_by_date_range(self, start: datetime, end: datetime) -> list[KpiRecord]:
        with self._lock:
            return [r for r in self._records if start <= r.calculated_at <= end]

    def add(self, record: KpiRecord) -> KpiRecord:
        with self._lock:
            self._records.append(record)
        return record
