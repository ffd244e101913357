"""Anomaly detection application service.

Scans the trailing window of every metric for z-score outliers, persists
new anomalies with a 30-minute dedup guard, and handles resolution.
Scoring itself is delegated to the domain-layer :class:`AnomalyScorer`.
"""

from __future__ import annotations

import dataclasses
import logging
import threading
from collections import defaultdict
from collections.abc import Callable
from contextlib import AbstractContextManager
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Protocol
from uuid import UUID

from domain.exceptions import DuplicateAnomalyError
from domain.models.anomaly import AnomalyRecord
from domain.models.metric import MetricPoint
from domain.services.anomaly_scoring import AnomalyScorer
from infrastructure.observability.metrics import (
    anomalies_detected_total,
    anomalies_resolved_total,
    anomalies_suppressed_total,
    track_operation,
)

if TYPE_CHECKING:
    from application.services.metric_service import MetricStore

logger = logging.getLogger(__name__)

DETECTION_WINDOW: timedelta = timedelta(hours=24)


# ---------------------------------------------------------------------------
# Port interfaces
# ---------------------------------------------------------------------------


class AnomalyStore(Protocol):
    """Port: persistence for anomaly records.

    ``add`` must raise :class:`DuplicateAnomalyError` when an unresolved
    record with the same ``dedup_key`` already exists.
    """

    def get_all(self) -> list[AnomalyRecord]: ...

    def get_unresolved(self) -> list[AnomalyRecord]: ...

    def get_by_id(self, anomaly_id: UUID) -> AnomalyRecord | None: ...

    def add(self, record: AnomalyRecord) -> AnomalyRecord: ...

    def update(self, record: AnomalyRecord) -> AnomalyRecord: ...


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class AnomalyDetector:
    """Creates, lists and resolves anomalies."""

    def __init__(
        self,
        metric_store: MetricStore,
        anomaly_store: AnomalyStore,
        scorer: AnomalyScorer | None = None,
        lock: AbstractContextManager | None = None,
        window: timedelta = DETECTION_WINDOW,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._metrics = metric_store
        self._anomalies = anomaly_store
        self._scorer = scorer or AnomalyScorer()
        self._lock = lock if lock is not None else threading.Lock()
        self._window = window
        self._clock = clock or (lambda: datetime.now(UTC))

    # -- helpers ----------------------------------------------------------

    def _is_suppressed(self, metric_name: str, now: datetime) -> bool:
        return any(
            record.metric_name == metric_name
            and self._scorer.is_within_dedup_window(record, now)
            for record in self._anomalies.get_unresolved()
        )

    def _persist(self, record: AnomalyRecord) -> AnomalyRecord | None:
        try:
            return self._anomalies.add(record)
        except DuplicateAnomalyError:
            logger.info("Anomaly for %s already recorded under %s", record.metric_name, record.dedup_key)
            return None

    # -- public API -------------------------------------------------------

    def detect(self, now: datetime | None = None) -> list[AnomalyRecord]:
        """Run one detection sweep over the trailing window.

        Returns only the records created by this sweep; outliers covered by
        an unresolved anomaly of the same metric from the last 30 minutes
        are counted as suppressed instead.
        """
        now = now or self._clock()
        with track_operation("detect_anomalies"):
            points = self._metrics.query(start=now - self._window, end=now)

            groups: dict[str, list[MetricPoint]] = defaultdict(list)
            for point in points:
                groups[point.metric_name].append(point)

            created: list[AnomalyRecord] = []
            for metric_name, window in groups.items():
                candidate = self._scorer.score(metric_name, window)
                if candidate is None:
                    continue

                with self._lock:
                    if self._is_suppressed(metric_name, now):
                        stored = None
                    else:
                        stored = self._persist(self._scorer.build_record(candidate, now))

                if stored is None:
                    anomalies_suppressed_total.labels(metric_name=metric_name).inc()
                    continue

                anomalies_detected_total.labels(
                    metric_name=metric_name,
                    severity=stored.severity.value,
                ).inc()
                logger.info(
                    "Anomaly detected for %s: value=%.2f expected=%.2f stddev=%.2f z=%.2f severity=%s",
                    metric_name,
                    candidate.value,
                    candidate.expected_value,
                    candidate.stddev,
                    candidate.z_score,
                    stored.severity.value,
                )
                created.append(stored)

        return created

    def resolve(self, anomaly_id: UUID, now: datetime | None = None) -> bool:
        """Mark an anomaly resolved.

        Returns ``False`` without touching the record when it does not exist
        or is already resolved.
        """
        with self._lock:
            record = self._anomalies.get_by_id(anomaly_id)
            if record is None or record.is_resolved:
                return False

            resolved = dataclasses.replace(
                record, is_resolved=True, resolved_at=now or self._clock()
            )
            self._anomalies.update(resolved)

        anomalies_resolved_total.inc()
        logger.info("Anomaly %s resolved", anomaly_id)
        return True

    def get_all(self) -> list[AnomalyRecord]:
        return sorted(self._anomalies.get_all(), key=lambda a: a.detected_at, reverse=True)

    def get_unresolved(self) -> list[AnomalyRecord]:
        return sorted(self._anomalies.get_unresolved(), key=lambda a: a.detected_at, reverse=True)
