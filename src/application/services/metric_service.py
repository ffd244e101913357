"""Metric ingestion and listing.

Defines the :class:`MetricStore` port that every analytics service reads
from, and a thin service for recording and paging through metric points.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Protocol
from uuid import uuid4

from application.schemas.metric_query import MetricQuery
from application.schemas.pagination import PaginatedResponse, PaginationParams
from domain.models.metric import MetricPoint

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Port interfaces
# ---------------------------------------------------------------------------


class MetricStore(Protocol):
    """Port: read/append access to metric points.

    ``query`` matches ``metric_name`` and ``source`` exactly, treats
    ``start`` / ``end`` as inclusive, and returns points ordered by
    timestamp ascending.
    """

    def query(
        self,
        metric_name: str | None = None,
        source: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[MetricPoint]: ...

    def add(self, point: MetricPoint) -> MetricPoint: ...


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class MetricService:

    def __init__(
        self,
        metric_store: MetricStore,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._metrics = metric_store
        self._clock = clock or (lambda: datetime.now(UTC))

    def record_metric(
        self,
        metric_name: str,
        value: float,
        unit: str = "",
        source: str = "",
        tags: str | None = None,
    ) -> MetricPoint:
        """Stamp a reading with the current time and append it to the store."""
        point = MetricPoint(
            id=uuid4(),
            metric_name=metric_name,
            value=float(value),
            timestamp=self._clock(),
            source=source,
            unit=unit,
            tags=tags,
        )
        logger.debug("Recording %s=%s from %s", metric_name, value, source or "<none>")
        return self._metrics.add(point)

    def query_metrics(
        self,
        query: MetricQuery,
        pagination: PaginationParams | None = None,
    ) -> PaginatedResponse[MetricPoint]:
        """Filter points (substring, case-insensitive) and page them newest first."""
        pagination = pagination or PaginationParams()
        candidates = self._metrics.query(start=query.start, end=query.end)
        matched = [
            p for p in candidates if query.matches(p.metric_name, p.source, p.timestamp)
        ]
        matched.sort(key=lambda p: p.timestamp, reverse=True)
        return PaginatedResponse.from_sequence(matched, pagination)

    def get_recent_metrics(self, count: int = 100) -> list[MetricPoint]:
        points = self._metrics.query()
        return sorted(points, key=lambda p: p.timestamp, reverse=True)[: max(count, 0)]
