"""KPI calculation application service."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Protocol

from domain.models.kpi import KpiDefinition, KpiRecord
from domain.services.kpi_evaluator import DEFAULT_KPI_DEFINITIONS, KpiEvaluator
from infrastructure.observability.metrics import kpi_records_total, track_operation

if TYPE_CHECKING:
    from application.services.metric_service import MetricStore

logger = logging.getLogger(__name__)

KPI_WINDOW: timedelta = timedelta(hours=24)


# ---------------------------------------------------------------------------
# Port interfaces
# ---------------------------------------------------------------------------


class KpiStore(Protocol):
    """Port: append-only persistence for KPI records."""

    def get_all(self) -> list[KpiRecord]: ...

    def get_by_date_range(self, start: datetime, end: datetime) -> list[KpiRecord]: ...

    def add(self, record: KpiRecord) -> KpiRecord: ...


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class KpiCalculator:

    def __init__(
        self,
        metric_store: MetricStore,
        kpi_store: KpiStore,
        evaluator: KpiEvaluator | None = None,
        definitions: Sequence[KpiDefinition] = DEFAULT_KPI_DEFINITIONS,
        window: timedelta = KPI_WINDOW,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._metrics = metric_store
        self._kpis = kpi_store
        self._evaluator = evaluator or KpiEvaluator()
        self._definitions = tuple(definitions)
        self._window = window
        self._clock = clock or (lambda: datetime.now(UTC))

    def calculate(self, now: datetime | None = None) -> list[KpiRecord]:
        """Evaluate every KPI definition over the trailing window.

        KPIs whose inputs are missing for the window are skipped. Each
        produced record is appended to the store; earlier records are kept.
        """
        now = now or self._clock()
        period_start = now - self._window

        with track_operation("calculate_kpis"):
            points = self._metrics.query(start=period_start, end=now)

            records: list[KpiRecord] = []
            for definition in self._definitions:
                record = self._evaluator.evaluate(definition, points, period_start, now, now)
                if record is None:
                    logger.debug("Skipping KPI %s: no input data in window", definition.name)
                    continue
                records.append(self._kpis.add(record))
                kpi_records_total.labels(kpi_name=record.kpi_name, status=record.status.value).inc()

        logger.info("Calculated %d of %d KPIs", len(records), len(self._definitions))
        return records

    def get_all(self) -> list[KpiRecord]:
        return sorted(self._kpis.get_all(), key=lambda k: k.calculated_at, reverse=True)

    def get_by_date_range(self, start: datetime, end: datetime) -> list[KpiRecord]:
        records = self._kpis.get_by_date_range(start, end)
        return sorted(records, key=lambda k: k.calculated_at, reverse=True)
