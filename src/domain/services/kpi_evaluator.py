from __future__ import annotations

import math
from collections.abc import Sequence
from datetime import datetime
from uuid import uuid4

from domain.models.kpi import Aggregation, Directionality, KpiDefinition, KpiRecord, KpiStatus
from domain.models.metric import MetricPoint, MetricType

DEFAULT_KPI_DEFINITIONS: tuple[KpiDefinition, ...] = (
    KpiDefinition(
        name="Average Response Time",
        metric_name=MetricType.RESPONSE_TIME.value,
        aggregation=Aggregation.MEAN,
        target=200.0,
        directionality=Directionality.LOWER_IS_BETTER,
        description="Average response time over the last {hours:g} hours. Target: {target:g}ms",
    ),
    KpiDefinition(
        name="Throughput",
        metric_name=MetricType.REQUEST_COUNT.value,
        aggregation=Aggregation.RATE_PER_HOUR,
        target=1000.0,
        directionality=Directionality.HIGHER_IS_BETTER,
        description="Requests per hour over the last {hours:g} hours. Target: {target:g} req/hr",
    ),
    KpiDefinition(
        name="Error Rate",
        metric_name=MetricType.ERROR_COUNT.value,
        aggregation=Aggregation.RATIO,
        target=1.0,
        directionality=Directionality.LOWER_IS_BETTER,
        denominator_metric=MetricType.REQUEST_COUNT.value,
        description="Error rate percentage over the last {hours:g} hours. Target: <{target:g}%",
    ),
    KpiDefinition(
        name="System Availability",
        metric_name=MetricType.UPTIME.value,
        aggregation=Aggregation.MEAN,
        target=99.9,
        directionality=Directionality.HIGHER_IS_BETTER,
        description="System uptime percentage over the last {hours:g} hours. Target: {target:g}%",
    ),
)

# (upper bound inclusive, status) for lower-is-better KPIs
_LOWER_IS_BETTER_BANDS: list[tuple[float, KpiStatus]] = [
    (80.0, KpiStatus.ABOVE_TARGET),
    (100.0, KpiStatus.ON_TARGET),
    (150.0, KpiStatus.BELOW_TARGET),
]

# (lower bound inclusive, status) for higher-is-better KPIs
_HIGHER_IS_BETTER_BANDS: list[tuple[float, KpiStatus]] = [
    (100.0, KpiStatus.ABOVE_TARGET),
    (80.0, KpiStatus.ON_TARGET),
    (50.0, KpiStatus.BELOW_TARGET),
]


def _matches(point: MetricPoint, metric_name: str, source: str | None) -> bool:
    if point.metric_name.casefold() != metric_name.casefold():
        return False
    return source is None or point.source.casefold() == source.casefold()


class KpiEvaluator:

    @staticmethod
    def percentage_of_target(actual: float, target: float | None) -> float | None:
        if not target or target <= 0:
            return None
        return actual / target * 100

    def determine_status(
        self,
        actual: float,
        target: float,
        directionality: Directionality,
    ) -> KpiStatus:
        percentage = self.percentage_of_target(actual, target)
        if percentage is None:
            raise ValueError(f"KPI status needs a positive target, got {target!r}")

        if directionality is Directionality.LOWER_IS_BETTER:
            for upper, status in _LOWER_IS_BETTER_BANDS:
                if percentage <= upper:
                    return status
        else:
            for lower, status in _HIGHER_IS_BETTER_BANDS:
                if percentage >= lower:
                    return status
        return KpiStatus.CRITICAL

    def aggregate(
        self,
        definition: KpiDefinition,
        points: Sequence[MetricPoint],
        period_hours: float,
    ) -> float | None:
        """Reduce *points* to the KPI value, or ``None`` when it is undefined."""
        values = [p.value for p in points if _matches(p, definition.metric_name, definition.source)]

        if definition.aggregation is Aggregation.RATIO:
            denominators = [
                p.value
                for p in points
                if _matches(p, definition.denominator_metric or "", definition.source)
            ]
            denominator = math.fsum(denominators)
            if not denominators or denominator == 0:
                return None
            return math.fsum(values) / denominator * 100

        if not values:
            return None

        if definition.aggregation is Aggregation.MEAN:
            return math.fsum(values) / len(values)

        if period_hours <= 0:
            return None
        return math.fsum(values) / period_hours

    def evaluate(
        self,
        definition: KpiDefinition,
        points: Sequence[MetricPoint],
        period_start: datetime,
        period_end: datetime,
        calculated_at: datetime,
    ) -> KpiRecord | None:
        period_hours = (period_end - period_start).total_seconds() / 3600
        actual = self.aggregate(definition, points, period_hours)
        if actual is None:
            return None

        return KpiRecord(
            id=uuid4(),
            kpi_name=definition.name,
            calculated_value=round(actual, 2),
            target_value=definition.target,
            status=self.determine_status(actual, definition.target, definition.directionality),
            calculated_at=calculated_at,
            period_start=period_start,
            period_end=period_end,
            description=definition.description.format(hours=period_hours, target=definition.target),
        )
