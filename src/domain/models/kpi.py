from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID, uuid4


class KpiStatus(enum.Enum):
    BELOW_TARGET = "BelowTarget"
    ON_TARGET = "OnTarget"
    ABOVE_TARGET = "AboveTarget"
    CRITICAL = "Critical"


class Directionality(enum.Enum):
    LOWER_IS_BETTER = "LOWER_IS_BETTER"
    HIGHER_IS_BETTER = "HIGHER_IS_BETTER"


class Aggregation(enum.Enum):
    MEAN = "MEAN"
    RATE_PER_HOUR = "RATE_PER_HOUR"
    RATIO = "RATIO"


@dataclass(frozen=True)
class KpiDefinition:
    """Declarative description of one KPI.

    ``RATIO`` KPIs divide the sum of ``metric_name`` by the sum of
    ``denominator_metric`` and express the result as a percentage.
    """

    name: str
    metric_name: str
    aggregation: Aggregation
    target: float
    directionality: Directionality
    description: str = ""
    source: str | None = None
    denominator_metric: str | None = None

    def __post_init__(self) -> None:
        if self.target is None or self.target <= 0:
            raise ValueError(f"KPI {self.name!r} needs a positive target")
        if self.aggregation is Aggregation.RATIO and not self.denominator_metric:
            raise ValueError(f"Ratio KPI {self.name!r} needs a denominator_metric")


@dataclass(frozen=True)
class KpiRecord:
    id: UUID = field(default_factory=uuid4)
    kpi_name: str = ""
    calculated_value: float = 0.0
    target_value: float | None = None
    status: KpiStatus = KpiStatus.ON_TARGET
    calculated_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    period_start: datetime = field(default_factory=lambda: datetime.now(UTC))
    period_end: datetime = field(default_factory=lambda: datetime.now(UTC))
    description: str = ""

    @property
    def percentage_of_target(self) -> float | None:
        if not self.target_value or self.target_value <= 0:
            return None
        return round(self.calculated_value / self.target_value * 100, 2)
