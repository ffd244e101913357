from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID, uuid4


class AnomalySeverity(enum.Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


@dataclass
class AnomalyRecord:
    id: UUID = field(default_factory=uuid4)
    metric_name: str = ""
    detected_value: float = 0.0
    expected_value: float = 0.0
    deviation_percent: float | None = None
    severity: AnomalySeverity = AnomalySeverity.LOW
    detected_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    is_resolved: bool = False
    resolved_at: datetime | None = None
    description: str = ""
    dedup_key: str = ""
