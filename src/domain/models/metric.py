from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID, uuid4


class MetricType(enum.Enum):
    RESPONSE_TIME = "ResponseTime"
    REQUEST_COUNT = "RequestCount"
    ERROR_COUNT = "ErrorCount"
    CPU_USAGE = "CPUUsage"
    MEMORY_USAGE = "MemoryUsage"
    DISK_IO = "DiskIO"
    NETWORK_THROUGHPUT = "NetworkThroughput"
    ACTIVE_CONNECTIONS = "ActiveConnections"
    UPTIME = "Uptime"


@dataclass(frozen=True)
class MetricPoint:
    id: UUID = field(default_factory=uuid4)
    metric_name: str = ""
    value: float = 0.0
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    source: str = ""
    unit: str = ""
    tags: str | None = None
