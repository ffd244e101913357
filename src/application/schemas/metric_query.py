from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class MetricQuery:
    """Filters for listing metric points.

    ``metric_name`` and ``source`` are case-insensitive substring matches;
    ``start`` / ``end`` are inclusive.
    """

    metric_name: str | None = None
    source: str | None = None
    start: datetime | None = None
    end: datetime | None = None

    def matches(self, metric_name: str, source: str, timestamp: datetime) -> bool:
        if self.metric_name and self.metric_name.casefold() not in metric_name.casefold():
            return False
        if self.source and self.source.casefold() not in source.casefold():
            return False
        if self.start is not None and timestamp < self.start:
            return False
        if self.end is not None and timestamp > self.end:
            return False
        return True
