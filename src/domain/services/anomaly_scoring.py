from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from uuid import uuid4

from domain.models.anomaly import AnomalyRecord, AnomalySeverity
from domain.models.metric import MetricPoint
from domain.services import statistics_kernel as stats

MIN_SAMPLE_SIZE: int = 10
Z_SCORE_THRESHOLD: float = 2.0
DEDUP_WINDOW: timedelta = timedelta(minutes=30)

# Checked top-down; anything above Z_SCORE_THRESHOLD but below the last row is LOW.
SEVERITY_THRESHOLDS: list[tuple[float, AnomalySeverity]] = [
    (4.0, AnomalySeverity.CRITICAL),
    (3.0, AnomalySeverity.HIGH),
    (2.5, AnomalySeverity.MEDIUM),
]


@dataclass(frozen=True)
class AnomalyCandidate:
    """An outlier found in a metric window, not yet persisted."""

    metric_name: str
    value: float
    expected_value: float
    stddev: float
    z_score: float
    deviation_percent: float | None
    severity: AnomalySeverity
    observed_at: datetime


class AnomalyScorer:

    def grade_severity(self, z_score: float) -> AnomalySeverity:
        for threshold, severity in SEVERITY_THRESHOLDS:
            if z_score >= threshold:
                return severity
        return AnomalySeverity.LOW

    def score(self, metric_name: str, points: Sequence[MetricPoint]) -> AnomalyCandidate | None:
        """Score the most recent point of *points* against the whole window.

        Returns ``None`` when the window is too small, flat, or the latest
        value is within ``Z_SCORE_THRESHOLD`` standard deviations.
        """
        if len(points) < MIN_SAMPLE_SIZE:
            return None

        values = [p.value for p in points]
        mu = stats.mean(values)
        sigma = stats.stddev(values, mu)
        if sigma == 0:
            return None

        latest = max(points, key=lambda p: p.timestamp)
        z_score = abs(latest.value - mu) / sigma
        if z_score <= Z_SCORE_THRESHOLD:
            return None

        deviation = round((latest.value - mu) / mu * 100, 2) if mu != 0 else None

        return AnomalyCandidate(
            metric_name=metric_name,
            value=latest.value,
            expected_value=mu,
            stddev=sigma,
            z_score=z_score,
            deviation_percent=deviation,
            severity=self.grade_severity(z_score),
            observed_at=latest.timestamp,
        )

    @staticmethod
    def dedup_key(metric_name: str, at: datetime) -> str:
        """Idempotency key: metric name plus the start of its 30-minute bucket."""
        bucket_seconds = int(DEDUP_WINDOW.total_seconds())
        bucket = int(at.timestamp()) // bucket_seconds * bucket_seconds
        return f"{metric_name}@{datetime.fromtimestamp(bucket, tz=UTC).isoformat()}"

    @staticmethod
    def is_within_dedup_window(record: AnomalyRecord, now: datetime) -> bool:
        return (
            not record.is_resolved
            and record.detected_at >= now - DEDUP_WINDOW
        )

    def build_record(self, candidate: AnomalyCandidate, detected_at: datetime) -> AnomalyRecord:
        if candidate.deviation_percent is None:
            description = (
                f"Detected anomaly: value {candidate.value:.2f} deviates from "
                f"expected {candidate.expected_value:.2f}"
            )
        else:
            description = (
                f"Detected anomaly: value {candidate.value:.2f} deviates "
                f"{abs(candidate.deviation_percent):.2f}% from expected "
                f"{candidate.expected_value:.2f}"
            )
        return AnomalyRecord(
            id=uuid4(),
            metric_name=candidate.metric_name,
            detected_value=candidate.value,
            expected_value=candidate.expected_value,
            deviation_percent=candidate.deviation_percent,
            severity=candidate.severity,
            detected_at=detected_at,
            is_resolved=False,
            resolved_at=None,
            description=description,
            dedup_key=self.dedup_key(candidate.metric_name, detected_at),
        )
