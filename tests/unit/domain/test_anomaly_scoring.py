"""Tests for src/domain/services/anomaly_scoring.py"""

import random
import statistics
from datetime import UTC, datetime, timedelta

import pytest

from domain.models.anomaly import AnomalyRecord, AnomalySeverity
from domain.services.anomaly_scoring import (
    DEDUP_WINDOW,
    MIN_SAMPLE_SIZE,
    AnomalyCandidate,
    AnomalyScorer,
)

BASELINE = [99.0, 101.0] * 9 + [100.0]


@pytest.fixture
def scorer():
    return AnomalyScorer()


class TestGradeSeverity:
    @pytest.mark.parametrize(
        "z_score, expected",
        [
            (2.01, AnomalySeverity.LOW),
            (2.49, AnomalySeverity.LOW),
            (2.5, AnomalySeverity.MEDIUM),
            (2.99, AnomalySeverity.MEDIUM),
            (3.0, AnomalySeverity.HIGH),
            (3.99, AnomalySeverity.HIGH),
            (4.0, AnomalySeverity.CRITICAL),
            (12.0, AnomalySeverity.CRITICAL),
        ],
    )
    def test_thresholds(self, scorer, z_score, expected):
        assert scorer.grade_severity(z_score) is expected


class TestScore:
    def test_outlier_is_scored(self, scorer, make_series):
        values = BASELINE + [200.0]
        points = make_series("ResponseTime", values)
        candidate = scorer.score("ResponseTime", points)

        mu = statistics.fmean(values)
        sigma = statistics.pstdev(values)
        assert candidate is not None
        assert candidate.value == 200.0
        assert candidate.expected_value == pytest.approx(mu)
        assert candidate.z_score == pytest.approx((200.0 - mu) / sigma)
        assert candidate.deviation_percent == round((200.0 - mu) / mu * 100, 2)
        assert candidate.severity is AnomalySeverity.CRITICAL

    def test_too_few_points(self, scorer, make_series):
        points = make_series("ResponseTime", [100.0] * (MIN_SAMPLE_SIZE - 2) + [500.0])
        assert scorer.score("ResponseTime", points) is None

    def test_flat_window_never_flags(self, scorer, make_series):
        points = make_series("ResponseTime", [100.0] * 20)
        assert scorer.score("ResponseTime", points) is None

    def test_latest_value_within_range(self, scorer, make_series):
        points = make_series("ResponseTime", [500.0] + BASELINE)
        assert scorer.score("ResponseTime", points) is None

    def test_uses_most_recent_point_regardless_of_order(self, scorer, make_series):
        points = make_series("ResponseTime", BASELINE + [200.0])
        shuffled = list(points)
        random.Random(7).shuffle(shuffled)
        candidate = scorer.score("ResponseTime", shuffled)
        assert candidate is not None
        assert candidate.value == 200.0
        assert candidate.observed_at == points[-1].timestamp

    def test_zero_mean_leaves_deviation_undefined(self, scorer, make_series):
        points = make_series("ErrorCount", [-1.0, 1.0] * 9 + [-20.0, 20.0])
        candidate = scorer.score("ErrorCount", points)
        assert candidate is not None
        assert candidate.deviation_percent is None
        assert candidate.severity is AnomalySeverity.HIGH


class TestDedupKey:
    def test_bucket_start(self):
        at = datetime(2026, 2, 17, 10, 47, 12, tzinfo=UTC)
        assert AnomalyScorer.dedup_key("ResponseTime", at) == "ResponseTime@2026-02-17T10:30:00+00:00"

    def test_same_bucket_same_key(self):
        a = datetime(2026, 2, 17, 10, 0, 0, tzinfo=UTC)
        b = datetime(2026, 2, 17, 10, 29, 59, tzinfo=UTC)
        assert AnomalyScorer.dedup_key("CPUUsage", a) == AnomalyScorer.dedup_key("CPUUsage", b)

    def test_different_metrics_differ(self):
        at = datetime(2026, 2, 17, 10, 0, 0, tzinfo=UTC)
        assert AnomalyScorer.dedup_key("CPUUsage", at) != AnomalyScorer.dedup_key("MemoryUsage", at)


class TestDedupWindow:
    @pytest.mark.parametrize(
        "age, resolved, expected",
        [
            (timedelta(minutes=10), False, True),
            (DEDUP_WINDOW, False, True),
            (DEDUP_WINDOW + timedelta(seconds=1), False, False),
            (timedelta(minutes=10), True, False),
        ],
    )
    def test_window(self, now, age, resolved, expected):
        record = AnomalyRecord(metric_name="ResponseTime", detected_at=now - age, is_resolved=resolved)
        assert AnomalyScorer.is_within_dedup_window(record, now) is expected


class TestBuildRecord:
    def _candidate(self, deviation):
        return AnomalyCandidate(
            metric_name="ResponseTime",
            value=200.0,
            expected_value=100.0,
            stddev=20.0,
            z_score=5.0,
            deviation_percent=deviation,
            severity=AnomalySeverity.CRITICAL,
            observed_at=datetime(2026, 2, 17, 11, 55, tzinfo=UTC),
        )

    def test_fields(self, scorer, now):
        record = scorer.build_record(self._candidate(100.0), now)
        assert record.metric_name == "ResponseTime"
        assert record.detected_value == 200.0
        assert record.expected_value == 100.0
        assert record.deviation_percent == 100.0
        assert record.severity is AnomalySeverity.CRITICAL
        assert record.detected_at == now
        assert record.is_resolved is False
        assert record.resolved_at is None
        assert record.dedup_key == AnomalyScorer.dedup_key("ResponseTime", now)

    def test_description(self, scorer, now):
        record = scorer.build_record(self._candidate(100.0), now)
        assert record.description == (
            "Detected anomaly: value 200.00 deviates 100.00% from expected 100.00"
        )

    def test_description_without_deviation(self, scorer, now):
        record = scorer.build_record(self._candidate(None), now)
        assert record.description == "Detected anomaly: value 200.00 deviates from expected 100.00"
