"""Unit tests for ReportAggregator: cross-metric findings and anomaly tallies."""

from __future__ import annotations

from datetime import timedelta

import pytest

from application.services.report_service import DEFAULT_REPORT_METRIC_TYPES, ReportAggregator
from application.services.trend_analysis_service import TrendAnalyzer
from domain.exceptions import AnomalyNotFoundError
from domain.models.analysis import HealthStatus, TrendDirection
from domain.models.anomaly import AnomalyRecord

HOUR = timedelta(hours=1)


class _ForgetfulAnalyzer(TrendAnalyzer):
    """Loses track of one anomaly between listing and classification."""

    def __init__(self, *args, missing_id, **kwargs):
        super().__init__(*args, **kwargs)
        self._missing_id = missing_id

    def classify_anomaly(self, anomaly_id):
        if anomaly_id == self._missing_id:
            raise AnomalyNotFoundError(str(anomaly_id))
        return super().classify_anomaly(anomaly_id)


@pytest.fixture
def analyzer(metric_store, anomaly_store, clock):
    return TrendAnalyzer(metric_store, anomaly_store, clock=clock)


@pytest.fixture
def aggregator(analyzer, anomaly_store, clock):
    return ReportAggregator(analyzer, anomaly_store, clock=clock)


@pytest.fixture
def period(now):
    return now - 10 * HOUR, now


@pytest.fixture
def degrading(metric_store, make_series, now):
    # 11 hourly points spanning the whole 10 hour period
    metric_store.add_many(make_series("ResponseTime", [350 + 10 * i for i in range(11)], step=HOUR))
    metric_store.add_many(make_series("CPUUsage", [71 + 0.5 * i for i in range(11)], step=HOUR))
    return metric_store


class TestBuildReport:

    def test_default_metric_types(self):
        assert DEFAULT_REPORT_METRIC_TYPES == (
            "ResponseTime",
            "CPUUsage",
            "MemoryUsage",
            "ErrorCount",
            "RequestCount",
        )

    def test_summaries_for_types_with_data(self, aggregator, degrading, period, now):
        report = aggregator.build_report(*period)

        assert (report.period_start, report.period_end) == period
        assert report.generated_at == now
        assert [t.metric_type for t in report.metric_trends] == ["ResponseTime", "CPUUsage"]

        response = report.metric_trends[0]
        assert response.direction is TrendDirection.UPWARD
        assert response.health_status is HealthStatus.CRITICAL
        assert response.change_percent == pytest.approx(27.5)
        assert response.has_seasonality is False

        cpu = report.metric_trends[1]
        assert cpu.health_status is HealthStatus.WARNING

    def test_findings_and_recommendations(self, aggregator, degrading, period):
        report = aggregator.build_report(*period)

        assert "ResponseTime: Upward trend of 27.5% detected" in report.key_findings
        assert report.recommendations[0] == (
            "URGENT: ResponseTime requires immediate attention - "
            "Upward trend detected with strong correlation (R²=1.000). "
            "Metric increasing at 11.00 units/hour."
        )
        assert (
            "Monitor CPUUsage closely - trending upward and may become critical"
            in report.recommendations
        )

    def test_empty_store_yields_empty_report(self, aggregator, period):
        report = aggregator.build_report(*period)
        assert report.metric_trends == []
        assert report.key_findings == []
        assert report.recommendations == []
        assert report.total_anomalies == 0

    def test_metric_types_are_configurable(self, analyzer, anomaly_store, degrading, period, clock):
        aggregator = ReportAggregator(analyzer, anomaly_store, metric_types=["CPUUsage"], clock=clock)
        report = aggregator.build_report(*period)
        assert [t.metric_type for t in report.metric_trends] == ["CPUUsage"]

    def test_anomaly_tallies(self, aggregator, metric_store, anomaly_store, make_series, period, now):
        half_hour = timedelta(minutes=30)
        spike_at = now - 5 * HOUR
        metric_store.add_many(make_series("ErrorCount", [5.0] * 10, end=spike_at - half_hour, step=half_hour))
        metric_store.add_many(make_series("ErrorCount", [80.0], end=spike_at))
        metric_store.add_many(make_series("ErrorCount", [5.0] * 9, end=now, step=half_hour))

        anomaly_store.add(AnomalyRecord(metric_name="ErrorCount", detected_value=80.0, detected_at=spike_at))
        anomaly_store.add(AnomalyRecord(metric_name="ErrorCount", detected_at=now - 20 * HOUR))

        report = aggregator.build_report(*period)
        assert report.total_anomalies == 1
        assert report.one_off_spikes == 1
        assert report.sustained_issues == 0

    def test_seasonality_finding(self, analyzer, anomaly_store, metric_store, make_series, now, clock):
        # 25 hourly points ending at 12:00; 18:00 peaks and 03:00 dips
        def value(i: int) -> float:
            hour = (12 + i) % 24
            return {18: 300.0, 3: 20.0}.get(hour, 100.0)

        metric_store.add_many(make_series("RequestCount", [value(i) for i in range(25)], step=HOUR))
        aggregator = ReportAggregator(analyzer, anomaly_store, metric_types=["RequestCount"], clock=clock)

        report = aggregator.build_report(now - 24 * HOUR, now)

        assert report.metric_trends[0].has_seasonality is True
        assert "RequestCount: Seasonality detected with 1 peak periods" in report.key_findings


class TestAnomalyTallies:

    @pytest.fixture
    def flat_errors(self, metric_store, make_series, now):
        # 30-minute points from ten hours before to ten hours after now
        metric_store.add_many(make_series("ErrorCount", [5.0] * 41, end=now + 10 * HOUR, step=timedelta(minutes=30)))
        return metric_store

    def test_only_twenty_most_recent_classified(self, analyzer, anomaly_store, flat_errors, period, now, clock):
        for i in range(25):
            anomaly_store.add(
                AnomalyRecord(metric_name="ErrorCount", detected_at=now - i * timedelta(minutes=20))
            )
        aggregator = ReportAggregator(analyzer, anomaly_store, metric_types=(), clock=clock)

        report = aggregator.build_report(*period)

        assert report.total_anomalies == 25
        assert report.one_off_spikes == 20
        assert report.sustained_issues == 0

    def test_classification_failure_is_skipped(
        self, metric_store, anomaly_store, flat_errors, period, now, clock
    ):
        records = [
            anomaly_store.add(AnomalyRecord(metric_name="ErrorCount", detected_at=now - i * HOUR))
            for i in range(3)
        ]
        analyzer = _ForgetfulAnalyzer(metric_store, anomaly_store, clock=clock, missing_id=records[1].id)
        aggregator = ReportAggregator(analyzer, anomaly_store, metric_types=(), clock=clock)

        report = aggregator.build_report(*period)

        assert report.total_anomalies == 3
        assert report.one_off_spikes == 2
